"""Command line utilities for telemetry_pie."""

from telemetry_pie.cli.app import main, run_cli

__all__ = ["main", "run_cli"]
