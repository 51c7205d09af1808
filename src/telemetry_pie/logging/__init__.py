"""Logging utilities for telemetry_pie."""

from telemetry_pie.logging.config import JsonFormatter, logging_trace, setup_logging

__all__ = ["JsonFormatter", "logging_trace", "setup_logging"]
