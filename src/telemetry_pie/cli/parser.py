"""Argument parsing helpers for the telemetry_pie CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from telemetry_pie.configuration import COLOR_MAPS, COLOR_MODES
from telemetry_pie.exporters import exporters_registry
from telemetry_pie.cli.workflows import _handle_render, _handle_replay


def _add_panel_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--color-map", dest="color_map", choices=COLOR_MAPS, default=None)
    parser.add_argument("--color-mode", dest="color_mode", choices=COLOR_MODES, default=None)
    parser.add_argument(
        "--gradient",
        nargs=2,
        metavar=("START", "END"),
        default=None,
        help="Colours used by the gradient colour mode.",
    )
    parser.add_argument(
        "--reverse",
        action="store_true",
        help="Mirror the colour ramp.",
    )
    parser.add_argument("--title", default=None)
    parser.add_argument(
        "--legend",
        dest="legends",
        action="append",
        default=None,
        help="Legend label for the next wedge (repeatable).",
    )
    parser.add_argument(
        "--gap-angle",
        dest="gap_angle",
        type=float,
        default=None,
        help="Angle in radians left open at the top of the ring.",
    )
    parser.add_argument(
        "--format",
        choices=sorted(exporters_registry),
        default="json",
        help="Output format (default: json).",
    )


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    """Build the ``telemetry-pie`` parser; logging defaults come from ``config``."""

    stored = (config or {}).get("logging")
    logging_defaults = stored if isinstance(stored, Mapping) else {}

    parser = argparse.ArgumentParser(
        prog="telemetry-pie",
        description="Render streaming telemetry vectors as annular pie charts.",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="pyproject.toml (or its directory) holding [tool.telemetry_pie].",
    )
    for option, fallback, extra in (
        ("level", "info", {"help": "Threshold such as debug, info or warning."}),
        ("output", "stderr", {"help": "stdout, stderr or a log file path."}),
        ("format", "json", {"choices": ("json", "text"), "help": "Log record layout."}),
    ):
        parser.add_argument(
            f"--log-{option}",
            dest=f"log_{option}",
            default=logging_defaults.get(option, fallback),
            **extra,
        )

    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser(
        "render",
        help="Render a single weight vector.",
    )
    render_parser.add_argument(
        "--weights",
        required=True,
        help="Comma separated weights, e.g. 1,2,3.",
    )
    _add_panel_arguments(render_parser)
    render_parser.set_defaults(handler=_handle_render)

    replay_parser = subparsers.add_parser(
        "replay",
        help="Replay a JSON Lines recording through the panel and render the final frame.",
    )
    replay_parser.add_argument("recording", type=Path, help="Recording to replay.")
    replay_parser.add_argument(
        "--path",
        default=None,
        help="Message path selecting the weight vector (e.g. /load.data).",
    )
    replay_parser.add_argument(
        "--trace",
        action="store_true",
        help="Log reducer transitions at debug level.",
    )
    _add_panel_arguments(replay_parser)
    replay_parser.set_defaults(handler=_handle_replay)

    return parser


__all__ = ["build_parser"]
