"""Entry point of the ``telemetry-pie`` command."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from telemetry_pie.cli.errors import CliError
from telemetry_pie.cli.io import load_cli_config
from telemetry_pie.cli.parser import build_parser
from telemetry_pie.logging.config import setup_logging

_LOGGING_DEFAULTS = {"level": "info", "output": "stderr", "format": "json"}


def _bootstrap_parser() -> argparse.ArgumentParser:
    """Parse the options needed before the full parser can be built."""

    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config", dest="config_path", type=Path, default=None)
    for option in ("level", "output", "format"):
        parser.add_argument(f"--log-{option}", dest=f"log_{option}", default=None)
    return parser


def _logging_settings(options: argparse.Namespace, config: Mapping[str, Any]) -> Dict[str, Any]:
    settings: Dict[str, Any] = dict(_LOGGING_DEFAULTS)
    stored = config.get("logging")
    if isinstance(stored, Mapping):
        settings.update(stored)
    for option in _LOGGING_DEFAULTS:
        override = getattr(options, f"log_{option}")
        if override is not None:
            settings[option] = override
    return settings


def _write(text: str) -> None:
    if not text:
        return
    sys.stdout.write(text if text.endswith("\n") else text + "\n")


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Run ``telemetry-pie`` with ``args`` and return the rendered output.

    Command failures exit with the status of their :class:`CliError`
    category after the message is logged and echoed on stdout.
    """

    options, remaining = _bootstrap_parser().parse_known_args(args)
    config = load_cli_config(options.config_path)
    config["logging"] = _logging_settings(options, config)
    try:
        setup_logging(config)
    except ValueError as exc:
        raise SystemExit(f"Invalid logging configuration: {exc}") from exc

    namespace = build_parser(config).parse_args(list(remaining), namespace=options)
    try:
        output = namespace.handler(namespace, config=config)
    except CliError as exc:
        exc.log()
        _write(exc.message)
        raise SystemExit(exc.status_code) from exc
    _write(output)
    return output


def main() -> None:  # pragma: no cover - console script
    run_cli()


if __name__ == "__main__":  # pragma: no cover
    main()
