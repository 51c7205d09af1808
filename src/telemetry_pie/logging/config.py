"""Logging configuration helpers.

The command line tools and embedding hosts share a single entry point,
:func:`setup_logging`, which reads a ``logging`` table of the form::

    [tool.telemetry_pie.logging]
    level = "info"
    output = "stderr"   # stdout, stderr or a file path
    format = "json"     # json or text
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping

__all__ = ["JsonFormatter", "logging_trace", "setup_logging"]


_PACKAGE_LOGGER = "telemetry_pie"
_HANDLER_MARKER = "_telemetry_pie_handler"
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Attributes present on every LogRecord; anything else came from ``extra``.
_RESERVED_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    if isinstance(value, Path):
        return str(value)
    tolist = getattr(value, "tolist", None)
    if callable(tolist):
        return tolist()
    return repr(value)


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRIBUTES or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_json_default, sort_keys=True)


def _resolve_level(value: Any) -> int:
    if isinstance(value, int):
        return value
    name = str(value or "info").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level: {value!r}")
    return level


def _build_handler(output: Any) -> logging.Handler:
    target = str(output or "stderr").strip()
    if target.lower() == "stdout":
        return logging.StreamHandler(sys.stdout)
    if target.lower() == "stderr":
        return logging.StreamHandler(sys.stderr)
    path = Path(target).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def setup_logging(config: Mapping[str, Any] | None = None) -> logging.Logger:
    """Configure the package logger from ``config["logging"]``.

    Repeated calls replace the handler installed by a previous call rather
    than stacking additional handlers.
    """

    logging_cfg: Mapping[str, Any] = {}
    if config:
        candidate = config.get("logging", {})
        if isinstance(candidate, Mapping):
            logging_cfg = candidate

    logger = logging.getLogger(_PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    handler = _build_handler(logging_cfg.get("output"))
    fmt = str(logging_cfg.get("format", "json")).strip().lower()
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    elif fmt == "text":
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    else:
        raise ValueError(f"Unknown logging format: {fmt!r}")
    setattr(handler, _HANDLER_MARKER, True)

    logger.addHandler(handler)
    logger.setLevel(_resolve_level(logging_cfg.get("level", "info")))
    logger.propagate = False
    return logger


def logging_trace(
    logger: logging.Logger | None = None, *, level: int = logging.DEBUG
) -> Callable[[str, Mapping[str, Any]], None]:
    """Return a reducer trace hook that forwards events to ``logger``."""

    target = logger or logging.getLogger("telemetry_pie.core.reducer")

    def _trace(event: str, details: Mapping[str, Any]) -> None:
        if not target.isEnabledFor(level):
            return
        target.log(
            level,
            event,
            extra={"event": f"reducer.{event}", "context": dict(details)},
        )

    return _trace
