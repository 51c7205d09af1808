"""Error taxonomy shared by the streaming and rendering layers."""

from __future__ import annotations

__all__ = [
    "ExtractionError",
    "PathParseError",
    "TelemetryPieError",
    "VARIABLES_UNSUPPORTED_MESSAGE",
]


VARIABLES_UNSUPPORTED_MESSAGE = "Message paths using variables are not currently supported"


class TelemetryPieError(Exception):
    """Base class for errors raised by :mod:`telemetry_pie`."""


class PathParseError(TelemetryPieError, ValueError):
    """Raised when a message path cannot be parsed."""

    def __init__(self, message: str, *, text: str = "", column: int | None = None) -> None:
        super().__init__(message)
        self.text = text
        self.column = column

    def __str__(self) -> str:
        message = super().__str__()
        if self.column is None:
            return message
        return f"{message} (column {self.column})"


class ExtractionError(TelemetryPieError):
    """Raised when a message payload does not match the bound path."""

    def __init__(self, message: str, *, topic: str | None = None) -> None:
        super().__init__(message)
        self.topic = topic
