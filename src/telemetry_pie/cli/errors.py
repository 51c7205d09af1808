"""Exit statuses and error reporting for the telemetry_pie CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

__all__ = ["EXIT_CODES", "CliError"]


EXIT_CODES: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
    "not_found": 4,
}

logger = logging.getLogger(__name__)


def _loggable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    return repr(value)


class CliError(RuntimeError):
    """Failure of a CLI command, mapped to a process exit status.

    ``category`` selects the status from :data:`EXIT_CODES`; unknown
    categories are reported as ``runtime`` failures.
    """

    def __init__(
        self,
        message: str,
        *,
        category: str = "runtime",
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.category = category if category in EXIT_CODES else "runtime"
        self.status_code = EXIT_CODES[self.category]
        self.context = {str(key): _loggable(value) for key, value in (context or {}).items()}
        self.logged = False

    @classmethod
    def wrap(
        cls,
        exc: BaseException,
        *,
        category: str,
        context: Optional[Mapping[str, Any]] = None,
    ) -> "CliError":
        """Build an error carrying the message of ``exc``."""

        error = cls(str(exc) or type(exc).__name__, category=category, context=context)
        error.__cause__ = exc
        return error

    @property
    def message(self) -> str:
        return str(self)

    def as_dict(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "category": self.category,
            "message": self.message,
            "context": dict(self.context),
        }

    def log(self, target: Optional[logging.Logger] = None) -> None:
        """Emit the error once with structured context."""

        if self.logged:
            return
        (target or logger).error(
            self.message,
            extra={
                "event": "cli.error",
                "category": self.category,
                "status_code": self.status_code,
                "context": dict(self.context),
            },
            exc_info=self.__cause__,
        )
        self.logged = True
