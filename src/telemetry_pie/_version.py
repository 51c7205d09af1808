"""Package version lookup."""

from __future__ import annotations

import re
from importlib import metadata
from pathlib import Path

from packaging.version import InvalidVersion, Version

_DISTRIBUTION = "telemetry-pie"
_HEADING = re.compile(r"^## v(\d+\.\d+\.\d+)\b", re.MULTILINE)


def _version_from_sources() -> str:
    """Read the newest ``## vX.Y.Z`` heading of ``CHANGELOG.md``.

    Source checkouts without installed metadata resolve their version this
    way; the changelog lives at the repository root, two levels above the
    package.
    """

    for directory in Path(__file__).resolve().parents[1:3]:
        changelog = directory / "CHANGELOG.md"
        if changelog.is_file():
            found = _HEADING.search(changelog.read_text(encoding="utf-8"))
            if found:
                return found.group(1)
    raise RuntimeError(f"Cannot determine the {_DISTRIBUTION!r} version")


def _load_version() -> str:
    try:
        raw = metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        raw = _version_from_sources()
    try:
        release = Version(raw).release
    except InvalidVersion as exc:
        raise RuntimeError(f"{_DISTRIBUTION!r} has an invalid version {raw!r}") from exc
    if len(release) != 3:
        raise RuntimeError(f"{_DISTRIBUTION!r} version {raw!r} is not MAJOR.MINOR.PATCH")
    return raw


__version__ = _load_version()

__all__ = ["__version__"]
