"""Configuration discovery and recording access for the telemetry_pie CLI."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from telemetry_pie.cli.errors import CliError
from telemetry_pie.configuration import load_project_config
from telemetry_pie.telemetry.replay import load_recording

__all__ = ["CONFIG_ENV_VAR", "load_cli_config", "read_recording"]


CONFIG_ENV_VAR = "TELEMETRY_PIE_CONFIG"


def _search_locations(path: Optional[Path]) -> Iterator[Path]:
    """Yield config locations in precedence order, each at most once."""

    env_value = os.environ.get(CONFIG_ENV_VAR)
    locations = [path, Path(env_value) if env_value else None, Path.cwd()]
    visited = set()
    for location in locations:
        if location is None:
            continue
        key = location.expanduser().resolve(strict=False)
        if key not in visited:
            visited.add(key)
            yield location


def load_cli_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Return the first ``[tool.telemetry_pie]`` table found.

    An explicit ``path`` wins over :data:`CONFIG_ENV_VAR`, which wins over
    the working directory.  ``_config_path`` records the file used.
    """

    for location in _search_locations(path):
        found = load_project_config(location)
        if found is None:
            continue
        payload, source = found
        payload["_config_path"] = str(source)
        return payload
    return {"_config_path": None}


def read_recording(source: Path) -> List[Dict[str, Any]]:
    """Load a JSON Lines recording for the ``replay`` command."""

    if not source.is_file():
        raise CliError(
            f"Recording not found: {source}",
            category="not_found",
            context={"source": source},
        )
    try:
        return load_recording(source)
    except (OSError, ValueError) as exc:
        raise CliError.wrap(exc, category="io", context={"source": source}) from exc
