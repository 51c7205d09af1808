"""Panel configuration records and project-level configuration files."""

from __future__ import annotations

import copy
import logging
import math
from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore


__all__ = [
    "COLOR_MAPS",
    "COLOR_MODES",
    "DEFAULT_CONFIG",
    "DEFAULT_TURBO_SAMPLES",
    "MAX_LEGENDS",
    "PanelConfig",
    "RenderOptions",
    "SettingsAction",
    "apply_settings_action",
    "load_project_config",
    "merge_config",
    "panel_defaults",
]


logger = logging.getLogger(__name__)

COLOR_MAPS = ("red-yellow-green", "rainbow", "turbo")
COLOR_MODES = ("colormap", "gradient")
MAX_LEGENDS = 10
DEFAULT_TURBO_SAMPLES = 20

_PROJECT_FILENAME = "pyproject.toml"
_TOOL_SECTION = "telemetry_pie"

# Persisted (camelCase) key -> dataclass field.
_STATE_KEYS: Mapping[str, str] = {
    "path": "path",
    "minValue": "min_value",
    "maxValue": "max_value",
    "colorMap": "color_map",
    "colorMode": "color_mode",
    "gradient": "gradient",
    "reverse": "reverse",
    "title": "title",
}
_FIELD_KEYS: Mapping[str, str] = {value: key for key, value in _STATE_KEYS.items()}


def _coerce_bool(value: Any, fallback: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    if isinstance(value, (int, float)):
        return bool(value)
    return fallback


def _coerce_float(value: Any, fallback: float) -> float:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(numeric):
        return fallback
    return numeric


def _coerce_choice(value: Any, choices: Sequence[str], fallback: str) -> str:
    if isinstance(value, str) and value.strip() in choices:
        return value.strip()
    if value is not None:
        logger.warning(
            "Ignoring unsupported configuration value",
            extra={"event": "config.invalid", "context": {"value": value, "choices": list(choices)}},
        )
    return fallback


def _coerce_gradient(value: Any, fallback: tuple[str, str]) -> tuple[str, str]:
    if isinstance(value, (list, tuple)) and len(value) == 2:
        if all(isinstance(color, str) and color.strip() for color in value):
            return (value[0].strip(), value[1].strip())
    return fallback


@dataclass(frozen=True, slots=True)
class PanelConfig:
    """Configuration persisted with a pie chart panel."""

    path: str = ""
    min_value: float = 0.0
    max_value: float = 1.0
    color_map: str = "red-yellow-green"
    color_mode: str = "colormap"
    gradient: tuple[str, str] = ("#0000ff", "#ff00ff")
    reverse: bool = False
    title: str = ""
    legends: tuple[str, ...] = field(default=())

    @classmethod
    def from_mapping(
        cls, payload: Mapping[str, Any] | None, *, base: "PanelConfig | None" = None
    ) -> "PanelConfig":
        """Coerce persisted panel state (camelCase or snake_case keys)."""

        defaults = base or cls()
        data: dict[str, Any] = {}
        for key, value in (payload or {}).items():
            name = _STATE_KEYS.get(str(key), str(key))
            data[name] = value

        legends = list(defaults.legends)
        raw_legends = data.get("legends")
        if isinstance(raw_legends, (list, tuple)):
            legends = [str(label) for label in raw_legends[:MAX_LEGENDS]]
        for index in range(MAX_LEGENDS):
            key = f"legend{index + 1}"
            if key not in data:
                continue
            while len(legends) <= index:
                legends.append("")
            legends[index] = str(data[key] or "")
        while legends and not legends[-1]:
            legends.pop()

        return cls(
            path=str(data.get("path", defaults.path) or ""),
            min_value=_coerce_float(data.get("min_value"), defaults.min_value),
            max_value=_coerce_float(data.get("max_value"), defaults.max_value),
            color_map=_coerce_choice(data.get("color_map"), COLOR_MAPS, defaults.color_map),
            color_mode=_coerce_choice(data.get("color_mode"), COLOR_MODES, defaults.color_mode),
            gradient=_coerce_gradient(data.get("gradient"), defaults.gradient),
            reverse=_coerce_bool(data.get("reverse"), defaults.reverse),
            title=str(data.get("title", defaults.title) or ""),
            legends=tuple(legends),
        )

    def to_state(self) -> dict[str, Any]:
        """Return the flat camelCase record persisted by the host."""

        state: dict[str, Any] = {
            "path": self.path,
            "minValue": self.min_value,
            "maxValue": self.max_value,
            "colorMap": self.color_map,
            "colorMode": self.color_mode,
            "gradient": list(self.gradient),
            "reverse": self.reverse,
            "title": self.title,
        }
        for index in range(MAX_LEGENDS):
            label = self.legends[index] if index < len(self.legends) else ""
            state[f"legend{index + 1}"] = label
        return state

    def legend_for(self, index: int) -> str:
        if 0 <= index < len(self.legends) and self.legends[index]:
            return self.legends[index]
        return f"Data {index + 1}"


DEFAULT_CONFIG = PanelConfig()


def merge_config(
    defaults: PanelConfig, persisted: Mapping[str, Any] | None
) -> PanelConfig:
    """Overlay ``persisted`` panel state on top of ``defaults``."""

    return PanelConfig.from_mapping(persisted, base=defaults)


@dataclass(frozen=True, slots=True)
class RenderOptions:
    """Ring geometry and colour sampling shared by the render model and exporters.

    ``turbo_samples`` fixes the number of stops sampled from the turbo ramp;
    ``None`` samples one stop per weight so each wedge gets an exact ramp
    colour.
    """

    gap_angle: float = 0.0
    inner_radius: float = 0.4
    outer_radius: float = 0.8
    turbo_samples: int | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.gap_angle < math.pi:
            raise ValueError(f"gap_angle must lie in [0, pi), got {self.gap_angle!r}")
        if not 0.0 <= self.inner_radius < self.outer_radius:
            raise ValueError(
                "radii must satisfy 0 <= inner_radius < outer_radius, "
                f"got {self.inner_radius!r} and {self.outer_radius!r}"
            )
        if self.turbo_samples is not None and self.turbo_samples < 2:
            raise ValueError(f"turbo_samples must be at least 2, got {self.turbo_samples!r}")

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "RenderOptions":
        """Read the ``render`` table of a project configuration."""

        defaults = cls()
        table = config.get("render") if config else None
        if not isinstance(table, ABCMapping):
            return defaults
        samples = table.get("turbo_samples")
        if samples is not None:
            try:
                samples = int(samples)
            except (TypeError, ValueError):
                samples = defaults.turbo_samples
        return cls(
            gap_angle=_coerce_float(table.get("gap_angle"), defaults.gap_angle),
            inner_radius=_coerce_float(table.get("inner_radius"), defaults.inner_radius),
            outer_radius=_coerce_float(table.get("outer_radius"), defaults.outer_radius),
            turbo_samples=samples,
        )


@dataclass(frozen=True, slots=True)
class SettingsAction:
    """Edit emitted by the host's settings surface."""

    path: tuple[str, ...]
    value: Any
    action: str = "update"


def apply_settings_action(config: PanelConfig, action: SettingsAction) -> PanelConfig:
    """Return ``config`` updated by ``action``.

    The last element of :attr:`SettingsAction.path` names the edited field,
    either in its persisted camelCase form or as the dataclass attribute.
    """

    if action.action != "update" or not action.path:
        return config
    key = str(action.path[-1])
    name = _STATE_KEYS.get(key, key)
    is_legend = key.startswith("legend") and key[len("legend"):].isdigit()
    if name not in _FIELD_KEYS and name != "legends" and not is_legend:
        logger.warning(
            "Ignoring settings update for unknown field",
            extra={"event": "config.unknown_field", "context": {"path": list(action.path)}},
        )
        return config
    if is_legend and not 1 <= int(key[len("legend"):]) <= MAX_LEGENDS:
        return config
    return PanelConfig.from_mapping({key: action.value}, base=config)


def _as_dict(payload: ABCMapping[str, Any]) -> dict[str, Any]:
    """Recursively coerce TOML mappings into regular dictionaries."""

    result: dict[str, Any] = {}
    for key, value in payload.items():
        if isinstance(value, ABCMapping):
            result[str(key)] = _as_dict(value)
        else:
            result[str(key)] = value
    return result


def _resolve_pyproject_path(candidate: Path) -> Path | None:
    candidate = candidate.expanduser()
    if candidate.name == _PROJECT_FILENAME:
        return candidate
    if candidate.suffix:
        return None
    return candidate / _PROJECT_FILENAME


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Load the ``[tool.telemetry_pie]`` section from ``pyproject.toml``."""

    pyproject_path = _resolve_pyproject_path(Path(path))
    if pyproject_path is None or not pyproject_path.exists():
        return None
    pyproject_path = pyproject_path.resolve(strict=False)
    with pyproject_path.open("rb") as handle:
        payload = tomllib.load(handle)

    tool_section = payload.get("tool")
    if not isinstance(tool_section, ABCMapping):
        return None
    section = tool_section.get(_TOOL_SECTION)
    if not isinstance(section, ABCMapping):
        return None
    return copy.deepcopy(_as_dict(section)), pyproject_path


def panel_defaults(config: Mapping[str, Any] | None) -> PanelConfig:
    """Return the stored default panel configuration from ``config``."""

    table = config.get("panel") if config else None
    if not isinstance(table, ABCMapping):
        return DEFAULT_CONFIG
    return merge_config(DEFAULT_CONFIG, table)
