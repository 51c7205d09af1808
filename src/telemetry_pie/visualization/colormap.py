"""Colour ramps used to paint pie chart wedges."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from matplotlib import colormaps
from matplotlib.colors import to_hex, to_rgb

from telemetry_pie.configuration import DEFAULT_TURBO_SAMPLES, PanelConfig

__all__ = [
    "ColorStop",
    "RAINBOW_COLORS",
    "RED_YELLOW_GREEN_STOPS",
    "color_at",
    "colors_for",
    "resolve_color_stops",
    "reverse_stops",
    "turbo",
]


# Stop locations are kept on a decimal grid so mirroring a ramp twice
# reproduces the input locations exactly.
_LOCATION_DIGITS = 12


@dataclass(frozen=True, slots=True)
class ColorStop:
    color: str
    location: float


def _stop(color: str, location: float) -> ColorStop:
    return ColorStop(color, round(float(location), _LOCATION_DIGITS))


RED_YELLOW_GREEN_STOPS: tuple[ColorStop, ...] = (
    _stop("#ff0000", 0.0),
    _stop("#ffff00", 0.5),
    _stop("#00ff00", 1.0),
)

RAINBOW_COLORS: tuple[str, ...] = (
    "#ff00ff",
    "#0000ff",
    "#00ffff",
    "#00ff00",
    "#ffff00",
    "#ff0000",
)


def turbo(t: float) -> str:
    """Return the turbo ramp colour at ``t`` (clamped to ``[0, 1]``)."""

    position = min(1.0, max(0.0, float(t)))
    return to_hex(colormaps["turbo"](position))


def _evenly_spaced(colors: Sequence[str]) -> tuple[ColorStop, ...]:
    last = len(colors) - 1
    return tuple(_stop(color, index / last) for index, color in enumerate(colors))


def reverse_stops(stops: Sequence[ColorStop]) -> tuple[ColorStop, ...]:
    """Mirror ``stops`` around the middle of the ramp.

    Each location ``l`` becomes ``1 - l`` and the order is reversed so the
    result stays sorted by location.
    """

    return tuple(_stop(stop.color, 1.0 - stop.location) for stop in reversed(stops))


def resolve_color_stops(
    config: PanelConfig,
    count: int | None = None,
    *,
    turbo_samples: int | None = None,
) -> tuple[ColorStop, ...]:
    """Return the ordered colour stops selected by ``config``.

    Parameters
    ----------
    config:
        Panel configuration providing ``color_mode``, ``color_map``,
        ``gradient`` and ``reverse``.
    count:
        Number of weights that will be coloured.  Only used to size the
        turbo ramp when ``turbo_samples`` is not given.
    turbo_samples:
        Fixed number of turbo stops.  Defaults to ``count`` when it is at
        least two, otherwise :data:`DEFAULT_TURBO_SAMPLES`.

    Turbo therefore uses one stop per weight by default; the fixed
    :data:`DEFAULT_TURBO_SAMPLES` ramp only applies to a single weight.
    """

    if config.color_mode == "gradient":
        start, end = config.gradient
        stops: tuple[ColorStop, ...] = (_stop(start, 0.0), _stop(end, 1.0))
    elif config.color_map == "rainbow":
        stops = _evenly_spaced(RAINBOW_COLORS)
    elif config.color_map == "turbo":
        samples = turbo_samples
        if samples is None:
            samples = count if count is not None and count >= 2 else DEFAULT_TURBO_SAMPLES
        if samples < 2:
            raise ValueError(f"turbo ramps need at least two samples, got {samples}")
        stops = tuple(
            _stop(turbo(index / (samples - 1)), index / (samples - 1))
            for index in range(samples)
        )
    else:
        stops = RED_YELLOW_GREEN_STOPS

    if config.reverse:
        stops = reverse_stops(stops)
    return stops


def color_at(stops: Sequence[ColorStop], position: float) -> str:
    """Linearly interpolate the ramp described by ``stops`` at ``position``."""

    if not stops:
        raise ValueError("color_at() requires at least one stop")
    position = min(1.0, max(0.0, float(position)))
    if position <= stops[0].location:
        return stops[0].color
    for lower, upper in zip(stops, stops[1:]):
        if position == upper.location:
            return upper.color
        if position < upper.location:
            span = upper.location - lower.location
            if span <= 0.0:
                return upper.color
            fraction = (position - lower.location) / span
            low_rgb = to_rgb(lower.color)
            high_rgb = to_rgb(upper.color)
            mixed = tuple(a + (b - a) * fraction for a, b in zip(low_rgb, high_rgb))
            return to_hex(mixed)
    return stops[-1].color


def colors_for(stops: Sequence[ColorStop], count: int) -> list[str]:
    """Assign one colour per weight index.

    When ``count`` matches the number of stops index ``i`` takes stop ``i``;
    otherwise the ramp is resampled at ``i / (count - 1)``.  A single weight
    takes the colour at location 0.
    """

    if count <= 0:
        return []
    if count == len(stops):
        return [stop.color for stop in stops]
    if count == 1:
        return [color_at(stops, 0.0)]
    return [color_at(stops, index / (count - 1)) for index in range(count)]
