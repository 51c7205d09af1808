"""Angular layout of pie chart wedges on an annulus.

Angles are in radians in screen orientation (``y`` grows downwards), so
``-pi/2`` points to 12 o'clock and angles increase clockwise.  A gap angle
``g`` trims the sweep symmetrically around 12 o'clock: wedges cover
``[-pi/2 + g, 3*pi/2 - g]``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from telemetry_pie.visualization.colormap import ColorStop, colors_for

__all__ = [
    "Annulus",
    "BoundingBox",
    "EMPTY_SEGMENTS",
    "Segment",
    "annulus_geometry",
    "compute_segments",
    "percentages",
    "sweep_bounds",
    "wedge_outline",
]


HALF_PI = math.pi / 2.0
TWO_PI = 2.0 * math.pi


@dataclass(frozen=True, slots=True)
class Segment:
    color: str
    start_angle: float
    end_angle: float

    @property
    def width(self) -> float:
        return self.end_angle - self.start_angle


EMPTY_SEGMENTS: tuple[Segment, ...] = ()


def _validate_gap(gap: float) -> float:
    gap = float(gap)
    if not 0.0 <= gap < math.pi:
        raise ValueError(f"gap angle must lie in [0, pi), got {gap!r}")
    return gap


def sweep_bounds(gap: float = 0.0) -> tuple[float, float]:
    """Return the first and last angle covered by the ring."""

    gap = _validate_gap(gap)
    return -HALF_PI + gap, 3.0 * HALF_PI - gap


def percentages(weights: Iterable[float]) -> np.ndarray | None:
    """Return each weight as a percentage of the total.

    Negative weights count as zero.  ``None`` signals degenerate input (no
    weights, a zero total or non-finite values) so callers never divide by
    zero.
    """

    values = np.asarray(list(weights), dtype=np.float64)
    if values.size == 0 or not np.all(np.isfinite(values)):
        return None
    values = np.clip(values, 0.0, None)
    total = float(values.sum())
    if not np.isfinite(total):
        values = values / values.max()
        total = float(values.sum())
    if total <= 0.0:
        return None
    return values / total * 100.0


def compute_segments(
    weights: Iterable[float],
    stops: Sequence[ColorStop],
    gap: float = 0.0,
) -> tuple[Segment, ...]:
    """Lay out one wedge per weight in input order.

    The last wedge ends exactly on the closed-form end of the sweep so
    accumulated rounding never leaves a seam.  Degenerate weights yield
    :data:`EMPTY_SEGMENTS`.
    """

    start, end = sweep_bounds(gap)
    shares = percentages(weights)
    if shares is None:
        return EMPTY_SEGMENTS

    span = end - start
    colors = colors_for(stops, len(shares))
    last = len(shares) - 1
    segments: list[Segment] = []
    angle_start = start
    for index, (share, color) in enumerate(zip(shares, colors)):
        if index == last:
            angle_end = end
        else:
            angle_end = angle_start + (float(share) / 100.0) * span
        segments.append(Segment(color, angle_start, angle_end))
        angle_start = angle_end
    return tuple(segments)


@dataclass(frozen=True, slots=True)
class BoundingBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


@dataclass(frozen=True, slots=True)
class Annulus:
    """Ring clipped to the sweep of a given gap angle."""

    outer_radius: float
    inner_radius: float
    start_angle: float
    end_angle: float
    bounds: BoundingBox

    def normalize(self, x: float, y: float) -> tuple[float, float]:
        """Map ring coordinates into ``[0, 1]`` relative to :attr:`bounds`."""

        box = self.bounds
        width = box.width or 1.0
        height = box.height or 1.0
        return (x - box.min_x) / width, (y - box.min_y) / height


def _arc_points(radius: float, start: float, end: float) -> list[tuple[float, float]]:
    angles = [start, end]
    for quadrant in range(-1, 4):
        angle = quadrant * HALF_PI
        if start < angle < end:
            angles.append(angle)
    return [(radius * math.cos(angle), radius * math.sin(angle)) for angle in angles]


def annulus_geometry(
    outer_radius: float, inner_radius: float, gap: float = 0.0
) -> Annulus:
    """Describe the drawable ring and its bounding box for ``gap``.

    The box is derived from the arc end points and the extreme points the
    arcs actually reach, so widening the gap shrinks the box instead of
    clipping the shape.
    """

    if not 0.0 <= inner_radius < outer_radius:
        raise ValueError(
            "radii must satisfy 0 <= inner < outer, "
            f"got inner={inner_radius!r} outer={outer_radius!r}"
        )
    start, end = sweep_bounds(gap)
    points = _arc_points(outer_radius, start, end) + _arc_points(inner_radius, start, end)
    xs = [x for x, _ in points]
    ys = [y for _, y in points]
    bounds = BoundingBox(min(xs), min(ys), max(xs), max(ys))
    return Annulus(outer_radius, inner_radius, start, end, bounds)


def wedge_outline(
    start_angle: float,
    end_angle: float,
    annulus: Annulus,
    *,
    resolution: int = 96,
) -> np.ndarray:
    """Return the closed outline of a wedge as an ``(n, 2)`` array.

    The outline follows the outer arc clockwise, the radial edge at
    ``end_angle``, the inner arc back and the radial edge at ``start_angle``.
    ``resolution`` is the number of points used for a full turn.
    """

    width = max(0.0, end_angle - start_angle)
    steps = max(2, int(math.ceil(resolution * width / TWO_PI)) + 1)
    angles = np.linspace(start_angle, end_angle, steps)
    outer = np.column_stack(
        (annulus.outer_radius * np.cos(angles), annulus.outer_radius * np.sin(angles))
    )
    inner_angles = angles[::-1]
    inner = np.column_stack(
        (annulus.inner_radius * np.cos(inner_angles), annulus.inner_radius * np.sin(inner_angles))
    )
    return np.vstack((outer, inner))
