"""Colour ramps, wedge geometry and render models for telemetry_pie."""

from telemetry_pie.visualization.colormap import (
    ColorStop,
    color_at,
    colors_for,
    resolve_color_stops,
    reverse_stops,
    turbo,
)
from telemetry_pie.visualization.geometry import (
    Annulus,
    BoundingBox,
    EMPTY_SEGMENTS,
    Segment,
    annulus_geometry,
    compute_segments,
    percentages,
    sweep_bounds,
    wedge_outline,
)
from telemetry_pie.visualization.render import (
    RenderModel,
    RenderSegment,
    build_render_model,
    build_segments,
)

__all__ = [
    "Annulus",
    "BoundingBox",
    "ColorStop",
    "EMPTY_SEGMENTS",
    "RenderModel",
    "RenderSegment",
    "Segment",
    "annulus_geometry",
    "build_render_model",
    "build_segments",
    "color_at",
    "colors_for",
    "compute_segments",
    "percentages",
    "resolve_color_stops",
    "reverse_stops",
    "sweep_bounds",
    "turbo",
    "wedge_outline",
]
