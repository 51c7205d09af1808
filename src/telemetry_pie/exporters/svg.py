"""SVG rendering of pie chart render models."""

from __future__ import annotations

from html import escape
from typing import Iterable

import numpy as np

from telemetry_pie.configuration import RenderOptions
from telemetry_pie.visualization.geometry import Annulus, annulus_geometry, wedge_outline
from telemetry_pie.visualization.render import RenderModel

__all__ = ["PLACEHOLDER_COLOR", "render_svg"]


PLACEHOLDER_COLOR = "#d0d0d0"
_STALE_OPACITY = 0.4
_TITLE_HEIGHT = 28.0
_MARGIN = 8.0


def _path_data(points: Iterable[tuple[float, float]]) -> str:
    commands = []
    for index, (x, y) in enumerate(points):
        commands.append(f"{'M' if index == 0 else 'L'}{x:.3f},{y:.3f}")
    commands.append("Z")
    return " ".join(commands)


def _project(
    outline: np.ndarray,
    annulus: Annulus,
    origin: tuple[float, float],
    scale: float,
) -> list[tuple[float, float]]:
    box = annulus.bounds
    # Keep the aspect ratio: one scale for both axes, centred in the canvas.
    offset_x = origin[0] + (scale * max(box.width, box.height) - scale * box.width) / 2.0
    offset_y = origin[1] + (scale * max(box.width, box.height) - scale * box.height) / 2.0
    return [
        (offset_x + (x - box.min_x) * scale, offset_y + (y - box.min_y) * scale)
        for x, y in outline
    ]


def render_svg(model: RenderModel, options: RenderOptions | None = None, *, size: int = 400) -> str:
    """Return a standalone SVG document drawing ``model``."""

    options = options or RenderOptions()
    annulus = annulus_geometry(options.outer_radius, options.inner_radius, options.gap_angle)
    extent = max(annulus.bounds.width, annulus.bounds.height) or 1.0
    drawable = size - 2.0 * _MARGIN
    scale = drawable / extent
    origin = (_MARGIN, _TITLE_HEIGHT + _MARGIN)
    height = size + _TITLE_HEIGHT

    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{height:.0f}" '
        f'viewBox="0 0 {size} {height:.0f}">',
        f'<text x="{size / 2:.1f}" y="20" text-anchor="middle" font-size="16">'
        f"{escape(model.title)}</text>",
    ]

    if model.segments:
        opacity = _STALE_OPACITY if model.stale else 1.0
        parts.append(f'<g opacity="{opacity}">')
        for segment in model.segments:
            outline = wedge_outline(segment.start_angle, segment.end_angle, annulus)
            points = _project(outline, annulus, origin, scale)
            parts.append(
                f'<path d="{_path_data(points)}" fill="{escape(segment.color)}">'
                f"<title>{escape(segment.tooltip)}</title></path>"
            )
        parts.append("</g>")
    else:
        outline = wedge_outline(annulus.start_angle, annulus.end_angle, annulus)
        points = _project(outline, annulus, origin, scale)
        parts.append(f'<path d="{_path_data(points)}" fill="{PLACEHOLDER_COLOR}"/>')
        parts.append(
            f'<text x="{size / 2:.1f}" y="{origin[1] + drawable / 2:.1f}" '
            'text-anchor="middle" font-size="14">No data available</text>'
        )

    if model.error_message:
        parts.append(
            f'<text x="{size / 2:.1f}" y="{height - 4:.1f}" text-anchor="middle" '
            f'font-size="12" fill="#b00020">{escape(model.error_message)}</text>'
        )
    parts.append("</svg>")
    return "\n".join(parts)
