"""Exporters turning render models into text artefacts."""

from __future__ import annotations

import json
from typing import Protocol

from telemetry_pie.configuration import RenderOptions
from telemetry_pie.exporters.svg import render_svg
from telemetry_pie.visualization.render import RenderModel


class Exporter(Protocol):
    """Exporter callable protocol."""

    def __call__(self, model: RenderModel, options: RenderOptions) -> str:  # pragma: no cover - interface only
        ...


def json_exporter(model: RenderModel, options: RenderOptions) -> str:
    payload = model.as_dict()
    payload["geometry"] = {
        "gapAngle": options.gap_angle,
        "innerRadius": options.inner_radius,
        "outerRadius": options.outer_radius,
    }
    return json.dumps(payload, indent=2, sort_keys=True)


def svg_exporter(model: RenderModel, options: RenderOptions) -> str:
    return render_svg(model, options)


exporters_registry = {
    "json": json_exporter,
    "svg": svg_exporter,
}

__all__ = [
    "Exporter",
    "exporters_registry",
    "json_exporter",
    "render_svg",
    "svg_exporter",
]
