"""Render-ready pie chart description handed to the drawing surface."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable

from telemetry_pie.configuration import PanelConfig, RenderOptions
from telemetry_pie.core.reducer import ReducerState
from telemetry_pie.visualization.colormap import resolve_color_stops
from telemetry_pie.visualization.geometry import compute_segments, percentages

__all__ = [
    "DEFAULT_TITLE",
    "RenderModel",
    "RenderSegment",
    "build_render_model",
    "build_segments",
]


DEFAULT_TITLE = "Pie Chart"


@dataclass(frozen=True, slots=True)
class RenderSegment:
    color: str
    start_angle: float
    end_angle: float
    label: str
    value: float
    percent: float

    @property
    def value_text(self) -> str:
        return f"{self.value:.2f}"

    @property
    def tooltip(self) -> str:
        return f"{self.label}: {self.percent:.2f}%"

    def as_dict(self) -> dict[str, Any]:
        return {
            "color": self.color,
            "startAngle": self.start_angle,
            "endAngle": self.end_angle,
            "label": self.label,
            "value": self.value,
            "percent": self.percent,
        }


@dataclass(frozen=True, slots=True)
class RenderModel:
    """Segments plus the status flags the surface needs.

    ``stale`` marks a model kept from an earlier render while the stream is
    in an error state; surfaces dim it rather than blanking the chart.
    """

    segments: tuple[RenderSegment, ...] = ()
    has_data: bool = False
    error_message: str | None = None
    stale: bool = False
    title: str = DEFAULT_TITLE

    def as_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "hasData": self.has_data,
            "errorMessage": self.error_message,
            "stale": self.stale,
            "segments": [segment.as_dict() for segment in self.segments],
        }


def build_segments(
    weights: Iterable[float],
    config: PanelConfig,
    options: RenderOptions | None = None,
) -> tuple[RenderSegment, ...]:
    """Colour and lay out ``weights`` according to ``config``."""

    options = options or RenderOptions()
    values = [float(weight) for weight in weights]
    if not values:
        return ()
    shares = percentages(values)
    if shares is None:
        return ()
    stops = resolve_color_stops(config, len(values), turbo_samples=options.turbo_samples)
    segments = compute_segments(values, stops, options.gap_angle)
    return tuple(
        RenderSegment(
            color=segment.color,
            start_angle=segment.start_angle,
            end_angle=segment.end_angle,
            label=config.legend_for(index),
            value=values[index],
            percent=float(shares[index]),
        )
        for index, segment in enumerate(segments)
    )


def build_render_model(
    state: ReducerState,
    config: PanelConfig,
    options: RenderOptions | None = None,
    *,
    last_good: RenderModel | None = None,
) -> RenderModel:
    """Derive the model for the current reducer ``state``.

    While the reducer reports a path or extraction error the chart stops
    following new data: ``last_good`` is returned flagged as stale with the
    error message attached.
    """

    title = config.title or DEFAULT_TITLE
    error_message = state.path_grammar_error
    if error_message is None and state.error is not None:
        error_message = str(state.error) or type(state.error).__name__
    if error_message is not None:
        base = last_good if last_good is not None else RenderModel()
        return replace(base, error_message=error_message, stale=base.has_data, title=title)

    if state.latest_value is None:
        return RenderModel(title=title)
    segments = build_segments(state.latest_value, config, options)
    return RenderModel(segments=segments, has_data=bool(segments), title=title)
