"""Top-level package for telemetry_pie.

The package turns a numeric vector streamed on a telemetry topic into an
annular pie chart.  A pure stream reducer keeps the latest vector selected
by a message path, a colour engine resolves ramp stops and the wedge
geometry lays out one segment per weight.
"""

from ._version import __version__
from .configuration import (
    DEFAULT_CONFIG,
    PanelConfig,
    RenderOptions,
    SettingsAction,
    apply_settings_action,
    merge_config,
)
from .core.reducer import ApplyFrame, ReducerState, Seek, SetPath, initial_state, reduce
from .errors import ExtractionError, PathParseError, TelemetryPieError
from .panel import PieChartPanel
from .telemetry.events import MessageEvent, RenderState
from .telemetry.message_path import ParsedPath, get_path_value, parse_message_path
from .visualization.colormap import ColorStop, resolve_color_stops, reverse_stops, turbo
from .visualization.geometry import Segment, annulus_geometry, compute_segments
from .visualization.render import RenderModel, RenderSegment, build_render_model

__all__ = [
    "ApplyFrame",
    "ColorStop",
    "DEFAULT_CONFIG",
    "ExtractionError",
    "MessageEvent",
    "PanelConfig",
    "ParsedPath",
    "PathParseError",
    "PieChartPanel",
    "ReducerState",
    "RenderModel",
    "RenderOptions",
    "RenderSegment",
    "RenderState",
    "Seek",
    "Segment",
    "SetPath",
    "SettingsAction",
    "TelemetryPieError",
    "annulus_geometry",
    "apply_settings_action",
    "build_render_model",
    "compute_segments",
    "get_path_value",
    "initial_state",
    "merge_config",
    "parse_message_path",
    "reduce",
    "resolve_color_stops",
    "reverse_stops",
    "turbo",
    "__version__",
]
