"""Core streaming state for telemetry_pie."""

from __future__ import annotations

from .interfaces import PanelContext, RenderCallback, SupportsMessageEvent, TraceHook
from .reducer import (
    Action,
    ApplyFrame,
    ReducerState,
    Seek,
    SetPath,
    initial_state,
    reduce,
)

__all__ = [
    "Action",
    "ApplyFrame",
    "PanelContext",
    "ReducerState",
    "RenderCallback",
    "Seek",
    "SetPath",
    "SupportsMessageEvent",
    "TraceHook",
    "initial_state",
    "reduce",
]
