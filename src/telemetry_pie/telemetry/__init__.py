"""Telemetry records, message paths and recorded frame sources."""

from __future__ import annotations

from .events import MessageEvent, RenderState, Subscription
from .message_path import (
    FieldAccess,
    FilterOperation,
    ParsedPath,
    PathOperation,
    SliceOperation,
    Variable,
    get_path_value,
    parse_message_path,
)
from .replay import ReplayContext, iter_render_states, load_recording

__all__ = [
    "FieldAccess",
    "FilterOperation",
    "MessageEvent",
    "ParsedPath",
    "PathOperation",
    "RenderState",
    "ReplayContext",
    "SliceOperation",
    "Subscription",
    "Variable",
    "get_path_value",
    "iter_render_states",
    "load_recording",
    "parse_message_path",
]
