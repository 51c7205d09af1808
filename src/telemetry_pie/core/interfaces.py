"""Structural typing interfaces for the hosting environment.

The panel adapter only relies on the attributes declared here, so any
host (a live bridge, a replay driver or a test double) can drive it
without inheriting from a concrete base class.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, runtime_checkable

from telemetry_pie.telemetry.events import RenderState, Subscription

__all__ = [
    "PanelContext",
    "RenderCallback",
    "SupportsMessageEvent",
    "TraceHook",
]


TraceHook = Callable[[str, Mapping[str, Any]], None]
RenderCallback = Callable[[RenderState, Callable[[], None]], None]


@runtime_checkable
class SupportsMessageEvent(Protocol):
    """Message record consumed by the stream reducer."""

    topic: str
    receive_time: float
    message: Any


@runtime_checkable
class PanelContext(Protocol):
    """Callbacks exposed by the host embedding a panel."""

    initial_state: Optional[Mapping[str, Any]]
    on_render: Optional[RenderCallback]

    def watch(self, field: str) -> None: ...

    def subscribe(self, subscriptions: Sequence[Subscription]) -> None: ...

    def unsubscribe_all(self) -> None: ...

    def save_state(self, state: Mapping[str, Any]) -> None: ...

    def set_default_panel_title(self, title: Optional[str]) -> None: ...
