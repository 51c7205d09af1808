"""Builders shared by the telemetry_pie test-suite."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from telemetry_pie.telemetry.events import MessageEvent, RenderState

__all__ = [
    "ObjectPayload",
    "TraceRecorder",
    "build_event",
    "build_frame",
    "build_render_state",
]


class ObjectPayload:
    """Attribute-based payload, mimicking decoded message classes."""

    def __init__(self, **fields: Any) -> None:
        for name, value in fields.items():
            setattr(self, name, value)


def build_event(
    topic: str = "/load",
    data: Any = (1.0, 2.0, 3.0),
    *,
    receive_time: float = 0.0,
    message: Any = None,
) -> MessageEvent:
    payload = message if message is not None else {"data": list(data)}
    return MessageEvent(topic=topic, receive_time=receive_time, message=payload)


def build_frame(*vectors: Iterable[float], topic: str = "/load") -> tuple[MessageEvent, ...]:
    return tuple(
        build_event(topic, list(vector), receive_time=float(index))
        for index, vector in enumerate(vectors)
    )


def build_render_state(
    *events: MessageEvent, did_seek: bool = False
) -> RenderState:
    return RenderState(current_frame=tuple(events) if events else None, did_seek=did_seek)


@dataclass
class TraceRecorder:
    """Trace hook collecting reducer events."""

    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def __call__(self, event: str, details: Mapping[str, Any]) -> None:
        self.events.append((event, dict(details)))

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.events]
