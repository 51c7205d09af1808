"""Records delivered by a frame source."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

__all__ = ["MessageEvent", "RenderState", "Subscription"]


@dataclass(frozen=True, slots=True)
class MessageEvent:
    """A single message received on ``topic``."""

    topic: str
    receive_time: float
    message: Any


@dataclass(frozen=True, slots=True)
class RenderState:
    """State handed to the panel on every render tick.

    ``current_frame`` holds the messages delivered since the previous tick,
    possibly multiplexing several topics. ``did_seek`` marks a playback
    discontinuity that happened before the frame.
    """

    current_frame: tuple[MessageEvent, ...] | None = None
    did_seek: bool = False


@dataclass(frozen=True, slots=True)
class Subscription:
    topic: str
    preload: bool = field(default=False)
