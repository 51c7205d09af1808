"""Recorded frame sources.

Recordings are JSON Lines documents.  Each line is either a message::

    {"frame": 3, "topic": "/load", "receive_time": 12.5, "message": {"data": [1, 2]}}

or a playback discontinuity marker::

    {"seek": true}

Consecutive messages sharing a ``frame`` value are delivered as one batch;
messages without a ``frame`` key form single-message batches.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Sequence

from telemetry_pie.telemetry.events import MessageEvent, RenderState, Subscription

__all__ = ["ReplayContext", "iter_render_states", "load_recording"]


logger = logging.getLogger(__name__)


def load_recording(source: Path) -> list[dict[str, Any]]:
    """Read the JSON Lines recording stored at ``source``."""

    records: list[dict[str, Any]] = []
    with Path(source).open("r", encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            text = line.strip()
            if not text:
                continue
            try:
                payload = json.loads(text)
            except json.JSONDecodeError as exc:
                raise ValueError(f"{source}:{line_number}: invalid JSON ({exc.msg})") from exc
            if not isinstance(payload, dict):
                raise ValueError(f"{source}:{line_number}: expected a JSON object")
            if not payload.get("seek") and not isinstance(payload.get("topic"), str):
                raise ValueError(f"{source}:{line_number}: message records need a 'topic'")
            if "receive_time" in payload:
                try:
                    payload["receive_time"] = float(payload["receive_time"])
                except (TypeError, ValueError) as exc:
                    raise ValueError(
                        f"{source}:{line_number}: 'receive_time' must be a number"
                    ) from exc
            records.append(payload)
    logger.debug(
        "Loaded recording",
        extra={"event": "replay.loaded", "context": {"source": str(source), "records": len(records)}},
    )
    return records


def _as_event(record: Mapping[str, Any]) -> MessageEvent:
    return MessageEvent(
        topic=str(record["topic"]),
        receive_time=float(record.get("receive_time", 0.0)),
        message=record.get("message"),
    )


def iter_render_states(records: Iterable[Mapping[str, Any]]) -> Iterator[RenderState]:
    """Group ``records`` into the render ticks a live host would deliver."""

    batch: list[MessageEvent] = []
    batch_key: Any = None
    pending_seek = False

    for index, record in enumerate(records):
        if record.get("seek"):
            if batch:
                yield RenderState(tuple(batch), did_seek=pending_seek)
                batch = []
            pending_seek = True
            continue
        key = record.get("frame", ("line", index))
        if batch and key != batch_key:
            yield RenderState(tuple(batch), did_seek=pending_seek)
            batch = []
            pending_seek = False
        batch_key = key
        batch.append(_as_event(record))

    if batch:
        yield RenderState(tuple(batch), did_seek=pending_seek)
    elif pending_seek:
        yield RenderState(None, did_seek=True)


class ReplayContext:
    """In-memory host that plays recorded frames into a panel."""

    def __init__(self, initial_state: Optional[Mapping[str, Any]] = None) -> None:
        self.initial_state = dict(initial_state) if initial_state is not None else None
        self.on_render: Optional[Callable[[RenderState, Callable[[], None]], None]] = None
        self.watched: set[str] = set()
        self.subscriptions: list[Subscription] = []
        self.saved_state: Optional[dict[str, Any]] = None
        self.default_title: Optional[str] = None
        self.renders_completed = 0

    def watch(self, field: str) -> None:
        self.watched.add(field)

    def subscribe(self, subscriptions: Sequence[Subscription]) -> None:
        self.subscriptions = list(subscriptions)

    def unsubscribe_all(self) -> None:
        self.subscriptions = []

    def save_state(self, state: Mapping[str, Any]) -> None:
        self.saved_state = dict(state)

    def set_default_panel_title(self, title: Optional[str]) -> None:
        self.default_title = title

    def _done(self) -> None:
        self.renders_completed += 1

    def deliver(self, render_state: RenderState) -> None:
        if self.on_render is None:
            return
        self.on_render(render_state, self._done)

    def play(self, render_states: Iterable[RenderState]) -> int:
        count = 0
        for render_state in render_states:
            self.deliver(render_state)
            count += 1
        return count
