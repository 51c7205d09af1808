"""Stream reducer binding a message path to the latest queried value.

The reducer is a pure ``State × Action → State`` function.  Every
transition returns a new :class:`ReducerState` and never raises: parse
problems become :attr:`ReducerState.path_grammar_error`, payload mismatches
become :attr:`ReducerState.error`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Sequence, Union

import numpy as np

from telemetry_pie.core.interfaces import SupportsMessageEvent, TraceHook
from telemetry_pie.errors import ExtractionError, PathParseError, VARIABLES_UNSUPPORTED_MESSAGE
from telemetry_pie.telemetry.message_path import ParsedPath, get_path_value, parse_message_path

__all__ = [
    "Action",
    "ApplyFrame",
    "ReducerState",
    "Seek",
    "SetPath",
    "initial_state",
    "reduce",
]


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, eq=False)
class ReducerState:
    """Snapshot of the path binding and the latest extracted vector.

    ``latest_value`` is only ever set while ``path_grammar_error`` is
    ``None``.  Arrays stored here are read-only.
    """

    path: str
    parsed_path: ParsedPath | None = None
    latest_message: SupportsMessageEvent | None = None
    latest_value: np.ndarray | None = None
    error: Exception | None = None
    path_grammar_error: str | None = None

    @property
    def topic_name(self) -> str | None:
        return self.parsed_path.topic_name if self.parsed_path is not None else None


@dataclass(frozen=True, slots=True)
class SetPath:
    path: str


@dataclass(frozen=True, slots=True)
class ApplyFrame:
    messages: Sequence[SupportsMessageEvent]


@dataclass(frozen=True, slots=True)
class Seek:
    pass


Action = Union[SetPath, ApplyFrame, Seek]


def _emit(trace: TraceHook | None, event: str, **details: Any) -> None:
    if trace is not None:
        trace(event, details)


def _bind(path: str) -> tuple[ParsedPath | None, str | None]:
    try:
        parsed = parse_message_path(path)
    except PathParseError as exc:
        return None, str(exc)
    if parsed.uses_variables:
        return parsed, VARIABLES_UNSUPPORTED_MESSAGE
    return parsed, None


def _extract(message: SupportsMessageEvent, parsed: ParsedPath) -> np.ndarray | None:
    if message.topic != parsed.topic_name:
        return None
    try:
        value = get_path_value(message.message, parsed)
    except ExtractionError as exc:
        exc.topic = message.topic
        raise
    if value is not None:
        value.flags.writeable = False
    return value


def initial_state(path: str) -> ReducerState:
    """Build the state used at mount time for ``path``."""

    parsed, grammar_error = _bind(path)
    return ReducerState(path=path, parsed_path=parsed, path_grammar_error=grammar_error)


def _set_path(state: ReducerState, action: SetPath, trace: TraceHook | None) -> ReducerState:
    if action.path == state.path:
        return state
    parsed, grammar_error = _bind(action.path)
    latest_value: np.ndarray | None = None
    error: Exception | None = None
    if grammar_error is None and parsed is not None and state.latest_message is not None:
        try:
            latest_value = _extract(state.latest_message, parsed)
        except Exception as exc:  # extraction must never escape a transition
            error = exc
    _emit(
        trace,
        "path",
        path=action.path,
        grammar_error=grammar_error,
        reextracted=latest_value is not None,
        error=str(error) if error is not None else None,
    )
    return replace(
        state,
        path=action.path,
        parsed_path=parsed,
        latest_value=latest_value,
        error=error,
        path_grammar_error=grammar_error,
    )


def _apply_frame(
    state: ReducerState, action: ApplyFrame, trace: TraceHook | None
) -> ReducerState:
    messages = action.messages
    if not messages:
        return state
    if state.path_grammar_error is not None or state.parsed_path is None:
        # Remember the sample so a corrected path can re-extract it.
        return replace(state, latest_message=messages[-1], error=None)

    parsed = state.parsed_path
    latest_message = state.latest_message
    latest_value = state.latest_value
    error = state.error
    matched = 0
    for message in messages:
        if message.topic != parsed.topic_name:
            continue
        matched += 1
        try:
            value = _extract(message, parsed)
        except ExtractionError as exc:
            error = exc
            continue
        if value is None:
            continue
        latest_message, latest_value, error = message, value, None

    _emit(trace, "frame", size=len(messages), matched=matched, error=str(error) if error else None)
    if not matched:
        return state
    return replace(
        state,
        latest_message=latest_message,
        latest_value=latest_value,
        error=error,
    )


def _seek(state: ReducerState, trace: TraceHook | None) -> ReducerState:
    _emit(trace, "seek", path=state.path)
    return replace(state, latest_message=None, latest_value=None, error=None)


def reduce(
    state: ReducerState, action: Action, *, trace: TraceHook | None = None
) -> ReducerState:
    """Apply ``action`` to ``state`` and return the resulting state."""

    try:
        if isinstance(action, SetPath):
            return _set_path(state, action, trace)
        if isinstance(action, ApplyFrame):
            return _apply_frame(state, action, trace)
        if isinstance(action, Seek):
            return _seek(state, trace)
    except Exception as exc:  # a transition is total; failures become state
        logger.warning(
            "Reducer transition failed",
            extra={"event": "reducer.failure", "context": {"action": type(action).__name__}},
            exc_info=exc,
        )
        return replace(state, latest_value=None, error=exc)
    raise TypeError(f"Unsupported reducer action: {action!r}")
