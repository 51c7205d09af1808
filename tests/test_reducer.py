"""Behaviour of the stream reducer transitions."""

from __future__ import annotations

import numpy as np
import pytest

from telemetry_pie.core.reducer import (
    ApplyFrame,
    ReducerState,
    Seek,
    SetPath,
    initial_state,
    reduce,
)
from telemetry_pie.errors import VARIABLES_UNSUPPORTED_MESSAGE, ExtractionError

from tests.helpers import TraceRecorder, build_event, build_frame


def _loaded_state(path: str = "/load.data", vector=(1.0, 2.0, 3.0)) -> ReducerState:
    state = initial_state(path)
    return reduce(state, ApplyFrame((build_event("/load", vector),)))


def test_initial_state_binds_topic() -> None:
    state = initial_state("/load.data")

    assert state.topic_name == "/load"
    assert state.path_grammar_error is None
    assert state.latest_message is None
    assert state.latest_value is None
    assert state.error is None


def test_initial_state_with_empty_path_reports_grammar_error() -> None:
    state = initial_state("")

    assert state.parsed_path is None
    assert state.path_grammar_error is not None
    assert state.topic_name is None


def test_frame_extracts_matching_topic() -> None:
    state = _loaded_state()

    assert state.latest_value.tolist() == [1.0, 2.0, 3.0]
    assert state.latest_message.topic == "/load"
    assert state.error is None


def test_frame_copies_host_arrays() -> None:
    buffer = np.array([1.0, 2.0])

    state = reduce(
        initial_state("/load.data"),
        ApplyFrame((build_event(message={"data": buffer}),)),
    )

    assert state.latest_value is not buffer
    assert not np.shares_memory(state.latest_value, buffer)
    assert buffer.flags.writeable
    buffer[0] = 9.0
    assert state.latest_value.tolist() == [1.0, 2.0]


def test_frame_last_match_wins() -> None:
    state = initial_state("/load.data")
    frame = build_frame([1, 1], [2, 2], [3, 5])

    state = reduce(state, ApplyFrame(frame))

    assert state.latest_value.tolist() == [3.0, 5.0]
    assert state.latest_message is frame[-1]


def test_frame_ignores_other_topics() -> None:
    state = _loaded_state()
    other = build_event("/other", [9, 9])

    updated = reduce(state, ApplyFrame((other,)))

    assert updated is state
    assert updated.latest_value.tolist() == [1.0, 2.0, 3.0]


def test_frame_multiplexed_topics_only_use_bound_topic() -> None:
    state = initial_state("/load.data")
    frame = (
        build_event("/load", [1, 2]),
        build_event("/other", [7, 7]),
    )

    state = reduce(state, ApplyFrame(frame))

    assert state.latest_value.tolist() == [1.0, 2.0]
    assert state.latest_message is frame[0]


def test_empty_frame_is_a_no_op() -> None:
    state = _loaded_state()

    assert reduce(state, ApplyFrame(())) is state


def test_frame_extraction_error_is_stored_without_aborting_batch() -> None:
    state = initial_state("/load.data")
    frame = (
        build_event("/load", [1, 3]),
        build_event("/load", message={"nope": [1]}),
    )

    state = reduce(state, ApplyFrame(frame))

    assert isinstance(state.error, ExtractionError)
    assert state.error.topic == "/load"
    assert state.latest_value.tolist() == [1.0, 3.0]
    assert state.latest_message is frame[0]


def test_later_success_clears_extraction_error() -> None:
    state = initial_state("/load.data")
    frame = (
        build_event("/load", message={"nope": [1]}),
        build_event("/load", [4, 4]),
    )

    state = reduce(state, ApplyFrame(frame))

    assert state.error is None
    assert state.latest_value.tolist() == [4.0, 4.0]


def test_frame_filtered_message_keeps_previous_value() -> None:
    state = _loaded_state('/load{source=="left"}.data')
    state = reduce(state, ApplyFrame((build_event("/load", message={"source": "left", "data": [5]}),)))
    state = reduce(state, ApplyFrame((build_event("/load", message={"source": "right", "data": [9]}),)))

    assert state.latest_value.tolist() == [5.0]
    assert state.error is None


def test_latest_value_is_read_only() -> None:
    state = _loaded_state()

    with pytest.raises(ValueError):
        state.latest_value[0] = 10.0


def test_transitions_do_not_mutate_prior_state() -> None:
    before = _loaded_state()
    snapshot = before.latest_value

    after = reduce(before, ApplyFrame((build_event("/load", [8, 8]),)))

    assert before.latest_value is snapshot
    assert before.latest_value.tolist() == [1.0, 2.0, 3.0]
    assert after is not before


def test_set_path_reextracts_last_message() -> None:
    state = initial_state("/load.data")
    message = build_event("/load", message={"data": [1, 2], "other": [5, 5, 5]})
    state = reduce(state, ApplyFrame((message,)))

    state = reduce(state, SetPath("/load.other"))

    assert state.path == "/load.other"
    assert state.latest_value.tolist() == [5.0, 5.0, 5.0]
    assert state.latest_message is message
    assert state.error is None


def test_set_path_same_value_keeps_state() -> None:
    state = _loaded_state()

    assert reduce(state, SetPath("/load.data")) is state


def test_set_path_extraction_failure_is_captured() -> None:
    state = _loaded_state()

    state = reduce(state, SetPath("/load.missing"))

    assert isinstance(state.error, ExtractionError)
    assert state.latest_value is None
    assert state.path_grammar_error is None


def test_set_path_to_other_topic_clears_value() -> None:
    state = _loaded_state()

    state = reduce(state, SetPath("/other.data"))

    assert state.topic_name == "/other"
    assert state.latest_value is None
    assert state.error is None


def test_set_path_with_variables_sets_grammar_error() -> None:
    state = _loaded_state()
    assert state.latest_value is not None

    state = reduce(state, SetPath("/load.data[$start:2]"))

    assert state.path_grammar_error == VARIABLES_UNSUPPORTED_MESSAGE
    assert state.latest_value is None
    assert state.topic_name == "/load"


def test_set_path_with_unparseable_text_sets_grammar_error() -> None:
    state = _loaded_state()

    state = reduce(state, SetPath("/load.data["))

    assert state.parsed_path is None
    assert state.path_grammar_error
    assert state.latest_value is None


def test_grammar_error_frames_only_remember_last_message() -> None:
    state = reduce(_loaded_state(), SetPath("/load{id==$robot}.data"))
    state = reduce(state, ApplyFrame((build_event("/load", message={"id": 1, "data": [1]}),)))
    frame = build_frame([4, 4], [5, 5])

    state = reduce(state, ApplyFrame(frame))

    assert state.latest_message is frame[-1]
    assert state.latest_value is None
    assert state.error is None


def test_fixing_path_recovers_from_remembered_message() -> None:
    state = reduce(initial_state("/load.data"), SetPath("/load.data[$i]"))
    state = reduce(state, ApplyFrame(build_frame([2, 6])))

    state = reduce(state, SetPath("/load.data"))

    assert state.path_grammar_error is None
    assert state.latest_value.tolist() == [2.0, 6.0]


def test_seek_resets_transient_state() -> None:
    state = reduce(_loaded_state(), ApplyFrame((build_event("/load", message={"bad": 1}),)))
    assert state.error is not None

    state = reduce(state, Seek())

    assert state.latest_message is None
    assert state.latest_value is None
    assert state.error is None
    assert state.path == "/load.data"
    assert state.topic_name == "/load"


def test_trace_hook_receives_events(trace: TraceRecorder) -> None:
    state = initial_state("/load.data")
    state = reduce(state, ApplyFrame(build_frame([1, 2])), trace=trace)
    state = reduce(state, SetPath("/load"), trace=trace)
    reduce(state, Seek(), trace=trace)

    assert trace.names == ["frame", "path", "seek"]
    frame_details = trace.events[0][1]
    assert frame_details["size"] == 1
    assert frame_details["matched"] == 1


def test_unexpected_failure_is_captured(monkeypatch: pytest.MonkeyPatch) -> None:
    from telemetry_pie.core import reducer as reducer_module

    def explode(message, parsed):
        raise RuntimeError("boom")

    state = _loaded_state()
    monkeypatch.setattr(reducer_module, "_extract", explode)

    updated = reduce(state, ApplyFrame((build_event("/load", [1]),)))

    assert isinstance(updated.error, RuntimeError)
    assert updated.latest_value is None


def test_unknown_action_is_rejected() -> None:
    with pytest.raises(TypeError):
        reduce(initial_state("/load.data"), object())  # type: ignore[arg-type]


def test_values_are_float_vectors() -> None:
    state = _loaded_state(vector=np.array([1, 2], dtype=np.int32))

    assert state.latest_value.dtype == np.float64
