"""Tests for tool-calling event handlers.

Covers function calls (including interleaved calls), code interpreter,
file search, web search and custom tools.
"""

from __future__ import annotations

from types import SimpleNamespace

from integrations.event_handlers.base import UNKNOWN_CALL_ID, StreamState
from integrations.event_handlers.tool_calling_events import (
    handle_code_interpreter_code_delta,
    handle_code_interpreter_code_done,
    handle_code_interpreter_completed,
    handle_code_interpreter_progress,
    handle_custom_tool_delta,
    handle_custom_tool_done,
    handle_file_search_completed,
    handle_file_search_progress,
    handle_function_call_delta,
    handle_function_call_done,
    handle_web_search_completed,
    handle_web_search_progress,
)


class TestFunctionCalls:
    """Tests for function call argument buffering."""

    def test_delta_reports_snapshot(self) -> None:
        """Test each delta carries the accumulated arguments so far."""
        state = StreamState()

        (first,) = list(handle_function_call_delta(SimpleNamespace(item_id="fc_1", delta='{"a"'), state, 1))
        (second,) = list(handle_function_call_delta(SimpleNamespace(item_id="fc_1", delta=":1}"), state, 2))

        assert first.payload()["snapshot"] == '{"a"'
        assert second.payload() == {"call_id": "fc_1", "delta": ":1}", "snapshot": '{"a":1}', "sequence": 2}

    def test_interleaved_calls_stay_separate(self) -> None:
        """Test A:"a", B:"b", A:"c", A.done yields arguments "ac" for A."""
        state = StreamState()

        list(handle_function_call_delta(SimpleNamespace(item_id="A", delta="a"), state, 1))
        list(handle_function_call_delta(SimpleNamespace(item_id="B", delta="b"), state, 2))
        list(handle_function_call_delta(SimpleNamespace(item_id="A", delta="c"), state, 3))
        (done,) = list(handle_function_call_done(SimpleNamespace(item_id="A", name="lookup"), state, 4))

        assert done.event == "function_call_done"
        assert done.payload() == {"call_id": "A", "name": "lookup", "arguments": "ac", "sequence": 4}
        assert state.tool_calls["A"].status == "completed"
        assert state.tool_calls["B"].buffer == "b"
        assert state.tool_calls["B"].status == "in_progress"

    def test_done_without_deltas_uses_event_arguments(self) -> None:
        """Test done fills in arguments when no deltas were seen."""
        state = StreamState()
        event = SimpleNamespace(item_id="fc_2", arguments='{"city":"Paris"}')

        (done,) = list(handle_function_call_done(event, state, 1))

        assert done.payload()["arguments"] == '{"city":"Paris"}'

    def test_buffer_wins_over_event_arguments(self) -> None:
        """Test the buffered fragments are authoritative."""
        state = StreamState()
        list(handle_function_call_delta(SimpleNamespace(item_id="fc_3", delta="{}"), state, 1))

        (done,) = list(handle_function_call_done(SimpleNamespace(item_id="fc_3", arguments="ignored"), state, 2))

        assert done.payload()["arguments"] == "{}"

    def test_missing_call_id_uses_placeholder(self) -> None:
        """Test events without call_id or item_id are tracked under the placeholder id."""
        state = StreamState()

        (result,) = list(handle_function_call_delta(SimpleNamespace(delta="x"), state, 1))

        assert result.payload()["call_id"] == UNKNOWN_CALL_ID
        assert state.tool_calls[UNKNOWN_CALL_ID].buffer == "x"


class TestCodeInterpreter:
    """Tests for code interpreter events."""

    def test_progress_phases_keep_names(self) -> None:
        """Test in_progress and interpreting both go through the progress handler."""
        state = StreamState()
        in_progress = SimpleNamespace(type="response.code_interpreter_call.in_progress", item_id="ci_1")
        interpreting = SimpleNamespace(type="response.code_interpreter_call.interpreting", item_id="ci_1")

        (first,) = list(handle_code_interpreter_progress(in_progress, state, 1))
        (second,) = list(handle_code_interpreter_progress(interpreting, state, 2))

        assert first.event == "code_interpreter_call.in_progress"
        assert second.event == "code_interpreter_call.interpreting"
        assert "ci_1" in state.tool_calls

    def test_code_buffer_and_completion(self) -> None:
        """Test code deltas buffer and completion reports code and output."""
        state = StreamState()
        list(handle_code_interpreter_code_delta(SimpleNamespace(item_id="ci_1", delta="print("), state, 1))
        list(handle_code_interpreter_code_delta(SimpleNamespace(item_id="ci_1", delta="1)"), state, 2))

        (code_done,) = list(handle_code_interpreter_code_done(SimpleNamespace(item_id="ci_1"), state, 3))
        (completed,) = list(
            handle_code_interpreter_completed(SimpleNamespace(item_id="ci_1", output="1\n"), state, 4)
        )

        assert code_done.payload()["code"] == "print(1)"
        assert completed.event == "code_interpreter_completed"
        assert completed.payload()["code"] == "print(1)"
        assert completed.payload()["output"] == "1\n"
        assert state.tool_calls["ci_1"].status == "completed"


class TestSearchCalls:
    """Tests for file search and web search events."""

    def test_file_search(self) -> None:
        """Test file search progress and completion."""
        state = StreamState()
        searching = SimpleNamespace(type="response.file_search_call.searching", item_id="fs_1")
        results = [{"file_id": "file_1", "score": 0.9}]

        (progress,) = list(handle_file_search_progress(searching, state, 1))
        (done,) = list(handle_file_search_completed(SimpleNamespace(item_id="fs_1", results=results), state, 2))

        assert progress.event == "file_search_call.searching"
        assert done.event == "file_search_completed"
        assert done.payload()["results"] == results

    def test_web_search(self) -> None:
        """Test web search progress and completion."""
        state = StreamState()
        in_progress = SimpleNamespace(type="response.web_search_call.in_progress", item_id="ws_1")

        (progress,) = list(handle_web_search_progress(in_progress, state, 1))
        (done,) = list(handle_web_search_completed(SimpleNamespace(item_id="ws_1"), state, 2))

        assert progress.event == "web_search_call.in_progress"
        assert done.event == "web_search_completed"
        assert state.tool_calls["ws_1"].status == "completed"


class TestCustomTools:
    """Tests for custom tool input events."""

    def test_custom_tool_input(self) -> None:
        """Test custom tool input buffers per call."""
        state = StreamState()
        list(handle_custom_tool_delta(SimpleNamespace(item_id="ct_1", delta="SELECT "), state, 1))
        list(handle_custom_tool_delta(SimpleNamespace(item_id="ct_1", delta="1"), state, 2))

        (done,) = list(handle_custom_tool_done(SimpleNamespace(item_id="ct_1"), state, 3))

        assert done.event == "custom_tool_done"
        assert done.payload()["input"] == "SELECT 1"

    def test_custom_tool_done_without_deltas(self) -> None:
        """Test done falls back to the event's input."""
        (done,) = list(handle_custom_tool_done(SimpleNamespace(item_id="ct_2", input="raw"), StreamState(), 1))

        assert done.payload()["input"] == "raw"
