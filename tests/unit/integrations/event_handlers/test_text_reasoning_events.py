"""Tests for output text and reasoning event handlers."""

from __future__ import annotations

from types import SimpleNamespace

from integrations.event_handlers.base import StreamState
from integrations.event_handlers.reasoning_events import (
    handle_reasoning_delta,
    handle_reasoning_done,
    handle_reasoning_summary_delta,
    handle_reasoning_summary_done,
    handle_reasoning_summary_part,
)
from integrations.event_handlers.text_events import (
    handle_text_annotation,
    handle_text_delta,
    handle_text_done,
)


class TestTextEvents:
    """Tests for response.output_text.* handlers."""

    def test_delta_forwarded_and_accumulated(self) -> None:
        """Test each delta is emitted immediately and appended to state."""
        state = StreamState()

        first = list(handle_text_delta(SimpleNamespace(delta="Hel", item_id="msg_1", output_index=0), state, 1))
        second = list(handle_text_delta(SimpleNamespace(delta="lo", item_id="msg_1", output_index=0), state, 2))

        assert first[0].event == "text_delta"
        assert first[0].payload() == {"delta": "Hel", "item_id": "msg_1", "output_index": 0, "sequence": 1}
        assert second[0].payload()["delta"] == "lo"
        assert state.full_text == "Hello"

    def test_empty_logprobs_omitted(self) -> None:
        """Test an empty logprobs list is not forwarded."""
        (result,) = list(handle_text_delta(SimpleNamespace(delta="x", logprobs=[]), StreamState(), 0))

        assert "logprobs" not in result.payload()

    def test_done_uses_event_text(self) -> None:
        """Test output_text.done prefers the event's final text."""
        state = StreamState()
        state.append_text("partial")

        (result,) = list(handle_text_done(SimpleNamespace(text="final text", item_id="msg_1"), state, 3))

        assert result.event == "text_done"
        assert result.payload()["output_text"] == "final text"

    def test_done_falls_back_to_accumulated(self) -> None:
        """Test output_text.done without text uses the accumulated deltas."""
        state = StreamState()
        state.append_text("Hello")
        state.append_text(" there")

        (result,) = list(handle_text_done(SimpleNamespace(), state, 3))

        assert result.payload()["output_text"] == "Hello there"

    def test_annotation(self) -> None:
        """Test annotation events forward the annotation."""
        annotation = {"type": "url_citation", "url": "https://example.com"}
        event = SimpleNamespace(annotation=annotation, annotation_index=0, item_id="msg_1")

        (result,) = list(handle_text_annotation(event, StreamState(), 4))

        assert result.event == "text_annotation"
        assert result.payload()["annotation"] == annotation
        assert result.payload()["annotation_index"] == 0


class TestReasoningEvents:
    """Tests for response.reasoning_* handlers."""

    def test_reasoning_delta_and_done(self) -> None:
        """Test reasoning text deltas and final text."""
        state = StreamState()

        (delta,) = list(handle_reasoning_delta(SimpleNamespace(delta="think", item_id="rs_1"), state, 1))
        (done,) = list(handle_reasoning_done(SimpleNamespace(text="thinking done", item_id="rs_1"), state, 2))

        assert delta.event == "reasoning_delta"
        assert delta.payload()["delta"] == "think"
        assert done.event == "reasoning_done"
        assert done.payload()["reasoning_text"] == "thinking done"

    def test_summary_part_keeps_phase(self) -> None:
        """Test added and done summary parts keep their phase in the event name."""
        state = StreamState()
        added = SimpleNamespace(type="response.reasoning_summary_part.added", part={"type": "summary_text"})
        done = SimpleNamespace(type="response.reasoning_summary_part.done", part={"type": "summary_text"})

        (first,) = list(handle_reasoning_summary_part(added, state, 1))
        (second,) = list(handle_reasoning_summary_part(done, state, 2))

        assert first.event == "reasoning_summary_part.added"
        assert second.event == "reasoning_summary_part.done"

    def test_summary_text(self) -> None:
        """Test summary deltas and the final summary."""
        state = StreamState()

        (delta,) = list(handle_reasoning_summary_delta(SimpleNamespace(delta="Sum", summary_index=0), state, 1))
        (done,) = list(handle_reasoning_summary_done(SimpleNamespace(text="Summary", summary_index=0), state, 2))

        assert delta.event == "reasoning_summary_delta"
        assert delta.payload() == {"delta": "Sum", "summary_index": 0, "sequence": 1}
        assert done.event == "reasoning_summary_done"
        assert done.payload()["reasoning_summary"] == "Summary"
