"""Tests for the event routing table and dispatcher."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import Mock, patch

from integrations.event_handlers import EVENT_ROUTES, StreamState, dispatch_event, get_handler
from integrations.event_handlers.registry import FALLBACK_HANDLER
from integrations.event_handlers.structural_events import handle_unknown_event
from models.stream_models import StreamEventType as T


def _run(events: list[SimpleNamespace], state: StreamState | None = None) -> list:
    state = state or StreamState()
    return [normalized for event in events for normalized in dispatch_event(event, state)]


class TestRoutingTable:
    """Tests for EVENT_ROUTES coverage."""

    def test_every_known_type_is_routed(self) -> None:
        """Test every StreamEventType has exactly one handler."""
        assert set(EVENT_ROUTES) == set(T)

    def test_unknown_type_uses_fallback(self) -> None:
        """Test unrecognized and missing types resolve to the unknown handler."""
        assert get_handler("response.not_a_real_event") is FALLBACK_HANDLER
        assert get_handler(None) is FALLBACK_HANDLER
        assert FALLBACK_HANDLER is handle_unknown_event

    def test_known_type_lookup(self) -> None:
        """Test lookup by vendor string."""
        assert get_handler("response.output_text.delta") is EVENT_ROUTES[T.TEXT_DELTA]


class TestDispatch:
    """Tests for dispatch_event."""

    def test_unknown_type_never_raises(self) -> None:
        """Test unknown events become unknown_event."""
        results = _run([SimpleNamespace(type="response.future_feature.delta", sequence_number=4)])

        assert [r.event for r in results] == ["unknown_event"]
        assert results[0].sequence == 4

    def test_sequence_follows_vendor_numbers(self) -> None:
        """Test normalized sequences track the vendor sequence_number."""
        events = [
            SimpleNamespace(type="response.created", sequence_number=0, response={"id": "resp_1", "model": "gpt-4o"}),
            SimpleNamespace(type="response.output_text.delta", sequence_number=1, delta="He"),
            SimpleNamespace(type="response.output_text.delta", sequence_number=2, delta="y"),
        ]

        results = _run(events)

        assert [r.sequence for r in results] == [0, 1, 2]

    def test_missing_sequence_reuses_last(self) -> None:
        """Test events without sequence_number keep the sequence non-decreasing."""
        state = StreamState()
        events = [
            SimpleNamespace(type="response.output_text.delta", sequence_number=5, delta="a"),
            SimpleNamespace(type="response.output_text.delta", delta="b"),
        ]

        results = _run(events, state)

        assert [r.sequence for r in results] == [5, 5]
        assert state.last_sequence == 5

    def test_image_partials_each_call_handler(self) -> None:
        """Test in_progress, 3 partials and completed call handlers 1/3/1 times."""
        progress = Mock(side_effect=EVENT_ROUTES[T.IMAGE_GEN_IN_PROGRESS])
        partial = Mock(side_effect=EVENT_ROUTES[T.IMAGE_GEN_PARTIAL])
        completed = Mock(side_effect=EVENT_ROUTES[T.IMAGE_GEN_COMPLETED])
        events = [
            SimpleNamespace(type=T.IMAGE_GEN_IN_PROGRESS.value, item_id="ig_1", sequence_number=1),
            *[
                SimpleNamespace(
                    type=T.IMAGE_GEN_PARTIAL.value,
                    item_id="ig_1",
                    partial_image_index=i,
                    partial_image_b64=f"frame{i}",
                    sequence_number=2 + i,
                )
                for i in range(3)
            ],
            SimpleNamespace(type=T.IMAGE_GEN_COMPLETED.value, item_id="ig_1", result="final", sequence_number=5),
        ]

        with patch.dict(
            EVENT_ROUTES,
            {T.IMAGE_GEN_IN_PROGRESS: progress, T.IMAGE_GEN_PARTIAL: partial, T.IMAGE_GEN_COMPLETED: completed},
        ):
            results = _run(events)

        assert progress.call_count == 1
        assert partial.call_count == 3
        assert completed.call_count == 1
        assert [r.event for r in results] == [
            "image_generation_call.in_progress",
            "image_gen_partial",
            "image_gen_partial",
            "image_gen_partial",
            "image_gen_completed",
        ]

    def test_shared_progress_handlers(self) -> None:
        """Test phases that share a handler each invoke it once per event."""
        code_progress = Mock(side_effect=EVENT_ROUTES[T.CODE_INTERPRETER_IN_PROGRESS])
        list_tools = Mock(side_effect=EVENT_ROUTES[T.MCP_LIST_TOOLS_IN_PROGRESS])
        summary_part = Mock(side_effect=EVENT_ROUTES[T.REASONING_SUMMARY_PART_ADDED])
        events = [
            SimpleNamespace(type=T.CODE_INTERPRETER_IN_PROGRESS.value, item_id="ci_1"),
            SimpleNamespace(type=T.CODE_INTERPRETER_INTERPRETING.value, item_id="ci_1"),
            SimpleNamespace(type=T.MCP_LIST_TOOLS_IN_PROGRESS.value),
            SimpleNamespace(type=T.MCP_LIST_TOOLS_COMPLETED.value),
            SimpleNamespace(type=T.MCP_LIST_TOOLS_FAILED.value),
            SimpleNamespace(type=T.REASONING_SUMMARY_PART_ADDED.value),
            SimpleNamespace(type=T.REASONING_SUMMARY_PART_DONE.value),
        ]

        with patch.dict(
            EVENT_ROUTES,
            {
                T.CODE_INTERPRETER_IN_PROGRESS: code_progress,
                T.CODE_INTERPRETER_INTERPRETING: code_progress,
                T.MCP_LIST_TOOLS_IN_PROGRESS: list_tools,
                T.MCP_LIST_TOOLS_COMPLETED: list_tools,
                T.MCP_LIST_TOOLS_FAILED: list_tools,
                T.REASONING_SUMMARY_PART_ADDED: summary_part,
                T.REASONING_SUMMARY_PART_DONE: summary_part,
            },
        ):
            _run(events)

        assert code_progress.call_count == 2
        assert list_tools.call_count == 3
        assert summary_part.call_count == 2

    def test_full_text_stream(self) -> None:
        """Test a complete text stream through the dispatcher."""
        usage = SimpleNamespace(
            input_tokens=3,
            output_tokens=2,
            total_tokens=5,
            input_tokens_details=SimpleNamespace(cached_tokens=0),
            output_tokens_details=SimpleNamespace(reasoning_tokens=0),
        )
        response = SimpleNamespace(id="resp_1", model="gpt-4o", status="completed", usage=usage)
        state = StreamState()
        events = [
            SimpleNamespace(type="response.created", sequence_number=0, response=response),
            SimpleNamespace(type="response.output_text.delta", sequence_number=1, delta="Hi"),
            SimpleNamespace(type="response.output_text.delta", sequence_number=2, delta="!"),
            SimpleNamespace(type="response.output_text.done", sequence_number=3, text="Hi!"),
            SimpleNamespace(type="response.completed", sequence_number=4, response=response),
        ]

        results = _run(events, state)

        assert [r.event for r in results] == [
            "response_created",
            "text_delta",
            "text_delta",
            "text_done",
            "response_completed",
        ]
        completed = results[-1].payload()
        assert completed["output_text"] == "Hi!"
        assert completed["usage"] == {
            "input_tokens": 3,
            "output_tokens": 2,
            "total_tokens": 5,
            "cached_tokens": 0,
            "reasoning_tokens": 0,
        }
