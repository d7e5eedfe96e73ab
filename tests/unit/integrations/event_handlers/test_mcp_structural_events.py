"""Tests for MCP, refusal, structural and computer-use event handlers."""

from __future__ import annotations

from types import SimpleNamespace

from integrations.event_handlers.base import StreamState
from integrations.event_handlers.computer_use_events import (
    handle_computer_use_action_delta,
    handle_computer_use_action_done,
    handle_computer_use_completed,
    handle_computer_use_output_item,
    handle_computer_use_progress,
)
from integrations.event_handlers.mcp_events import (
    handle_mcp_call_completed,
    handle_mcp_call_delta,
    handle_mcp_call_done,
    handle_mcp_call_failed,
    handle_mcp_call_progress,
    handle_mcp_list_tools,
)
from integrations.event_handlers.refusal_events import handle_refusal_delta, handle_refusal_done
from integrations.event_handlers.structural_events import handle_structural_event, handle_unknown_event


class TestMCPEvents:
    """Tests for remote MCP tool events."""

    def test_call_lifecycle(self) -> None:
        """Test argument buffering through completion."""
        state = StreamState()
        list(handle_mcp_call_progress(SimpleNamespace(item_id="mcp_1"), state, 1))
        list(handle_mcp_call_delta(SimpleNamespace(item_id="mcp_1", delta='{"q":'), state, 2))
        list(handle_mcp_call_delta(SimpleNamespace(item_id="mcp_1", delta='"x"}'), state, 3))

        (done,) = list(handle_mcp_call_done(SimpleNamespace(item_id="mcp_1"), state, 4))
        (completed,) = list(handle_mcp_call_completed(SimpleNamespace(item_id="mcp_1", output="ok"), state, 5))

        assert done.payload()["arguments"] == '{"q":"x"}'
        assert completed.event == "mcp_call_completed"
        assert completed.payload()["result"] == "ok"
        assert state.tool_calls["mcp_1"].status == "completed"

    def test_call_failed(self) -> None:
        """Test failure marks the call failed."""
        state = StreamState()

        (result,) = list(handle_mcp_call_failed(SimpleNamespace(item_id="mcp_2", error="timeout"), state, 1))

        assert result.event == "mcp_call_failed"
        assert result.payload()["error"] == "timeout"
        assert state.tool_calls["mcp_2"].status == "failed"

    def test_list_tools_phases(self) -> None:
        """Test the three list-tools phases report their status."""
        state = StreamState()
        phases = ["in_progress", "completed", "failed"]

        results = [
            next(handle_mcp_list_tools(SimpleNamespace(type=f"response.mcp_list_tools.{phase}"), state, i))
            for i, phase in enumerate(phases)
        ]

        assert [r.event for r in results] == [f"mcp_list_tools.{phase}" for phase in phases]
        assert [r.payload()["status"] for r in results] == phases


class TestRefusalEvents:
    """Tests for refusal events."""

    def test_refusal(self) -> None:
        """Test refusal deltas and final refusal text."""
        state = StreamState()

        (delta,) = list(handle_refusal_delta(SimpleNamespace(delta="I can't"), state, 1))
        (done,) = list(handle_refusal_done(SimpleNamespace(refusal="I can't help with that."), state, 2))

        assert delta.event == "refusal_delta"
        assert done.event == "refusal_done"
        assert done.payload()["refusal"] == "I can't help with that."


class TestStructuralEvents:
    """Tests for output item / content part events and the unknown fallback."""

    def test_output_item_added(self) -> None:
        """Test output items are forwarded under their stripped type."""
        item = {"id": "msg_1", "type": "message"}
        event = SimpleNamespace(type="response.output_item.added", item=item, output_index=0)

        (result,) = list(handle_structural_event(event, StreamState(), 1))

        assert result.event == "output_item.added"
        assert result.payload() == {"item": item, "output_index": 0, "sequence": 1}

    def test_content_part_done(self) -> None:
        """Test content parts are forwarded."""
        part = {"type": "output_text", "text": "Hi"}
        event = SimpleNamespace(type="response.content_part.done", part=part, item_id="msg_1", content_index=0)

        (result,) = list(handle_structural_event(event, StreamState(), 2))

        assert result.event == "content_part.done"
        assert result.payload()["part"] == part

    def test_unknown_event_forwarded(self) -> None:
        """Test an unrecognized type produces an unknown_event, not an exception."""
        event = SimpleNamespace(type="response.brand_new.thing", foo="bar")

        (result,) = list(handle_unknown_event(event, StreamState(), 3))

        assert result.event == "unknown_event"
        assert result.payload()["type"] == "response.brand_new.thing"
        assert result.payload()["event"]["foo"] == "bar"

    def test_unknown_event_without_type(self) -> None:
        """Test an event with no type at all."""
        (result,) = list(handle_unknown_event({"payload": 1}, StreamState(), 0))

        assert result.payload()["type"] == "unknown"
        assert result.payload()["event"] == {"payload": 1}


class TestComputerUseEvents:
    """Tests for computer-use tool events."""

    def test_action_flow(self) -> None:
        """Test action delta/done, screenshot output and completion."""
        state = StreamState()
        action = {"type": "click", "x": 10, "y": 20}

        (progress,) = list(
            handle_computer_use_progress(
                SimpleNamespace(type="response.computer_use_call.in_progress", item_id="cu_1"), state, 1
            )
        )
        (delta,) = list(handle_computer_use_action_delta(SimpleNamespace(item_id="cu_1", delta=action), state, 2))
        (done,) = list(handle_computer_use_action_done(SimpleNamespace(item_id="cu_1", action=action), state, 3))
        (added,) = list(
            handle_computer_use_output_item(
                SimpleNamespace(type="response.computer_use_call.output_item.added", item_id="cu_1"), state, 4
            )
        )
        (output_done,) = list(
            handle_computer_use_output_item(
                SimpleNamespace(
                    type="response.computer_use_call.output_item.done",
                    item_id="cu_1",
                    output={"type": "computer_screenshot", "image_url": "data:image/png;base64,AAA"},
                ),
                state,
                5,
            )
        )
        (completed,) = list(handle_computer_use_completed(SimpleNamespace(item_id="cu_1"), state, 6))

        assert progress.event == "computer_use_call.in_progress"
        assert delta.payload()["action"] == action
        assert done.payload()["action"] == action
        assert added.event == "computer_use_output_item_added"
        assert output_done.event == "computer_use_output_item_done"
        assert state.tool_calls["cu_1"].output["type"] == "computer_screenshot"
        assert completed.payload() == {"call_id": "cu_1", "status": "completed", "sequence": 6}
