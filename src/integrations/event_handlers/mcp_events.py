"""
MCP (remote Model Context Protocol server) event handlers.

Tool invocations buffer their argument fragments per call id like function
calls. The three list-tools phases (in_progress, completed, failed) share
one handler that tells them apart by event type.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from models.event_models import NormalizedEvent
from models.stream_models import StreamEventType, strip_response_prefix
from utils.logger import logger

from .base import StreamState, call_id_of, event_field, event_type_of

CALL_TYPE_MCP = "mcp"

_LIST_TOOLS_STATUS = {
    StreamEventType.MCP_LIST_TOOLS_IN_PROGRESS: "in_progress",
    StreamEventType.MCP_LIST_TOOLS_COMPLETED: "completed",
    StreamEventType.MCP_LIST_TOOLS_FAILED: "failed",
}


def handle_mcp_call_progress(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    state.get_call(call_id, CALL_TYPE_MCP)

    yield NormalizedEvent.build("mcp_call_in_progress", sequence, call_id=call_id)


def handle_mcp_call_delta(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    delta = event_field(event, "delta", default="")
    state.append_call_input(call_id, CALL_TYPE_MCP, delta)

    yield NormalizedEvent.build("mcp_call_delta", sequence, call_id=call_id, delta=delta)


def handle_mcp_call_done(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """Arguments complete; the call itself may still be running."""
    call_id = call_id_of(event)
    call = state.get_call(call_id, CALL_TYPE_MCP)
    if not call.buffer:
        call.buffer = event_field(event, "arguments", default="")

    yield NormalizedEvent.build("mcp_call_done", sequence, call_id=call_id, arguments=call.buffer)


def handle_mcp_call_completed(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    call = state.complete_call(call_id, CALL_TYPE_MCP)
    call.output = event_field(event, "output", "result")

    yield NormalizedEvent.build("mcp_call_completed", sequence, call_id=call_id, result=call.output)


def handle_mcp_call_failed(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    call = state.get_call(call_id, CALL_TYPE_MCP)
    call.status = "failed"
    error = event_field(event, "error")
    logger.warning(f"MCP call failed: {call_id}", sequence=sequence)

    yield NormalizedEvent.build("mcp_call_failed", sequence, call_id=call_id, error=error)


def handle_mcp_list_tools(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """All three list-tools phases; status derived from the event type."""
    event_type = event_type_of(event) or StreamEventType.MCP_LIST_TOOLS_IN_PROGRESS.value
    member = StreamEventType.parse(event_type)
    status = _LIST_TOOLS_STATUS.get(member) if member else None

    yield NormalizedEvent.build(
        strip_response_prefix(event_type),
        sequence,
        item_id=event_field(event, "item_id"),
        status=status,
        tools=event_field(event, "tools"),
        error=event_field(event, "error"),
    )
