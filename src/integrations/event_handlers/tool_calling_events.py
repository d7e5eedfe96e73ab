"""
Tool-calling event handlers.

Handles function calls, code interpreter, file search, web search, and
custom tools. Argument and input fragments are buffered per call id on the
stream state, so interleaved calls never corrupt each other:

    A:"a"  B:"b"  A:"c"  A.done  ->  function_call_done(A, "ac")

Progress phases that the vendor reports separately (in_progress and
interpreting/searching) share one progress handler and keep their phase in
the emitted event name.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from models.event_models import NormalizedEvent
from models.stream_models import strip_response_prefix
from utils.logger import logger

from .base import StreamState, call_id_of, event_field, event_type_of

CALL_TYPE_FUNCTION = "function"
CALL_TYPE_CODE_INTERPRETER = "code_interpreter"
CALL_TYPE_FILE_SEARCH = "file_search"
CALL_TYPE_WEB_SEARCH = "web_search"
CALL_TYPE_CUSTOM_TOOL = "custom_tool"

# -----------------------------------------------------------------------------
# Function calls
# -----------------------------------------------------------------------------


def handle_function_call_delta(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """Buffer an arguments fragment and forward it with the running snapshot."""
    call_id = call_id_of(event)
    delta = event_field(event, "delta", default="")
    snapshot = state.append_call_input(call_id, CALL_TYPE_FUNCTION, delta)

    yield NormalizedEvent.build(
        "function_call_delta",
        sequence,
        call_id=call_id,
        delta=delta,
        snapshot=snapshot,
    )


def handle_function_call_done(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """Emit the complete arguments for one call exactly once.

    The buffered fragments win; the event's own ``arguments`` only fills in
    when no deltas were seen for this call.
    """
    call_id = call_id_of(event)
    call = state.complete_call(call_id, CALL_TYPE_FUNCTION, event_field(event, "arguments"))

    logger.debug(f"Function call arguments complete: {call_id}", sequence=sequence)

    yield NormalizedEvent.build(
        "function_call_done",
        sequence,
        call_id=call_id,
        name=event_field(event, "name"),
        arguments=call.buffer,
    )


# -----------------------------------------------------------------------------
# Code interpreter
# -----------------------------------------------------------------------------


def handle_code_interpreter_progress(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """in_progress and interpreting phases."""
    call_id = call_id_of(event)
    state.get_call(call_id, CALL_TYPE_CODE_INTERPRETER)
    event_type = event_type_of(event) or "response.code_interpreter_call.in_progress"

    yield NormalizedEvent.build(strip_response_prefix(event_type), sequence, call_id=call_id)


def handle_code_interpreter_code_delta(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    delta = event_field(event, "delta", default="")
    state.append_call_input(call_id, CALL_TYPE_CODE_INTERPRETER, delta)

    yield NormalizedEvent.build("code_interpreter_code_delta", sequence, call_id=call_id, delta=delta)


def handle_code_interpreter_code_done(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    call = state.get_call(call_id, CALL_TYPE_CODE_INTERPRETER)
    code = event_field(event, "code") or call.buffer
    call.buffer = code

    yield NormalizedEvent.build("code_interpreter_code_done", sequence, call_id=call_id, code=code)


def handle_code_interpreter_completed(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    call = state.complete_call(call_id, CALL_TYPE_CODE_INTERPRETER)
    call.output = event_field(event, "output", "outputs")

    yield NormalizedEvent.build(
        "code_interpreter_completed",
        sequence,
        call_id=call_id,
        code=call.buffer or None,
        output=call.output,
    )


# -----------------------------------------------------------------------------
# File search / web search
# -----------------------------------------------------------------------------


def _handle_search_progress(
    event: Any, state: StreamState, sequence: int, call_type: str, default_type: str
) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    state.get_call(call_id, call_type)
    event_type = event_type_of(event) or default_type

    yield NormalizedEvent.build(strip_response_prefix(event_type), sequence, call_id=call_id)


def _handle_search_completed(
    event: Any, state: StreamState, sequence: int, call_type: str, event_name: str
) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    call = state.complete_call(call_id, call_type)
    call.output = event_field(event, "results")

    yield NormalizedEvent.build(event_name, sequence, call_id=call_id, results=call.output)


def handle_file_search_progress(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """in_progress and searching phases."""
    yield from _handle_search_progress(
        event, state, sequence, CALL_TYPE_FILE_SEARCH, "response.file_search_call.in_progress"
    )


def handle_file_search_completed(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    yield from _handle_search_completed(event, state, sequence, CALL_TYPE_FILE_SEARCH, "file_search_completed")


def handle_web_search_progress(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """in_progress and searching phases."""
    yield from _handle_search_progress(
        event, state, sequence, CALL_TYPE_WEB_SEARCH, "response.web_search_call.in_progress"
    )


def handle_web_search_completed(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    yield from _handle_search_completed(event, state, sequence, CALL_TYPE_WEB_SEARCH, "web_search_completed")


# -----------------------------------------------------------------------------
# Custom tools
# -----------------------------------------------------------------------------


def handle_custom_tool_delta(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    delta = event_field(event, "delta", default="")
    state.append_call_input(call_id, CALL_TYPE_CUSTOM_TOOL, delta)

    yield NormalizedEvent.build("custom_tool_delta", sequence, call_id=call_id, delta=delta)


def handle_custom_tool_done(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    call = state.complete_call(call_id, CALL_TYPE_CUSTOM_TOOL, event_field(event, "input"))

    yield NormalizedEvent.build("custom_tool_done", sequence, call_id=call_id, input=call.buffer)
