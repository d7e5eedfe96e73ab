"""
Event routing table and dispatcher for Responses API streams.

EVENT_ROUTES maps every known StreamEventType to exactly one handler.
Types missing from the table (new protocol additions, malformed events)
fall through to the structural unknown-event handler, so dispatch never
raises on an unrecognized type.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from models.event_models import NormalizedEvent
from models.stream_models import StreamEventType as T

from . import (
    audio_events,
    computer_use_events,
    image_events,
    lifecycle_events,
    mcp_events,
    reasoning_events,
    refusal_events,
    structural_events,
    text_events,
    tool_calling_events,
)
from .base import EventHandler, StreamState, event_type_of, sequence_of

EVENT_ROUTES: dict[T, EventHandler] = {
    # Lifecycle
    T.RESPONSE_CREATED: lifecycle_events.handle_response_created,
    T.RESPONSE_QUEUED: lifecycle_events.handle_response_queued,
    T.RESPONSE_IN_PROGRESS: lifecycle_events.handle_response_in_progress,
    T.RESPONSE_COMPLETED: lifecycle_events.handle_response_completed,
    T.RESPONSE_INCOMPLETE: lifecycle_events.handle_response_incomplete,
    T.RESPONSE_FAILED: lifecycle_events.handle_response_failed,
    T.ERROR: lifecycle_events.handle_error,
    # Text
    T.TEXT_DELTA: text_events.handle_text_delta,
    T.TEXT_DONE: text_events.handle_text_done,
    T.TEXT_ANNOTATION_ADDED: text_events.handle_text_annotation,
    # Reasoning
    T.REASONING_TEXT_DELTA: reasoning_events.handle_reasoning_delta,
    T.REASONING_TEXT_DONE: reasoning_events.handle_reasoning_done,
    T.REASONING_SUMMARY_PART_ADDED: reasoning_events.handle_reasoning_summary_part,
    T.REASONING_SUMMARY_PART_DONE: reasoning_events.handle_reasoning_summary_part,
    T.REASONING_SUMMARY_TEXT_DELTA: reasoning_events.handle_reasoning_summary_delta,
    T.REASONING_SUMMARY_TEXT_DONE: reasoning_events.handle_reasoning_summary_done,
    # Function calls
    T.FUNCTION_CALL_ARGUMENTS_DELTA: tool_calling_events.handle_function_call_delta,
    T.FUNCTION_CALL_ARGUMENTS_DONE: tool_calling_events.handle_function_call_done,
    # Code interpreter
    T.CODE_INTERPRETER_IN_PROGRESS: tool_calling_events.handle_code_interpreter_progress,
    T.CODE_INTERPRETER_INTERPRETING: tool_calling_events.handle_code_interpreter_progress,
    T.CODE_INTERPRETER_CODE_DELTA: tool_calling_events.handle_code_interpreter_code_delta,
    T.CODE_INTERPRETER_CODE_DONE: tool_calling_events.handle_code_interpreter_code_done,
    T.CODE_INTERPRETER_COMPLETED: tool_calling_events.handle_code_interpreter_completed,
    # File search
    T.FILE_SEARCH_IN_PROGRESS: tool_calling_events.handle_file_search_progress,
    T.FILE_SEARCH_SEARCHING: tool_calling_events.handle_file_search_progress,
    T.FILE_SEARCH_COMPLETED: tool_calling_events.handle_file_search_completed,
    # Web search
    T.WEB_SEARCH_IN_PROGRESS: tool_calling_events.handle_web_search_progress,
    T.WEB_SEARCH_SEARCHING: tool_calling_events.handle_web_search_progress,
    T.WEB_SEARCH_COMPLETED: tool_calling_events.handle_web_search_completed,
    # Custom tools
    T.CUSTOM_TOOL_INPUT_DELTA: tool_calling_events.handle_custom_tool_delta,
    T.CUSTOM_TOOL_INPUT_DONE: tool_calling_events.handle_custom_tool_done,
    # Image generation
    T.IMAGE_GEN_IN_PROGRESS: image_events.handle_image_gen_progress,
    T.IMAGE_GEN_GENERATING: image_events.handle_image_gen_progress,
    T.IMAGE_GEN_PARTIAL: image_events.handle_image_gen_partial,
    T.IMAGE_GEN_COMPLETED: image_events.handle_image_gen_completed,
    # Audio
    T.AUDIO_DELTA: audio_events.handle_audio_delta,
    T.AUDIO_DONE: audio_events.handle_audio_done,
    T.AUDIO_TRANSCRIPT_DELTA: audio_events.handle_audio_transcript_delta,
    T.AUDIO_TRANSCRIPT_DONE: audio_events.handle_audio_transcript_done,
    # MCP
    T.MCP_CALL_IN_PROGRESS: mcp_events.handle_mcp_call_progress,
    T.MCP_CALL_ARGUMENTS_DELTA: mcp_events.handle_mcp_call_delta,
    T.MCP_CALL_ARGUMENTS_DONE: mcp_events.handle_mcp_call_done,
    T.MCP_CALL_COMPLETED: mcp_events.handle_mcp_call_completed,
    T.MCP_CALL_FAILED: mcp_events.handle_mcp_call_failed,
    T.MCP_LIST_TOOLS_IN_PROGRESS: mcp_events.handle_mcp_list_tools,
    T.MCP_LIST_TOOLS_COMPLETED: mcp_events.handle_mcp_list_tools,
    T.MCP_LIST_TOOLS_FAILED: mcp_events.handle_mcp_list_tools,
    # Refusal
    T.REFUSAL_DELTA: refusal_events.handle_refusal_delta,
    T.REFUSAL_DONE: refusal_events.handle_refusal_done,
    # Structural
    T.OUTPUT_ITEM_ADDED: structural_events.handle_structural_event,
    T.OUTPUT_ITEM_DONE: structural_events.handle_structural_event,
    T.CONTENT_PART_ADDED: structural_events.handle_structural_event,
    T.CONTENT_PART_DONE: structural_events.handle_structural_event,
    # Computer use
    T.COMPUTER_USE_IN_PROGRESS: computer_use_events.handle_computer_use_progress,
    T.COMPUTER_USE_ACTION_DELTA: computer_use_events.handle_computer_use_action_delta,
    T.COMPUTER_USE_ACTION_DONE: computer_use_events.handle_computer_use_action_done,
    T.COMPUTER_USE_OUTPUT_ITEM_ADDED: computer_use_events.handle_computer_use_output_item,
    T.COMPUTER_USE_OUTPUT_ITEM_DONE: computer_use_events.handle_computer_use_output_item,
    T.COMPUTER_USE_COMPLETED: computer_use_events.handle_computer_use_completed,
}

FALLBACK_HANDLER: EventHandler = structural_events.handle_unknown_event


def get_handler(event_type: str | None) -> EventHandler:
    """Handler for a vendor type string; the unknown-event handler when none matches."""
    member = T.parse(event_type)
    if member is None:
        return FALLBACK_HANDLER
    return EVENT_ROUTES.get(member, FALLBACK_HANDLER)


def dispatch_event(event: Any, state: StreamState) -> Iterator[NormalizedEvent]:
    """Route one vendor event and yield its normalized events lazily.

    The normalized sequence is the vendor's ``sequence_number``; events
    without one reuse the last sequence seen on this stream.
    """
    sequence = sequence_of(event, state.last_sequence)
    state.last_sequence = sequence
    handler = get_handler(event_type_of(event))
    yield from handler(event, state, sequence)


__all__ = [
    "EVENT_ROUTES",
    "FALLBACK_HANDLER",
    "dispatch_event",
    "get_handler",
]
