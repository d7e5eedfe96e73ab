"""
Computer-use tool event handlers.

Tracks UI automation calls (mouse moves, clicks, typing, key presses,
screenshots) per call id on the stream state.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from models.event_models import NormalizedEvent
from models.stream_models import strip_response_prefix

from .base import StreamState, call_id_of, event_field, event_type_of

CALL_TYPE_COMPUTER_USE = "computer_use"


def handle_computer_use_action_delta(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    state.get_call(call_id, CALL_TYPE_COMPUTER_USE)

    yield NormalizedEvent.build(
        "computer_use_action_delta",
        sequence,
        call_id=call_id,
        action=event_field(event, "delta"),
    )


def handle_computer_use_action_done(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    state.get_call(call_id, CALL_TYPE_COMPUTER_USE)

    yield NormalizedEvent.build(
        "computer_use_action_done",
        sequence,
        call_id=call_id,
        action=event_field(event, "action"),
    )


def handle_computer_use_progress(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    state.get_call(call_id, CALL_TYPE_COMPUTER_USE)
    event_type = event_type_of(event) or "response.computer_use_call.in_progress"

    yield NormalizedEvent.build(strip_response_prefix(event_type), sequence, call_id=call_id)


def handle_computer_use_output_item(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """Screenshot output added/done."""
    call_id = call_id_of(event)
    call = state.get_call(call_id, CALL_TYPE_COMPUTER_USE)
    output = event_field(event, "output", "item")
    if output is not None:
        call.output = output

    event_type = event_type_of(event) or ""
    event_name = "computer_use_output_item_done" if event_type.endswith(".done") else "computer_use_output_item_added"

    yield NormalizedEvent.build(event_name, sequence, call_id=call_id, output=output)


def handle_computer_use_completed(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    call_id = call_id_of(event)
    call = state.complete_call(call_id, CALL_TYPE_COMPUTER_USE)

    yield NormalizedEvent.build("computer_use_completed", sequence, call_id=call_id, status=call.status)
