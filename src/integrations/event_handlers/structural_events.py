"""
Structural event handlers and the unknown-event fallback.

Output item and content part boundaries are forwarded with the item/part
they describe. Any vendor type without a dedicated handler lands in
handle_unknown_event, which still emits an event so clients can observe
protocol additions.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from models.event_models import NormalizedEvent
from models.stream_models import strip_response_prefix
from utils.logger import logger

from .base import StreamState, event_field, event_type_of

UNKNOWN_EVENT = "unknown_event"


def handle_structural_event(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """output_item.added/done and content_part.added/done."""
    event_type = event_type_of(event) or "response.output_item"

    yield NormalizedEvent.build(
        strip_response_prefix(event_type),
        sequence,
        item=event_field(event, "item"),
        part=event_field(event, "part"),
        item_id=event_field(event, "item_id"),
        output_index=event_field(event, "output_index"),
        content_index=event_field(event, "content_index"),
    )


def handle_unknown_event(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """Forward an unrecognized event instead of dropping it."""
    event_type = event_type_of(event)
    logger.info(f"Unknown event type: {event_type}", sequence=sequence)

    yield NormalizedEvent.build(
        UNKNOWN_EVENT,
        sequence,
        type=event_type or "unknown",
        event=_describe(event),
    )


def _describe(event: Any) -> Any:
    """Best-effort JSON-friendly view of an arbitrary vendor event."""
    if hasattr(event, "model_dump"):
        return event
    if isinstance(event, dict):
        return event
    if hasattr(event, "__dict__"):
        return dict(vars(event))
    return str(event)
