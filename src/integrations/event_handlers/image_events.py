"""
Image generation event handlers.

Partial frames are forwarded one by one as they arrive (never buffered) so
clients can render progressively; the stream state only counts them per
call id. ``in_progress`` and ``generating`` share the progress handler.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from models.event_models import NormalizedEvent
from models.stream_models import strip_response_prefix

from .base import StreamState, call_id_of, event_field, event_type_of

CALL_TYPE_IMAGE_GENERATION = "image_generation"


def handle_image_gen_progress(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """in_progress and generating phases."""
    call_id = call_id_of(event)
    state.get_call(call_id, CALL_TYPE_IMAGE_GENERATION)
    event_type = event_type_of(event) or "response.image_generation_call.in_progress"

    yield NormalizedEvent.build(strip_response_prefix(event_type), sequence, call_id=call_id)


def handle_image_gen_partial(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """Forward one base64 partial frame."""
    call_id = call_id_of(event)
    count = state.record_partial_image(call_id)

    yield NormalizedEvent.build(
        "image_gen_partial",
        sequence,
        call_id=call_id,
        partial_image_index=event_field(event, "partial_image_index"),
        partial_count=count,
        image_data=event_field(event, "partial_image_b64", "image_data"),
    )


def handle_image_gen_completed(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """Emit the final image once per call."""
    call_id = call_id_of(event)
    call = state.complete_call(call_id, CALL_TYPE_IMAGE_GENERATION)
    call.output = event_field(event, "result", "image_data", "partial_image_b64")

    yield NormalizedEvent.build(
        "image_gen_completed",
        sequence,
        call_id=call_id,
        partial_count=state.partial_images.get(call_id, 0),
        image_data=call.output,
    )
