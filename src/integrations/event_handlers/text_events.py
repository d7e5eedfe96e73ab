"""
Output text event handlers.

Text deltas are forwarded immediately and appended to the stream's running
output text, which ``output_text.done`` falls back to when the event omits
the final text.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from models.event_models import NormalizedEvent

from .base import StreamState, event_field


def handle_text_delta(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    delta = event_field(event, "delta", default="")
    state.append_text(delta)

    yield NormalizedEvent.build(
        "text_delta",
        sequence,
        delta=delta,
        item_id=event_field(event, "item_id"),
        output_index=event_field(event, "output_index"),
        content_index=event_field(event, "content_index"),
        logprobs=event_field(event, "logprobs") or None,
    )


def handle_text_done(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    yield NormalizedEvent.build(
        "text_done",
        sequence,
        output_text=event_field(event, "text") or state.full_text,
        item_id=event_field(event, "item_id"),
    )


def handle_text_annotation(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """Citations and file references attached to output text."""
    yield NormalizedEvent.build(
        "text_annotation",
        sequence,
        annotation=event_field(event, "annotation"),
        annotation_index=event_field(event, "annotation_index"),
        item_id=event_field(event, "item_id"),
    )
