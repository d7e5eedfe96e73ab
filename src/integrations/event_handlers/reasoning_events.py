"""
Reasoning event handlers (o-series and gpt-5 models).
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from models.event_models import NormalizedEvent
from models.stream_models import strip_response_prefix

from .base import StreamState, event_field, event_type_of


def handle_reasoning_delta(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    yield NormalizedEvent.build(
        "reasoning_delta",
        sequence,
        delta=event_field(event, "delta", default=""),
        item_id=event_field(event, "item_id"),
    )


def handle_reasoning_done(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    yield NormalizedEvent.build(
        "reasoning_done",
        sequence,
        reasoning_text=event_field(event, "text"),
        item_id=event_field(event, "item_id"),
    )


def handle_reasoning_summary_part(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """Summary part added/done; the event name keeps the vendor phase."""
    event_type = event_type_of(event) or "response.reasoning_summary_part"
    yield NormalizedEvent.build(
        strip_response_prefix(event_type),
        sequence,
        part=event_field(event, "part"),
        summary_index=event_field(event, "summary_index"),
        item_id=event_field(event, "item_id"),
    )


def handle_reasoning_summary_delta(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    yield NormalizedEvent.build(
        "reasoning_summary_delta",
        sequence,
        delta=event_field(event, "delta", default=""),
        summary_index=event_field(event, "summary_index"),
    )


def handle_reasoning_summary_done(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    yield NormalizedEvent.build(
        "reasoning_summary_done",
        sequence,
        reasoning_summary=event_field(event, "text"),
        summary_index=event_field(event, "summary_index"),
    )
