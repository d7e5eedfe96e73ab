"""
Refusal event handlers (model declined to answer).
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from models.event_models import NormalizedEvent
from utils.logger import logger

from .base import StreamState, event_field


def handle_refusal_delta(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    yield NormalizedEvent.build(
        "refusal_delta",
        sequence,
        delta=event_field(event, "delta", default=""),
        item_id=event_field(event, "item_id"),
    )


def handle_refusal_done(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    refusal = event_field(event, "refusal")
    logger.info("Model refused request", response_id=state.response_id, sequence=sequence)

    yield NormalizedEvent.build(
        "refusal_done",
        sequence,
        refusal=refusal,
        item_id=event_field(event, "item_id"),
    )
