"""
Response lifecycle event handlers.

Handles created/queued/in_progress/completed/incomplete/failed events and
the top-level ``error`` event. Completion is where final usage and cost are
captured on the stream state.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from models.event_models import NormalizedEvent
from utils.logger import logger
from utils.pricing import calculate_cost
from utils.usage import extract_usage, get_field

from .base import StreamState, event_field


def _response_of(event: Any) -> Any:
    return get_field(event, "response")


def _response_id(event: Any, state: StreamState) -> str | None:
    return get_field(_response_of(event), "id") or state.response_id


def _capture_final(response: Any, state: StreamState) -> None:
    """Store the terminal response plus its usage and token cost."""
    state.final_response = response
    state.usage = extract_usage(response)
    model = get_field(response, "model") or state.model
    if model:
        state.model = model
        state.cost_estimate = calculate_cost(model, state.usage)


def handle_response_created(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """Record the response id and model for the rest of the stream."""
    response = _response_of(event)
    state.response_id = get_field(response, "id") or state.response_id
    state.model = get_field(response, "model") or state.model

    yield NormalizedEvent.build(
        "response_created",
        sequence,
        response_id=state.response_id,
        model=state.model,
        status=get_field(response, "status"),
    )


def handle_response_queued(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    yield NormalizedEvent.build(
        "response_queued",
        sequence,
        response_id=_response_id(event, state),
        status=get_field(_response_of(event), "status"),
    )


def handle_response_in_progress(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    yield NormalizedEvent.build("response_in_progress", sequence, response_id=_response_id(event, state))


def handle_response_completed(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """Emit the completion summary with usage and token cost.

    Produces nothing when the event carries no response object.
    """
    response = _response_of(event)
    if response is None:
        logger.warning("response.completed event without response payload", sequence=sequence)
        return

    _capture_final(response, state)

    yield NormalizedEvent.build(
        "response_completed",
        sequence,
        response_id=_response_id(event, state),
        output_text=state.full_text,
        usage=state.usage.to_dict() if state.usage else None,
        cost_estimate=state.cost_estimate,
        status=get_field(response, "status"),
        latency_ms=state.latency_ms(),
    )


def handle_response_incomplete(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """Emit the incomplete reason (for example max_output_tokens)."""
    response = _response_of(event)
    if response is not None:
        _capture_final(response, state)

    yield NormalizedEvent.build(
        "response_incomplete",
        sequence,
        response_id=_response_id(event, state),
        incomplete_details=get_field(response, "incomplete_details"),
        usage=state.usage.to_dict() if state.usage else None,
    )


def handle_response_failed(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """Emit the provider-reported failure."""
    response = _response_of(event)
    if response is not None:
        _capture_final(response, state)

    error = get_field(response, "error")
    logger.warning(
        f"Response {_response_id(event, state)} failed: {get_field(error, 'message', 'unknown error')}",
        sequence=sequence,
    )

    yield NormalizedEvent.build(
        "response_failed",
        sequence,
        response_id=_response_id(event, state),
        error=error,
    )


def handle_error(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    """Translate a vendor ``error`` event into a normalized ``error`` event."""
    message = event_field(event, "message", default="Unknown stream error")
    logger.warning(f"Stream error event: {message}", sequence=sequence)

    yield NormalizedEvent.build(
        "error",
        sequence,
        error=str(message),
        code=event_field(event, "code"),
        param=event_field(event, "param"),
    )
