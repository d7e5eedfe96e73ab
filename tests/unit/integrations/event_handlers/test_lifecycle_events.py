"""Tests for response lifecycle event handlers.

Tests response id/model capture, completion usage and cost, and the
top-level error event.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest

from integrations.event_handlers.base import StreamState
from integrations.event_handlers.lifecycle_events import (
    handle_error,
    handle_response_completed,
    handle_response_created,
    handle_response_failed,
    handle_response_in_progress,
    handle_response_incomplete,
    handle_response_queued,
)


def _usage(**overrides: Any) -> SimpleNamespace:
    values = {"input_tokens": 10, "output_tokens": 5, "total_tokens": 15}
    values.update(overrides)
    return SimpleNamespace(
        input_tokens=values["input_tokens"],
        output_tokens=values["output_tokens"],
        total_tokens=values["total_tokens"],
        input_tokens_details=SimpleNamespace(cached_tokens=values.get("cached_tokens")),
        output_tokens_details=SimpleNamespace(reasoning_tokens=values.get("reasoning_tokens")),
    )


def _response(**fields: Any) -> SimpleNamespace:
    base = {"id": "resp_1", "model": "gpt-4o", "status": "completed", "usage": None}
    base.update(fields)
    return SimpleNamespace(**base)


class TestResponseCreated:
    """Tests for response.created / queued / in_progress."""

    def test_created_records_id_and_model(self) -> None:
        """Test response.created stores id and model on the state."""
        state = StreamState()
        event = SimpleNamespace(type="response.created", response=_response(status="in_progress"))

        (result,) = list(handle_response_created(event, state, 0))

        assert state.response_id == "resp_1"
        assert state.model == "gpt-4o"
        assert result.event == "response_created"
        assert result.payload() == {
            "response_id": "resp_1",
            "model": "gpt-4o",
            "status": "in_progress",
            "sequence": 0,
        }

    def test_queued_falls_back_to_state_id(self) -> None:
        """Test response.queued without a response uses the known id."""
        state = StreamState(response_id="resp_known")
        event = SimpleNamespace(type="response.queued")

        (result,) = list(handle_response_queued(event, state, 1))

        assert result.event == "response_queued"
        assert result.payload()["response_id"] == "resp_known"

    def test_in_progress(self) -> None:
        """Test response.in_progress emits the response id."""
        state = StreamState()
        event = SimpleNamespace(type="response.in_progress", response=_response(id="resp_9"))

        (result,) = list(handle_response_in_progress(event, state, 2))

        assert result.event == "response_in_progress"
        assert result.payload() == {"response_id": "resp_9", "sequence": 2}


class TestResponseCompleted:
    """Tests for response.completed."""

    def test_completed_captures_usage_and_cost(self) -> None:
        """Test completion stores final usage and a token cost."""
        state = StreamState()
        state.append_text("Hello ")
        state.append_text("world")
        response = _response(usage=_usage())
        event = SimpleNamespace(type="response.completed", response=response)

        (result,) = list(handle_response_completed(event, state, 7))

        payload = result.payload()
        assert result.event == "response_completed"
        assert result.sequence == 7
        assert payload["output_text"] == "Hello world"
        assert payload["usage"] == {"input_tokens": 10, "output_tokens": 5, "total_tokens": 15}
        assert payload["cost_estimate"] == pytest.approx(10 / 1_000_000 * 0.0025 + 5 / 1_000_000 * 0.01)
        assert payload["status"] == "completed"
        assert "latency_ms" in payload
        assert state.final_response is response
        assert state.usage is not None and state.usage.total_tokens == 15

    def test_completed_without_usage_omits_usage(self) -> None:
        """Test absent usage stays absent rather than becoming zeros."""
        state = StreamState()
        event = SimpleNamespace(type="response.completed", response=_response())

        (result,) = list(handle_response_completed(event, state, 3))

        assert "usage" not in result.payload()
        assert state.usage is None
        assert state.cost_estimate == 0.0

    def test_completed_without_response_emits_nothing(self) -> None:
        """Test a completion event with no response payload yields nothing."""
        state = StreamState()
        event = SimpleNamespace(type="response.completed")

        assert list(handle_response_completed(event, state, 3)) == []
        assert state.final_response is None

    def test_completed_unknown_model_costs_zero(self) -> None:
        """Test unknown models cost 0."""
        state = StreamState()
        event = SimpleNamespace(type="response.completed", response=_response(model="mystery-model", usage=_usage()))

        (result,) = list(handle_response_completed(event, state, 1))

        assert result.payload()["cost_estimate"] == 0.0


class TestResponseIncompleteAndFailed:
    """Tests for response.incomplete and response.failed."""

    def test_incomplete_reports_reason(self) -> None:
        """Test incomplete_details are forwarded."""
        state = StreamState()
        response = _response(status="incomplete", incomplete_details={"reason": "max_output_tokens"}, usage=_usage())
        event = SimpleNamespace(type="response.incomplete", response=response)

        (result,) = list(handle_response_incomplete(event, state, 4))

        payload = result.payload()
        assert result.event == "response_incomplete"
        assert payload["incomplete_details"] == {"reason": "max_output_tokens"}
        assert payload["usage"]["total_tokens"] == 15

    def test_failed_reports_error(self) -> None:
        """Test the provider error object is forwarded."""
        state = StreamState()
        error = {"code": "server_error", "message": "boom"}
        event = SimpleNamespace(type="response.failed", response=_response(status="failed", error=error))

        (result,) = list(handle_response_failed(event, state, 5))

        assert result.event == "response_failed"
        assert result.payload()["error"] == error
        assert result.payload()["response_id"] == "resp_1"


class TestErrorEvent:
    """Tests for the top-level error event."""

    def test_error_event(self) -> None:
        """Test vendor error becomes a normalized error event."""
        state = StreamState()
        event = SimpleNamespace(type="error", message="Rate limit reached", code="rate_limit_exceeded", param=None)

        (result,) = list(handle_error(event, state, 9))

        assert result.event == "error"
        assert result.payload() == {"error": "Rate limit reached", "code": "rate_limit_exceeded", "sequence": 9}

    def test_error_event_without_message(self) -> None:
        """Test a bare error event still carries a message."""
        (result,) = list(handle_error(SimpleNamespace(type="error"), StreamState(), 0))

        assert result.payload()["error"] == "Unknown stream error"
