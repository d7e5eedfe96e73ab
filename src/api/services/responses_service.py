"""
Responses API service: non-streaming calls and the stream orchestrator.

Streaming calls run every vendor event through the event handler registry
and yield NormalizedEvent instances. Each stream gets its own StreamState.
Every normalized event is also written to the interaction log sink together
with its vendor type and sequence.

Failures are reported twice: one ``stream_error`` log record plus one
``error`` event yielded to the caller, after which the exception is
re-raised. The vendor stream is closed on every exit path.
"""

from __future__ import annotations

import inspect
import time

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from openai import AsyncOpenAI

from api.services.request_builder import build_image_response_params, build_text_response_params
from core.constants import (
    API_RESPONSES,
    ENDPOINT_IMAGE_RESPONSES,
    ENDPOINT_IMAGE_RESPONSES_STREAM,
    ENDPOINT_RESPONSE_CANCEL,
    ENDPOINT_RESPONSE_DELETE,
    ENDPOINT_RESPONSE_RESUME,
    ENDPOINT_RESPONSE_RETRIEVE,
    ENDPOINT_RESPONSES,
    ENDPOINT_RESPONSES_STREAM,
    STREAM_COMPLETE,
    STREAM_ERROR,
    STREAM_RESUME,
    STREAM_START,
    get_settings,
)
from integrations.event_handlers import StreamState, dispatch_event
from integrations.event_handlers.base import event_type_of
from models.error_models import extract_error_details, extract_event_error
from models.event_models import NormalizedEvent
from models.log_models import ErrorInfo, InteractionLogEntry, StreamingLogEntry
from models.request_models import ImageResponseRequest, TextResponseRequest
from models.stream_models import TERMINAL_EVENT_TYPES, StreamEventType, get_event_category
from utils.json_utils import to_jsonable
from utils.logger import InteractionLogger, logger
from utils.pricing import calculate_cost
from utils.usage import extract_response_metadata, extract_usage, get_field

StreamOpener = Callable[[], Awaitable[Any]]

#: Normalized events whose payload carries a provider-reported error.
_PROVIDER_ERROR_EVENTS = frozenset({"error", "response_failed"})


def _elapsed_ms(started_at: float) -> int:
    return int((time.monotonic() - started_at) * 1000)


def _present(**fields: Any) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


def _loggable_request(params: dict[str, Any]) -> dict[str, Any]:
    return to_jsonable(params)


async def _close_stream(stream: Any) -> None:
    """Close an SDK AsyncStream (``close``) or a bare async generator (``aclose``)."""
    close = getattr(stream, "close", None) or getattr(stream, "aclose", None)
    if close is None:
        return
    result = close()
    if inspect.isawaitable(result):
        await result


class ResponsesService:
    """Text and image generation over the Responses API.

    The client and log sink are injected; default models fall back to the
    configured settings.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        interaction_logger: InteractionLogger,
        default_model: str | None = None,
        image_model: str | None = None,
    ):
        self.client = client
        self.interaction_logger = interaction_logger
        if default_model is None or image_model is None:
            settings = get_settings()
            default_model = default_model or settings.openai_default_model
            image_model = image_model or settings.openai_image_response_model
        self.default_model: str = default_model
        self.image_model: str = image_model

    # ------------------------------------------------------------------
    # Non-streaming
    # ------------------------------------------------------------------

    async def create_text_response(self, request: TextResponseRequest) -> Any:
        """Create a text response and log it with usage and cost."""
        params = build_text_response_params(request, self.default_model)
        return await self._create_logged(params, ENDPOINT_RESPONSES)

    async def create_image_response(self, request: ImageResponseRequest) -> Any:
        """Create a response that uses the image_generation tool."""
        params = build_image_response_params(request, self.image_model)
        return await self._create_logged(params, ENDPOINT_IMAGE_RESPONSES)

    async def _create_logged(self, params: dict[str, Any], endpoint: str) -> Any:
        started_at = time.monotonic()
        try:
            response = await self.client.responses.create(**params)
        except Exception as e:
            self._log_call_error(endpoint, _loggable_request(params), e, started_at)
            raise

        usage = extract_usage(response)
        model = get_field(response, "model") or params["model"]
        self.interaction_logger.log_openai_interaction(
            InteractionLogEntry(
                api=API_RESPONSES,
                endpoint=endpoint,
                request=_loggable_request(params),
                response=to_jsonable(response),
                metadata={
                    **_present(
                        latency_ms=_elapsed_ms(started_at),
                        tokens_used=usage.total_tokens if usage else None,
                        cached_tokens=usage.cached_tokens if usage else None,
                        reasoning_tokens=usage.reasoning_tokens if usage else None,
                        cost_estimate=calculate_cost(model, usage),
                    ),
                    **extract_response_metadata(response),
                },
            )
        )
        return response

    async def retrieve_response(self, response_id: str) -> Any:
        """Fetch a stored response by id."""
        endpoint = ENDPOINT_RESPONSE_RETRIEVE.format(response_id=response_id)
        started_at = time.monotonic()
        try:
            response = await self.client.responses.retrieve(response_id)
        except Exception as e:
            self._log_call_error(endpoint, {"response_id": response_id}, e, started_at)
            raise

        usage = extract_usage(response)
        self.interaction_logger.log_openai_interaction(
            InteractionLogEntry(
                api=API_RESPONSES,
                endpoint=endpoint,
                request={"response_id": response_id},
                response=to_jsonable(response),
                metadata={
                    **_present(
                        latency_ms=_elapsed_ms(started_at),
                        tokens_used=usage.total_tokens if usage else None,
                    ),
                    **extract_response_metadata(response),
                },
            )
        )
        return response

    async def delete_response(self, response_id: str) -> dict[str, Any]:
        """Delete a stored response.

        The SDK returns nothing on success, so the confirmation is built here.
        """
        endpoint = ENDPOINT_RESPONSE_DELETE.format(response_id=response_id)
        started_at = time.monotonic()
        try:
            await self.client.responses.delete(response_id)
        except Exception as e:
            self._log_call_error(endpoint, {"response_id": response_id}, e, started_at)
            raise

        result = {"id": response_id, "deleted": True, "object": "response"}
        self.interaction_logger.log_openai_interaction(
            InteractionLogEntry(
                api=API_RESPONSES,
                endpoint=endpoint,
                request={"response_id": response_id},
                response=result,
                metadata={"latency_ms": _elapsed_ms(started_at)},
            )
        )
        return result

    async def cancel_response(self, response_id: str) -> Any:
        """Cancel a background response that is still queued or running."""
        endpoint = ENDPOINT_RESPONSE_CANCEL.format(response_id=response_id)
        started_at = time.monotonic()
        try:
            response = await self.client.responses.cancel(response_id)
        except Exception as e:
            self._log_call_error(endpoint, {"response_id": response_id}, e, started_at)
            raise

        self.interaction_logger.log_openai_interaction(
            InteractionLogEntry(
                api=API_RESPONSES,
                endpoint=endpoint,
                request={"response_id": response_id},
                response=to_jsonable(response),
                metadata={
                    "latency_ms": _elapsed_ms(started_at),
                    **extract_response_metadata(response),
                },
            )
        )
        return response

    def _log_call_error(self, endpoint: str, request: dict[str, Any], error: Exception, started_at: float) -> None:
        details = extract_error_details(error)
        logger.error(f"OpenAI call failed: {endpoint}: {details.message}", status=details.status, code=details.code)
        self.interaction_logger.log_openai_interaction(
            InteractionLogEntry(
                api=API_RESPONSES,
                endpoint=endpoint,
                request=request,
                error=details,
                metadata={"latency_ms": _elapsed_ms(started_at)},
            )
        )

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def create_text_response_stream(self, request: TextResponseRequest) -> AsyncIterator[NormalizedEvent]:
        """Stream a text response as normalized events."""
        params = build_text_response_params(request, self.default_model, stream=True)
        return self._stream_events(
            lambda: self.client.responses.create(**params),
            endpoint=ENDPOINT_RESPONSES_STREAM,
            start_event_type=STREAM_START,
            request=_loggable_request(params),
        )

    def create_image_response_stream(self, request: ImageResponseRequest) -> AsyncIterator[NormalizedEvent]:
        """Stream an image response, including partial image frames."""
        params = build_image_response_params(request, self.image_model, stream=True)
        return self._stream_events(
            lambda: self.client.responses.create(**params),
            endpoint=ENDPOINT_IMAGE_RESPONSES_STREAM,
            start_event_type=STREAM_START,
            request=_loggable_request(params),
        )

    def resume_response_stream(
        self,
        response_id: str,
        starting_after: int | None = None,
    ) -> AsyncIterator[NormalizedEvent]:
        """Reattach to a background response's event stream.

        Args:
            response_id: Response created with ``background=True``
            starting_after: Resume after this vendor sequence number
        """
        kwargs: dict[str, Any] = {"stream": True}
        if starting_after is not None:
            kwargs["starting_after"] = starting_after
        return self._stream_events(
            lambda: self.client.responses.retrieve(response_id, **kwargs),
            endpoint=ENDPOINT_RESPONSE_RESUME.format(response_id=response_id),
            start_event_type=STREAM_RESUME,
            request={"response_id": response_id, **_present(starting_after=starting_after)},
        )

    async def _stream_events(
        self,
        open_stream: StreamOpener,
        endpoint: str,
        start_event_type: str,
        request: dict[str, Any],
    ) -> AsyncIterator[NormalizedEvent]:
        state = StreamState()
        stream: Any = None
        provider_error: ErrorInfo | None = None

        self._log_stream_record(endpoint, start_event_type, 0, request=request)

        try:
            stream = await open_stream()
            async for vendor_event in stream:
                vendor_type = event_type_of(vendor_event)
                for normalized in dispatch_event(vendor_event, state):
                    provider_error = self._log_normalized(endpoint, normalized, vendor_type) or provider_error
                    yield normalized

                if StreamEventType.parse(vendor_type) in TERMINAL_EVENT_TYPES:
                    break

            self._log_stream_complete(endpoint, state, provider_error)
        except Exception as e:
            details = extract_error_details(e)
            logger.error(
                f"Stream failed: {endpoint}: {details.message}",
                response_id=state.response_id,
                sequence=state.last_sequence,
            )
            self._log_stream_record(
                endpoint,
                STREAM_ERROR,
                state.last_sequence,
                error=details,
                metadata={"latency_ms": state.latency_ms()},
            )
            yield NormalizedEvent.build("error", state.last_sequence, error=details.message)
            raise
        finally:
            if stream is not None:
                await _close_stream(stream)

    def _log_normalized(self, endpoint: str, event: NormalizedEvent, vendor_type: str | None) -> ErrorInfo | None:
        """Write the per-event record; returns the provider error it carried, if any."""
        payload = event.payload()
        delta = payload.get("delta")
        error = extract_event_error(payload) if event.event in _PROVIDER_ERROR_EVENTS else None
        self._log_stream_record(
            endpoint,
            event.event,
            event.sequence,
            vendor_event_type=vendor_type,
            delta=delta if isinstance(delta, str) else None,
            error=error,
            metadata={"category": get_event_category(vendor_type).value},
        )
        return error

    def _log_stream_complete(self, endpoint: str, state: StreamState, error: ErrorInfo | None = None) -> None:
        usage = state.usage
        self._log_stream_record(
            endpoint,
            STREAM_COMPLETE,
            state.last_sequence,
            response=_present(response_id=state.response_id, model=state.model),
            error=error,
            metadata={
                **_present(
                    latency_ms=state.latency_ms(),
                    tokens_used=usage.total_tokens if usage else None,
                    cached_tokens=usage.cached_tokens if usage else None,
                    reasoning_tokens=usage.reasoning_tokens if usage else None,
                    cost_estimate=state.cost_estimate,
                ),
                **extract_response_metadata(state.final_response),
            },
        )

    def _log_stream_record(self, endpoint: str, event_type: str, sequence: int, **fields: Any) -> None:
        self.interaction_logger.log_streaming_event(
            StreamingLogEntry(
                api=API_RESPONSES,
                endpoint=endpoint,
                event_type=event_type,
                sequence=sequence,
                **fields,
            )
        )
