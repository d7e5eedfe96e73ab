"""
Models Module - Data Models and Type Definitions
=================================================

Pydantic v2 models and enums shared by the handlers and services.

Modules:
    stream_models: StreamEventType enum, event categories, terminal types
    event_models: NormalizedEvent, the unit yielded to stream consumers
    request_models: Validated inputs for responses, audio, video and images
    usage_models: UsageRecord token counts and CostEstimate
    log_models: Interaction and streaming log records
    error_models: ErrorCode, AppException and provider error extraction

Example:
    Building a normalized event::

        from models.event_models import NormalizedEvent

        event = NormalizedEvent.build("text_delta", 4, delta="Hel")
        event.payload()  # {"delta": "Hel", "sequence": 4}
"""
