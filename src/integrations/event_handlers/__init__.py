"""
Event handlers for Responses API streaming.

Each handler module owns one event family and turns vendor stream events
into NormalizedEvent instances. registry.dispatch_event is the single
entry point used by the stream orchestrator.
"""

from __future__ import annotations

from .base import StreamState, ToolCallBuffer
from .registry import EVENT_ROUTES, dispatch_event, get_handler

__all__ = [
    "EVENT_ROUTES",
    "StreamState",
    "ToolCallBuffer",
    "dispatch_event",
    "get_handler",
]
