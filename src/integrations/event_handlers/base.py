"""
Base types and per-stream state for event handlers.

This module provides the foundational components used across all event handler modules:
- StreamState: Accumulator for one streaming call (text, tool calls, images, usage)
- ToolCallBuffer: Per-call_id argument/input buffer
- EventHandler: Callable signature shared by every handler
- Field helpers that read SDK objects, namespaces, and mappings alike
"""

from __future__ import annotations

import time

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from models.event_models import NormalizedEvent
from models.usage_models import UsageRecord
from utils.usage import get_field

#: Call id used when a vendor event carries neither call_id nor item_id.
UNKNOWN_CALL_ID = "unknown"


@dataclass
class ToolCallBuffer:
    """Accumulated input for one tool invocation."""

    call_type: str
    buffer: str = ""
    status: str = "in_progress"
    output: Any = None


@dataclass
class StreamState:
    """Mutable accumulator scoped to exactly one streaming call.

    Created when the stream starts, passed by reference into every handler,
    dropped when the stream ends. Never shared between streams.
    """

    response_id: str | None = None
    model: str | None = None
    tool_calls: dict[str, ToolCallBuffer] = field(default_factory=dict)  # {call_id: buffer}
    partial_images: dict[str, int] = field(default_factory=dict)  # {call_id: frames seen}
    usage: UsageRecord | None = None
    cost_estimate: float | None = None
    final_response: Any = None
    last_sequence: int = 0
    started_at: float = field(default_factory=time.monotonic)
    _text_parts: list[str] = field(default_factory=list)

    @property
    def full_text(self) -> str:
        """All output text deltas seen so far, concatenated."""
        return "".join(self._text_parts)

    def append_text(self, delta: str) -> None:
        self._text_parts.append(delta)

    def latency_ms(self) -> int:
        """Milliseconds since the stream started."""
        return int((time.monotonic() - self.started_at) * 1000)

    def get_call(self, call_id: str, call_type: str) -> ToolCallBuffer:
        """Return the buffer for ``call_id``, creating it on first sight."""
        call = self.tool_calls.get(call_id)
        if call is None:
            call = ToolCallBuffer(call_type=call_type)
            self.tool_calls[call_id] = call
        return call

    def append_call_input(self, call_id: str, call_type: str, delta: str) -> str:
        """Append a fragment to one call's buffer and return the snapshot."""
        call = self.get_call(call_id, call_type)
        call.buffer += delta
        return call.buffer

    def complete_call(self, call_id: str, call_type: str, final_input: str | None = None) -> ToolCallBuffer:
        """Mark a call completed; ``final_input`` fills an empty buffer."""
        call = self.get_call(call_id, call_type)
        if not call.buffer and final_input:
            call.buffer = final_input
        call.status = "completed"
        return call

    def record_partial_image(self, call_id: str) -> int:
        """Count one more partial frame for ``call_id``; returns the new count."""
        self.partial_images[call_id] = self.partial_images.get(call_id, 0) + 1
        return self.partial_images[call_id]


#: Every handler takes (vendor event, stream state, sequence) and yields
#: zero or more normalized events.
EventHandler = Callable[[Any, StreamState, int], Iterator[NormalizedEvent]]


def event_field(event: Any, *names: str, default: Any = None) -> Any:
    """First non-None value among ``names`` on ``event``."""
    for name in names:
        value = get_field(event, name)
        if value is not None:
            return value
    return default


def call_id_of(event: Any) -> str:
    """Correlation id for tool events: ``call_id``, then ``item_id``."""
    return str(event_field(event, "call_id", "item_id", default=UNKNOWN_CALL_ID))


def event_type_of(event: Any) -> str | None:
    value = get_field(event, "type")
    return None if value is None else str(value)


def sequence_of(event: Any, fallback: int) -> int:
    """Vendor ``sequence_number``, or ``fallback`` when the event carries none."""
    value = get_field(event, "sequence_number")
    return value if isinstance(value, int) and not isinstance(value, bool) else fallback
