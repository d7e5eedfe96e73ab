"""
Log record models handed to the interaction log sink.

InteractionLogEntry is written once per top-level operation; StreamingLogEntry
once per stream start/resume, per normalized event, and per terminal outcome.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ApiName = Literal["responses", "images", "videos", "audio", "files", "vector_stores"]


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()


class ErrorInfo(BaseModel):
    """Provider error details captured on failure."""

    message: str
    type: str | None = None
    code: str | None = None
    status: int | None = None
    param: str | None = None


class InteractionLogEntry(BaseModel):
    """Request/response record for one API call."""

    timestamp: str = Field(default_factory=_utc_now)
    api: ApiName
    endpoint: str
    request: dict[str, Any] = Field(default_factory=dict)
    response: Any | None = None
    error: ErrorInfo | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    streaming: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for the JSON log line."""
        return self.model_dump(exclude_none=True)


class StreamingLogEntry(BaseModel):
    """One streaming log record (start, resume, event, completion, or error)."""

    timestamp: str = Field(default_factory=_utc_now)
    api: ApiName
    endpoint: str
    event_type: str
    sequence: int
    vendor_event_type: str | None = None
    request: dict[str, Any] | None = None
    delta: str | None = None
    response: Any | None = None
    error: ErrorInfo | None = None
    metadata: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for the JSON log line."""
        return self.model_dump(exclude_none=True)
