"""
Error codes, application exceptions, and provider error extraction.

Provider errors (openai.APIError and subclasses) are never wrapped: services
log them via extract_error_details() and re-raise the original exception.
Application-level failures that have no provider counterpart, such as a
polling deadline, are raised as AppException subclasses.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from models.log_models import ErrorInfo


class ErrorCode(str, Enum):
    """Application-specific error codes for categorization."""

    # Validation errors (2xxx)
    VALIDATION_ERROR = "VAL_2001"

    # Resource errors (3xxx)
    RESOURCE_NOT_FOUND = "RES_3001"

    # External service errors (7xxx)
    EXTERNAL_SERVICE_ERROR = "EXT_7001"
    EXTERNAL_TIMEOUT = "EXT_7002"
    EXTERNAL_RATE_LIMITED = "EXT_7003"
    OPENAI_ERROR = "EXT_7010"

    # Internal errors (9xxx)
    INTERNAL_ERROR = "INT_9001"


# HTTP status code mappings for error codes
ERROR_CODE_TO_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.RESOURCE_NOT_FOUND: 404,
    ErrorCode.EXTERNAL_SERVICE_ERROR: 502,
    ErrorCode.OPENAI_ERROR: 502,
    ErrorCode.EXTERNAL_RATE_LIMITED: 429,
    ErrorCode.EXTERNAL_TIMEOUT: 504,
    ErrorCode.INTERNAL_ERROR: 500,
}


def get_status_code(code: ErrorCode) -> int:
    """Get HTTP status code for an error code."""
    return ERROR_CODE_TO_STATUS.get(code, 500)


class AppException(Exception):
    """Base application exception with error code support.

    Example:
        raise AppException(
            code=ErrorCode.RESOURCE_NOT_FOUND,
            message="Video not found",
            details={"video_id": video_id}
        )
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.code = code
        self.message = message
        self.details = details
        self.cause = cause
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return get_status_code(self.code)


class VideoGenerationTimeoutError(AppException):
    """Polling deadline exceeded before the video reached a terminal status.

    Distinct from a video whose status is ``failed``: that is returned to the
    caller as a normal result.
    """

    def __init__(self, video_id: str, max_wait_ms: int):
        super().__init__(
            code=ErrorCode.EXTERNAL_TIMEOUT,
            message=f"Video generation timeout: exceeded {max_wait_ms}ms waiting for video {video_id}",
            details={"video_id": video_id, "max_wait_ms": max_wait_ms},
        )
        self.video_id = video_id
        self.max_wait_ms = max_wait_ms


class PollingTimeoutError(AppException):
    """Polling deadline exceeded for a file, vector store, or file batch.

    ``resource`` names what was polled (``file``, ``vector_store``,
    ``vector_store_file``, ``file_batch``). A terminal failure status is not a
    timeout and is returned to the caller.
    """

    def __init__(self, resource: str, resource_id: str, max_wait_ms: int):
        super().__init__(
            code=ErrorCode.EXTERNAL_TIMEOUT,
            message=f"Polling timeout: {resource} {resource_id} not finished after {max_wait_ms}ms",
            details={"resource": resource, "resource_id": resource_id, "max_wait_ms": max_wait_ms},
        )
        self.resource = resource
        self.resource_id = resource_id
        self.max_wait_ms = max_wait_ms


def extract_error_details(error: BaseException) -> ErrorInfo:
    """Build an ErrorInfo from any exception.

    ``openai.APIError`` carries ``type``/``code``/``param``; ``APIStatusError``
    adds ``status_code``. Fields the exception does not carry stay None.
    """
    message = getattr(error, "message", None) or str(error) or type(error).__name__
    status = getattr(error, "status_code", None)
    if status is None:
        status = getattr(error, "status", None)
    code = getattr(error, "code", None)
    if isinstance(code, Enum):
        code = code.value
    return ErrorInfo(
        message=str(message),
        type=_str_or_none(getattr(error, "type", None)),
        code=_str_or_none(code),
        status=status if isinstance(status, int) else None,
        param=_str_or_none(getattr(error, "param", None)),
    )


def extract_event_error(payload: dict[str, Any], default_message: str = "Unknown stream error") -> ErrorInfo:
    """Build an ErrorInfo from a normalized ``error`` or ``response_failed`` payload.

    ``error`` events carry the message as a string next to ``code``/``param``;
    ``response_failed`` events carry the provider's error object under ``error``.
    """
    error = payload.get("error")
    if isinstance(error, dict):
        return ErrorInfo(
            message=str(error.get("message") or default_message),
            type=_str_or_none(error.get("type")),
            code=_str_or_none(error.get("code")),
            param=_str_or_none(error.get("param")),
        )
    return ErrorInfo(
        message=str(error or default_message),
        type=_str_or_none(payload.get("type")),
        code=_str_or_none(payload.get("code")),
        param=_str_or_none(payload.get("param")),
    )


def _str_or_none(value: Any) -> str | None:
    return None if value is None else str(value)
