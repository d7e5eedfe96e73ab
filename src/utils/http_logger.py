"""
HTTP request/response logging for debugging OpenAI API issues.

Captures request payloads and response status using httpx event hooks.
Streaming and binary bodies (SSE, audio, video, multipart uploads) are
never read here so the SDK can consume them.
"""

from __future__ import annotations

import json

from typing import Any

import httpx

from utils.logger import logger

SENSITIVE_HEADERS = frozenset({"authorization", "api-key", "x-api-key", "openai-organization"})


class HTTPLogger:
    """Logs HTTP requests and responses for debugging."""

    def __init__(self, enabled: bool = True):
        """Initialize HTTP logger.

        Args:
            enabled: Whether to enable HTTP logging (default: True)
        """
        self.enabled = enabled
        self._request_data: dict[int, dict[str, Any]] = {}

    async def log_request(self, request: httpx.Request) -> None:
        """Log outgoing HTTP request."""
        if not self.enabled:
            return

        content_type = request.headers.get("content-type", "")
        body: Any = None
        if content_type.startswith("application/json"):
            try:
                body = json.loads(request.content.decode("utf-8")) if request.content else {}
            except (UnicodeDecodeError, json.JSONDecodeError, httpx.RequestNotRead):
                body = {"_note": "body not captured"}
        elif content_type:
            body = {"_note": f"{content_type.split(';')[0]} body not captured"}

        self._request_data[id(request)] = {"method": request.method, "url": str(request.url)}

        logger.info(
            f"HTTP Request: {request.method} {request.url}",
            http_request=True,
            method=request.method,
            url=str(request.url),
            headers=self._sanitize_headers(dict(request.headers)),
            payload=body,
        )

    async def log_response(self, response: httpx.Response) -> None:
        """Log HTTP response status and headers."""
        if not self.enabled:
            return

        request_data = self._request_data.pop(id(response.request), {})
        logger.info(
            f"HTTP Response: {response.status_code} "
            f"{request_data.get('method', 'UNKNOWN')} {request_data.get('url', 'UNKNOWN')}",
            http_response=True,
            status_code=response.status_code,
            headers=dict(response.headers),
            request_id=response.headers.get("x-request-id"),
        )

    def _sanitize_headers(self, headers: dict[str, str]) -> dict[str, str]:
        """Redact sensitive header values, keeping the last 4 characters."""
        sanitized = headers.copy()
        for key, value in headers.items():
            if key.lower() in SENSITIVE_HEADERS:
                sanitized[key] = f"***{value[-4:]}" if len(value) > 4 else "***"
        return sanitized


def create_logging_client(
    enabled: bool = True,
    timeout: httpx.Timeout | None = None,
) -> httpx.AsyncClient:
    """Create an httpx client with request/response logging.

    Args:
        enabled: Whether to enable HTTP logging
        timeout: Optional timeout configuration

    Returns:
        Configured httpx.AsyncClient with event hooks
    """
    http_logger = HTTPLogger(enabled=enabled)

    event_hooks: dict[str, list[Any]] = {
        "request": [http_logger.log_request],
        "response": [http_logger.log_response],
    }

    return httpx.AsyncClient(event_hooks=event_hooks, timeout=timeout)
