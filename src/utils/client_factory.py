"""
OpenAI client factory utilities.
Centralizes AsyncOpenAI client creation with consistent configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from openai import AsyncOpenAI

from utils.http_logger import create_logging_client

if TYPE_CHECKING:
    from core.constants import Settings

# Streams from reasoning models can pause 30+ seconds between events,
# so the read timeout is much longer than the others.
DEFAULT_CONNECT_TIMEOUT = 30.0  # Time to establish connection
DEFAULT_READ_TIMEOUT = 600.0  # 10 minutes between streamed chunks
DEFAULT_WRITE_TIMEOUT = 30.0  # Time to send request (audio/image uploads)
DEFAULT_POOL_TIMEOUT = 30.0  # Time to acquire connection from pool


def create_http_client(
    enable_logging: bool = False,
    read_timeout: float | None = None,
) -> httpx.AsyncClient:
    """Create HTTP client with proper timeouts for streaming.

    Args:
        enable_logging: Enable HTTP request/response logging
        read_timeout: Read timeout in seconds (default: 600s)

    Returns:
        Configured httpx.AsyncClient
    """
    effective_read_timeout = read_timeout if read_timeout is not None else DEFAULT_READ_TIMEOUT
    timeout = httpx.Timeout(
        connect=DEFAULT_CONNECT_TIMEOUT,
        read=effective_read_timeout,
        write=DEFAULT_WRITE_TIMEOUT,
        pool=DEFAULT_POOL_TIMEOUT,
    )

    if enable_logging:
        return create_logging_client(enabled=True, timeout=timeout)

    return httpx.AsyncClient(timeout=timeout)


def create_openai_client(
    api_key: str,
    base_url: str | None = None,
    http_client: httpx.AsyncClient | None = None,
    timeout: float | None = None,
    max_retries: int | None = None,
) -> AsyncOpenAI:
    """Create AsyncOpenAI client with consistent configuration.

    Args:
        api_key: OpenAI API key
        base_url: Optional base URL for proxies or compatible endpoints
        http_client: Optional httpx client for request logging
        timeout: Optional per-request timeout in seconds
        max_retries: Optional SDK retry count

    Returns:
        Configured AsyncOpenAI client
    """
    kwargs: dict[str, Any] = {"api_key": api_key, "http_client": http_client}
    if base_url:
        kwargs["base_url"] = base_url
    if timeout is not None:
        kwargs["timeout"] = timeout
    if max_retries is not None:
        kwargs["max_retries"] = max_retries
    return AsyncOpenAI(**kwargs)


def create_openai_client_from_settings(settings: Settings) -> AsyncOpenAI:
    """Build the shared AsyncOpenAI client from application settings."""
    return create_openai_client(
        api_key=settings.openai_api_key,
        base_url=settings.openai_api_base_url,
        http_client=create_http_client(enable_logging=settings.http_request_logging),
        timeout=settings.timeout_seconds,
        max_retries=settings.openai_max_retries,
    )
