"""
Status polling shared by the files and vector stores services.

Each check fetches the object once; between checks the wait grows linearly
from 5s to a 20s cap. The caller decides what a timeout means.
"""

from __future__ import annotations

import asyncio
import time

from collections.abc import Awaitable, Callable
from typing import Any

from core.constants import POLL_INITIAL_WAIT_MS, POLL_MAX_INTERVAL_MS, POLL_WAIT_STEP_MS
from utils.usage import get_field


def next_poll_wait_ms(current_ms: int) -> int:
    """Backoff step: +5s per retry, capped at 20s."""
    return min(current_ms + POLL_WAIT_STEP_MS, POLL_MAX_INTERVAL_MS)


async def poll_until_terminal(
    fetch: Callable[[], Awaitable[Any]],
    terminal_statuses: frozenset[str],
    max_wait_ms: int,
    initial_wait_ms: int = POLL_INITIAL_WAIT_MS,
) -> Any | None:
    """Fetch until ``status`` is terminal.

    Returns:
        The object with a terminal status, or None when the deadline passed first
    """
    deadline = time.monotonic() + max_wait_ms / 1000
    wait_ms = initial_wait_ms

    while time.monotonic() < deadline:
        item = await fetch()
        if get_field(item, "status") in terminal_statuses:
            return item
        await asyncio.sleep(wait_ms / 1000)
        wait_ms = next_poll_wait_ms(wait_ms)

    return None
