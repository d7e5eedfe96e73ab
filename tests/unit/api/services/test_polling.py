"""Tests for the shared status polling helper."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from api.services.polling import poll_until_terminal


class TestPollUntilTerminal:
    """Tests for poll_until_terminal."""

    @pytest.mark.asyncio
    async def test_mapping_status_read(self) -> None:
        """Test plain dicts are inspected like SDK objects."""
        fetch = AsyncMock(side_effect=[{"status": "in_progress"}, {"status": "completed", "id": "x"}])

        with patch("api.services.polling.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await poll_until_terminal(fetch, frozenset({"completed"}), max_wait_ms=60_000)

        assert result == {"status": "completed", "id": "x"}
        mock_sleep.assert_awaited_once_with(5.0)

    @pytest.mark.asyncio
    async def test_deadline_returns_none(self) -> None:
        """Test a passed deadline yields None without fetching."""
        fetch = AsyncMock()

        assert await poll_until_terminal(fetch, frozenset({"completed"}), max_wait_ms=0) is None
        fetch.assert_not_awaited()
