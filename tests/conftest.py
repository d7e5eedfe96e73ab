"""Shared test fixtures for the Responses gateway test suite.

This module provides common fixtures used across all test modules,
including mocks for the OpenAI client and the interaction log sink.
"""

from __future__ import annotations

import tempfile

from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import pytest

# ============================================================================
# EARLY INITIALIZATION: Runs before test collection
# ============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure settings mock before any test modules are imported.

    This hook runs before test collection, which is when module-level
    imports happen (utils.logger builds its handlers at import). We patch
    get_settings here to prevent ValidationError on CI where .env is not
    available.
    """
    log_dir = tempfile.mkdtemp(prefix="responses-gateway-tests-")

    mock_settings = MagicMock()
    mock_settings.openai_api_key = "sk-test-openai-key"
    mock_settings.openai_api_base_url = "https://api.openai.com/v1"
    mock_settings.openai_default_model = "gpt-4o"
    mock_settings.openai_image_response_model = "gpt-5"
    mock_settings.openai_timeout = 60000
    mock_settings.openai_max_retries = 3
    mock_settings.timeout_seconds = 60.0
    mock_settings.debug = False
    mock_settings.log_level = "INFO"
    mock_settings.log_dir = log_dir
    mock_settings.http_request_logging = False

    cfg: Any = config
    cfg._mock_settings = mock_settings

    # Patch get_settings at the module level BEFORE any imports
    patcher = patch("core.constants.get_settings", return_value=mock_settings)
    patcher.start()
    cfg._settings_patcher = patcher


def pytest_unconfigure(config: pytest.Config) -> None:
    """Clean up settings mock after all tests complete."""
    patcher = getattr(config, "_settings_patcher", None)
    if patcher:
        patcher.stop()


# ============================================================================
# Mock External Dependencies
# ============================================================================


@pytest.fixture
def mock_openai_client() -> Mock:
    """AsyncOpenAI stand-in with every resource method used by the services."""
    client = Mock()
    client.responses.create = AsyncMock()
    client.responses.retrieve = AsyncMock()
    client.responses.delete = AsyncMock(return_value=None)
    client.responses.cancel = AsyncMock()
    client.audio.speech.create = AsyncMock()
    client.audio.transcriptions.create = AsyncMock()
    client.audio.translations.create = AsyncMock()
    client.videos.create = AsyncMock()
    client.videos.retrieve = AsyncMock()
    client.videos.download_content = AsyncMock()
    client.videos.list = AsyncMock()
    client.videos.delete = AsyncMock()
    client.videos.remix = AsyncMock()
    client.images.generate = AsyncMock()
    client.images.edit = AsyncMock()
    client.images.create_variation = AsyncMock()
    client.files.create = AsyncMock()
    client.files.retrieve = AsyncMock()
    client.files.list = AsyncMock()
    client.files.delete = AsyncMock()
    client.files.content = AsyncMock()
    for name in ("create", "retrieve", "update", "list", "delete", "search"):
        setattr(client.vector_stores, name, AsyncMock())
    for name in ("create", "retrieve", "update", "list", "delete", "content"):
        setattr(client.vector_stores.files, name, AsyncMock())
    for name in ("create", "retrieve", "cancel", "list_files"):
        setattr(client.vector_stores.file_batches, name, AsyncMock())
    return client


@pytest.fixture
def interaction_logger() -> Mock:
    """Recording stand-in for utils.logger.InteractionLogger."""
    sink = Mock()
    sink.log_openai_interaction = Mock()
    sink.log_streaming_event = Mock()
    return sink


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)

