"""
Files API service.

Uploads feed vector stores, batch jobs, fine-tuning and vision inputs. An
uploaded file may need processing before it is usable; wait_for_processing
polls until the file is ``processed`` or ``error`` and raises
PollingTimeoutError when the deadline passes first.
"""

from __future__ import annotations

import time

from collections.abc import Awaitable, Callable
from typing import Any, Literal

from openai import AsyncOpenAI

from api.services.polling import poll_until_terminal
from core.constants import (
    API_FILES,
    ENDPOINT_FILE,
    ENDPOINT_FILE_CONTENT,
    ENDPOINT_FILE_POLL,
    ENDPOINT_FILES,
    FILE_PROCESSING_MAX_WAIT_MS,
    FILE_TERMINAL_STATUSES,
    POLL_INITIAL_WAIT_MS,
)
from models.error_models import PollingTimeoutError, extract_error_details
from models.log_models import InteractionLogEntry
from models.request_models import UploadedFile
from utils.json_utils import to_jsonable
from utils.logger import InteractionLogger, logger
from utils.usage import get_field

FilePurpose = Literal["assistants", "batch", "fine-tune", "vision", "user_data", "evals"]

_FILE_METADATA_FIELDS = (
    "id",
    "object",
    "bytes",
    "created_at",
    "filename",
    "purpose",
    "status",
    "status_details",
    "expires_at",
)


def _elapsed_ms(started_at: float) -> int:
    return int((time.monotonic() - started_at) * 1000)


def _file_summary(file: Any) -> dict[str, Any]:
    return {
        "file_id": get_field(file, "id"),
        "filename": get_field(file, "filename"),
        "bytes": get_field(file, "bytes"),
        "purpose": get_field(file, "purpose"),
        "status": get_field(file, "status"),
    }


def extract_file_metadata(file: Any) -> dict[str, Any]:
    """Structured view of an uploaded file, fields copied as-is (None when absent)."""
    return {name: to_jsonable(get_field(file, name)) for name in _FILE_METADATA_FIELDS}


class FilesService:
    """Uploaded files: upload, retrieve, list, delete, download, wait for processing."""

    def __init__(self, client: AsyncOpenAI, interaction_logger: InteractionLogger):
        self.client = client
        self.interaction_logger = interaction_logger

    async def _invoke(
        self,
        endpoint: str,
        request: dict[str, Any],
        call: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Run one vendor call; failures are logged then re-raised."""
        started_at = time.monotonic()
        try:
            return await call()
        except Exception as e:
            details = extract_error_details(e)
            logger.error(f"OpenAI files call failed: {endpoint}: {details.message}", status=details.status)
            self.interaction_logger.log_openai_interaction(
                InteractionLogEntry(
                    api=API_FILES,
                    endpoint=endpoint,
                    request=request,
                    error=details,
                    metadata={"latency_ms": _elapsed_ms(started_at)},
                )
            )
            raise

    def _log(self, endpoint: str, request: dict[str, Any], response: Any, started_at: float, **metadata: Any) -> None:
        self.interaction_logger.log_openai_interaction(
            InteractionLogEntry(
                api=API_FILES,
                endpoint=endpoint,
                request=request,
                response=to_jsonable(response),
                metadata={"latency_ms": _elapsed_ms(started_at), **metadata},
            )
        )

    async def upload_file(
        self,
        file: UploadedFile,
        purpose: FilePurpose,
        expires_after: dict[str, Any] | None = None,
    ) -> Any:
        """Upload one file.

        Args:
            file: Bytes and filename to send as multipart
            purpose: Intended use, e.g. ``assistants`` for vector stores
            expires_after: Optional ``{"anchor": "created_at", "seconds": N}``

        Returns:
            The SDK FileObject
        """
        params: dict[str, Any] = {"file": file.as_sdk_file(), "purpose": purpose}
        request: dict[str, Any] = {"filename": file.filename, "purpose": purpose, "bytes": file.size}
        if expires_after is not None:
            params["expires_after"] = expires_after
            request["expires_after"] = expires_after

        started_at = time.monotonic()
        uploaded = await self._invoke(ENDPOINT_FILES, request, lambda: self.client.files.create(**params))
        self._log(
            ENDPOINT_FILES,
            request,
            uploaded,
            started_at,
            **_file_summary(uploaded),
            created_at=get_field(uploaded, "created_at"),
        )
        return uploaded

    async def retrieve_file(self, file_id: str) -> Any:
        endpoint = ENDPOINT_FILE.format(file_id=file_id)
        started_at = time.monotonic()
        file = await self._invoke(endpoint, {}, lambda: self.client.files.retrieve(file_id))
        self._log(endpoint, {}, file, started_at, **_file_summary(file))
        return file

    async def list_files(
        self,
        purpose: FilePurpose | None = None,
        order: Literal["asc", "desc"] = "desc",
        limit: int | None = None,
    ) -> list[Any]:
        """First page of uploaded files, optionally filtered by purpose."""
        params: dict[str, Any] = {"order": order}
        if purpose is not None:
            params["purpose"] = purpose
        if limit is not None:
            params["limit"] = limit

        started_at = time.monotonic()
        page = await self._invoke(ENDPOINT_FILES, params, lambda: self.client.files.list(**params))

        files = list(page.data)
        self._log(ENDPOINT_FILES, params, files, started_at, result_count=len(files))
        return files

    async def delete_file(self, file_id: str) -> Any:
        endpoint = ENDPOINT_FILE.format(file_id=file_id)
        started_at = time.monotonic()
        result = await self._invoke(endpoint, {}, lambda: self.client.files.delete(file_id))
        self._log(endpoint, {}, result, started_at, file_id=file_id, deleted=get_field(result, "deleted"))
        return result

    async def download_file_content(self, file_id: str) -> bytes:
        """Raw bytes of an uploaded file; only the size is logged."""
        endpoint = ENDPOINT_FILE_CONTENT.format(file_id=file_id)
        started_at = time.monotonic()
        content = await self._invoke(endpoint, {}, lambda: self.client.files.content(file_id))

        data: bytes = content.content
        self._log(endpoint, {}, {"bytes": len(data)}, started_at, file_id=file_id, bytes=len(data))
        return data

    async def wait_for_processing(
        self,
        file_id: str,
        poll_interval_ms: int = POLL_INITIAL_WAIT_MS,
        max_wait_ms: int = FILE_PROCESSING_MAX_WAIT_MS,
    ) -> Any:
        """Poll until the file is ``processed`` or ``error``.

        Raises:
            PollingTimeoutError: Deadline reached before a terminal status
        """
        started_at = time.monotonic()
        file = await poll_until_terminal(
            lambda: self.retrieve_file(file_id),
            FILE_TERMINAL_STATUSES,
            max_wait_ms,
            initial_wait_ms=poll_interval_ms,
        )
        if file is None:
            logger.warning(f"File processing timed out: {file_id}", max_wait_ms=max_wait_ms)
            raise PollingTimeoutError("file", file_id, max_wait_ms)

        self._log(
            ENDPOINT_FILE_POLL.format(file_id=file_id),
            {"max_wait_ms": max_wait_ms},
            file,
            started_at,
            **_file_summary(file),
        )
        return file

    def extract_file_metadata(self, file: Any) -> dict[str, Any]:
        return extract_file_metadata(file)
