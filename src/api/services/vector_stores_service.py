"""
Vector Stores API service.

Covers the store itself (create, retrieve, update, list, delete, search),
the files attached to it, and file batches. Stores, files and batches are
all processed asynchronously; the poll_* methods wait for a terminal status
with the shared 5s→20s backoff and raise PollingTimeoutError when the
deadline passes first. Failed or cancelled statuses are returned, not
raised.
"""

from __future__ import annotations

import time

from collections.abc import Awaitable, Callable
from typing import Any, Literal

from openai import AsyncOpenAI

from api.services.polling import poll_until_terminal
from core.constants import (
    API_VECTOR_STORES,
    ENDPOINT_FILE_BATCH,
    ENDPOINT_FILE_BATCH_CANCEL,
    ENDPOINT_FILE_BATCH_FILES,
    ENDPOINT_FILE_BATCH_POLL,
    ENDPOINT_FILE_BATCHES,
    ENDPOINT_VECTOR_STORE,
    ENDPOINT_VECTOR_STORE_FILE,
    ENDPOINT_VECTOR_STORE_FILE_CONTENT,
    ENDPOINT_VECTOR_STORE_FILE_POLL,
    ENDPOINT_VECTOR_STORE_FILES,
    ENDPOINT_VECTOR_STORE_POLL,
    ENDPOINT_VECTOR_STORE_SEARCH,
    ENDPOINT_VECTOR_STORES,
    FILE_BATCH_TERMINAL_STATUSES,
    VECTOR_STORE_FILE_TERMINAL_STATUSES,
    VECTOR_STORE_POLL_MAX_WAIT_MS,
    VECTOR_STORE_TERMINAL_STATUSES,
)
from models.error_models import PollingTimeoutError, extract_error_details
from models.log_models import InteractionLogEntry
from models.request_models import VectorStoreCreateRequest, VectorStoreSearchRequest, VectorStoreUpdateRequest
from utils.json_utils import compact_payload, to_jsonable
from utils.logger import InteractionLogger, logger
from utils.usage import get_field

Order = Literal["asc", "desc"]
FileStatusFilter = Literal["in_progress", "completed", "failed", "cancelled"]

_VECTOR_STORE_METADATA_FIELDS = (
    "id",
    "name",
    "status",
    "file_counts",
    "usage_bytes",
    "created_at",
    "last_active_at",
    "expires_at",
)


def _elapsed_ms(started_at: float) -> int:
    return int((time.monotonic() - started_at) * 1000)


def _store_summary(store: Any) -> dict[str, Any]:
    return {
        "vector_store_id": get_field(store, "id"),
        "status": get_field(store, "status"),
        "file_counts": to_jsonable(get_field(store, "file_counts")),
    }


def _file_summary(vector_store_file: Any) -> dict[str, Any]:
    return {
        "file_id": get_field(vector_store_file, "id"),
        "vector_store_id": get_field(vector_store_file, "vector_store_id"),
        "status": get_field(vector_store_file, "status"),
        "usage_bytes": get_field(vector_store_file, "usage_bytes"),
    }


def _batch_summary(batch: Any) -> dict[str, Any]:
    return {
        "batch_id": get_field(batch, "id"),
        "vector_store_id": get_field(batch, "vector_store_id"),
        "status": get_field(batch, "status"),
        "file_counts": to_jsonable(get_field(batch, "file_counts")),
    }


def _page_params(
    limit: int | None,
    order: Order | None,
    after: str | None,
    before: str | None,
    **extra: Any,
) -> dict[str, Any]:
    return compact_payload({"limit": limit, "order": order, "after": after, "before": before, **extra})


def extract_vector_store_metadata(store: Any) -> dict[str, Any]:
    """Structured view of a vector store, fields copied as-is (None when absent)."""
    return {name: to_jsonable(get_field(store, name)) for name in _VECTOR_STORE_METADATA_FIELDS}


class VectorStoresService:
    """Vector stores, their files and file batches."""

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
            logger.error(f"OpenAI vector stores call failed: {endpoint}: {details.message}", status=details.status)
            self.interaction_logger.log_openai_interaction(
                InteractionLogEntry(
                    api=API_VECTOR_STORES,
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
                api=API_VECTOR_STORES,
                endpoint=endpoint,
                request=request,
                response=to_jsonable(response),
                metadata={"latency_ms": _elapsed_ms(started_at), **metadata},
            )
        )

    async def _poll(
        self,
        resource: str,
        resource_id: str,
        endpoint: str,
        fetch: Callable[[], Awaitable[Any]],
        terminal_statuses: frozenset[str],
        max_wait_ms: int,
        summarize: Callable[[Any], dict[str, Any]],
    ) -> Any:
        started_at = time.monotonic()
        result = await poll_until_terminal(fetch, terminal_statuses, max_wait_ms)
        if result is None:
            logger.warning(f"Vector store polling timed out: {resource} {resource_id}", max_wait_ms=max_wait_ms)
            raise PollingTimeoutError(resource, resource_id, max_wait_ms)

        self._log(endpoint, {"max_wait_ms": max_wait_ms}, result, started_at, **summarize(result))
        return result

    # ------------------------------------------------------------------
    # Vector stores
    # ------------------------------------------------------------------

    async def create_vector_store(self, request: VectorStoreCreateRequest | None = None) -> Any:
        """Create a store, optionally seeded with already uploaded files."""
        params = (request or VectorStoreCreateRequest()).model_dump(exclude_none=True)
        started_at = time.monotonic()
        store = await self._invoke(
            ENDPOINT_VECTOR_STORES, params, lambda: self.client.vector_stores.create(**params)
        )
        self._log(ENDPOINT_VECTOR_STORES, params, store, started_at, **_store_summary(store))
        return store

    async def retrieve_vector_store(self, vector_store_id: str) -> Any:
        endpoint = ENDPOINT_VECTOR_STORE.format(vector_store_id=vector_store_id)
        started_at = time.monotonic()
        store = await self._invoke(endpoint, {}, lambda: self.client.vector_stores.retrieve(vector_store_id))
        self._log(endpoint, {}, store, started_at, **_store_summary(store))
        return store

    async def update_vector_store(self, vector_store_id: str, request: VectorStoreUpdateRequest) -> Any:
        """Send only the fields the caller set; explicit None clears them."""
        endpoint = ENDPOINT_VECTOR_STORE.format(vector_store_id=vector_store_id)
        params = request.model_dump(exclude_unset=True)
        started_at = time.monotonic()
        store = await self._invoke(
            endpoint, params, lambda: self.client.vector_stores.update(vector_store_id, **params)
        )
        self._log(endpoint, params, store, started_at, **_store_summary(store))
        return store

    async def list_vector_stores(
        self,
        limit: int | None = None,
        order: Order | None = None,
        after: str | None = None,
        before: str | None = None,
    ) -> list[Any]:
        """One page of stores; pass ``after``/``before`` ids to move between pages."""
        params = _page_params(limit, order, after, before)
        started_at = time.monotonic()
        page = await self._invoke(ENDPOINT_VECTOR_STORES, params, lambda: self.client.vector_stores.list(**params))

        stores = list(page.data)
        self._log(ENDPOINT_VECTOR_STORES, params, stores, started_at, result_count=len(stores))
        return stores

    async def delete_vector_store(self, vector_store_id: str) -> Any:
        """Delete the store; the uploaded files themselves are kept."""
        endpoint = ENDPOINT_VECTOR_STORE.format(vector_store_id=vector_store_id)
        started_at = time.monotonic()
        result = await self._invoke(endpoint, {}, lambda: self.client.vector_stores.delete(vector_store_id))
        self._log(
            endpoint,
            {},
            result,
            started_at,
            vector_store_id=vector_store_id,
            deleted=get_field(result, "deleted"),
        )
        return result

    async def search_vector_store(self, vector_store_id: str, request: VectorStoreSearchRequest) -> list[Any]:
        """Semantic search; returns the matching chunks of the first page."""
        endpoint = ENDPOINT_VECTOR_STORE_SEARCH.format(vector_store_id=vector_store_id)
        params = request.model_dump(exclude_none=True)
        started_at = time.monotonic()
        page = await self._invoke(
            endpoint, params, lambda: self.client.vector_stores.search(vector_store_id, **params)
        )

        results = list(page.data)
        query = request.query if isinstance(request.query, str) else f"[{len(request.query)} queries]"
        self._log(
            endpoint,
            params,
            results,
            started_at,
            vector_store_id=vector_store_id,
            query=query,
            result_count=len(results),
        )
        return results

    async def poll_until_complete(
        self, vector_store_id: str, max_wait_ms: int = VECTOR_STORE_POLL_MAX_WAIT_MS
    ) -> Any:
        """Poll the store until ``completed`` or ``expired``.

        Raises:
            PollingTimeoutError: Deadline reached before a terminal status
        """
        return await self._poll(
            "vector_store",
            vector_store_id,
            ENDPOINT_VECTOR_STORE_POLL.format(vector_store_id=vector_store_id),
            lambda: self.retrieve_vector_store(vector_store_id),
            VECTOR_STORE_TERMINAL_STATUSES,
            max_wait_ms,
            _store_summary,
        )

    # ------------------------------------------------------------------
    # Vector store files
    # ------------------------------------------------------------------

    async def add_file(
        self,
        vector_store_id: str,
        file_id: str,
        attributes: dict[str, str | float | bool] | None = None,
        chunking_strategy: dict[str, Any] | None = None,
    ) -> Any:
        """Attach an uploaded file; indexing continues in the background."""
        endpoint = ENDPOINT_VECTOR_STORE_FILES.format(vector_store_id=vector_store_id)
        params = compact_payload(
            {"file_id": file_id, "attributes": attributes, "chunking_strategy": chunking_strategy}
        )
        started_at = time.monotonic()
        vector_store_file = await self._invoke(
            endpoint, params, lambda: self.client.vector_stores.files.create(vector_store_id, **params)
        )
        self._log(endpoint, params, vector_store_file, started_at, **_file_summary(vector_store_file))
        return vector_store_file

    async def list_files(
        self,
        vector_store_id: str,
        limit: int | None = None,
        order: Order | None = None,
        after: str | None = None,
        before: str | None = None,
        filter: FileStatusFilter | None = None,
    ) -> list[Any]:
        endpoint = ENDPOINT_VECTOR_STORE_FILES.format(vector_store_id=vector_store_id)
        params = _page_params(limit, order, after, before, filter=filter)
        started_at = time.monotonic()
        page = await self._invoke(
            endpoint, params, lambda: self.client.vector_stores.files.list(vector_store_id, **params)
        )

        files = list(page.data)
        self._log(endpoint, params, files, started_at, vector_store_id=vector_store_id, result_count=len(files))
        return files

    async def get_file(self, vector_store_id: str, file_id: str) -> Any:
        endpoint = ENDPOINT_VECTOR_STORE_FILE.format(vector_store_id=vector_store_id, file_id=file_id)
        started_at = time.monotonic()
        vector_store_file = await self._invoke(
            endpoint,
            {},
            lambda: self.client.vector_stores.files.retrieve(file_id, vector_store_id=vector_store_id),
        )
        self._log(endpoint, {}, vector_store_file, started_at, **_file_summary(vector_store_file))
        return vector_store_file

    async def update_file(
        self,
        vector_store_id: str,
        file_id: str,
        attributes: dict[str, str | float | bool] | None,
    ) -> Any:
        """Replace the file's attributes; None removes them."""
        endpoint = ENDPOINT_VECTOR_STORE_FILE.format(vector_store_id=vector_store_id, file_id=file_id)
        request = {"attributes": attributes}
        started_at = time.monotonic()
        vector_store_file = await self._invoke(
            endpoint,
            request,
            lambda: self.client.vector_stores.files.update(
                file_id, vector_store_id=vector_store_id, attributes=attributes
            ),
        )
        self._log(endpoint, request, vector_store_file, started_at, **_file_summary(vector_store_file))
        return vector_store_file

    async def remove_file(self, vector_store_id: str, file_id: str) -> Any:
        """Detach a file from the store; the uploaded file is not deleted."""
        endpoint = ENDPOINT_VECTOR_STORE_FILE.format(vector_store_id=vector_store_id, file_id=file_id)
        started_at = time.monotonic()
        result = await self._invoke(
            endpoint,
            {},
            lambda: self.client.vector_stores.files.delete(file_id, vector_store_id=vector_store_id),
        )
        self._log(
            endpoint,
            {},
            result,
            started_at,
            vector_store_id=vector_store_id,
            file_id=file_id,
            deleted=get_field(result, "deleted"),
        )
        return result

    async def get_file_content(self, vector_store_id: str, file_id: str) -> list[Any]:
        """Parsed text chunks of an indexed file."""
        endpoint = ENDPOINT_VECTOR_STORE_FILE_CONTENT.format(vector_store_id=vector_store_id, file_id=file_id)
        started_at = time.monotonic()
        page = await self._invoke(
            endpoint,
            {},
            lambda: self.client.vector_stores.files.content(file_id, vector_store_id=vector_store_id),
        )

        chunks = list(page.data)
        self._log(
            endpoint,
            {},
            chunks,
            started_at,
            vector_store_id=vector_store_id,
            file_id=file_id,
            result_count=len(chunks),
        )
        return chunks

    async def poll_file_until_complete(
        self,
        vector_store_id: str,
        file_id: str,
        max_wait_ms: int = VECTOR_STORE_POLL_MAX_WAIT_MS,
    ) -> Any:
        """Poll an attached file until ``completed``, ``failed`` or ``cancelled``."""
        return await self._poll(
            "vector_store_file",
            file_id,
            ENDPOINT_VECTOR_STORE_FILE_POLL.format(vector_store_id=vector_store_id, file_id=file_id),
            lambda: self.get_file(vector_store_id, file_id),
            VECTOR_STORE_FILE_TERMINAL_STATUSES,
            max_wait_ms,
            _file_summary,
        )

    # ------------------------------------------------------------------
    # File batches
    # ------------------------------------------------------------------

    async def create_file_batch(
        self,
        vector_store_id: str,
        file_ids: list[str] | None = None,
        files: list[dict[str, Any]] | None = None,
        attributes: dict[str, str | float | bool] | None = None,
        chunking_strategy: dict[str, Any] | None = None,
    ) -> Any:
        """Attach many files at once.

        Pass either ``file_ids`` (sharing ``attributes``/``chunking_strategy``)
        or ``files``, a list of per-file ``{"file_id", "attributes",
        "chunking_strategy"}`` entries.
        """
        if not file_ids and not files:
            raise ValueError("create_file_batch needs file_ids or files")

        endpoint = ENDPOINT_FILE_BATCHES.format(vector_store_id=vector_store_id)
        params = compact_payload(
            {
                "file_ids": file_ids,
                "files": files,
                "attributes": attributes,
                "chunking_strategy": chunking_strategy,
            }
        )
        started_at = time.monotonic()
        batch = await self._invoke(
            endpoint, params, lambda: self.client.vector_stores.file_batches.create(vector_store_id, **params)
        )
        self._log(endpoint, params, batch, started_at, **_batch_summary(batch))
        return batch

    async def get_file_batch(self, vector_store_id: str, batch_id: str) -> Any:
        endpoint = ENDPOINT_FILE_BATCH.format(vector_store_id=vector_store_id, batch_id=batch_id)
        started_at = time.monotonic()
        batch = await self._invoke(
            endpoint,
            {},
            lambda: self.client.vector_stores.file_batches.retrieve(batch_id, vector_store_id=vector_store_id),
        )
        self._log(endpoint, {}, batch, started_at, **_batch_summary(batch))
        return batch

    async def cancel_file_batch(self, vector_store_id: str, batch_id: str) -> Any:
        """Stop processing the batch's remaining files."""
        endpoint = ENDPOINT_FILE_BATCH_CANCEL.format(vector_store_id=vector_store_id, batch_id=batch_id)
        started_at = time.monotonic()
        batch = await self._invoke(
            endpoint,
            {},
            lambda: self.client.vector_stores.file_batches.cancel(batch_id, vector_store_id=vector_store_id),
        )
        self._log(endpoint, {}, batch, started_at, **_batch_summary(batch))
        return batch

    async def list_batch_files(
        self,
        vector_store_id: str,
        batch_id: str,
        limit: int | None = None,
        order: Order | None = None,
        after: str | None = None,
        before: str | None = None,
        filter: FileStatusFilter | None = None,
    ) -> list[Any]:
        endpoint = ENDPOINT_FILE_BATCH_FILES.format(vector_store_id=vector_store_id, batch_id=batch_id)
        params = _page_params(limit, order, after, before, filter=filter)
        started_at = time.monotonic()
        page = await self._invoke(
            endpoint,
            params,
            lambda: self.client.vector_stores.file_batches.list_files(
                batch_id, vector_store_id=vector_store_id, **params
            ),
        )

        files = list(page.data)
        self._log(endpoint, params, files, started_at, batch_id=batch_id, result_count=len(files))
        return files

    async def poll_batch_until_complete(
        self,
        vector_store_id: str,
        batch_id: str,
        max_wait_ms: int = VECTOR_STORE_POLL_MAX_WAIT_MS,
    ) -> Any:
        """Poll a batch until ``completed`` or ``cancelled``."""
        return await self._poll(
            "file_batch",
            batch_id,
            ENDPOINT_FILE_BATCH_POLL.format(vector_store_id=vector_store_id, batch_id=batch_id),
            lambda: self.get_file_batch(vector_store_id, batch_id),
            FILE_BATCH_TERMINAL_STATUSES,
            max_wait_ms,
            _batch_summary,
        )

    def extract_vector_store_metadata(self, store: Any) -> dict[str, Any]:
        return extract_vector_store_metadata(store)
