"""
Videos API service (Sora).

Video generation is an asynchronous job: create returns a queued video,
then status is polled until it reaches a terminal state. Polling backs off
linearly from 5s up to a 20s interval. Running out of time raises
VideoGenerationTimeoutError, which is distinct from a video whose status
is ``failed``.
"""

from __future__ import annotations

import asyncio
import time

from collections.abc import Awaitable, Callable
from typing import Any, Literal

from openai import AsyncOpenAI

from api.services.polling import next_poll_wait_ms
from core.constants import (
    API_VIDEOS,
    DEFAULT_VIDEO_MODEL,
    DEFAULT_VIDEO_SECONDS,
    ENDPOINT_VIDEO,
    ENDPOINT_VIDEO_CONTENT,
    ENDPOINT_VIDEO_POLL,
    ENDPOINT_VIDEO_REMIX,
    ENDPOINT_VIDEOS,
    POLL_INITIAL_WAIT_MS,
    VIDEO_POLL_MAX_WAIT_MS,
    VIDEO_TERMINAL_STATUSES,
)
from models.error_models import VideoGenerationTimeoutError, extract_error_details
from models.log_models import InteractionLogEntry
from models.request_models import VideoRequest
from utils.json_utils import to_jsonable
from utils.logger import InteractionLogger, logger
from utils.pricing import calculate_video_cost
from utils.usage import get_field

VideoVariant = Literal["video", "thumbnail", "spritesheet"]

_VIDEO_METADATA_FIELDS = (
    "id",
    "object",
    "status",
    "progress",
    "model",
    "seconds",
    "size",
    "prompt",
    "created_at",
    "completed_at",
    "expires_at",
    "remixed_from_video_id",
    "error",
)


def _elapsed_ms(started_at: float) -> int:
    return int((time.monotonic() - started_at) * 1000)


def _video_summary(video: Any) -> dict[str, Any]:
    return {
        "video_id": get_field(video, "id"),
        "model": get_field(video, "model"),
        "status": get_field(video, "status"),
    }


def extract_video_metadata(video: Any) -> dict[str, Any]:
    """Structured view of a video job, fields copied as-is (None when absent)."""
    return {name: to_jsonable(get_field(video, name)) for name in _VIDEO_METADATA_FIELDS}


class VideosService:
    """Video generation jobs: create, poll, download, list, delete, remix."""

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
            logger.error(f"OpenAI videos call failed: {endpoint}: {details.message}", status=details.status)
            self.interaction_logger.log_openai_interaction(
                InteractionLogEntry(
                    api=API_VIDEOS,
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
                api=API_VIDEOS,
                endpoint=endpoint,
                request=request,
                response=to_jsonable(response),
                metadata={"latency_ms": _elapsed_ms(started_at), **metadata},
            )
        )

    async def create_video(self, request: VideoRequest) -> Any:
        """Start a generation job; the returned video is usually ``queued``."""
        params: dict[str, Any] = {"prompt": request.prompt}
        if request.model:
            params["model"] = request.model
        if request.seconds:
            params["seconds"] = request.seconds
        if request.size:
            params["size"] = request.size

        started_at = time.monotonic()
        video = await self._invoke(ENDPOINT_VIDEOS, params, lambda: self.client.videos.create(**params))

        cost = calculate_video_cost(
            request.model or DEFAULT_VIDEO_MODEL,
            int(request.seconds or DEFAULT_VIDEO_SECONDS),
        )
        self._log(ENDPOINT_VIDEOS, params, video, started_at, **_video_summary(video), cost_estimate=cost)
        return video

    async def get_video_status(self, video_id: str) -> Any:
        endpoint = ENDPOINT_VIDEO.format(video_id=video_id)
        started_at = time.monotonic()
        video = await self._invoke(endpoint, {}, lambda: self.client.videos.retrieve(video_id))
        self._log(endpoint, {}, video, started_at, **_video_summary(video))
        return video

    async def poll_until_complete(self, video_id: str, max_wait_ms: int = VIDEO_POLL_MAX_WAIT_MS) -> Any:
        """Poll status until the job is completed or failed.

        Args:
            video_id: Video job id
            max_wait_ms: Give up after this many milliseconds

        Returns:
            The final video object (status ``completed`` or ``failed``)

        Raises:
            VideoGenerationTimeoutError: Deadline reached before a terminal status
        """
        started_at = time.monotonic()
        deadline = started_at + max_wait_ms / 1000
        wait_ms = POLL_INITIAL_WAIT_MS

        while time.monotonic() < deadline:
            video = await self.get_video_status(video_id)

            if get_field(video, "status") in VIDEO_TERMINAL_STATUSES:
                self._log(
                    ENDPOINT_VIDEO_POLL.format(video_id=video_id),
                    {"max_wait_ms": max_wait_ms},
                    video,
                    started_at,
                    **_video_summary(video),
                )
                return video

            await asyncio.sleep(wait_ms / 1000)
            wait_ms = next_poll_wait_ms(wait_ms)

        logger.warning(f"Video generation timed out: {video_id}", max_wait_ms=max_wait_ms)
        raise VideoGenerationTimeoutError(video_id, max_wait_ms)

    async def download_video(self, video_id: str, variant: VideoVariant = "video") -> Any:
        """Download the MP4, thumbnail or spritesheet of a completed video.

        Returns the SDK binary response (``.content``, ``.aread()`` etc).
        """
        endpoint = ENDPOINT_VIDEO_CONTENT.format(video_id=video_id)
        request = {"variant": variant}
        started_at = time.monotonic()
        content = await self._invoke(
            endpoint,
            request,
            lambda: self.client.videos.download_content(video_id, variant=variant),
        )

        headers = getattr(getattr(content, "response", None), "headers", None) or {}
        self._log(
            endpoint,
            request,
            {"content_type": headers.get("content-type", "application/octet-stream")},
            started_at,
            video_id=video_id,
        )
        return content

    async def list_videos(self, limit: int = 10, order: Literal["asc", "desc"] = "desc") -> list[Any]:
        """First page of video jobs."""
        request = {"limit": limit, "order": order}
        started_at = time.monotonic()
        page = await self._invoke(ENDPOINT_VIDEOS, request, lambda: self.client.videos.list(limit=limit, order=order))

        videos = list(page.data)
        self._log(ENDPOINT_VIDEOS, request, videos, started_at, result_count=len(videos))
        return videos

    async def delete_video(self, video_id: str) -> Any:
        endpoint = ENDPOINT_VIDEO.format(video_id=video_id)
        started_at = time.monotonic()
        result = await self._invoke(endpoint, {}, lambda: self.client.videos.delete(video_id))
        self._log(endpoint, {}, result, started_at, video_id=video_id, deleted=get_field(result, "deleted"))
        return result

    async def remix_video(self, video_id: str, prompt: str) -> Any:
        """Start a new job that reworks an existing video with a new prompt."""
        endpoint = ENDPOINT_VIDEO_REMIX.format(video_id=video_id)
        request = {"prompt": prompt}
        started_at = time.monotonic()
        video = await self._invoke(endpoint, request, lambda: self.client.videos.remix(video_id, prompt=prompt))
        self._log(endpoint, request, video, started_at, **_video_summary(video))
        return video

    def extract_video_metadata(self, video: Any) -> dict[str, Any]:
        return extract_video_metadata(video)
