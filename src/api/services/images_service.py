"""
Images API service (DALL-E): generation, edits and variations.

Edits and variations only run on dall-e-2, so their cost is always priced
at dall-e-2 rates.
"""

from __future__ import annotations

import time

from typing import Any

from openai import AsyncOpenAI

from core.constants import (
    API_IMAGES,
    DEFAULT_IMAGE_SIZE,
    DEFAULT_IMAGES_MODEL,
    ENDPOINT_IMAGE_EDITS,
    ENDPOINT_IMAGE_GENERATIONS,
    ENDPOINT_IMAGE_VARIATIONS,
)
from models.error_models import extract_error_details
from models.log_models import InteractionLogEntry
from models.request_models import (
    ImageEditRequest,
    ImageGenerationRequest,
    ImageVariationRequest,
    UploadedFile,
)
from models.usage_models import CostEstimate
from utils.json_utils import to_jsonable
from utils.logger import InteractionLogger, logger
from utils.pricing import calculate_image_cost, create_cost_estimate
from utils.usage import get_field

_EDIT_MODEL = "dall-e-2"


def _elapsed_ms(started_at: float) -> int:
    return int((time.monotonic() - started_at) * 1000)


def _present(**fields: Any) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


def estimate_image_cost(model: str, size: str | None, quality: str | None, n: int | None) -> CostEstimate:
    """Per-image flat rate times the number of images."""
    count = n or 1
    size = size or DEFAULT_IMAGE_SIZE
    tier = f"{size}/{quality}" if quality else size
    return create_cost_estimate(
        model=model,
        pricing_tier=tier,
        quantity=count,
        unit_type="images",
        cost_usd=calculate_image_cost(model, size, quality, count),
    )


class ImagesService:
    """Direct image generation through ``/v1/images/*``."""

    def __init__(self, client: AsyncOpenAI, interaction_logger: InteractionLogger):
        self.client = client
        self.interaction_logger = interaction_logger

    async def generate_images(self, request: ImageGenerationRequest) -> Any:
        """Generate ``n`` images from a prompt."""
        params: dict[str, Any] = {
            "prompt": request.prompt,
            **_present(
                model=request.model,
                n=request.n,
                size=request.size,
                quality=request.quality,
                style=request.style,
                response_format=request.response_format,
                user=request.user,
            ),
        }
        model = request.model or DEFAULT_IMAGES_MODEL
        started_at = time.monotonic()
        try:
            response = await self.client.images.generate(**params)
        except Exception as e:
            self._log_error(ENDPOINT_IMAGE_GENERATIONS, params, e, started_at)
            raise

        data = get_field(response, "data", [])
        estimate = estimate_image_cost(model, request.size, request.quality, request.n)
        self._log_success(
            ENDPOINT_IMAGE_GENERATIONS,
            params,
            response,
            started_at,
            model=model,
            images_generated=len(data),
            cost_estimate=estimate.cost_usd,
            cost_breakdown=estimate.model_dump(),
            has_revised_prompt=bool(data) and get_field(data[0], "revised_prompt") is not None,
        )
        return response

    async def edit_image(
        self,
        image: UploadedFile,
        request: ImageEditRequest,
        mask: UploadedFile | None = None,
    ) -> Any:
        """Edit an image from a prompt; transparent areas of ``mask`` are repainted."""
        params: dict[str, Any] = {
            "image": image.as_sdk_file(),
            "prompt": request.prompt,
            **_present(
                mask=mask.as_sdk_file() if mask else None,
                model=request.model,
                n=request.n,
                size=request.size,
                response_format=request.response_format,
                user=request.user,
            ),
        }
        log_request = {
            "prompt": request.prompt,
            "has_mask": mask is not None,
            "image_size_bytes": image.size,
            **_present(
                model=request.model,
                n=request.n,
                size=request.size,
                mask_size_bytes=mask.size if mask else None,
            ),
        }
        started_at = time.monotonic()
        try:
            response = await self.client.images.edit(**params)
        except Exception as e:
            self._log_error(ENDPOINT_IMAGE_EDITS, log_request, e, started_at)
            raise

        estimate = estimate_image_cost(_EDIT_MODEL, request.size, None, request.n)
        self._log_success(
            ENDPOINT_IMAGE_EDITS,
            log_request,
            response,
            started_at,
            model=_EDIT_MODEL,
            images_generated=len(get_field(response, "data", [])),
            cost_estimate=estimate.cost_usd,
            cost_breakdown=estimate.model_dump(),
        )
        return response

    async def create_image_variation(self, image: UploadedFile, request: ImageVariationRequest) -> Any:
        params: dict[str, Any] = {
            "image": image.as_sdk_file(),
            **_present(
                model=request.model,
                n=request.n,
                size=request.size,
                response_format=request.response_format,
                user=request.user,
            ),
        }
        log_request = {
            "image_size_bytes": image.size,
            **_present(model=request.model, n=request.n, size=request.size),
        }
        started_at = time.monotonic()
        try:
            response = await self.client.images.create_variation(**params)
        except Exception as e:
            self._log_error(ENDPOINT_IMAGE_VARIATIONS, log_request, e, started_at)
            raise

        estimate = estimate_image_cost(_EDIT_MODEL, request.size, None, request.n)
        self._log_success(
            ENDPOINT_IMAGE_VARIATIONS,
            log_request,
            response,
            started_at,
            model=_EDIT_MODEL,
            images_generated=len(get_field(response, "data", [])),
            cost_estimate=estimate.cost_usd,
            cost_breakdown=estimate.model_dump(),
        )
        return response

    def _log_success(
        self,
        endpoint: str,
        request: dict[str, Any],
        response: Any,
        started_at: float,
        **metadata: Any,
    ) -> None:
        self.interaction_logger.log_openai_interaction(
            InteractionLogEntry(
                api=API_IMAGES,
                endpoint=endpoint,
                request=to_jsonable(request),
                response=to_jsonable(response),
                metadata={"latency_ms": _elapsed_ms(started_at), **metadata},
            )
        )

    def _log_error(self, endpoint: str, request: dict[str, Any], error: Exception, started_at: float) -> None:
        details = extract_error_details(error)
        logger.error(f"OpenAI images call failed: {endpoint}: {details.message}", status=details.status)
        self.interaction_logger.log_openai_interaction(
            InteractionLogEntry(
                api=API_IMAGES,
                endpoint=endpoint,
                request=to_jsonable(request),
                error=details,
                metadata={"latency_ms": _elapsed_ms(started_at)},
            )
        )
