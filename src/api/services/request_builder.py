"""
Outbound parameter assembly for the Responses API.

Pure functions: validated request model in, keyword arguments for
``client.responses.create`` out. Optional fields the caller did not supply
are left out entirely instead of being sent as null.
"""

from __future__ import annotations

from typing import Any

from core.constants import DEFAULT_STREAM_PARTIAL_IMAGES
from models.request_models import ImageResponseRequest, ResponseRequestBase, TextResponseRequest

# Optional fields forwarded verbatim when supplied, in request order.
_SHARED_OPTIONAL_PARAMS: tuple[str, ...] = (
    "conversation",
    "previous_response_id",
    "store",
    "max_output_tokens",
    "tool_choice",
    "parallel_tool_calls",
    "prompt_cache_key",
    "service_tier",
    "background",
    "truncation",
    "safety_identifier",
    "metadata",
)

_TEXT_SAMPLING_PARAMS: tuple[str, ...] = ("text", "temperature", "top_p")

# Fields where an explicit null is a meaningful value for the API.
_NULLABLE_PARAMS = frozenset(
    {"background", "truncation", "metadata", "stream_options", "prompt", "reasoning", "input_fidelity"}
)

# Request field -> image_generation tool key.
_IMAGE_TOOL_FIELDS: tuple[tuple[str, str], ...] = (
    ("image_model", "model"),
    ("image_quality", "quality"),
    ("image_format", "output_format"),
    ("image_size", "size"),
    ("image_moderation", "moderation"),
    ("image_background", "background"),
    ("input_fidelity", "input_fidelity"),
    ("output_compression", "output_compression"),
    ("partial_images", "partial_images"),
)


def _is_supplied(request: Any, name: str) -> bool:
    """True when the caller set ``name`` (explicit null only counts where nullable)."""
    value = getattr(request, name, None)
    if value is not None:
        return True
    return name in _NULLABLE_PARAMS and name in request.model_fields_set


def _copy_supplied(request: Any, params: dict[str, Any], names: tuple[str, ...]) -> None:
    for name in names:
        if _is_supplied(request, name):
            params[name] = getattr(request, name)


def _base_params(request: ResponseRequestBase, default_model: str) -> dict[str, Any]:
    params: dict[str, Any] = {
        "model": request.model or default_model,
        "input": request.input,
    }
    if request.instructions:
        params["instructions"] = request.instructions
    if request.modalities:
        # Not a typed SDK argument; sent through the raw request body
        params["extra_body"] = {"modalities": list(request.modalities)}
    return params


def build_text_response_params(
    request: TextResponseRequest,
    default_model: str,
    stream: bool = False,
) -> dict[str, Any]:
    """Build ``responses.create`` kwargs for a text response.

    Args:
        request: Validated text response input
        default_model: Model used when the request names none
        stream: Build streaming parameters (adds ``stream`` and ``stream_options``)

    Returns:
        Keyword arguments for ``client.responses.create``
    """
    params = _base_params(request, default_model)
    if request.tools:
        params["tools"] = list(request.tools)

    _copy_supplied(request, params, _TEXT_SAMPLING_PARAMS)
    _copy_supplied(request, params, _SHARED_OPTIONAL_PARAMS)

    if stream:
        params["stream"] = True
        _copy_supplied(request, params, ("stream_options",))

    _copy_supplied(request, params, ("prompt", "include", "reasoning"))
    return params


def build_image_generation_tool(request: ImageResponseRequest, stream: bool = False) -> dict[str, Any]:
    """Describe the image_generation tool from the request's image fields.

    Streaming requests default ``partial_images`` so partial frames arrive.
    """
    tool: dict[str, Any] = {"type": "image_generation"}
    for field_name, tool_key in _IMAGE_TOOL_FIELDS:
        if _is_supplied(request, field_name):
            tool[tool_key] = getattr(request, field_name)

    if stream and "partial_images" not in tool:
        tool["partial_images"] = DEFAULT_STREAM_PARTIAL_IMAGES
    return tool


def build_image_response_params(
    request: ImageResponseRequest,
    default_model: str,
    stream: bool = False,
) -> dict[str, Any]:
    """Build ``responses.create`` kwargs for image generation.

    The image_generation tool is appended after the caller's own tools;
    caller tools keep their order.
    """
    params = _base_params(request, default_model)
    params["tools"] = [*(request.tools or []), build_image_generation_tool(request, stream=stream)]

    _copy_supplied(request, params, _SHARED_OPTIONAL_PARAMS)

    if stream:
        params["stream"] = True

    _copy_supplied(request, params, ("prompt", "include"))
    return params
