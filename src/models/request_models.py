"""
Validated input objects accepted by the service layer.

Schema validation happens upstream in the route layer; these models only
carry the already-validated values. Every optional field defaults to None,
and ``model_fields_set`` records which fields the caller actually supplied.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

# ============================================================================
# Responses API
# ============================================================================


class ResponseRequestBase(BaseModel):
    """Fields shared by text and image response requests."""

    model: str | None = None
    input: str | list[dict[str, Any]]
    instructions: str | None = None
    modalities: list[Literal["text", "audio"]] | None = None
    tools: list[dict[str, Any]] | None = None
    conversation: str | dict[str, Any] | None = None
    previous_response_id: str | None = None
    store: bool | None = None
    max_output_tokens: int | None = None
    tool_choice: str | dict[str, Any] | None = None
    parallel_tool_calls: bool | None = None
    prompt_cache_key: str | None = None
    service_tier: Literal["auto", "default", "flex", "scale", "priority"] | None = None
    background: bool | None = None
    truncation: Literal["auto", "disabled"] | None = None
    safety_identifier: str | None = None
    metadata: dict[str, str] | None = None
    prompt: dict[str, Any] | None = None
    include: list[str] | None = None


class TextResponseRequest(ResponseRequestBase):
    """Input for text generation through the Responses API."""

    text: dict[str, Any] | None = None
    temperature: float | None = None
    top_p: float | None = None
    stream_options: dict[str, Any] | None = None
    reasoning: dict[str, Any] | None = None


class ImageResponseRequest(ResponseRequestBase):
    """Input for image generation through the Responses API image_generation tool."""

    image_model: Literal["gpt-image-1", "gpt-image-1-mini"] | None = None
    image_quality: Literal["low", "medium", "high", "auto"] | None = None
    image_format: Literal["png", "webp", "jpeg"] | None = None
    image_size: Literal["1024x1024", "1024x1536", "1536x1024", "auto"] | None = None
    image_moderation: Literal["auto", "low"] | None = None
    image_background: Literal["transparent", "opaque", "auto"] | None = None
    input_fidelity: Literal["high", "low"] | None = None
    output_compression: int | None = None
    partial_images: int | None = None


# ============================================================================
# Uploaded files (already parsed by the transport layer)
# ============================================================================


class UploadedFile(BaseModel):
    """File bytes plus the metadata the SDK needs for multipart upload."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)

    def as_sdk_file(self) -> tuple[str, bytes, str]:
        """Tuple form accepted by the openai SDK ``FileTypes``."""
        return (self.filename, self.content, self.content_type)


# ============================================================================
# Audio API
# ============================================================================


class SpeechRequest(BaseModel):
    """Text-to-speech input."""

    model: Literal["tts-1", "tts-1-hd", "gpt-4o-mini-tts"] = "tts-1"
    voice: str
    input: str = Field(max_length=4096)
    response_format: Literal["mp3", "opus", "aac", "flac", "wav", "pcm"] | None = None
    speed: float | None = None
    instructions: str | None = None


class TranscriptionRequest(BaseModel):
    """Speech-to-text input."""

    model: str = "whisper-1"
    language: str | None = None
    prompt: str | None = None
    response_format: Literal["json", "text", "srt", "verbose_json", "vtt"] | None = None
    temperature: float | None = None
    timestamp_granularities: list[Literal["word", "segment"]] | None = None


class TranslationRequest(BaseModel):
    """Audio-to-English translation input."""

    model: Literal["whisper-1"] = "whisper-1"
    prompt: str | None = None
    response_format: Literal["json", "text", "srt", "verbose_json", "vtt"] | None = None
    temperature: float | None = None


# ============================================================================
# Videos API
# ============================================================================


class VideoRequest(BaseModel):
    """Video generation input."""

    prompt: str
    model: Literal["sora-2", "sora-2-pro"] | None = None
    seconds: Literal["4", "8", "12"] | None = None
    size: str | None = None


# ============================================================================
# Vector Stores API
# ============================================================================


class VectorStoreCreateRequest(BaseModel):
    """Vector store creation input; unset fields are not sent."""

    name: str | None = None
    file_ids: list[str] | None = None
    chunking_strategy: dict[str, Any] | None = None
    expires_after: dict[str, Any] | None = None
    metadata: dict[str, str] | None = None
    description: str | None = None


class VectorStoreUpdateRequest(BaseModel):
    """Vector store update input.

    Only fields the caller set are sent, so an explicit ``expires_after=None``
    clears the expiration policy.
    """

    name: str | None = None
    expires_after: dict[str, Any] | None = None
    metadata: dict[str, str] | None = None


class VectorStoreSearchRequest(BaseModel):
    """Semantic search over a vector store."""

    query: str | list[str]
    max_num_results: int | None = Field(default=None, ge=1, le=50)
    filters: dict[str, Any] | None = None
    ranking_options: dict[str, Any] | None = None
    rewrite_query: bool | None = None


# ============================================================================
# Images API
# ============================================================================


class ImageGenerationRequest(BaseModel):
    """Images API generation input."""

    prompt: str
    model: Literal["dall-e-2", "dall-e-3", "gpt-image-1"] | None = None
    n: int | None = None
    size: str | None = None
    quality: Literal["standard", "hd"] | None = None
    style: Literal["vivid", "natural"] | None = None
    response_format: Literal["url", "b64_json"] | None = None
    user: str | None = None


class ImageEditRequest(BaseModel):
    """Images API edit input (dall-e-2 only)."""

    prompt: str
    model: Literal["dall-e-2"] | None = None
    n: int | None = None
    size: Literal["256x256", "512x512", "1024x1024"] | None = None
    response_format: Literal["url", "b64_json"] | None = None
    user: str | None = None


class ImageVariationRequest(BaseModel):
    """Images API variation input (dall-e-2 only)."""

    model: Literal["dall-e-2"] | None = None
    n: int | None = None
    size: Literal["256x256", "512x512", "1024x1024"] | None = None
    response_format: Literal["url", "b64_json"] | None = None
    user: str | None = None
