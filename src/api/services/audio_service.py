"""
Audio API service: text-to-speech, transcription and translation.

Every call writes one interaction record with a cost estimate. Text formats
(text, srt, vtt) come back from the API as plain strings; those are logged
as a truncated preview.
"""

from __future__ import annotations

import time

from typing import Any

from openai import AsyncOpenAI

from core.constants import (
    API_AUDIO,
    DEFAULT_SPEECH_FORMAT,
    DEFAULT_SPEECH_SPEED,
    ENDPOINT_SPEECH,
    ENDPOINT_TRANSCRIPTIONS,
    ENDPOINT_TRANSLATIONS,
    LOG_TEXT_PREVIEW_LENGTH,
)
from models.error_models import extract_error_details
from models.log_models import InteractionLogEntry
from models.request_models import SpeechRequest, TranscriptionRequest, TranslationRequest, UploadedFile
from utils.json_utils import to_jsonable
from utils.logger import InteractionLogger, logger
from utils.pricing import calculate_speech_cost, calculate_transcription_cost
from utils.usage import get_field

#: Assumed audio length when whisper-1 reports no duration.
WHISPER_FALLBACK_DURATION_SECONDS = 60


def _elapsed_ms(started_at: float) -> int:
    return int((time.monotonic() - started_at) * 1000)


def _present(**fields: Any) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


def extract_transcription_metadata(response: Any) -> dict[str, Any]:
    """Summarize a transcription/translation response for logging.

    Plain-string responses only yield ``text_length``. verbose_json responses
    add duration, language, segment/word counts and the mean segment
    ``avg_logprob`` as ``average_confidence``.
    """
    if isinstance(response, str):
        return {"text_length": len(response)}

    text = get_field(response, "text", "")
    metadata: dict[str, Any] = {"text_length": len(text)}

    duration = get_field(response, "duration")
    if duration is not None:
        metadata["duration_seconds"] = duration
    language = get_field(response, "language")
    if language is not None:
        metadata["detected_language"] = language

    segments = get_field(response, "segments")
    if segments:
        metadata["segment_count"] = len(segments)
        total_logprob = sum(get_field(segment, "avg_logprob", 0) for segment in segments)
        metadata["average_confidence"] = total_logprob / len(segments)

    words = get_field(response, "words")
    if words:
        metadata["word_count"] = len(words)

    return metadata


def estimate_transcription_cost(response: Any, model: str) -> float:
    """Duration-based estimate for whisper-1, token-based for the gpt-4o models."""
    duration = 0.0
    usage = None
    if not isinstance(response, str):
        duration = get_field(response, "duration", 0.0)
        usage = to_jsonable(get_field(response, "usage"))

    if not duration and model == "whisper-1":
        duration = WHISPER_FALLBACK_DURATION_SECONDS

    return calculate_transcription_cost(model, duration, usage if isinstance(usage, dict) else None)


def _log_response(response: Any) -> Any:
    if isinstance(response, str):
        return {"text": response[:LOG_TEXT_PREVIEW_LENGTH]}
    return to_jsonable(response)


class AudioService:
    """Speech synthesis and speech recognition."""

    def __init__(self, client: AsyncOpenAI, interaction_logger: InteractionLogger):
        self.client = client
        self.interaction_logger = interaction_logger

    async def create_speech(self, request: SpeechRequest) -> Any:
        """Synthesize speech; returns the SDK binary response."""
        params: dict[str, Any] = {
            "model": request.model,
            "voice": request.voice,
            "input": request.input,
            **_present(
                response_format=request.response_format,
                speed=request.speed,
                instructions=request.instructions,
            ),
        }
        character_count = len(request.input)
        response_format = request.response_format or DEFAULT_SPEECH_FORMAT
        started_at = time.monotonic()

        try:
            response = await self.client.audio.speech.create(**params)
        except Exception as e:
            self._log_error(
                ENDPOINT_SPEECH,
                {"model": request.model, "voice": request.voice, "character_count": character_count},
                e,
                started_at,
            )
            raise

        self.interaction_logger.log_openai_interaction(
            InteractionLogEntry(
                api=API_AUDIO,
                endpoint=ENDPOINT_SPEECH,
                request=params,
                response={"status": "success", "format": response_format},
                metadata={
                    "latency_ms": _elapsed_ms(started_at),
                    "model": request.model,
                    "voice": request.voice,
                    "character_count": character_count,
                    "response_format": response_format,
                    "speed": request.speed if request.speed is not None else DEFAULT_SPEECH_SPEED,
                    "cost_estimate": calculate_speech_cost(request.model, character_count),
                },
            )
        )
        return response

    async def create_transcription(self, file: UploadedFile, request: TranscriptionRequest) -> Any:
        """Transcribe audio in its original language."""
        params: dict[str, Any] = {
            "file": file.as_sdk_file(),
            "model": request.model,
            **_present(
                language=request.language,
                prompt=request.prompt,
                response_format=request.response_format,
                temperature=request.temperature,
                timestamp_granularities=request.timestamp_granularities,
            ),
        }
        log_request = {
            "model": request.model,
            "file_size_bytes": file.size,
            "filename": file.filename,
            **_present(language=request.language, response_format=request.response_format),
        }
        return await self._recognize(
            self.client.audio.transcriptions.create,
            ENDPOINT_TRANSCRIPTIONS,
            params,
            log_request,
            file,
            request.model,
        )

    async def create_translation(self, file: UploadedFile, request: TranslationRequest) -> Any:
        """Translate audio from any language into English text."""
        params: dict[str, Any] = {
            "file": file.as_sdk_file(),
            "model": request.model,
            **_present(
                prompt=request.prompt,
                response_format=request.response_format,
                temperature=request.temperature,
            ),
        }
        log_request = {
            "model": request.model,
            "file_size_bytes": file.size,
            "filename": file.filename,
            **_present(response_format=request.response_format),
        }
        return await self._recognize(
            self.client.audio.translations.create,
            ENDPOINT_TRANSLATIONS,
            params,
            log_request,
            file,
            request.model,
        )

    async def _recognize(
        self,
        create: Any,
        endpoint: str,
        params: dict[str, Any],
        log_request: dict[str, Any],
        file: UploadedFile,
        model: str,
    ) -> Any:
        started_at = time.monotonic()
        try:
            response = await create(**params)
        except Exception as e:
            self._log_error(endpoint, log_request, e, started_at)
            raise

        self.interaction_logger.log_openai_interaction(
            InteractionLogEntry(
                api=API_AUDIO,
                endpoint=endpoint,
                request=log_request,
                response=_log_response(response),
                metadata={
                    "latency_ms": _elapsed_ms(started_at),
                    "model": model,
                    "file_size_mb": f"{file.size / 1024 / 1024:.2f}",
                    **extract_transcription_metadata(response),
                    "cost_estimate": estimate_transcription_cost(response, model),
                },
            )
        )
        return response

    def _log_error(self, endpoint: str, request: dict[str, Any], error: Exception, started_at: float) -> None:
        details = extract_error_details(error)
        logger.error(f"OpenAI audio call failed: {endpoint}: {details.message}", status=details.status)
        self.interaction_logger.log_openai_interaction(
            InteractionLogEntry(
                api=API_AUDIO,
                endpoint=endpoint,
                request=request,
                error=details,
                metadata={"latency_ms": _elapsed_ms(started_at)},
            )
        )
