"""
Audio output event handlers (base64 audio chunks and transcripts).
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from models.event_models import NormalizedEvent

from .base import StreamState, event_field


def handle_audio_delta(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    yield NormalizedEvent.build("audio_delta", sequence, delta=event_field(event, "delta", default=""))


def handle_audio_done(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    yield NormalizedEvent.build("audio_done", sequence, audio=event_field(event, "audio"))


def handle_audio_transcript_delta(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    yield NormalizedEvent.build("audio_transcript_delta", sequence, delta=event_field(event, "delta", default=""))


def handle_audio_transcript_done(event: Any, state: StreamState, sequence: int) -> Iterator[NormalizedEvent]:
    yield NormalizedEvent.build("audio_transcript_done", sequence, transcript=event_field(event, "transcript"))
