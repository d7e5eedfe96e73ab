"""
Pricing tables and cost arithmetic.

Rates are estimates taken from the public pricing page on the date in
PRICING_LAST_VERIFIED. Token-priced transcription and several image tiers
are placeholders until per-model pricing is published; keep the constants
as they are so estimates stay comparable across releases.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.constants import COST_PRECISION, PRICING_LAST_VERIFIED, PRICING_URL
from models.usage_models import CostEstimate, UnitType, UsageRecord

TOKENS_PER_UNIT = 1_000_000


@dataclass(frozen=True, slots=True)
class ModelPricing:
    """Token rates for one model, applied per TOKENS_PER_UNIT tokens."""

    input: float
    output: float
    cached_input: float | None = None
    reasoning: float | None = None
    image: float | None = None


#: Token pricing table keyed by model id.
MODEL_PRICING: dict[str, ModelPricing] = {
    "gpt-4o": ModelPricing(input=0.0025, output=0.01, cached_input=0.00125),
    "gpt-4o-mini": ModelPricing(input=0.00015, output=0.0006, cached_input=0.000075),
    "o1": ModelPricing(input=0.015, output=0.06, reasoning=0.06, cached_input=0.0075),
    "o3-mini": ModelPricing(input=0.0011, output=0.0044, reasoning=0.0044, cached_input=0.00055),
    "gpt-5": ModelPricing(input=0.00125, output=0.01, reasoning=0.01, cached_input=0.000625),
    "gpt-image-1": ModelPricing(input=0.0025, output=0.01, image=0.04),
}

# Per-image flat rates
DALL_E_3_HD_SQUARE = 0.08
DALL_E_3_HD_WIDE = 0.12
DALL_E_3_STANDARD = 0.04
DALL_E_2_RATES: dict[str, float] = {"1024x1024": 0.02, "512x512": 0.018, "256x256": 0.016}
DALL_E_2_DEFAULT = 0.02
GPT_IMAGE_1_RATE = 0.02
IMAGE_FALLBACK_RATE = 0.02

# Per-second video rates
VIDEO_PRO_RATE = 0.4
VIDEO_STANDARD_RATE = 0.125

# Per-1k-character speech rates
SPEECH_HD_RATE = 0.03
SPEECH_STANDARD_RATE = 0.015

# Transcription
WHISPER_RATE_PER_MINUTE = 0.006
#: Placeholder token rates (gpt-4o-audio-preview used as reference).
TRANSCRIPTION_INPUT_TOKEN_RATE = 0.00001
TRANSCRIPTION_OUTPUT_TOKEN_RATE = 0.00003
#: Flat estimate when neither duration nor token usage is available.
TRANSCRIPTION_FALLBACK_COST = 0.01


def get_model_pricing(model: str) -> ModelPricing | None:
    return MODEL_PRICING.get(model)


def calculate_cost(model: str, usage: UsageRecord | None) -> float:
    """Token cost for one response, unrounded.

    Unknown models and missing usage both cost 0. Absent sub-counts
    contribute nothing.
    """
    pricing = get_model_pricing(model)
    if pricing is None or usage is None:
        return 0.0

    cost = 0.0
    cost += (usage.input_tokens or 0) / TOKENS_PER_UNIT * pricing.input
    if usage.cached_tokens and pricing.cached_input is not None:
        cost += usage.cached_tokens / TOKENS_PER_UNIT * pricing.cached_input
    cost += (usage.output_tokens or 0) / TOKENS_PER_UNIT * pricing.output
    if usage.reasoning_tokens and pricing.reasoning is not None:
        cost += usage.reasoning_tokens / TOKENS_PER_UNIT * pricing.reasoning
    return cost


def create_cost_estimate(
    model: str,
    pricing_tier: str,
    quantity: float,
    unit_type: UnitType,
    cost_usd: float,
) -> CostEstimate:
    """Wrap a raw cost in a CostEstimate rounded to COST_PRECISION places."""
    return CostEstimate(
        model=model,
        pricing_tier=pricing_tier,
        quantity=quantity,
        unit_type=unit_type,
        cost_usd=round(cost_usd, COST_PRECISION),
        pricing_url=PRICING_URL,
        last_verified=PRICING_LAST_VERIFIED,
    )


def calculate_image_cost(model: str, size: str, quality: str | None = "standard", n: int = 1) -> float:
    """Flat per-image rate by model, size and quality, times ``n``."""
    if model == "dall-e-3":
        if quality == "hd":
            if size in ("1792x1024", "1024x1792"):
                per_image = DALL_E_3_HD_WIDE
            else:
                per_image = DALL_E_3_HD_SQUARE
        else:
            per_image = DALL_E_3_STANDARD
    elif model == "dall-e-2":
        per_image = DALL_E_2_RATES.get(size, DALL_E_2_DEFAULT)
    elif model == "gpt-image-1":
        per_image = GPT_IMAGE_1_RATE
    else:
        per_image = IMAGE_FALLBACK_RATE

    return per_image * n


def calculate_video_cost(model: str, duration_seconds: float) -> float:
    """Per-second video cost; ``sora-2-pro`` is the premium tier."""
    rate = VIDEO_PRO_RATE if model == "sora-2-pro" else VIDEO_STANDARD_RATE
    return rate * duration_seconds


def calculate_speech_cost(model: str, characters: int) -> float:
    """Per-1k-character speech cost; ``tts-1-hd`` is the premium tier."""
    rate = SPEECH_HD_RATE if model == "tts-1-hd" else SPEECH_STANDARD_RATE
    return characters / 1000 * rate


def calculate_transcription_cost(
    model: str,
    duration_seconds: float,
    usage: dict[str, Any] | None = None,
) -> float:
    """Transcription/translation cost estimate.

    whisper-1 is priced per minute of audio. Token-billed models use the
    placeholder token rates. Without either signal a flat estimate applies.
    """
    if model == "whisper-1":
        return duration_seconds / 60 * WHISPER_RATE_PER_MINUTE

    if usage:
        input_tokens = usage.get("input_tokens") or 0
        output_tokens = usage.get("output_tokens") or 0
        return input_tokens * TRANSCRIPTION_INPUT_TOKEN_RATE + output_tokens * TRANSCRIPTION_OUTPUT_TOKEN_RATE

    return TRANSCRIPTION_FALLBACK_COST
