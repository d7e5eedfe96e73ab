"""
Token usage and cost estimate models.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from core.constants import PRICING_LAST_VERIFIED, PRICING_URL

UnitType = Literal["characters", "tokens", "minutes", "images", "videos"]


class UsageRecord(BaseModel):
    """Normalized token counts for one response.

    ``cached_tokens`` and ``reasoning_tokens`` stay None unless the provider
    reported them; 0 is a real reported value.
    """

    model_config = ConfigDict(frozen=True)

    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None
    cached_tokens: int | None = None
    reasoning_tokens: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Reported fields only."""
        return self.model_dump(exclude_none=True)


class CostEstimate(BaseModel):
    """Dollar estimate for one request. ``cost_usd`` keeps 6 decimal places."""

    model_config = ConfigDict(frozen=True)

    model: str
    pricing_tier: str
    quantity: float
    unit_type: UnitType
    cost_usd: float
    pricing_url: str = PRICING_URL
    last_verified: str = PRICING_LAST_VERIFIED
