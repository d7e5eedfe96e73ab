"""
Normalized event model emitted by the streaming router.
Every handler produces NormalizedEvent instances; the wire shape is
``{"event": str, "data": str, "sequence": int}``.
"""

from __future__ import annotations

import json

from typing import Any

from pydantic import BaseModel, ConfigDict

from utils.json_utils import compact_payload, json_compact


class NormalizedEvent(BaseModel):
    """Client-facing event with a serialized JSON payload."""

    model_config = ConfigDict(frozen=True)

    event: str
    data: str
    sequence: int

    @classmethod
    def build(cls, event: str, sequence: int, /, **fields: Any) -> NormalizedEvent:
        """Serialize ``fields`` into ``data``, omitting absent values.

        The payload always carries the ``sequence`` it was produced for.
        """
        payload = compact_payload(fields)
        payload["sequence"] = sequence
        return cls(event=event, data=json_compact(payload), sequence=sequence)

    def payload(self) -> dict[str, Any]:
        """Decode ``data`` back into a dict."""
        decoded: dict[str, Any] = json.loads(self.data)
        return decoded

    def to_json(self) -> str:
        """Convert to JSON for transport."""
        json_str: str = self.model_dump_json()
        return json_str
