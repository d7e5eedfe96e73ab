"""Centralized JSON serialization utilities.

Pre-created partial functions for common JSON serialization patterns, plus
conversion of OpenAI SDK objects into plain JSON-compatible values.
"""

from __future__ import annotations

import json

from collections.abc import Callable, Mapping
from functools import partial
from typing import Any

from pydantic import BaseModel

# Compact JSON serialization (no spaces) with fallback to str for non-serializable types.
# Use for normalized event payloads where size matters.
# Example: json_compact({"key": "value"}) -> '{"key":"value"}'
json_compact: Callable[..., str] = partial(json.dumps, separators=(",", ":"), default=str)

# Standard JSON serialization with fallback to str for non-serializable types.
# Use for logging and debugging where readability is more important than size.
json_safe: Callable[..., str] = partial(json.dumps, default=str)


def to_jsonable(value: Any) -> Any:
    """Convert SDK models and nested containers into JSON-compatible values.

    Pydantic models (every OpenAI SDK type is one) are dumped with
    ``exclude_none`` so unset provider fields stay absent. Mappings and
    sequences are converted recursively; anything else is returned as-is
    and left to the ``default=str`` fallback of the serializers above.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def compact_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Drop absent (None) fields and convert the rest with :func:`to_jsonable`."""
    return {key: to_jsonable(value) for key, value in payload.items() if value is not None}
