"""
Usage and metadata extraction from Responses API objects.

Works on SDK ``Response`` objects, on stream events that wrap one under
``.response``, and on plain mappings (as produced by tests or replayed logs).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from models.usage_models import UsageRecord


def get_field(source: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from an SDK object, namespace, or mapping."""
    if source is None:
        return default
    if isinstance(source, Mapping):
        value = source.get(name, default)
    else:
        value = getattr(source, name, default)
    return default if value is None else value


def _int_or_none(value: Any) -> int | None:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def extract_usage(response_or_event: Any) -> UsageRecord | None:
    """Normalize token usage; None when the response reports no usage.

    A missing usage object yields None rather than a record of all-None
    counts. Either way nothing is reported as zero, and callers treat None
    as "no token fields to log". Nested ``input_tokens_details`` /
    ``output_tokens_details`` may be missing or empty, in which case the
    sub-counts stay None.
    """
    usage = get_field(response_or_event, "usage")
    if usage is None:
        usage = get_field(get_field(response_or_event, "response"), "usage")
    if usage is None:
        return None

    input_details = get_field(usage, "input_tokens_details")
    output_details = get_field(usage, "output_tokens_details")

    return UsageRecord(
        input_tokens=_int_or_none(get_field(usage, "input_tokens")),
        output_tokens=_int_or_none(get_field(usage, "output_tokens")),
        total_tokens=_int_or_none(get_field(usage, "total_tokens")),
        cached_tokens=_int_or_none(get_field(input_details, "cached_tokens")),
        reasoning_tokens=_int_or_none(get_field(output_details, "reasoning_tokens")),
    )


def extract_response_metadata(response: Any) -> dict[str, Any]:
    """Response-level fields worth logging next to usage.

    Absent fields are left out of the result.
    """
    text_config = get_field(response, "text")
    metadata = {
        "response_status": get_field(response, "status"),
        "response_error": get_field(response, "error"),
        "incomplete_details": get_field(response, "incomplete_details"),
        "conversation": get_field(response, "conversation"),
        "background": get_field(response, "background"),
        "max_output_tokens": get_field(response, "max_output_tokens"),
        "previous_response_id": get_field(response, "previous_response_id"),
        "prompt_cache_key": get_field(response, "prompt_cache_key"),
        "service_tier": get_field(response, "service_tier"),
        "truncation": get_field(response, "truncation"),
        "safety_identifier": get_field(response, "safety_identifier"),
        "request_metadata": get_field(response, "metadata"),
        "text_verbosity": get_field(text_config, "verbosity"),
    }
    return {key: value for key, value in metadata.items() if value is not None}
