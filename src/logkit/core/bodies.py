"""Preparation of request and response bodies for logging."""

import json
from collections.abc import Callable
from typing import Any

PREVIEW_LENGTH = 500


def truncated_body(
    original_size: int, max_size: int, preview: str | None = None
) -> dict[str, Any]:
    """Build the placeholder logged instead of an oversized body."""
    return {
        "_truncated": True,
        "_originalSize": original_size,
        "_maxSize": max_size,
        "_preview": preview,
    }


def process_body(
    body: Any,
    masker: Callable[[Any], Any],
    max_size: int,
) -> Any | None:
    """Mask a body and replace it with a preview when it is too large.

    Args:
        body: Decoded body (any JSON-like value).
        masker: Masking function applied before size measurement.
        max_size: Maximum serialized size in UTF-8 bytes.

    Returns:
        None for a missing body, the masked body when it fits, otherwise a
        record with ``_truncated``, ``_originalSize``, ``_maxSize`` and
        ``_preview`` holding the start of the serialized body.
    """
    if body is None:
        return None

    masked = masker(body)
    serialized = json.dumps(
        masked, default=str, separators=(",", ":"), ensure_ascii=False
    )
    size = len(serialized.encode("utf-8"))
    if size > max_size:
        return truncated_body(size, max_size, serialized[:PREVIEW_LENGTH] + "...")
    return masked
