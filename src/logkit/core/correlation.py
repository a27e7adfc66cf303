"""Correlation ID extraction and generation for request tracing."""

import uuid
from collections.abc import Iterable, Mapping, Sequence

CORRELATION_ID_HEADER = "x-request-id"

# Header spelling used by clients that do not lower-case header names
CORRELATION_ID_HEADER_FALLBACK = "X-Request-Id"

HeaderValue = str | Sequence[str] | None


def generate_correlation_id() -> str:
    """Generate a new random (version 4) correlation ID."""
    return str(uuid.uuid4())


def get_correlation_id(headers: Mapping[str, HeaderValue]) -> str:
    """Extract the correlation ID from request headers or generate one.

    Args:
        headers: Header mapping; values are strings, lists of strings or None.

    Returns:
        The client-supplied ID when present and non-empty, the first
        element when the header was repeated, otherwise a fresh UUID.
    """
    value = headers.get(CORRELATION_ID_HEADER)
    if value is None:
        value = headers.get(CORRELATION_ID_HEADER_FALLBACK)

    if isinstance(value, str):
        if value:
            return value
    elif isinstance(value, Sequence) and len(value) > 0 and value[0]:
        return str(value[0])

    return generate_correlation_id()


def headers_from_scope(raw_headers: Iterable[tuple[bytes, bytes]]) -> dict[str, HeaderValue]:
    """Convert ASGI header pairs into a mapping of lower-cased names.

    Repeated headers are collected into a list in arrival order.
    """
    headers: dict[str, HeaderValue] = {}
    for raw_name, raw_value in raw_headers:
        name = raw_name.decode("latin-1").lower()
        value = raw_value.decode("latin-1")
        existing = headers.get(name)
        if existing is None:
            headers[name] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            headers[name] = [existing, value]  # type: ignore[list-item]
    return headers
