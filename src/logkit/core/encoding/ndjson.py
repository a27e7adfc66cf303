"""NDJSON encoder for log records."""

import json
from collections.abc import Iterable
from typing import Any

from logkit.core.models import LogRecord


def record_to_dict(record: LogRecord) -> dict[str, Any]:
    """Convert a log record into its JSON object shape."""
    return {
        "timestamp": record.timestamp,
        "level": record.level.value,
        "message": record.message,
        "metadata": record.metadata,
    }


def encode_record(record: LogRecord) -> str:
    """Encode one log record as a single JSON line (no trailing newline).

    Values JSON cannot represent natively are rendered with ``str()``.
    """
    return json.dumps(record_to_dict(record), default=str)


def encode_records(records: Iterable[LogRecord]) -> str:
    """Encode log records to newline-delimited JSON.

    Args:
        records: An iterable of LogRecord objects.

    Returns:
        NDJSON string with one JSON object per line.
        Empty string if no records.
    """
    lines = [encode_record(record) for record in records]

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
