"""Console log sink."""

import json
import sys
import time
from typing import Any, TextIO

from logkit.core.encoding.ndjson import encode_record
from logkit.core.models import LogLevel, LogRecord


def format_pretty(record: LogRecord) -> str:
    """Render a record as a single human-readable line."""
    stamp = time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime(record.timestamp))
    line = f"{stamp} {record.level.value}: {record.message}"
    if record.metadata:
        line += " " + json.dumps(record.metadata, default=str)
    return line


class ConsoleSink:
    """Writes one line per record to a text stream.

    JSON lines by default; ``pretty=True`` switches to a compact
    human-readable format for local development.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        level: LogLevel | str = LogLevel.INFO,
        pretty: bool = False,
    ) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self.level = LogLevel.parse(level)
        self.pretty = pretty

    def write(self, level: LogLevel, message: str, metadata: dict[str, Any]) -> None:
        if not level.is_enabled_for(self.level):
            return
        record = LogRecord(
            timestamp=time.time(), level=level, message=message, metadata=metadata
        )
        line = format_pretty(record) if self.pretty else encode_record(record)
        self._stream.write(line + "\n")
        self._stream.flush()
