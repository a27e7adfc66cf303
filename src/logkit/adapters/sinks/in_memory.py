"""In-memory log sink."""

import time
from collections import deque
from typing import Any

from logkit.core.models import LogLevel, LogRecord


class InMemorySink:
    """In-memory implementation of LogSinkPort.

    Stores log records in a list, or in a bounded buffer that evicts the
    oldest record when ``max_size`` is given. Suitable for testing and for
    exposing recent logs from a running service.
    """

    def __init__(
        self, level: LogLevel | str = LogLevel.SILLY, max_size: int | None = None
    ) -> None:
        self.level = LogLevel.parse(level)
        self._records: deque[LogRecord] = deque(maxlen=max_size)

    def write(self, level: LogLevel, message: str, metadata: dict[str, Any]) -> None:
        """Store a log record if its level passes this sink's threshold."""
        if not level.is_enabled_for(self.level):
            return
        self._records.append(
            LogRecord(
                timestamp=time.time(),
                level=level,
                message=message,
                metadata=dict(metadata),
            )
        )

    def records(self, level: LogLevel | str | None = None) -> list[LogRecord]:
        """Return stored records in write order, optionally for one level."""
        if level is None:
            return list(self._records)
        wanted = LogLevel.parse(level)
        return [r for r in self._records if r.level is wanted]

    def clear(self) -> None:
        self._records.clear()
