"""Port interface for log sinks.

The pipeline depends only on this protocol, never on a concrete sink.
Examples: InMemorySink, ConsoleSink, RotatingFileSink, HttpSink.
"""

from collections.abc import Awaitable
from typing import Any, Protocol, runtime_checkable

from logkit.core.models import LogLevel


@runtime_checkable
class LogSinkPort(Protocol):
    """Port for writing finished log records.

    ``write`` may be a coroutine function; the pipeline schedules the
    returned awaitable without waiting for it.
    """

    def write(
        self, level: LogLevel, message: str, metadata: dict[str, Any]
    ) -> Awaitable[None] | None:
        """Write one log record."""
        ...
