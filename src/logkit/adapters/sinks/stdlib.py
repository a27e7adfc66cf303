"""Sink forwarding records to Python's standard library logging.

This lets pipeline records flow into an application's existing logging
handlers. The levels without a stdlib counterpart are registered as
custom levels: HTTP (15), VERBOSE (12) and SILLY (5).
"""

import logging
from typing import Any

from logkit.core.models import LogLevel

HTTP = 15
VERBOSE = 12
SILLY = 5

logging.addLevelName(HTTP, "HTTP")
logging.addLevelName(VERBOSE, "VERBOSE")
logging.addLevelName(SILLY, "SILLY")

_LEVEL_MAP = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.HTTP: HTTP,
    LogLevel.VERBOSE: VERBOSE,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.SILLY: SILLY,
}


def to_stdlib_level(level: LogLevel) -> int:
    """Map a pipeline level to a stdlib logging level number."""
    return _LEVEL_MAP[level]


class StdlibLoggingSink:
    """Writes records to a ``logging.Logger``.

    Metadata is attached to the stdlib record as its ``metadata``
    attribute, so formatters and handlers can render it.
    """

    def __init__(
        self,
        logger: logging.Logger | str = "logkit",
        level: LogLevel | str = LogLevel.SILLY,
    ) -> None:
        if isinstance(logger, str):
            logger = logging.getLogger(logger)
        self._logger = logger
        self.level = LogLevel.parse(level)

    def write(self, level: LogLevel, message: str, metadata: dict[str, Any]) -> None:
        if not level.is_enabled_for(self.level):
            return
        self._logger.log(
            to_stdlib_level(level),
            message,
            extra={"metadata": metadata},
        )
