"""Size-rotated file log sink."""

import logging
import logging.handlers
import time
from pathlib import Path
from typing import Any

from logkit.core.encoding.ndjson import encode_record
from logkit.core.models import LogLevel, LogRecord


class RotatingFileSink:
    """Appends NDJSON lines to a file, rotating it by size.

    Rotation is delegated to ``logging.handlers.RotatingFileHandler``:
    once the file would exceed ``max_bytes`` it is renamed to ``.1``
    (shifting older files) and at most ``backup_count`` old files are kept.
    """

    def __init__(
        self,
        path: str | Path,
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
        level: LogLevel | str = LogLevel.INFO,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.level = LogLevel.parse(level)
        self._handler = logging.handlers.RotatingFileHandler(
            self.path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        self._handler.setFormatter(logging.Formatter("%(message)s"))

    def write(self, level: LogLevel, message: str, metadata: dict[str, Any]) -> None:
        if not level.is_enabled_for(self.level):
            return
        line = encode_record(
            LogRecord(
                timestamp=time.time(), level=level, message=message, metadata=metadata
            )
        )
        # Hand the encoded line to the handler as a pre-formatted message
        self._handler.handle(
            logging.makeLogRecord(
                {"msg": line, "levelno": logging.INFO, "levelname": "INFO"}
            )
        )

    def close(self) -> None:
        """Close the underlying file."""
        self._handler.close()
