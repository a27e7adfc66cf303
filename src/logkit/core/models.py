"""Core domain models for the logging pipeline."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from logkit.core.exceptions import InvalidLogLevelError

LoggerMetadata = Mapping[str, Any]


class LogLevel(str, Enum):
    """Ordered log levels, most severe first."""

    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    HTTP = "http"
    VERBOSE = "verbose"
    DEBUG = "debug"
    SILLY = "silly"

    @property
    def priority(self) -> int:
        """Numeric priority: 0 for error, 6 for silly."""
        return _PRIORITIES[self]

    def is_enabled_for(self, threshold: "LogLevel") -> bool:
        """Return True if this level is at least as severe as threshold."""
        return self.priority <= threshold.priority

    @classmethod
    def parse(cls, value: "LogLevel | str") -> "LogLevel":
        """Parse a level name case-insensitively.

        Raises:
            InvalidLogLevelError: If the name is not a known level.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidLogLevelError(value) from None

    def __str__(self) -> str:
        return self.value


_PRIORITIES = {level: index for index, level in enumerate(LogLevel)}


@dataclass(frozen=True)
class LogRecord:
    """A finished log record as received by a sink.

    Attributes:
        timestamp: Unix timestamp in seconds.
        level: Log level.
        message: The log message.
        metadata: Merged and masked structured fields.
    """

    timestamp: float
    level: LogLevel
    message: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SamplingDecision:
    """Outcome of a sampling check for a single log call."""

    should_log: bool
    was_sampled: bool
    rate: float


@dataclass(frozen=True)
class ParsedStackFrame:
    """One recognized line of a stack trace.

    Attributes:
        function_name: Function or method name.
        file_name: File path, "native" or "unknown".
        line_number: Line number if present.
        column_number: Column number if present.
        is_native: Whether the frame is runtime-internal.
        is_library: Whether the file lives in a third-party package directory.
        raw: The stripped source line.
    """

    function_name: str
    file_name: str
    line_number: int | None
    column_number: int | None
    is_native: bool
    is_library: bool
    raw: str

    def to_dict(self) -> dict[str, Any]:
        """JSON shape of the frame.

        ``isNodeModules`` is the established record key; ``isLibrary`` carries
        the same value under a name that also fits Python packages.
        """
        return {
            "functionName": self.function_name,
            "fileName": self.file_name,
            "lineNumber": self.line_number,
            "columnNumber": self.column_number,
            "isNative": self.is_native,
            "isNodeModules": self.is_library,
            "isLibrary": self.is_library,
            "raw": self.raw,
        }


@dataclass(frozen=True)
class ParsedError:
    """Structured representation of an error and its cause chain."""

    name: str
    message: str
    stack: tuple[ParsedStackFrame, ...] = ()
    cause: "ParsedError | None" = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "message": self.message,
            "stack": [frame.to_dict() for frame in self.stack],
        }
        if self.cause is not None:
            data["cause"] = self.cause.to_dict()
        return data


@dataclass(frozen=True)
class ErrorInfo:
    """An error known only by its name, message and stack text.

    Used for errors that did not originate as Python exceptions, for
    example stack traces reported by a browser or another service.
    """

    name: str
    message: str
    stack: str | None = None
    cause: "ErrorInfo | BaseException | None" = None
