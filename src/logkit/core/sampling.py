"""Deterministic sampling of high-volume log levels.

Only debug, verbose and silly logs are sampled. The decision is derived from
a hash of the message text, so a given log statement is either always shown
or always hidden for a fixed rate instead of flickering between calls.
"""

import struct
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from logkit.core.exceptions import InvalidLogLevelError
from logkit.core.models import LogLevel, SamplingDecision

if TYPE_CHECKING:
    from logkit.core.config import LoggingConfig

SAMPLED_LEVELS = frozenset({LogLevel.DEBUG, LogLevel.VERBOSE, LogLevel.SILLY})

ALWAYS_LOG_LEVELS = frozenset(
    {LogLevel.ERROR, LogLevel.WARN, LogLevel.INFO, LogLevel.HTTP}
)

_NOT_SAMPLED = SamplingDecision(should_log=True, was_sampled=False, rate=1.0)


def hash_message(message: str) -> int:
    """Compute the 32-bit rolling hash of a message.

    ``hash = hash * 31 + code_unit`` over the UTF-16 code units of the text,
    wrapped to a signed 32-bit integer, then made non-negative.
    """
    value = 0
    data = message.encode("utf-16-le", "surrogatepass")
    for (unit,) in struct.iter_unpack("<H", data):
        value = (value * 31 + unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return abs(value)


def clamp_rate(rate: float) -> float:
    """Clamp a sampling rate into [0, 1]."""
    return max(0.0, min(1.0, float(rate)))


def should_sample_log(
    level: LogLevel | str,
    message: str,
    config: "LoggingConfig",
) -> SamplingDecision:
    """Decide whether a log call should be emitted.

    Args:
        level: Level of the log call.
        message: Message text; the decision is a pure function of it.
        config: Provides ``sampling_enabled`` and ``sampling_rate``.

    Returns:
        SamplingDecision for this call.
    """
    if not config.sampling_enabled:
        return _NOT_SAMPLED

    try:
        level = LogLevel.parse(level)
    except InvalidLogLevelError:
        return _NOT_SAMPLED
    if level not in SAMPLED_LEVELS:
        return _NOT_SAMPLED

    rate = clamp_rate(config.sampling_rate)
    threshold = int(rate * 1000)
    should_log = hash_message(message) % 1000 < threshold
    return SamplingDecision(should_log=should_log, was_sampled=True, rate=rate)


def _always(level: LogLevel | str, message: str) -> bool:
    return True


def create_sampler(config: "LoggingConfig") -> Callable[[LogLevel | str, str], bool]:
    """Create a boolean sampling filter from configuration."""
    if not config.sampling_enabled:
        return _always

    def sampler(level: LogLevel | str, message: str) -> bool:
        return should_sample_log(level, message, config).should_log

    return sampler


class SamplingStats:
    """Thread-safe counters of sampling decisions.

    Example:
        ```python
        stats = SamplingStats()
        stats.record(should_sample_log(LogLevel.DEBUG, "cache miss", config))
        stats.drop_rate
        ```
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total = 0
        self._sampled = 0
        self._dropped = 0

    def record(self, decision: SamplingDecision) -> None:
        """Count one decision."""
        with self._lock:
            self._total += 1
            if decision.was_sampled:
                self._sampled += 1
                if not decision.should_log:
                    self._dropped += 1

    @property
    def total(self) -> int:
        return self._total

    @property
    def sampled(self) -> int:
        return self._sampled

    @property
    def dropped(self) -> int:
        return self._dropped

    @property
    def drop_rate(self) -> float:
        """Fraction of sampled decisions that were dropped."""
        with self._lock:
            return self._dropped / self._sampled if self._sampled else 0.0

    def to_dict(self) -> dict[str, float]:
        with self._lock:
            sampled = self._sampled
            return {
                "total": self._total,
                "sampled": sampled,
                "dropped": self._dropped,
                "dropRate": self._dropped / sampled if sampled else 0.0,
            }

    def reset(self) -> None:
        """Zero all counters."""
        with self._lock:
            self._total = 0
            self._sampled = 0
            self._dropped = 0
