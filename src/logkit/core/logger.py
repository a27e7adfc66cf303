"""The logger pipeline: sampling, metadata merge, masking and dispatch.

A Logger holds an immutable snapshot of its metadata. ``child()`` builds a
new Logger with merged metadata that shares the parent's sinks, masker and
sampler, so request layers can add fields without touching shared state.
"""

import asyncio
import concurrent.futures
import functools
import inspect
import logging
import threading
from collections.abc import Awaitable, Callable, Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from logkit.core.masking import create_masker
from logkit.core.models import LogLevel, SamplingDecision
from logkit.core.ports import LogSinkPort
from logkit.core.sampling import SamplingStats, should_sample_log

if TYPE_CHECKING:
    from logkit.core.config import LoggingConfig

_logger = logging.getLogger(__name__)

Masker = Callable[[Any], Any]
Sampler = Callable[[LogLevel, str], SamplingDecision]

_NO_SAMPLING = SamplingDecision(should_log=True, was_sampled=False, rate=1.0)


def _never_sample(level: LogLevel, message: str) -> SamplingDecision:
    return _NO_SAMPLING


def _no_mask(data: Any) -> Any:
    return data


class _BackgroundLoop:
    """Event loop on a daemon thread for async sinks called outside a loop.

    Created on first use and shared by every dispatcher, so clients bound
    to a loop (such as a shared httpx.AsyncClient) always see the same one.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None

    def get(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=loop.run_forever, name="logkit-sinks", daemon=True
                )
                thread.start()
                self._loop = loop
            return self._loop


_background = _BackgroundLoop()


class _Dispatcher:
    """Hands records to sinks; shared by a logger and all its children.

    Awaitables returned by async sinks are never waited for by the caller.
    They are scheduled on the running event loop, or on the shared
    background loop when called from synchronous code, and tracked until
    done so flush() can wait for them.
    """

    def __init__(self, sinks: Iterable[LogSinkPort]) -> None:
        self.sinks = tuple(sinks)
        self._pending: set[asyncio.Task[None]] = set()
        self._threaded: set[concurrent.futures.Future[None]] = set()
        self._threaded_lock = threading.Lock()

    def dispatch(self, level: LogLevel, message: str, metadata: dict[str, Any]) -> None:
        for sink in self.sinks:
            try:
                result = sink.write(level, message, metadata)
            except Exception:
                _logger.exception("Log sink %r failed to write record", sink)
                continue
            if inspect.isawaitable(result):
                self._schedule(result, sink)

    def _schedule(self, awaitable: Awaitable[None], sink: LogSinkPort) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._schedule_threadsafe(awaitable, sink)
            return
        task = loop.create_task(self._guarded(awaitable, sink))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _schedule_threadsafe(
        self, awaitable: Awaitable[None], sink: LogSinkPort
    ) -> None:
        future = asyncio.run_coroutine_threadsafe(
            self._guarded(awaitable, sink), _background.get()
        )
        with self._threaded_lock:
            self._threaded.add(future)
        future.add_done_callback(self._forget)

    def _forget(self, future: concurrent.futures.Future[None]) -> None:
        with self._threaded_lock:
            self._threaded.discard(future)

    def _threaded_snapshot(self) -> list[concurrent.futures.Future[None]]:
        with self._threaded_lock:
            return list(self._threaded)

    @staticmethod
    async def _guarded(awaitable: Awaitable[None], sink: LogSinkPort) -> None:
        try:
            await awaitable
        except Exception:
            _logger.exception("Log sink %r failed to write record", sink)

    async def flush(self) -> None:
        while self._pending or self._threaded_snapshot():
            if self._pending:
                await asyncio.gather(*list(self._pending))
            threaded = self._threaded_snapshot()
            if threaded:
                await asyncio.gather(*(asyncio.wrap_future(f) for f in threaded))

    def flush_blocking(self, timeout: float | None = None) -> bool:
        threaded = self._threaded_snapshot()
        if not threaded:
            return True
        _done, not_done = concurrent.futures.wait(threaded, timeout=timeout)
        return not not_done


class Logger:
    """Leveled, metadata-carrying logger.

    Example:
        ```python
        from logkit import InMemorySink, Logger, build_config

        sink = InMemorySink()
        logger = Logger.from_config(build_config(), [sink], {"service": "api"})
        request_logger = logger.with_correlation_id("abc-123")
        request_logger.info("Order placed", {"orderId": 42, "password": "x"})
        ```
    """

    def __init__(
        self,
        sinks: Iterable[LogSinkPort] | _Dispatcher,
        metadata: Mapping[str, Any] | None = None,
        *,
        masker: Masker = _no_mask,
        sampler: Sampler = _never_sample,
        stats: SamplingStats | None = None,
    ) -> None:
        """Initialize the logger.

        Args:
            sinks: Sinks every emitted record is written to.
            metadata: Fields included in every record of this logger.
            masker: Redaction function applied to the merged metadata.
            sampler: Returns the sampling decision for (level, message).
            stats: Optional counters updated with every sampling decision.
        """
        if isinstance(sinks, _Dispatcher):
            self._dispatcher = sinks
        else:
            self._dispatcher = _Dispatcher(sinks)
        self._metadata: Mapping[str, Any] = MappingProxyType(dict(metadata or {}))
        self._masker = masker
        self._sampler = sampler
        self._stats = stats

    @classmethod
    def from_config(
        cls,
        config: "LoggingConfig",
        sinks: Iterable[LogSinkPort],
        metadata: Mapping[str, Any] | None = None,
        stats: SamplingStats | None = None,
    ) -> "Logger":
        """Create a logger with masking and sampling taken from config."""
        return cls(
            sinks,
            metadata,
            masker=create_masker(config),
            sampler=functools.partial(should_sample_log, config=config),
            stats=stats,
        )

    @property
    def metadata(self) -> Mapping[str, Any]:
        """Read-only view of the metadata attached to every record."""
        return self._metadata

    @property
    def sinks(self) -> tuple[LogSinkPort, ...]:
        return self._dispatcher.sinks

    def log(
        self,
        level: LogLevel | str,
        message: str,
        meta: Mapping[str, Any] | None = None,
    ) -> None:
        """Sample, merge, mask and dispatch one log call.

        Call-site metadata overrides the logger's metadata on key collision.
        Nothing else happens when the call is sampled out.
        """
        level = LogLevel.parse(level)
        decision = self._sampler(level, message)
        if self._stats is not None:
            self._stats.record(decision)
        if not decision.should_log:
            return

        merged = {**self._metadata, **meta} if meta else dict(self._metadata)
        masked = self._masker(merged)
        self._dispatcher.dispatch(level, message, masked)

    def error(self, message: str, meta: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.ERROR, message, meta)

    def warn(self, message: str, meta: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.WARN, message, meta)

    def info(self, message: str, meta: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.INFO, message, meta)

    def http(self, message: str, meta: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.HTTP, message, meta)

    def verbose(self, message: str, meta: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.VERBOSE, message, meta)

    def debug(self, message: str, meta: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.DEBUG, message, meta)

    def silly(self, message: str, meta: Mapping[str, Any] | None = None) -> None:
        self.log(LogLevel.SILLY, message, meta)

    def child(self, meta: Mapping[str, Any]) -> "Logger":
        """Create a logger whose metadata is this logger's plus ``meta``.

        The child's keys win on collision; this logger is left unchanged.
        """
        return Logger(
            self._dispatcher,
            {**self._metadata, **meta},
            masker=self._masker,
            sampler=self._sampler,
            stats=self._stats,
        )

    def with_correlation_id(self, correlation_id: str) -> "Logger":
        """Create a child logger tagged with a request correlation ID."""
        return self.child({"correlationId": correlation_id})

    async def flush(self) -> None:
        """Wait for records still being written by async sinks.

        Covers writes scheduled on the running loop and writes handed to the
        background loop by synchronous callers.
        """
        await self._dispatcher.flush()

    def flush_blocking(self, timeout: float | None = None) -> bool:
        """Block until writes started from synchronous code have finished.

        Writes scheduled on a running event loop are not covered; await
        flush() from that loop instead.

        Returns:
            False if the timeout expired with writes still in progress.
        """
        return self._dispatcher.flush_blocking(timeout)
