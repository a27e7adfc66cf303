"""ASGI middleware adding correlation IDs and request logging.

Works with any ASGI server or framework (uvicorn, Starlette, FastAPI)
without importing a framework.
"""

import fnmatch
import json
import logging
import time
from collections.abc import Callable, Coroutine
from typing import Any

from logkit.adapters.logging_context import reset_request_logger, set_request_logger
from logkit.core.bodies import process_body, truncated_body
from logkit.core.config import LoggingConfig
from logkit.core.correlation import (
    CORRELATION_ID_HEADER,
    get_correlation_id,
    headers_from_scope,
)
from logkit.core.error_parser import create_error_parser
from logkit.core.logger import Logger
from logkit.core.masking import create_masker

_logger = logging.getLogger(__name__)

# ASGI type aliases
Scope = dict[str, Any]
Message = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, Message]]
Send = Callable[[Message], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]

_HEADER_BYTES = CORRELATION_ID_HEADER.encode("latin-1")


def _replace_correlation_header(
    headers: list[tuple[bytes, bytes]], correlation_id: str
) -> list[tuple[bytes, bytes]]:
    """Return headers with a single x-request-id set to correlation_id."""
    kept = [(k, v) for k, v in headers if k.lower() != _HEADER_BYTES]
    kept.append((_HEADER_BYTES, correlation_id.encode("latin-1")))
    return kept


def _decode_body(raw: bytes) -> Any | None:
    """Decode a body as JSON, falling back to text.

    Returns:
        None for an empty body.
    """
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        _logger.debug("Body is not JSON, logging it as text")
        return raw.decode("utf-8", errors="replace")


async def _buffer_request_body(receive: Receive) -> tuple[bytes, Receive]:
    """Read the full request body and return a receive that replays it."""
    chunks: list[bytes] = []
    trailing: list[Message] = []
    while True:
        message = await receive()
        if message["type"] != "http.request":
            trailing.append(message)
            break
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            break

    body = b"".join(chunks)
    pending: list[Message] = [
        {"type": "http.request", "body": body, "more_body": False},
        *trailing,
    ]

    async def replay() -> Message:
        if pending:
            return pending.pop(0)
        return await receive()

    return body, replay


class CorrelationIdMiddleware:
    """ASGI middleware that correlates and logs every HTTP request.

    For each request it:

    - takes the ``x-request-id`` header or generates a UUID, rewrites the
      request header and echoes it on the response;
    - creates a child logger carrying ``correlationId``, exposed as
      ``scope["state"]["logger"]`` and via get_request_logger();
    - logs the incoming request, then completion (warn when slower than
      ``perf_threshold``) or failure with a parsed error.

    Example:
        ```python
        app = FastAPI()
        app.add_middleware(CorrelationIdMiddleware, logger=logger, config=config)
        ```
    """

    def __init__(
        self,
        app: ASGIApp,
        logger: Logger,
        config: LoggingConfig | None = None,
        exclude_paths: list[str] | None = None,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application to wrap.
            logger: Logger the per-request child loggers derive from.
            config: Body logging, masking, performance and error stack options.
            exclude_paths: Paths whose requests are not logged (correlation
                still applies). Supports wildcard patterns such as "/internal/*".
        """
        self.app = app
        self.logger = logger
        self.config = config or LoggingConfig()
        self.exclude_paths = exclude_paths or []
        self._masker = create_masker(self.config)
        self._error_parser = create_error_parser(self.config)

    def _path_excluded(self, path: str) -> bool:
        return any(fnmatch.fnmatch(path, pattern) for pattern in self.exclude_paths)

    def _process_body(self, raw: bytes) -> Any | None:
        return process_body(_decode_body(raw), self._masker, self.config.body_max_size)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        raw_headers: list[tuple[bytes, bytes]] = list(scope.get("headers", []))
        correlation_id = get_correlation_id(headers_from_scope(raw_headers))
        request_logger = self.logger.with_correlation_id(correlation_id)

        state = dict(scope.get("state") or {})
        state["logger"] = request_logger
        scope = {
            **scope,
            "headers": _replace_correlation_header(raw_headers, correlation_id),
            "state": state,
        }

        method = scope.get("method", "UNKNOWN")
        url = scope.get("path", "/")
        log_enabled = not self._path_excluded(url)
        base_meta = {"method": method, "url": url, "correlationId": correlation_id}

        if log_enabled:
            request_meta: dict[str, Any] = dict(base_meta)
            if self.config.log_request_body:
                raw_body, receive = await _buffer_request_body(receive)
                body = self._process_body(raw_body)
                if body is not None:
                    request_meta["body"] = body
            request_logger.info(f"Incoming request: {method} {url}", request_meta)

        captured: dict[str, Any] = {"status": None, "body": bytearray(), "size": 0}
        capture_body = log_enabled and self.config.log_response_body
        capture_limit = self.config.body_max_size

        async def wrapped_send(message: Message) -> None:
            if message["type"] == "http.response.start":
                captured["status"] = message["status"]
                headers = list(message.get("headers", []))
                message = {
                    **message,
                    "headers": _replace_correlation_header(headers, correlation_id),
                }
            elif message["type"] == "http.response.body" and capture_body:
                chunk = message.get("body", b"")
                captured["size"] += len(chunk)
                room = capture_limit - len(captured["body"])
                if room > 0:
                    captured["body"] += chunk[:room]
            await send(message)

        token = set_request_logger(request_logger)
        start_time = time.perf_counter()
        try:
            await self.app(scope, receive, wrapped_send)
        except Exception as exc:
            if log_enabled:
                error_meta = {
                    **base_meta,
                    "duration": _elapsed_ms(start_time),
                    "error": self._error_parser(exc),
                }
                request_logger.error(f"Request failed: {method} {url}", error_meta)
            raise
        finally:
            reset_request_logger(token)

        if log_enabled:
            self._log_completion(request_logger, base_meta, captured, start_time)

    def _log_completion(
        self,
        request_logger: Logger,
        base_meta: dict[str, Any],
        captured: dict[str, Any],
        start_time: float,
    ) -> None:
        """Log the completed request, escalating slow requests to warn."""
        duration = _elapsed_ms(start_time)
        method, url = base_meta["method"], base_meta["url"]
        response_meta: dict[str, Any] = {
            **base_meta,
            "statusCode": captured["status"],
            "duration": duration,
        }
        if self.config.log_response_body:
            if captured["size"] > self.config.body_max_size:
                # Only a prefix was captured; it cannot be masked, so no preview
                body = truncated_body(captured["size"], self.config.body_max_size)
            else:
                body = self._process_body(bytes(captured["body"]))
            if body is not None:
                response_meta["body"] = body

        if self.config.perf_enabled and duration >= self.config.perf_threshold:
            response_meta["slowRequest"] = True
            response_meta["perfThreshold"] = self.config.perf_threshold
            request_logger.warn(
                f"Slow request detected: {method} {url} ({duration}ms)", response_meta
            )
        else:
            request_logger.info(f"Request completed: {method} {url}", response_meta)


def _elapsed_ms(start_time: float) -> int:
    return round((time.perf_counter() - start_time) * 1000)
