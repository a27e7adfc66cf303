"""Shared test fixtures for all test modules."""

from pathlib import Path

import httpx
import pytest

from logkit.adapters.logging_context import clear_request_logger
from logkit.adapters.sinks.in_memory import InMemorySink
from logkit.core.config import LoggingConfig
from logkit.core.logger import Logger


@pytest.fixture(autouse=True)
def _no_request_logger():
    """Make sure no request logger leaks between tests."""
    clear_request_logger()
    yield
    clear_request_logger()


@pytest.fixture
def config() -> LoggingConfig:
    """Default configuration with sampling off and masking on."""
    return LoggingConfig()


@pytest.fixture
def sink() -> InMemorySink:
    """Fixture providing an empty in-memory sink that keeps every level."""
    return InMemorySink()


@pytest.fixture
def logger(config: LoggingConfig, sink: InMemorySink) -> Logger:
    """Root logger writing to the in-memory sink."""
    return Logger.from_config(config, [sink])


@pytest.fixture
def log_file_path(tmp_path: Path) -> Path:
    """Provide a temporary log file path inside a not-yet-existing directory."""
    return tmp_path / "logs" / "app.log"


# === ASGI Test Fixtures ===


@pytest.fixture
def basic_asgi_app():
    """Basic ASGI app fixture that returns 200 OK."""
    from logkit.adapters.frameworks.asgi import Receive, Scope, Send

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        """Simple ASGI app that returns 200 OK."""
        await send({"type": "http.response.start", "status": 200, "headers": []})
        await send({"type": "http.response.body", "body": b"OK"})

    return app


@pytest.fixture
def asgi_scope():
    """Factory fixture for creating ASGI scope dicts."""
    from logkit.adapters.frameworks.asgi import Scope

    def _scope(
        method: str = "GET",
        path: str = "/test",
        headers: list[tuple[bytes, bytes]] | None = None,
    ) -> Scope:
        return {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": b"",
            "headers": headers or [],
        }

    return _scope


@pytest.fixture
def asgi_send_capture():
    """Fixture that returns a send callable and a responses list for capture."""

    responses: list[dict[str, object]] = []

    async def send(message: dict[str, object]) -> None:
        """Capture ASGI messages."""
        responses.append(message)

    return send, responses


@pytest.fixture
def asgi_receive():
    """Factory fixture for a receive callable delivering a body in chunks."""

    def _receive(*chunks: bytes):
        messages = [
            {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
            for i, chunk in enumerate(chunks or (b"",))
        ]

        async def receive():
            if messages:
                return messages.pop(0)
            return {"type": "http.disconnect"}

        return receive

    return _receive


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Application exceptions are turned into 500 responses instead of being
    re-raised into the test.
    """

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://test",
        )

    return _get_client
