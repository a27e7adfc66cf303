"""Integration tests for request-scoped logger storage."""

import asyncio

import pytest

from logkit.adapters.logging_context import (
    clear_request_logger,
    get_request_logger,
    reset_request_logger,
    set_request_logger,
)
from logkit.core.logger import Logger

pytestmark = [pytest.mark.integration, pytest.mark.asgi]


def test_no_logger_outside_request(logger: Logger):
    assert get_request_logger() is None
    assert get_request_logger(default=logger) is logger


def test_set_and_reset(logger: Logger):
    request_logger = logger.with_correlation_id("abc")

    token = set_request_logger(request_logger)
    assert get_request_logger() is request_logger

    reset_request_logger(token)
    assert get_request_logger() is None


def test_clear(logger: Logger):
    set_request_logger(logger)
    clear_request_logger()
    assert get_request_logger() is None


async def test_concurrent_tasks_are_isolated(logger: Logger):
    async def handle(correlation_id: str) -> str | None:
        set_request_logger(logger.with_correlation_id(correlation_id))
        await asyncio.sleep(0)
        current = get_request_logger()
        return current.metadata["correlationId"] if current else None

    results = await asyncio.gather(handle("one"), handle("two"), handle("three"))

    assert results == ["one", "two", "three"]
    assert get_request_logger() is None
