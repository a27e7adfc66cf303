"""BDD step definitions for request correlation scenarios."""

import re

import pytest
from pytest_bdd import given, parsers, then, when
from tests.features.middleware.steps_helpers import (
    MiddlewareScenarioContext,
    run_async,
    simulate_request,
)

from logkit.adapters.sinks.in_memory import InMemorySink
from logkit.core.models import LogLevel

UUID4 = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")


@pytest.fixture
def ctx() -> MiddlewareScenarioContext:
    """Fresh scenario context for each test."""
    return MiddlewareScenarioContext()


# === Background Steps ===
@given("an in-memory log sink")
def step_sink(ctx: MiddlewareScenarioContext) -> None:
    ctx.sink = InMemorySink()


@given("an ASGI app with correlation middleware")
def step_app(ctx: MiddlewareScenarioContext) -> None:
    # The app is built per request so later Given steps can still configure it
    ctx.app_logs = 0
    ctx.raise_message = None


# === Setup Steps ===
@given(parsers.parse("an endpoint that writes {n:d} application logs"))
def step_app_logs(ctx: MiddlewareScenarioContext, n: int) -> None:
    ctx.app_logs = n


@given(parsers.parse('an endpoint that raises "{message}"'))
def step_app_raises(ctx: MiddlewareScenarioContext, message: str) -> None:
    ctx.raise_message = message


@given(parsers.parse("a slow request threshold of {ms:d} ms"))
def step_threshold(ctx: MiddlewareScenarioContext, ms: int) -> None:
    ctx.config_options["perf_threshold"] = ms


@given("request body logging is enabled")
def step_request_body(ctx: MiddlewareScenarioContext) -> None:
    ctx.config_options["log_request_body"] = True


@given(parsers.parse('the path "{path}" is excluded from logging'))
def step_exclude(ctx: MiddlewareScenarioContext, path: str) -> None:
    ctx.exclude_paths.append(path)


# === Request Steps ===
@when(parsers.parse('a GET request is made to "{path}" with request ID "{request_id}"'))
def step_get_with_id(ctx: MiddlewareScenarioContext, path: str, request_id: str) -> None:
    run_async(simulate_request(ctx, path=path, headers={"X-Request-Id": request_id}))


@when(parsers.re(r'a GET request is made to "(?P<path>[^"]+)"$'))
def step_get(ctx: MiddlewareScenarioContext, path: str) -> None:
    run_async(simulate_request(ctx, path=path))


@when(parsers.parse("a POST request is made to \"{path}\" with body '{body}'"))
def step_post(ctx: MiddlewareScenarioContext, path: str, body: str) -> None:
    run_async(simulate_request(ctx, method="POST", path=path, body=body.encode()))


# === Assertion Steps ===
@then(parsers.parse('the response has an "{header}" header holding a UUID'))
def step_header_uuid(ctx: MiddlewareScenarioContext, header: str) -> None:
    assert UUID4.match(ctx.response.headers[header])


@then(parsers.parse('the response header "{header}" is "{value}"'))
def step_header_value(ctx: MiddlewareScenarioContext, header: str, value: str) -> None:
    assert ctx.response.headers[header] == value


@then("every log record carries the response correlation ID")
def step_all_correlated(ctx: MiddlewareScenarioContext) -> None:
    correlation_id = ctx.response.headers["x-request-id"]
    records = ctx.sink.records()
    assert records
    assert all(r.metadata["correlationId"] == correlation_id for r in records)


@then(parsers.parse("{count:d} log records are written"))
def step_record_count(ctx: MiddlewareScenarioContext, count: int) -> None:
    assert len(ctx.sink.records()) == count


@then(parsers.parse('the last log record has level "{level}"'))
def step_last_level(ctx: MiddlewareScenarioContext, level: str) -> None:
    assert ctx.sink.records()[-1].level is LogLevel.parse(level)


@then(parsers.parse('the last log record message starts with "{prefix}"'))
def step_last_message(ctx: MiddlewareScenarioContext, prefix: str) -> None:
    assert ctx.sink.records()[-1].message.startswith(prefix)


@then("the request fails")
def step_request_fails(ctx: MiddlewareScenarioContext) -> None:
    assert ctx.response.exception is not None


@then(parsers.parse('the logged error message is "{message}"'))
def step_error_message(ctx: MiddlewareScenarioContext, message: str) -> None:
    assert ctx.sink.records()[-1].metadata["error"]["message"] == message


@then(parsers.parse('the incoming request log body field "{name}" is "{value}"'))
def step_body_field(ctx: MiddlewareScenarioContext, name: str, value: str) -> None:
    incoming = ctx.sink.records()[0]
    assert incoming.metadata["body"][name] == value
