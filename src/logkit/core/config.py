"""Logging configuration.

The configuration is an immutable value built once (usually from
environment variables) and passed explicitly into each component.

Every variable can be overridden per deployment environment: with
``APP_ENV=production``, ``LOG_LEVEL_PRODUCTION`` takes precedence over
``LOG_LEVEL``.
"""

import dataclasses
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from logkit.core.exceptions import ConfigurationError
from logkit.core.masking import DEFAULT_MASK_FIELDS, DEFAULT_MASK_PATTERN
from logkit.core.models import LogLevel

DEFAULT_ENVIRONMENT = "development"


@dataclass(frozen=True)
class LoggingConfig:
    """Options consumed by the pipeline, its sinks and the request middleware.

    Attributes:
        level: Minimum level written by the configured sinks.
        console: Enable the console sink.
        file: Enable the rotating file sink.
        file_path: Path of the active log file.
        file_max_size: Rotate once the file exceeds this many bytes.
        file_max_files: Number of rotated files to keep.
        http: Enable the HTTP ingestion sink.
        http_url: Ingestion endpoint URL.
        http_api_key: API token sent with each ingestion request.
        mask_enabled: Redact sensitive metadata fields.
        mask_fields: Field name patterns to redact (substring, case-insensitive).
        mask_pattern: Replacement text for redacted values.
        log_request_body: Include request bodies in request logs.
        log_response_body: Include response bodies in completion logs.
        body_max_size: Serialized body size in bytes above which bodies are
            replaced by a truncated preview.
        perf_enabled: Escalate slow requests to warn.
        perf_threshold: Slow request threshold in milliseconds.
        sampling_enabled: Sample debug, verbose and silly logs.
        sampling_rate: Fraction of sampled-level messages to keep (0 to 1).
        error_stack_enabled: Parse error stacks into structured frames.
        error_stack_lines: Maximum frames kept per error in a cause chain.
    """

    level: LogLevel = LogLevel.INFO
    console: bool = True
    file: bool = False
    file_path: str = "./logs/app.log"
    file_max_size: int = 10 * 1024 * 1024
    file_max_files: int = 5
    http: bool = False
    http_url: str = ""
    http_api_key: str = ""
    mask_enabled: bool = True
    mask_fields: tuple[str, ...] = field(default=DEFAULT_MASK_FIELDS)
    mask_pattern: str = DEFAULT_MASK_PATTERN
    log_request_body: bool = False
    log_response_body: bool = False
    body_max_size: int = 10_000
    perf_enabled: bool = True
    perf_threshold: int = 1000
    sampling_enabled: bool = False
    sampling_rate: float = 1.0
    error_stack_enabled: bool = True
    error_stack_lines: int = 10


_FIELD_NAMES = frozenset(f.name for f in dataclasses.fields(LoggingConfig))


class _EnvReader:
    """Reads variables with a per-environment override."""

    def __init__(self, environ: Mapping[str, str]) -> None:
        self._environ = environ
        self._suffix = environ.get("APP_ENV", DEFAULT_ENVIRONMENT).upper()

    def get(self, key: str) -> str | None:
        per_env = self._environ.get(f"{key}_{self._suffix}")
        if per_env is not None:
            return per_env
        return self._environ.get(key)

    def get_str(self, key: str, default: str) -> str:
        value = self.get(key)
        return default if value is None else value

    def get_bool(self, key: str, default: bool) -> bool:
        value = self.get(key)
        if value is None:
            return default
        return value.strip().lower() == "true"

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value, 10)
        except ValueError:
            return default

    def get_float(self, key: str, default: float) -> float:
        value = self.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            return default

    def get_list(self, key: str, default: tuple[str, ...]) -> tuple[str, ...]:
        value = self.get(key)
        if value is None:
            return default
        return tuple(item.strip() for item in value.split(",") if item.strip())


def build_config(
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> LoggingConfig:
    """Build a LoggingConfig from environment variables.

    Args:
        overrides: Field values that take precedence over the environment.
        environ: Variables to read instead of ``os.environ``.

    Returns:
        The resulting immutable configuration.

    Raises:
        ConfigurationError: If an override names an unknown field or a
            level name is invalid.
    """
    env = _EnvReader(os.environ if environ is None else environ)
    defaults = LoggingConfig()

    config = LoggingConfig(
        level=LogLevel.parse(env.get_str("LOG_LEVEL", defaults.level.value)),
        console=env.get_bool("LOG_CONSOLE", defaults.console),
        file=env.get_bool("LOG_FILE", defaults.file),
        file_path=env.get_str("LOG_FILE_PATH", defaults.file_path),
        file_max_size=env.get_int("LOG_FILE_MAXSIZE", defaults.file_max_size),
        file_max_files=env.get_int("LOG_FILE_MAXFILES", defaults.file_max_files),
        http=env.get_bool("LOG_HTTP", defaults.http),
        http_url=env.get_str("LOG_HTTP_URL", defaults.http_url),
        http_api_key=env.get_str("LOG_HTTP_API_KEY", defaults.http_api_key),
        mask_enabled=env.get_bool("LOG_MASK_ENABLED", defaults.mask_enabled),
        mask_fields=env.get_list("LOG_MASK_FIELDS", defaults.mask_fields),
        mask_pattern=env.get_str("LOG_MASK_PATTERN", defaults.mask_pattern),
        log_request_body=env.get_bool("LOG_REQUEST_BODY", defaults.log_request_body),
        log_response_body=env.get_bool("LOG_RESPONSE_BODY", defaults.log_response_body),
        body_max_size=env.get_int("LOG_BODY_MAX_SIZE", defaults.body_max_size),
        perf_enabled=env.get_bool("LOG_PERF_ENABLED", defaults.perf_enabled),
        perf_threshold=env.get_int("LOG_PERF_THRESHOLD", defaults.perf_threshold),
        sampling_enabled=env.get_bool("LOG_SAMPLING_ENABLED", defaults.sampling_enabled),
        sampling_rate=env.get_float("LOG_SAMPLING_RATE", defaults.sampling_rate),
        error_stack_enabled=env.get_bool(
            "LOG_ERROR_STACK_ENABLED", defaults.error_stack_enabled
        ),
        error_stack_lines=env.get_int("LOG_ERROR_STACK_LINES", defaults.error_stack_lines),
    )

    if not overrides:
        return config

    unknown = set(overrides) - _FIELD_NAMES
    if unknown:
        raise ConfigurationError(
            f"Unknown logging config option(s): {', '.join(sorted(unknown))}"
        )
    changes = dict(overrides)
    if "level" in changes:
        changes["level"] = LogLevel.parse(changes["level"])
    if "mask_fields" in changes:
        changes["mask_fields"] = tuple(changes["mask_fields"])
    return dataclasses.replace(config, **changes)
