"""Construction of loggers and sinks from configuration."""

import os
from collections.abc import Iterable, Mapping
from typing import Any

from logkit.adapters.sinks import ConsoleSink, HttpSink, RotatingFileSink
from logkit.core.config import DEFAULT_ENVIRONMENT, LoggingConfig, build_config
from logkit.core.logger import Logger
from logkit.core.ports import LogSinkPort
from logkit.core.sampling import SamplingStats


def create_sinks(
    config: LoggingConfig, environment: str = DEFAULT_ENVIRONMENT
) -> list[LogSinkPort]:
    """Create the sinks enabled in the configuration.

    Args:
        config: Logging configuration.
        environment: Deployment environment; "development" selects the
            human-readable console format, anything else JSON lines.

    Returns:
        Console, rotating file and HTTP sinks, in that order, for those
        enabled. The HTTP sink also requires a non-empty ``http_url``.
    """
    sinks: list[LogSinkPort] = []

    if config.console:
        sinks.append(
            ConsoleSink(level=config.level, pretty=environment == "development")
        )

    if config.file:
        sinks.append(
            RotatingFileSink(
                config.file_path,
                max_bytes=config.file_max_size,
                backup_count=config.file_max_files,
                level=config.level,
            )
        )

    if config.http and config.http_url:
        sinks.append(
            HttpSink(config.http_url, config.http_api_key, level=config.level)
        )

    return sinks


def create_logger(
    overrides: Mapping[str, Any] | None = None,
    default_meta: Mapping[str, Any] | None = None,
    *,
    sinks: Iterable[LogSinkPort] | None = None,
    environ: Mapping[str, str] | None = None,
    stats: SamplingStats | None = None,
) -> Logger:
    """Create a standalone logger.

    Args:
        overrides: Config fields taking precedence over the environment.
        default_meta: Metadata included in every record.
        sinks: Sinks to use instead of the ones enabled in the config.
        environ: Variables to read instead of ``os.environ``.
        stats: Counters updated with every sampling decision.

    Returns:
        A root Logger.
    """
    config = build_config(overrides, environ)
    if sinks is None:
        sinks = create_sinks(config, _environment(environ))
    return Logger.from_config(config, sinks, default_meta, stats=stats)


def _environment(environ: Mapping[str, str] | None) -> str:
    source = os.environ if environ is None else environ
    return source.get("APP_ENV", DEFAULT_ENVIRONMENT).lower()
