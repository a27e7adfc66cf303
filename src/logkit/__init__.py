"""logkit: structured logging with masking, sampling and request correlation."""

from logkit.adapters.factory import create_logger, create_sinks
from logkit.adapters.frameworks.asgi import CorrelationIdMiddleware
from logkit.adapters.logging_context import get_request_logger
from logkit.adapters.sinks import (
    ConsoleSink,
    HttpSink,
    InMemorySink,
    RotatingFileSink,
    StdlibLoggingSink,
)
from logkit.core.bodies import process_body
from logkit.core.config import LoggingConfig, build_config
from logkit.core.correlation import (
    CORRELATION_ID_HEADER,
    generate_correlation_id,
    get_correlation_id,
)
from logkit.core.error_parser import (
    create_error_parser,
    format_parsed_error,
    parse_error,
)
from logkit.core.exceptions import (
    ConfigurationError,
    InvalidLogLevelError,
    LogkitError,
)
from logkit.core.logger import Logger
from logkit.core.masking import (
    DEFAULT_MASK_FIELDS,
    DEFAULT_MASK_PATTERN,
    Masker,
    create_masker,
    mask_value,
)
from logkit.core.models import (
    ErrorInfo,
    LogLevel,
    LogRecord,
    ParsedError,
    ParsedStackFrame,
    SamplingDecision,
)
from logkit.core.ports import LogSinkPort
from logkit.core.sampling import SamplingStats, create_sampler, should_sample_log

__all__ = [
    "CORRELATION_ID_HEADER",
    "DEFAULT_MASK_FIELDS",
    "DEFAULT_MASK_PATTERN",
    "ConfigurationError",
    "ConsoleSink",
    "CorrelationIdMiddleware",
    "ErrorInfo",
    "HttpSink",
    "InMemorySink",
    "InvalidLogLevelError",
    "LogLevel",
    "LogRecord",
    "LogSinkPort",
    "Logger",
    "LoggingConfig",
    "LogkitError",
    "Masker",
    "ParsedError",
    "ParsedStackFrame",
    "RotatingFileSink",
    "SamplingDecision",
    "SamplingStats",
    "StdlibLoggingSink",
    "build_config",
    "create_error_parser",
    "create_logger",
    "create_masker",
    "create_sampler",
    "create_sinks",
    "format_parsed_error",
    "generate_correlation_id",
    "get_correlation_id",
    "get_request_logger",
    "mask_value",
    "parse_error",
    "process_body",
    "should_sample_log",
]
