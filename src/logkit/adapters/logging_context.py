"""Request-scoped logger storage based on contextvars.

The request middleware stores the correlated child logger here, so code
running inside a request (including nested awaits) can fetch it without
passing it around.
"""

from contextvars import ContextVar, Token

from logkit.core.logger import Logger

_request_logger: ContextVar[Logger | None] = ContextVar(
    "logkit_request_logger", default=None
)


def set_request_logger(logger: Logger) -> Token[Logger | None]:
    """Set the logger for the current context.

    Returns:
        Token for restoring the previous value with reset_request_logger().
    """
    return _request_logger.set(logger)


def reset_request_logger(token: Token[Logger | None]) -> None:
    """Restore the logger that was current before set_request_logger()."""
    _request_logger.reset(token)


def get_request_logger(default: Logger | None = None) -> Logger | None:
    """Return the current request logger, or ``default`` outside a request."""
    logger = _request_logger.get()
    return default if logger is None else logger


def clear_request_logger() -> None:
    """Remove the logger from the current context."""
    _request_logger.set(None)
