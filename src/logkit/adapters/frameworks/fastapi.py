"""FastAPI integration for request-scoped loggers."""

from typing import Annotated

from fastapi import Depends, Request

from logkit.adapters.logging_context import get_request_logger as _context_logger
from logkit.core.logger import Logger


def get_request_logger(request: Request) -> Logger:
    """FastAPI dependency returning the correlated logger of this request.

    Raises:
        RuntimeError: If CorrelationIdMiddleware is not installed.
    """
    logger = getattr(request.state, "logger", None) or _context_logger()
    if logger is None:
        raise RuntimeError(
            "No request logger found; add CorrelationIdMiddleware to the app"
        )
    return logger


RequestLogger = Annotated[Logger, Depends(get_request_logger)]
