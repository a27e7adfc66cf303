"""Exception types raised by logkit.

The logging pipeline itself never raises for well-formed input; these are
reserved for configuration problems detected up front.
"""


class LogkitError(Exception):
    """Base class for all logkit errors."""


class ConfigurationError(LogkitError, ValueError):
    """Raised when a logging configuration value is invalid."""


class InvalidLogLevelError(ConfigurationError):
    """Raised when a log level name is not one of the known levels."""

    def __init__(self, level: object) -> None:
        super().__init__(f"Unknown log level: {level!r}")
        self.level = level
