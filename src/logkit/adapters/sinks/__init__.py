"""Sink adapters implementing LogSinkPort."""

from logkit.adapters.sinks.console import ConsoleSink
from logkit.adapters.sinks.http import HttpSink
from logkit.adapters.sinks.in_memory import InMemorySink
from logkit.adapters.sinks.rotating_file import RotatingFileSink
from logkit.adapters.sinks.stdlib import StdlibLoggingSink

__all__ = [
    "ConsoleSink",
    "HttpSink",
    "InMemorySink",
    "RotatingFileSink",
    "StdlibLoggingSink",
]
