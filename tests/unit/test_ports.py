"""Tests that the sink adapters satisfy LogSinkPort."""

from pathlib import Path

import pytest

from logkit.adapters.sinks import (
    ConsoleSink,
    HttpSink,
    InMemorySink,
    RotatingFileSink,
    StdlibLoggingSink,
)
from logkit.core.ports import LogSinkPort


class TestLogSinkPort:
    @pytest.mark.core
    def test_adapters_implement_port(self, tmp_path: Path) -> None:
        file_sink = RotatingFileSink(tmp_path / "app.log")
        try:
            sinks = [
                InMemorySink(),
                ConsoleSink(),
                file_sink,
                HttpSink("http://logs.test/ingest"),
                StdlibLoggingSink(),
            ]
            for sink in sinks:
                assert isinstance(sink, LogSinkPort)
        finally:
            file_sink.close()

    @pytest.mark.core
    def test_object_without_write_is_not_a_sink(self) -> None:
        assert not isinstance(object(), LogSinkPort)
