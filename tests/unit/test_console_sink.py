"""Tests for the console sink."""

import io
import json

import pytest

from logkit.adapters.sinks.console import ConsoleSink, format_pretty
from logkit.core.models import LogLevel, LogRecord


class TestConsoleSink:
    @pytest.mark.sinks
    def test_writes_json_lines(self) -> None:
        stream = io.StringIO()
        sink = ConsoleSink(stream)

        sink.write(LogLevel.INFO, "hello", {"a": 1})
        sink.write(LogLevel.ERROR, "boom", {})

        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["level"] == "info"
        assert first["message"] == "hello"
        assert first["metadata"] == {"a": 1}

    @pytest.mark.sinks
    def test_filters_below_threshold(self) -> None:
        stream = io.StringIO()
        sink = ConsoleSink(stream, level=LogLevel.INFO)

        sink.write(LogLevel.DEBUG, "hidden", {})

        assert stream.getvalue() == ""

    @pytest.mark.sinks
    def test_pretty_format(self) -> None:
        stream = io.StringIO()
        sink = ConsoleSink(stream, pretty=True)

        sink.write(LogLevel.WARN, "careful", {"a": 1})

        line = stream.getvalue().rstrip("\n")
        assert line.endswith('warn: careful {"a": 1}')

    @pytest.mark.sinks
    def test_defaults_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        ConsoleSink().write(LogLevel.ERROR, "to stdout", {})

        assert "to stdout" in capsys.readouterr().out


class TestFormatPretty:
    @pytest.mark.sinks
    def test_without_metadata(self) -> None:
        line = format_pretty(LogRecord(0.0, LogLevel.INFO, "hello", {}))
        assert line.endswith(" info: hello")
