"""Tests for core domain models."""

import pytest

from logkit.core.exceptions import InvalidLogLevelError
from logkit.core.models import LogLevel, ParsedError, ParsedStackFrame


class TestLogLevel:
    """Tests for LogLevel ordering and parsing."""

    @pytest.mark.core
    def test_priorities_follow_severity(self) -> None:
        assert [level.priority for level in LogLevel] == list(range(7))
        assert LogLevel.ERROR.priority == 0
        assert LogLevel.SILLY.priority == 6

    @pytest.mark.core
    @pytest.mark.parametrize(
        ("level", "threshold", "expected"),
        [
            (LogLevel.ERROR, LogLevel.INFO, True),
            (LogLevel.INFO, LogLevel.INFO, True),
            (LogLevel.HTTP, LogLevel.INFO, False),
            (LogLevel.DEBUG, LogLevel.SILLY, True),
        ],
    )
    def test_is_enabled_for(
        self, level: LogLevel, threshold: LogLevel, expected: bool
    ) -> None:
        assert level.is_enabled_for(threshold) is expected

    @pytest.mark.core
    @pytest.mark.parametrize("name", ["warn", "WARN", " Warn "])
    def test_parse_is_case_insensitive(self, name: str) -> None:
        assert LogLevel.parse(name) is LogLevel.WARN

    @pytest.mark.core
    def test_parse_returns_members_unchanged(self) -> None:
        assert LogLevel.parse(LogLevel.DEBUG) is LogLevel.DEBUG

    @pytest.mark.core
    def test_parse_rejects_unknown_names(self) -> None:
        with pytest.raises(InvalidLogLevelError, match="warning"):
            LogLevel.parse("warning")

    @pytest.mark.core
    def test_str_is_value(self) -> None:
        assert str(LogLevel.VERBOSE) == "verbose"


class TestParsedError:
    @pytest.mark.core
    def test_to_dict_omits_missing_cause(self) -> None:
        frame = ParsedStackFrame("main", "/app/main.py", 3, None, False, False, "raw")
        data = ParsedError("ValueError", "bad", (frame,)).to_dict()
        assert data == {
            "name": "ValueError",
            "message": "bad",
            "stack": [
                {
                    "functionName": "main",
                    "fileName": "/app/main.py",
                    "lineNumber": 3,
                    "columnNumber": None,
                    "isNative": False,
                    "isNodeModules": False,
                    "isLibrary": False,
                    "raw": "raw",
                }
            ],
        }
