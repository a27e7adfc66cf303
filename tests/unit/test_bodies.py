"""Tests for body preparation."""

import json

import pytest

from logkit.core.bodies import PREVIEW_LENGTH, process_body
from logkit.core.masking import Masker


@pytest.fixture
def masker() -> Masker:
    return Masker(["password"], "[REDACTED]")


class TestProcessBody:
    @pytest.mark.core
    def test_missing_body(self, masker: Masker) -> None:
        assert process_body(None, masker, 100) is None

    @pytest.mark.core
    def test_small_body_is_masked(self, masker: Masker) -> None:
        body = {"user": "ada", "password": "hunter2"}
        assert process_body(body, masker, 1000) == {
            "user": "ada",
            "password": "[REDACTED]",
        }

    @pytest.mark.core
    def test_text_body_is_kept(self, masker: Masker) -> None:
        assert process_body("plain text", masker, 1000) == "plain text"

    @pytest.mark.core
    def test_body_at_limit_is_kept(self, masker: Masker) -> None:
        body = {"a": "x"}
        size = len(json.dumps(body, separators=(",", ":")))
        assert process_body(body, masker, size) == body

    @pytest.mark.core
    def test_oversized_body_is_truncated(self, masker: Masker) -> None:
        body = {"items": ["x" * 100] * 20, "password": "hunter2"}

        result = process_body(body, masker, 200)

        serialized = json.dumps(masker(body), separators=(",", ":"))
        assert result == {
            "_truncated": True,
            "_originalSize": len(serialized),
            "_maxSize": 200,
            "_preview": serialized[:PREVIEW_LENGTH] + "...",
        }
        assert "hunter2" not in result["_preview"]

    @pytest.mark.core
    def test_non_ascii_body_within_limit_is_kept(self, masker: Masker) -> None:
        body = {"name": "é" * 100}

        # 213 bytes as compact UTF-8 JSON
        assert process_body(body, masker, 250) == body

    @pytest.mark.core
    def test_size_is_measured_in_utf8_bytes(self, masker: Masker) -> None:
        body = "é" * 10

        result = process_body(body, masker, 15)

        assert result == {
            "_truncated": True,
            "_originalSize": 22,
            "_maxSize": 15,
            "_preview": '"' + "é" * 10 + '"...',
        }
