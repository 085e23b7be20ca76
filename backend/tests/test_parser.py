"""Tests for vidscribe.services.parser (request precheck)."""

import pytest

from vidscribe.models.schemas import InputMode
from vidscribe.services.parser import PrecheckError, extract_url, parse_request_text


class TestExtractUrl:
    """Tests for URL extraction from free text."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("https://youtu.be/abc", "https://youtu.be/abc"),
            ("please summarize https://youtu.be/abc thanks", "https://youtu.be/abc"),
            ("see (https://example.com/a.mp4).", "https://example.com/a.mp4"),
            ("first http://a.com/x then https://b.com/y", "http://a.com/x"),
            ("HTTPS://EXAMPLE.COM/Video", "HTTPS://EXAMPLE.COM/Video"),
        ],
    )
    def test_finds_first_url(self, text, expected):
        assert extract_url(text) == expected

    @pytest.mark.parametrize("text", ["", "no links", "ftp://example.com/file", "www.example.com"])
    def test_no_url(self, text):
        assert extract_url(text) is None


class TestParseRequestText:
    """Tests for parse_request_text."""

    def test_auto_mode_returns_url(self):
        parsed = parse_request_text("summarize https://youtu.be/abc please")
        assert parsed.is_url
        assert parsed.url == "https://youtu.be/abc"
        assert parsed.text is None

    def test_auto_mode_without_url_is_rejected(self):
        with pytest.raises(PrecheckError) as exc_info:
            parse_request_text("just some words")
        assert "valid video URL" in exc_info.value.message

    @pytest.mark.parametrize("text", [None, "", "   \n  "])
    def test_empty_payload_is_rejected_in_any_mode(self, text):
        for mode in InputMode:
            with pytest.raises(PrecheckError):
                parse_request_text(text, mode)

    def test_text_mode_keeps_whole_passage(self):
        parsed = parse_request_text("  A passage mentioning https://example.com in passing. ", InputMode.TEXT)
        assert not parsed.is_url
        assert parsed.text == "A passage mentioning https://example.com in passing."
