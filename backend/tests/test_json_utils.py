"""Tests for vidscribe.utils.json_utils."""

import pytest

from vidscribe.utils.json_utils import JSONExtractionError, extract_json_object, parse_json_object


class TestExtractJsonObject:
    """Tests for extract_json_object."""

    def test_plain_object(self):
        assert extract_json_object('{"a": 1}') == '{"a": 1}'

    def test_object_in_prose(self):
        assert extract_json_object('Result: {"a": {"b": 1}} done') == '{"a": {"b": 1}}'

    def test_code_block(self):
        assert extract_json_object('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_braces_inside_strings(self):
        text = '{"summary": "use {curly} braces", "x": "}"} trailing'
        assert extract_json_object(text) == '{"summary": "use {curly} braces", "x": "}"}'

    def test_no_object(self):
        assert extract_json_object("no json") == ""
        assert extract_json_object("") == ""


class TestParseJsonObject:
    """Tests for parse_json_object."""

    def test_parses_object(self):
        assert parse_json_object('Sure! {"summary": "S"}') == {"summary": "S"}

    @pytest.mark.parametrize(
        "text, reason",
        [
            ("", "empty"),
            ("   ", "empty"),
            ("plain prose", "no JSON object"),
            ('{"summary": "S",', "malformed"),
        ],
    )
    def test_rejects_unusable_responses(self, text, reason):
        with pytest.raises(JSONExtractionError) as exc_info:
            parse_json_object(text)
        assert reason in str(exc_info.value)
