"""Tests for JSON extraction utility."""

import pytest

from writing_annotator.utils.json_parser import extract_json


class TestExtractJson:
    def test_direct_json(self):
        assert extract_json('{"suggestions": []}') == {"suggestions": []}

    def test_bare_array(self):
        assert extract_json('[{"originalText": "a"}]') == [{"originalText": "a"}]

    def test_fenced_code_block(self):
        text = 'Here is the result:\n```json\n{"name": "test"}\n```\nDone.'
        assert extract_json(text) == {"name": "test"}

    def test_fenced_without_json_tag(self):
        assert extract_json('```\n{"key": "value"}\n```') == {"key": "value"}

    def test_embedded_json(self):
        text = 'The analysis is: {"score": 90, "pass": true} as shown above.'
        assert extract_json(text) == {"score": 90, "pass": True}

    def test_truncated_array_salvaged(self):
        text = (
            '{"suggestions": [{"originalText": "teh", "suggestedText": "the"}, '
            '{"originalText": "recieve", "suggestedText": "receive"}, {"originalText": "se'
        )
        result = extract_json(text)
        assert [s["originalText"] for s in result["suggestions"]] == ["teh", "recieve"]

    def test_braces_inside_strings(self):
        text = '{"suggestions": [{"originalText": "use {braces}", "suggestedText": "x"}, {"orig'
        result = extract_json(text)
        assert result["suggestions"][0]["originalText"] == "use {braces}"

    def test_invalid_json_raises(self):
        with pytest.raises(ValueError, match="Could not extract JSON"):
            extract_json("no json here at all")

    def test_empty_string_raises(self):
        with pytest.raises(ValueError):
            extract_json("")
