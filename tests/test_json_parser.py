"""Tests for JSON extraction from LLM text."""

import pytest

from cv_match.utils.json_parser import extract_json


class TestExtractJson:
    def test_plain_object(self):
        assert extract_json('{"overallScore": 70}') == {"overallScore": 70}

    def test_surrounding_whitespace(self):
        assert extract_json('\n\n  {"a": 1}  \n') == {"a": 1}

    def test_fenced_json_block(self):
        text = 'Here is the analysis:\n```json\n{"summary": "good"}\n```\nThanks!'
        assert extract_json(text) == {"summary": "good"}

    def test_fenced_block_without_language(self):
        assert extract_json('```\n{"a": [1, 2]}\n```') == {"a": [1, 2]}

    def test_braces_inside_prose(self):
        text = 'Sure. {"nextSteps": ["Add Kubernetes"]} Let me know.'
        assert extract_json(text) == {"nextSteps": ["Add Kubernetes"]}

    def test_top_level_array_rejected(self):
        with pytest.raises(ValueError):
            extract_json("[1, 2, 3]")

    def test_plain_text_rejected(self):
        with pytest.raises(ValueError):
            extract_json("I could not analyze this CV.")

    def test_truncated_object_rejected(self):
        with pytest.raises(ValueError):
            extract_json('{"overallScore": 70, "summary": "cut off')

    def test_non_string_rejected(self):
        with pytest.raises(ValueError):
            extract_json(None)
