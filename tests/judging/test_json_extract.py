"""Tests for lenient JSON extraction"""

from prompt_agent_core.judging.json_extract import extract_json_object, get_field


class TestExtractJsonObject:
    def test_plain_object(self):
        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_object_wrapped_in_prose(self):
        text = 'Here is my verdict:\n{"stabilityScore": 80}\nHope this helps.'
        assert extract_json_object(text) == {"stabilityScore": 80}

    def test_object_in_code_fence(self):
        text = '```json\n{"a": {"b": [1, 2]}}\n```'
        assert extract_json_object(text) == {"a": {"b": [1, 2]}}

    def test_two_objects_returns_first(self):
        text = 'first {"a": 1} then {"b": 2}'
        assert extract_json_object(text) == {"a": 1}

    def test_no_braces(self):
        assert extract_json_object("no json here") is None

    def test_empty(self):
        assert extract_json_object("") is None
        assert extract_json_object(None) is None

    def test_invalid_json(self):
        assert extract_json_object("{not: valid json}") is None

    def test_closing_brace_before_opening(self):
        assert extract_json_object("} oops {") is None


class TestGetField:
    def test_exact_key(self):
        assert get_field({"stabilityScore": 1}, "stabilityScore") == 1

    def test_case_insensitive(self):
        assert get_field({"StabilityScore": 2}, "stabilityScore") == 2

    def test_default(self):
        assert get_field({}, "missing", "fallback") == "fallback"
