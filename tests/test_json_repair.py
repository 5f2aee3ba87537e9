"""Tests for truncated-JSON repair of judge output."""

import json

import pytest

from collab_insight.judge.repair import (
    parse_json_object,
    repair_truncated_json,
    strip_code_fences,
)


class TestRepairTruncatedJson:
    """The brace/bracket/quote balance tracker."""

    def test_complete_json_unchanged(self):
        text = '{"a": 1, "b": [1, 2]}'
        assert repair_truncated_json(text) == text

    def test_closes_object(self):
        assert json.loads(repair_truncated_json('{"effortScore": 5.0')) == {"effortScore": 5.0}

    def test_closes_string_then_object(self):
        repaired = repair_truncated_json('{"reasoning": "Adds a fea')
        assert json.loads(repaired) == {"reasoning": "Adds a fea"}

    def test_closes_brackets_before_braces(self):
        repaired = repair_truncated_json('{"files": ["a.py", "b.py"')
        assert repaired.endswith("]}")
        assert json.loads(repaired) == {"files": ["a.py", "b.py"]}

    def test_escaped_quote_inside_string(self):
        repaired = repair_truncated_json('{"reasoning": "said \\"hi')
        assert json.loads(repaired) == {"reasoning": 'said "hi'}

    def test_braces_inside_strings_ignored(self):
        repaired = repair_truncated_json('{"reasoning": "uses {x} and [y]", "type": "FEATURE"')
        assert json.loads(repaired)["reasoning"] == "uses {x} and [y]"

    def test_truncated_key_closes_but_stays_invalid(self):
        repaired = repair_truncated_json('{"effortScore": 5.0, "complexity": 5.0, "nov')
        assert repaired == '{"effortScore": 5.0, "complexity": 5.0, "nov"}'
        with pytest.raises(json.JSONDecodeError):
            json.loads(repaired)


class TestParseJsonObject:
    def test_plain(self):
        assert parse_json_object('{"type": "TEST"}') == {"type": "TEST"}

    def test_code_fence(self):
        assert parse_json_object('```json\n{"type": "TEST"}\n```') == {"type": "TEST"}

    def test_repaired(self):
        assert parse_json_object('{"effortScore": 5.0, "complexity": 4') == {
            "effortScore": 5.0,
            "complexity": 4,
        }

    def test_unrepairable_is_none(self):
        assert parse_json_object('{"effortScore": 5.0, "complexity": 5.0, "nov') is None

    def test_non_object_is_none(self):
        assert parse_json_object("[1, 2, 3]") is None

    def test_prose_is_none(self):
        assert parse_json_object("I cannot rate this commit.") is None


class TestStripCodeFences:
    def test_bare_fence(self):
        assert strip_code_fences("```\n{}\n```") == "{}"

    def test_no_fence(self):
        assert strip_code_fences("  {}  ") == "{}"
