"""Tests for pattern compilation (grep_excel/pattern.py)."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from grep_excel.errors import GrepExcelError, PatternCompileError
from grep_excel.pattern import compile_pattern, matches


class TestCompilePattern:

    def test_substring_search(self):
        pattern = compile_pattern("Widget")
        assert matches(pattern, "Blue Widget A")
        assert not matches(pattern, "Gadget")

    def test_case_sensitive_by_default(self):
        assert not matches(compile_pattern("widget"), "Widget A")

    def test_ignore_case(self):
        assert matches(compile_pattern("widget", ignore_case=True), "WIDGET A")

    def test_literal_dot(self):
        pattern = compile_pattern("a.b", literal=True)
        assert matches(pattern, "x a.b y")
        assert not matches(pattern, "axb")

    def test_regex_dot(self):
        assert matches(compile_pattern("a.b"), "axb")

    def test_literal_accepts_invalid_regex(self):
        pattern = compile_pattern("(1+", literal=True)
        assert matches(pattern, "=SUM(1+2)")

    def test_literal_and_ignore_case(self):
        pattern = compile_pattern("A*B", ignore_case=True, literal=True)
        assert matches(pattern, "a*b")
        assert not matches(pattern, "aab")


class TestMultilineCells:

    def test_anchors_match_at_line_breaks(self):
        pattern = compile_pattern("^second")
        assert matches(pattern, "first line\nsecond line")

    def test_dot_matches_line_break(self):
        pattern = compile_pattern("line.second")
        assert matches(pattern, "first line\nsecond line")


class TestInvalidPattern:

    def test_invalid_regex_raises(self):
        with pytest.raises(PatternCompileError) as exc_info:
            compile_pattern("(unclosed")
        assert exc_info.value.pattern == "(unclosed"
        assert "(unclosed" in str(exc_info.value)

    def test_error_hierarchy(self):
        with pytest.raises(GrepExcelError):
            compile_pattern("[a-")
        with pytest.raises(ValueError):
            compile_pattern("*")
