"""Tests for cell value resolution (grep_excel/resolver.py)."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from grep_excel.errors import NumberFormatError
from grep_excel.resolver import resolve_cell_value
from grep_excel.workbook_reader import BLANK, FORMULA, VALUE


class FakeCell:
    """Stands in for the reader's cell objects."""

    def __init__(self, kind, formula=None, formatted=None, raw=None, coordinate="A1"):
        self.kind = kind
        self.coordinate = coordinate
        self._formula = formula
        self._formatted = formatted
        self._raw = raw

    def formula_text(self):
        return self._formula

    def formatted_value(self):
        if isinstance(self._formatted, Exception):
            raise self._formatted
        return self._formatted

    def raw_value(self):
        return self._raw


class TestResolveCellValue:

    def test_value_cell_uses_display_text(self):
        cell = FakeCell(VALUE, formatted="1,234.50", raw="1234.5")
        assert resolve_cell_value(cell) == "1,234.50"

    def test_formula_cell_gives_source(self):
        cell = FakeCell(FORMULA, formula="SUM(A1:A3)", formatted="6", raw="6")
        assert resolve_cell_value(cell) == "=SUM(A1:A3)"

    def test_formula_cell_gives_result(self):
        cell = FakeCell(FORMULA, formula="SUM(A1:A3)", formatted="6", raw="6")
        assert resolve_cell_value(cell, formula_result=True) == "6"

    def test_formula_result_flag_ignored_for_values(self):
        cell = FakeCell(VALUE, formatted="text", raw="text")
        assert resolve_cell_value(cell, formula_result=True) == "text"

    def test_format_failure_falls_back_to_raw_value(self):
        cell = FakeCell(VALUE, formatted=NumberFormatError("bad code"), raw="42.5")
        assert resolve_cell_value(cell) == "42.5"

    def test_blank_cell_is_rejected(self):
        with pytest.raises(ValueError):
            resolve_cell_value(FakeCell(BLANK))
