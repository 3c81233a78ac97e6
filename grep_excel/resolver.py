"""
Cell value resolution: the text a cell is searched as.
"""

import logging

from .workbook_reader import BLANK, FORMULA

logger = logging.getLogger(__name__)


def resolve_cell_value(cell, formula_result: bool = False) -> str:
    """Return the text that the pattern is matched against.

    - Formula cells give ``"=" + formula`` unless *formula_result* is set,
      in which case they give the formatted cached result.
    - Other cells give their formatted display text.
    - If formatting fails the raw, unformatted value is used instead.

    Blank cells are never resolved; callers skip them.
    """
    if cell.kind == BLANK:
        raise ValueError(f"Blank cell {cell.coordinate} has no value to resolve")
    if cell.kind == FORMULA and not formula_result:
        return "=" + cell.formula_text()
    try:
        return cell.formatted_value()
    except Exception as e:
        logger.debug(f"Formatting {cell.coordinate} failed ({e}); using raw value")
        return cell.raw_value()
