"""
Traversal & matching: walk one workbook sheet by sheet, row by row, cell by
cell, and collect the cells whose resolved value matches the pattern.
"""

import logging
import re

from .config import SearchConfig
from .errors import WorkbookReadError
from .pattern import matches
from .resolver import resolve_cell_value
from .results import CellMatch, FileResult
from .workbook_reader import BLANK, open_workbook

logger = logging.getLogger(__name__)


def grep_workbook(pattern: re.Pattern, file_path: str, workbook,
                  formula_result: bool = False) -> list[CellMatch]:
    """Return the matching cells of an open *workbook* in document order."""
    debug = logger.isEnabledFor(logging.DEBUG)
    found: list[CellMatch] = []
    for sheet in workbook.sheets():
        for row in sheet.rows():
            for cell in row:
                if cell.kind == BLANK:
                    continue
                value = resolve_cell_value(cell, formula_result)
                if debug:
                    logger.debug(f"file: {file_path}, sheet: {sheet.name}, "
                                 f"cell: {cell.coordinate}, value: {value!r}")
                if matches(pattern, value):
                    found.append(CellMatch(file_path, sheet.name, cell.coordinate, value))
    return found


def grep_file(pattern: re.Pattern, path: str, config: SearchConfig) -> FileResult:
    """Search one spreadsheet file.

    Any error while opening or reading the file is raised as
    ``WorkbookReadError`` naming *path*.
    """
    try:
        with open_workbook(path, cached_values=config.formula_result) as workbook:
            found = grep_workbook(pattern, path, workbook, config.formula_result)
    except Exception as e:
        raise WorkbookReadError(path, e) from e
    logger.debug(f"{path}: {len(found)} match(es)")
    return FileResult(path, found)
