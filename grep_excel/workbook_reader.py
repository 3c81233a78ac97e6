"""
Workbook reading layer.

Every workbook is exposed through the same small interface, whatever
library decodes it:

  * ``open_workbook(path)``    – context manager yielding a workbook
  * ``workbook.sheets()``      – sheets in workbook order (``.name``, ``.rows()``)
  * ``sheet.rows()``           – stored rows only, each a list of cells
  * ``cell.coordinate``        – ``"B7"`` style address
  * ``cell.kind``              – ``"blank"``, ``"formula"`` or ``"value"``
  * ``cell.formula_text()``    – formula source without the leading ``=`` (formula cells)
  * ``cell.formatted_value()`` – display text of the (cached) value
  * ``cell.raw_value()``       – unformatted text of the (cached) value

Office Open XML files (.xlsx, .xlsm, .xltx) are read with openpyxl in
read-only mode; legacy BIFF files (.xls, .xlt) are read with xlrd. The
library is chosen from the file content, not from the extension.
"""

import itertools
import logging
import warnings
from contextlib import ExitStack, contextmanager

import xlrd
from openpyxl import load_workbook
from openpyxl.cell.read_only import EmptyCell
from openpyxl.utils import get_column_letter
from openpyxl.utils.datetime import MAC_EPOCH, WINDOWS_EPOCH

from .number_format import format_value

logger = logging.getLogger(__name__)

# Suppress openpyxl warnings about unsupported extensions (data validation etc.)
warnings.filterwarnings("ignore", category=UserWarning, module="openpyxl")

BLANK = "blank"
FORMULA = "formula"
VALUE = "value"

OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def _cell_addr(row: int, col: int) -> str:
    return f"{get_column_letter(col)}{row}"


def _raw_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


# ---------------------------------------------------------------------------
# openpyxl (.xlsx / .xlsm / .xltx)
# ---------------------------------------------------------------------------

class OpenpyxlCell:
    """A stored cell of a read-only worksheet.

    *cached* is the same cell read from the ``data_only`` workbook, i.e.
    the last computed result of a formula; it is None when cached values
    were not requested.
    """

    def __init__(self, cell, cached=None, epoch=WINDOWS_EPOCH):
        self._cell = cell
        self._cached = cached
        self._epoch = epoch
        self.coordinate = cell.coordinate
        if cell.value is None:
            self.kind = BLANK
        elif cell.data_type == "f":
            self.kind = FORMULA
        else:
            self.kind = VALUE

    def formula_text(self) -> str:
        value = self._cell.value
        text = getattr(value, "text", None)
        if text is None:
            text = str(value)
        return text[1:] if text.startswith("=") else text

    def value(self):
        if self.kind == FORMULA:
            return self._cached.value if self._cached is not None else None
        return self._cell.value

    def formatted_value(self) -> str:
        return format_value(self.value(), self._cell.number_format, self._epoch)

    def raw_value(self) -> str:
        return _raw_text(self.value())


class OpenpyxlSheet:

    def __init__(self, ws, ws_values=None, epoch=WINDOWS_EPOCH):
        self._ws = ws
        self._ws_values = ws_values
        self._epoch = epoch
        self.name = ws.title

    def rows(self):
        """Yield the stored rows of the sheet in document order.

        Read-only worksheets pad gaps with empty cells; those padding cells
        and rows consisting only of padding are dropped.
        """
        # the <dimension> element of a sheet is not always accurate
        self._ws.reset_dimensions()
        formula_rows = self._ws.iter_rows()
        if self._ws_values is None:
            value_rows = itertools.repeat(None)
        else:
            self._ws_values.reset_dimensions()
            value_rows = self._ws_values.iter_rows()

        for row, cached_row in zip(formula_rows, value_rows):
            if cached_row is None:
                cached_row = [None] * len(row)
            cells = [
                OpenpyxlCell(cell, cached, self._epoch)
                for cell, cached in zip(row, cached_row)
                if not isinstance(cell, EmptyCell)
            ]
            if cells:
                yield cells


class OpenpyxlWorkbook:

    def __init__(self, wb, wb_values=None):
        self._wb = wb
        self._wb_values = wb_values

    def sheets(self):
        for idx, ws in enumerate(self._wb.worksheets):
            ws_values = self._wb_values.worksheets[idx] if self._wb_values is not None else None
            yield OpenpyxlSheet(ws, ws_values, self._wb.epoch)


def _open_openpyxl(path: str, cached_values: bool, stack: ExitStack) -> OpenpyxlWorkbook:
    # a file object bypasses openpyxl's extension check (.xlt files can be OOXML)
    wb = load_workbook(stack.enter_context(open(path, "rb")), read_only=True, data_only=False)
    stack.callback(wb.close)
    wb_values = None
    if cached_values:
        wb_values = load_workbook(stack.enter_context(open(path, "rb")), read_only=True, data_only=True)
        stack.callback(wb_values.close)
    return OpenpyxlWorkbook(wb, wb_values)


# ---------------------------------------------------------------------------
# xlrd (.xls / .xlt)
# ---------------------------------------------------------------------------

class XlrdCell:
    """A cell of a BIFF worksheet.

    xlrd does not decode formula expressions, so formula cells surface as
    value cells holding their last computed result and never need
    ``formula_text()``.
    """

    def __init__(self, book, sheet, rowx: int, colx: int):
        self._book = book
        self._sheet = sheet
        self._rowx = rowx
        self._colx = colx
        self.coordinate = _cell_addr(rowx + 1, colx + 1)
        ctype = sheet.cell_type(rowx, colx)
        self._ctype = ctype
        self.kind = BLANK if ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK) else VALUE

    def value(self):
        value = self._sheet.cell_value(self._rowx, self._colx)
        if self._ctype == xlrd.XL_CELL_BOOLEAN:
            return bool(value)
        if self._ctype == xlrd.XL_CELL_ERROR:
            return xlrd.error_text_from_code.get(value, f"#ERR{value}")
        if self._ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return None
        return value

    def number_format(self) -> str:
        xf = self._book.xf_list[self._sheet.cell_xf_index(self._rowx, self._colx)]
        fmt = self._book.format_map.get(xf.format_key)
        return fmt.format_str if fmt is not None else "General"

    def formatted_value(self) -> str:
        epoch = MAC_EPOCH if self._book.datemode == 1 else WINDOWS_EPOCH
        return format_value(self.value(), self.number_format(), epoch)

    def raw_value(self) -> str:
        return _raw_text(self.value())


class XlrdSheet:

    def __init__(self, book, sheet):
        self._book = book
        self._sheet = sheet
        self.name = sheet.name

    def rows(self):
        for rowx in range(self._sheet.nrows):
            cells = [
                XlrdCell(self._book, self._sheet, rowx, colx)
                for colx in range(self._sheet.row_len(rowx))
                if self._sheet.cell_type(rowx, colx) != xlrd.XL_CELL_EMPTY
            ]
            if cells:
                yield cells


class XlrdWorkbook:

    def __init__(self, book):
        self._book = book

    def sheets(self):
        for idx in range(self._book.nsheets):
            sheet = self._book.sheet_by_index(idx)
            try:
                yield XlrdSheet(self._book, sheet)
            finally:
                self._book.unload_sheet(idx)


def _open_xlrd(path: str, stack: ExitStack) -> XlrdWorkbook:
    book = xlrd.open_workbook(path, formatting_info=True, on_demand=True, ragged_rows=True)
    stack.callback(book.release_resources)
    return XlrdWorkbook(book)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def is_ole2_file(path: str) -> bool:
    """Return True if *path* is an OLE2 compound document (BIFF workbook)."""
    with open(path, "rb") as f:
        return f.read(len(OLE2_SIGNATURE)) == OLE2_SIGNATURE


@contextmanager
def open_workbook(path: str, cached_values: bool = False):
    """Open the workbook at *path* for reading.

    With *cached_values* formula cells also carry their last computed
    result. Every handle is released when the ``with`` block exits.
    """
    with ExitStack() as stack:
        if is_ole2_file(path):
            logger.debug(f"Opening {path} with xlrd")
            workbook = _open_xlrd(path, stack)
        else:
            logger.debug(f"Opening {path} with openpyxl")
            workbook = _open_openpyxl(path, cached_values, stack)
        yield workbook
