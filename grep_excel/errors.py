"""
Exception types raised by the search.

Everything derived from ``GrepExcelError`` is fatal for a run.
``NumberFormatError`` is the only recoverable kind: the cell value resolver
catches it and falls back to the raw cell value.
"""


class GrepExcelError(Exception):
    """Base class for errors that abort a search."""


class PatternCompileError(GrepExcelError, ValueError):
    """The search pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid pattern '{pattern}': {reason}")
        self.pattern = pattern


class DiscoveryError(GrepExcelError, OSError):
    """Walking one of the input paths failed."""


class WorkbookReadError(GrepExcelError):
    """A workbook could not be opened or read."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"{path}: {cause}")
        self.path = path


class NumberFormatError(ValueError):
    """A number format code could not be interpreted."""
