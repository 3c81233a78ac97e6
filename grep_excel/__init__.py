"""grep-excel: search spreadsheet cells with a regular expression.

Given a pattern and a set of files/directories, every cell of every
``.xls``, ``.xlsx``, ``.xlsm``, ``.xlt`` and ``.xltx`` file is resolved to the
text a spreadsheet application would display (or to its formula source)
and matched against the pattern:

  * **discovery** – expand input paths into spreadsheet files.
  * **engine** – walk one workbook and collect matching cells.
  * **search** – run the engine over all files, sequentially or on a thread
    pool, and return a path-ordered :class:`SearchSummary`.

The command line front end lives in :mod:`grep_excel.main`.
"""

from .config import SearchConfig, available_extensions, load_config
from .errors import (
    DiscoveryError,
    GrepExcelError,
    PatternCompileError,
    WorkbookReadError,
)
from .results import CellMatch, FileResult, SearchSummary
from .search import grep

__version__ = "1.0.0"

__all__ = [
    "grep",
    "SearchConfig",
    "SearchSummary",
    "FileResult",
    "CellMatch",
    "available_extensions",
    "load_config",
    "GrepExcelError",
    "PatternCompileError",
    "DiscoveryError",
    "WorkbookReadError",
]
