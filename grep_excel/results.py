"""
Search result types: one ``CellMatch`` per matching cell, grouped into one
``FileResult`` per file, collected in a path-ordered ``SearchSummary``.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CellMatch:
    """A cell whose resolved value matched the pattern."""
    file_path: str
    sheet_name: str
    cell_address: str
    cell_value: str


@dataclass
class FileResult:
    """All matches of one file, in sheet, row, cell order."""
    file: str
    matches: list[CellMatch] = field(default_factory=list)

    @property
    def match_count(self) -> int:
        return len(self.matches)


@dataclass
class SearchSummary:
    """Per-file results of a search, ordered by absolute file path."""
    results: list[FileResult] = field(default_factory=list)

    @property
    def target_file_count(self) -> int:
        return len(self.results)

    @property
    def match_file_count(self) -> int:
        return sum(1 for r in self.results if r.matches)

    @property
    def match_count(self) -> int:
        return sum(len(r.matches) for r in self.results)

    def all_matches(self) -> list[CellMatch]:
        return [m for r in self.results for m in r.matches]
