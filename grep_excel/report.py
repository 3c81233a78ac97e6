"""
Text output: one line per match and the optional result summary.
"""

import psutil

from .results import CellMatch, SearchSummary

RESULT_BANNER = "--- Result -------------------------------------------------------------"
FILE_SUMMARY_BANNER = "--- Result Summary (File) ----------------------------------------------"
TOTAL_SUMMARY_BANNER = "--- Result Summary (Total) ---------------------------------------------"

MIB = 1024 * 1024


def format_match(match: CellMatch) -> str:
    return f"[{match.file_path}][{match.sheet_name}][{match.cell_address}] {match.cell_value}"


def memory_usage() -> tuple[float, float]:
    """Return (used, total) memory in MB: process RSS and physical memory."""
    used = psutil.Process().memory_info().rss
    total = psutil.virtual_memory().total
    return used / MIB, total / MIB


def format_summary(summary: SearchSummary, running_time: float,
                   memory: tuple[float, float] | None = None) -> list[str]:
    """Render the per-file and total summary blocks as lines."""
    used_mb, total_mb = memory if memory is not None else memory_usage()
    width = max((len(str(r.match_count)) for r in summary.results), default=0)

    lines = ["", FILE_SUMMARY_BANNER]
    for result in summary.results:
        lines.append(f"[{result.match_count:>{width}}] : {result.file}")
    lines += [
        "",
        TOTAL_SUMMARY_BANNER,
        f"number of files (matches/total) : {summary.match_file_count}/{summary.target_file_count}",
        f"number of matches               : {summary.match_count}",
        f"running time                    : {round(running_time, 3)}s",
        f"memory (used/total)             : {used_mb:.1f}MB/{total_mb:.1f}MB",
    ]
    return lines
