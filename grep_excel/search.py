"""
Search coordinator: compile the pattern, discover files, search them one by
one or on a thread pool, and assemble the path-ordered summary.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from .config import SearchConfig
from .discovery import find_excel_files
from .engine import grep_file
from .pattern import compile_pattern
from .results import SearchSummary

logger = logging.getLogger(__name__)


def _search_sequential(pattern, files, config):
    return [grep_file(pattern, path, config) for path in files]


def _search_parallel(pattern, files, config):
    results = []
    with ThreadPoolExecutor(max_workers=config.worker_count()) as executor:
        futures = [executor.submit(grep_file, pattern, path, config) for path in files]
        try:
            for future in as_completed(futures):
                results.append(future.result())
        except BaseException:
            for future in futures:
                future.cancel()
            raise
    return results


def grep(pattern_text: str, paths, config: SearchConfig | None = None) -> SearchSummary:
    """Search every spreadsheet under *paths* for *pattern_text*.

    The first failing file aborts the whole search. The returned results
    are ordered by file path whatever order the files finished in.
    """
    config = config or SearchConfig()
    paths = list(paths)
    logger.debug(f"config: {config}")
    logger.debug(f"pattern: {pattern_text!r}, paths: {paths}")

    pattern = compile_pattern(pattern_text, config.ignore_case, config.literal)
    files = find_excel_files(paths, config.recursive)
    logger.info(f"Searching {len(files)} file(s)"
                f"{' in parallel' if config.parallel and files else ''}")

    if config.parallel and files:
        results = _search_parallel(pattern, files, config)
    else:
        results = _search_sequential(pattern, files, config)
    results.sort(key=lambda r: r.file)

    summary = SearchSummary(results)
    logger.info(f"{summary.match_count} match(es) in "
                f"{summary.match_file_count}/{summary.target_file_count} file(s)")
    return summary
