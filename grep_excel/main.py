#!/usr/bin/env python
"""
grepexcel – CLI entry point.

Usage:
    grepexcel [-f] [-i] [-l] [-p] [-r] [-s] PATTERN FILE [FILE ...]
    python -m grep_excel.main [options] PATTERN FILE [FILE ...]

Prints ``[file][sheet][cell] value`` for every matching cell. Exit status
is 0 on success, 1 for invalid arguments and 2 when the search fails.
"""

import argparse
import logging
import os
import platform
import sys
import time

import yaml

from grep_excel import __version__
from grep_excel.config import SearchConfig, available_extensions, load_config
from grep_excel.errors import GrepExcelError
from grep_excel.report import RESULT_BANNER, format_match, format_summary
from grep_excel.search import grep

COMMAND = "grepexcel"
SEARCH_FLAGS = ("formula_result", "ignore_case", "literal", "parallel", "recursive", "summary")

logger = logging.getLogger(__name__)


def setup_logging(level_str: str = "WARNING"):
    """Configure logging."""
    level = getattr(logging, str(level_str).upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )


class _ArgumentParser(argparse.ArgumentParser):
    """Writes the error and the full help to stderr and exits with 1."""

    def error(self, message):
        sys.stderr.write(f"{message}\n\n")
        self.print_help(sys.stderr)
        self.exit(1)


def existing_path(argument: str) -> str:
    if not os.path.exists(argument):
        raise argparse.ArgumentTypeError(f'No such file or directory "{argument}"')
    return argument


def build_parser() -> argparse.ArgumentParser:
    extensions = ", ".join(f".{ext}" for ext in available_extensions())
    parser = _ArgumentParser(
        prog=COMMAND,
        description=f"Search for PATTERN in each Excel FILE. ({extensions})",
    )
    parser.add_argument("pattern", metavar="PATTERN", help="regular expression to search for")
    parser.add_argument("paths", metavar="FILE", nargs="+", type=existing_path,
                        help="Excel file or directory to search")
    parser.add_argument("-f", "--formula-result", action="store_true",
                        help="search for calculated result of formula")
    parser.add_argument("-i", "--ignore-case", action="store_true",
                        help="ignore case distinctions")
    parser.add_argument("-l", "--literal", action="store_true",
                        help="enable literal parsing of the pattern")
    parser.add_argument("-p", "--parallel", action="store_true",
                        help="perform search processing in parallel")
    parser.add_argument("-r", "--recursive", action="store_true",
                        help="search directories for file recursively")
    parser.add_argument("-s", "--summary", action="store_true",
                        help="print a summary of results")
    parser.add_argument("-v", "--version", action="version",
                        version=f"{COMMAND} version {__version__} "
                                f"(Python version {platform.python_version()})",
                        help="display version information and exit")
    parser.add_argument("--config", type=existing_path, default=None,
                        help="path to a YAML file with default options")
    parser.add_argument("--log-level", default=None,
                        help="logging level written to stderr (default: WARNING)")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return e.code

    try:
        options = load_config(args.config)
        for name in SEARCH_FLAGS:
            if getattr(args, name):
                options[name] = True
        config = SearchConfig.from_mapping(options)
        if not isinstance(options["summary"], bool):
            raise ValueError(f"summary must be true or false, got {options['summary']!r}")
    except (yaml.YAMLError, ValueError, TypeError) as e:
        sys.stderr.write(f"{e}\n\n")
        parser.print_help(sys.stderr)
        return 1

    setup_logging(args.log_level or options["log_level"])
    logger.debug(f"args: {args}")

    start = time.perf_counter()
    try:
        summary = grep(args.pattern, args.paths, config)
    except GrepExcelError as e:
        logger.debug("Search failed", exc_info=True)
        sys.stderr.write(f"{COMMAND}: {e}\n")
        return 2
    running_time = time.perf_counter() - start

    show_summary = options["summary"]
    if show_summary:
        print(RESULT_BANNER)
    for match in summary.all_matches():
        print(format_match(match))
    if show_summary:
        for line in format_summary(summary, running_time):
            print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
