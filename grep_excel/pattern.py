"""
Compile the search pattern once per run.

The compiled ``re.Pattern`` is immutable and is shared by every worker
thread without locking.
"""

import re

from .errors import PatternCompileError

BASE_FLAGS = re.MULTILINE | re.DOTALL


def compile_pattern(pattern_text: str, ignore_case: bool = False,
                    literal: bool = False) -> re.Pattern:
    """Compile *pattern_text* for substring search inside cell values.

    ``^``/``$`` anchor at line breaks inside a cell and ``.`` matches a
    line break. With *literal* the text is matched verbatim.
    """
    flags = BASE_FLAGS
    if ignore_case:
        flags |= re.IGNORECASE
    source = re.escape(pattern_text) if literal else pattern_text
    try:
        return re.compile(source, flags)
    except re.error as e:
        raise PatternCompileError(pattern_text, str(e)) from e


def matches(pattern: re.Pattern, value: str) -> bool:
    """Return True if *pattern* occurs anywhere in *value*."""
    return pattern.search(value) is not None
