"""
File discovery: expand input files and directories into the list of
spreadsheet files to search.
"""

import logging
import os

from .config import EXTENSIONS
from .errors import DiscoveryError

logger = logging.getLogger(__name__)


def is_excel_file(path: str) -> bool:
    """Return True if *path* is a regular file with a spreadsheet extension.

    The extension is the case-sensitive text after the last dot of the
    file name, so ``book.XLSX`` is not searched.
    """
    if not os.path.isfile(path):
        return False
    name = os.path.basename(os.path.abspath(path))
    _, dot, ext = name.rpartition(".")
    return bool(dot) and ext in EXTENSIONS


def _raise(err: OSError):
    raise DiscoveryError(err.errno, err.strerror, err.filename) from err


def _walk(root: str, recursive: bool):
    """Yield *root* and the paths below it.

    Without *recursive* only the direct children of a directory are
    yielded. Symbolic links to directories are followed; a link pointing
    back to one of its own ancestors raises ``DiscoveryError``.
    """
    if not os.path.exists(root):
        raise DiscoveryError(2, "No such file or directory", root)
    yield root
    if not os.path.isdir(root):
        return

    ancestors = {os.path.abspath(root): frozenset([os.path.realpath(root)])}
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise, followlinks=True):
        seen = ancestors.pop(os.path.abspath(dirpath), frozenset())
        for name in dirnames + filenames:
            yield os.path.join(dirpath, name)
        if not recursive:
            dirnames[:] = []
            continue
        for name in dirnames:
            child = os.path.join(dirpath, name)
            real = os.path.realpath(child)
            if real in seen:
                raise DiscoveryError(40, "Symbolic link loop", child)
            ancestors[os.path.abspath(child)] = seen | {real}


def find_excel_files(paths, recursive: bool = False) -> list[str]:
    """Return the absolute paths of all spreadsheet files under *paths*.

    The result is unordered and not deduplicated: a file reachable from two
    roots is listed twice.
    """
    files: list[str] = []
    for root in paths:
        root = os.fspath(root)
        for path in _walk(root, recursive):
            if is_excel_file(path):
                files.append(os.path.abspath(path))
    logger.debug(f"Discovered {len(files)} file(s) under {list(map(os.fspath, paths))}")
    return files
