from __future__ import annotations

"""
Filesystem Discovery Service.

Depth-first, lexically ordered enumeration of a directory tree that never
follows symbolic links. Directories are counted; every other entry (regular
files, symbolic links, sockets, devices) is yielded as a file path. Entries
that cannot be read are skipped; only an unreadable root is fatal.
"""

import logging
import os
import stat as statmod
import threading
from dataclasses import dataclass
from typing import Iterator, List, Optional

from diskusage.domain.errors import ScanRootError

logger = logging.getLogger(__name__)


@dataclass
class WalkCounters:
    """
    Traversal counters, written only by the producer thread.

    Attributes:
        dirs: Directories visited, root included.
        files: Non-directory entries yielded.
        skipped: Entries or directory listings that could not be read.
    """
    dirs: int = 0
    files: int = 0
    skipped: int = 0


# ==============================================================================
# PUBLIC API
# ==============================================================================

def walk_files(
        root_abs: str,
        counters: WalkCounters,
        cancel_event: Optional[threading.Event] = None,
) -> Iterator[str]:
    """
    Validate the root and return an iterator over every file path below it.

    The root is checked and listed eagerly, so a missing or unreadable root
    raises here, before any worker is started. The rest of the tree is
    enumerated lazily as the iterator is consumed.

    Args:
        root_abs: Absolute, normalized root directory.
        counters: Counters updated while iterating.
        cancel_event: Optional event that stops the enumeration early.

    Returns:
        Iterator[str]: Absolute file paths in depth-first lexical order.

    Raises:
        ScanRootError: If the root is missing, not a directory or not listable.
    """
    try:
        st = os.lstat(root_abs)
    except OSError as e:
        raise ScanRootError(root_abs, e) from e

    if not statmod.S_ISDIR(st.st_mode):
        raise ScanRootError(root_abs, NotADirectoryError("not a directory"))

    try:
        first_level = _list_sorted(root_abs)
    except OSError as e:
        raise ScanRootError(root_abs, e) from e

    counters.dirs += 1
    return _iterate(first_level, counters, cancel_event)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _iterate(
        first_level: List[os.DirEntry],
        counters: WalkCounters,
        cancel_event: Optional[threading.Event],
) -> Iterator[str]:
    """Explicit-stack traversal; deep trees never hit the recursion limit."""
    stack = [iter(first_level)]

    while stack:
        if cancel_event is not None and cancel_event.is_set():
            logger.debug("Walk interrupted by cancellation signal.")
            return

        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as e:
            counters.skipped += 1
            logger.debug(f"Skipping unreadable entry {entry.path}: {e}")
            continue

        if not is_dir:
            counters.files += 1
            yield entry.path
            continue

        counters.dirs += 1
        try:
            stack.append(iter(_list_sorted(entry.path)))
        except OSError as e:
            counters.skipped += 1
            logger.debug(f"Skipping unreadable directory {entry.path}: {e}")


def _list_sorted(path: str) -> List[os.DirEntry]:
    with os.scandir(path) as it:
        return sorted(it, key=lambda e: e.name)
