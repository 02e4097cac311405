from __future__ import annotations

"""
Unit tests for the Filesystem Discovery Service.

Verifies:
1. Depth-first lexical enumeration and counters.
2. Symbolic links yielded as files and never followed.
3. Root validation errors.
4. Cancellation.
"""

import os
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from diskusage.core.services.walker import WalkCounters, walk_files
from diskusage.domain.errors import ScanRootError


def test_walk_is_depth_first_and_lexical(make_tree) -> None:
    root = make_tree({"b.txt": 1, "a/2.txt": 1, "a/1.txt": 1, "c/": 0})
    counters = WalkCounters()

    paths = list(walk_files(str(root), counters))

    rel = [os.path.relpath(p, root) for p in paths]
    assert rel == [os.path.join("a", "1.txt"), os.path.join("a", "2.txt"), "b.txt"]
    # root, a, c
    assert counters.dirs == 3
    assert counters.files == 3


def test_empty_root_counts_itself(tmp_path: Path) -> None:
    counters = WalkCounters()
    assert list(walk_files(str(tmp_path), counters)) == []
    assert counters.dirs == 1
    assert counters.files == 0


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_symlinks_are_files_and_not_followed(make_tree) -> None:
    root = make_tree({"real/inner.txt": 10})
    os.symlink(str(root / "real"), str(root / "link_dir"))
    os.symlink(str(root / "real" / "inner.txt"), str(root / "link_file"))

    counters = WalkCounters()
    names = sorted(os.path.basename(p) for p in walk_files(str(root), counters))

    assert names == ["inner.txt", "link_dir", "link_file"]
    assert counters.dirs == 2


def test_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(ScanRootError) as exc:
        walk_files(str(tmp_path / "nope"), WalkCounters())
    assert exc.value.path == str(tmp_path / "nope")
    assert isinstance(exc.value.reason, OSError)


def test_file_root_raises(tmp_path: Path) -> None:
    f = tmp_path / "file.txt"
    f.write_text("x")
    with pytest.raises(ScanRootError):
        walk_files(str(f), WalkCounters())


def test_root_error_is_raised_eagerly(tmp_path: Path) -> None:
    """The error surfaces at call time, not on first iteration."""
    with pytest.raises(ScanRootError):
        walk_files(str(tmp_path / "missing"), WalkCounters())


def test_cancel_stops_enumeration(make_tree) -> None:
    root = make_tree({f"f{i}.txt": 1 for i in range(20)})
    cancel = threading.Event()
    counters = WalkCounters()

    seen = []
    for path in walk_files(str(root), counters, cancel):
        seen.append(path)
        if len(seen) == 5:
            cancel.set()

    assert len(seen) == 5


def test_unlistable_subdirectory_is_skipped(make_tree) -> None:
    root = make_tree({"ok/a.txt": 1, "locked/b.txt": 1})
    real_scandir = os.scandir

    def flaky_scandir(path):
        if os.path.basename(path) == "locked":
            raise PermissionError("denied")
        return real_scandir(path)

    counters = WalkCounters()
    with patch("diskusage.core.services.walker.os.scandir", side_effect=flaky_scandir):
        names = [os.path.basename(p) for p in walk_files(str(root), counters)]

    assert names == ["a.txt"]
    assert counters.skipped == 1
    assert counters.dirs == 3
