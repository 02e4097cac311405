from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A deterministic name resolver, so tests never depend on the host's
   passwd and group databases.
3. A builder for synthetic directory trees.
"""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from diskusage.core.services.names import NameResolver  # noqa: E402


# -----------------------------------------------------------------------------
# Test Doubles
# -----------------------------------------------------------------------------
class FakeResolver(NameResolver):
    """In-memory resolver backed by two dictionaries; counts lookups."""

    def __init__(
            self,
            users: Optional[Mapping[int, str]] = None,
            groups: Optional[Mapping[int, str]] = None,
    ) -> None:
        self.users: Dict[int, str] = dict(users or {})
        self.groups: Dict[int, str] = dict(groups or {})
        self.user_calls = 0
        self.group_calls = 0

    def user_name(self, uid: int) -> Optional[str]:
        self.user_calls += 1
        return self.users.get(uid)

    def group_name(self, gid: int) -> Optional[str]:
        self.group_calls += 1
        return self.groups.get(gid)

    def user_id(self, name: str) -> Optional[int]:
        for uid, n in self.users.items():
            if n == name:
                return uid
        return None

    def group_id(self, name: str) -> Optional[int]:
        for gid, n in self.groups.items():
            if n == name:
                return gid
        return None


def _ids_of(path: Path) -> tuple:
    st = os.lstat(str(path))
    return getattr(st, "st_uid", 0), getattr(st, "st_gid", 0)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def current_ids(tmp_path: Path) -> tuple:
    """(uid, gid) that files created below tmp_path will carry."""
    return _ids_of(tmp_path)


@pytest.fixture
def resolver_cls() -> type:
    """The FakeResolver class, for tests that need custom mappings."""
    return FakeResolver


@pytest.fixture
def fake_resolver(tmp_path: Path) -> FakeResolver:
    """Resolver that maps the uid/gid of files below tmp_path to 'alice'/'staff'."""
    uid, gid = _ids_of(tmp_path)
    return FakeResolver(users={uid: "alice"}, groups={gid: "staff"})


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[Mapping[str, int]], Path]:
    """
    Return a builder that materializes files of given sizes below a fresh root.

    Keys are '/'-separated paths relative to the root; a key ending in '/'
    creates an empty directory.
    """
    def _build(files: Mapping[str, int]) -> Path:
        root = tmp_path / "scan_root"
        root.mkdir(exist_ok=True)
        for rel, size in files.items():
            target = root.joinpath(*rel.strip("/").split("/"))
            if rel.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(b"x" * size)
        return root

    return _build


@pytest.fixture
def mock_config_dict(tmp_path: Path) -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Mirrors 'diskusage.domain.config.get_default_config' with a temp root.
    """
    return {
        "root_path": str(tmp_path),
        "load_path": "",
        "concurrency": 2,
        "levels": 2,
        "show_user": False,
        "show_group": False,
        "show_files": False,
        "raw_bytes": False,
        "size_width": 0,
        "files_width": 0,
        "top_n": 0,
        "json_output": "",
        "gzip_output": False,
    }
