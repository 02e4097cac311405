from __future__ import annotations

"""
Integration tests for FileSystem Infrastructure.

Validates path normalization, cross-platform data directory resolution,
aggregate key helpers and snapshot target naming.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from diskusage.infra.fs import (
    add_gz_ext,
    discard_file,
    get_user_data_dir,
    normalize_path,
    parent_key,
    rel_to_abs,
    safe_mkdir,
)

# -----------------------------------------------------------------------------
# PATH RESOLUTION TESTS
# -----------------------------------------------------------------------------

def test_get_user_data_dir_windows() -> None:
    """TC-01: Verify resolution of %LOCALAPPDATA% on Windows systems."""
    mock_appdata = "C:/Users/Test/AppData/Local"
    with patch("os.name", "nt"):
        with patch.dict(os.environ, {"LOCALAPPDATA": mock_appdata}):
            with patch("os.makedirs"):
                path = get_user_data_dir()
                assert "DiskUsage" in path
                assert path.lower().startswith(os.path.abspath(mock_appdata).lower())


def test_get_user_data_dir_unix() -> None:
    """TC-01: Verify resolution of ~/.diskusage on Unix-like systems."""
    mock_home = "/home/testuser"
    with patch("os.name", "posix"):
        with patch("os.path.expanduser", return_value=mock_home):
            with patch("os.makedirs"):
                path = get_user_data_dir()
                assert path.replace("\\", "/").endswith("/home/testuser/.diskusage")


def test_normalize_path_expansion() -> None:
    """TC-02: Verify expansion of environment variables and user shortcuts."""
    with patch.dict(os.environ, {"TEST_VAR": "my_folder"}):
        path = normalize_path("$TEST_VAR/sub", fallback=".")
        assert path.lower().endswith(os.path.join("my_folder", "sub").lower())


def test_normalize_path_fallback(tmp_path: Path) -> None:
    assert normalize_path("  ", fallback=str(tmp_path)) == os.path.normpath(str(tmp_path))


# -----------------------------------------------------------------------------
# AGGREGATE KEY HELPERS
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("rel, expected", [
    (".", "."),
    ("a", "."),
    (os.path.join("a", "b"), "a"),
    (os.path.join("a", "b", "c"), os.path.join("a", "b")),
])
def test_parent_key(rel: str, expected: str) -> None:
    assert parent_key(rel) == expected


def test_parent_key_terminates_on_absolute_input() -> None:
    assert parent_key(os.sep) == "."


def test_rel_to_abs(tmp_path: Path) -> None:
    assert rel_to_abs(str(tmp_path), ".") == str(tmp_path)
    assert rel_to_abs(str(tmp_path), "x") == os.path.join(str(tmp_path), "x")


@pytest.mark.parametrize("target, expected", [
    ("out.json", "out.json.gz"),
    ("out.json.gz", "out.json.gz"),
    ("OUT.JSON.GZ", "OUT.JSON.GZ"),
    ("archive.tgz", "archive.tgz.gz"),
])
def test_add_gz_ext(target: str, expected: str) -> None:
    assert add_gz_ext(target) == expected


# -----------------------------------------------------------------------------
# FILESYSTEM OPERATIONS TESTS
# -----------------------------------------------------------------------------

def test_safe_mkdir_success(tmp_path: Path) -> None:
    """TC-04: Verify recursive directory creation."""
    target = tmp_path / "deep" / "nested" / "dir"
    success, err = safe_mkdir(str(target))

    assert success is True
    assert err is None
    assert target.exists()


def test_safe_mkdir_permission_error() -> None:
    """TC-04: Verify error handling when directory creation fails."""
    with patch("os.makedirs", side_effect=OSError("Permission Denied")):
        success, err = safe_mkdir("/root/forbidden")
        assert success is False
        assert "Permission Denied" in err


def test_discard_file(tmp_path: Path) -> None:
    partial = tmp_path / "partial.json"
    partial.write_text("{")

    assert discard_file(str(partial)) is True
    assert not partial.exists()
    assert discard_file(str(partial)) is False
