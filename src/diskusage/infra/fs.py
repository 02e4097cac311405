from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path resolution, snapshot target naming and
filesystem helpers. Acts as an abstraction over the 'os' module to ensure
uniform behavior across Windows and Unix-like systems.
"""

import logging
import os
from typing import Optional, Tuple

from diskusage.domain.constants import GZIP_SUFFIX, ROOT_KEY

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "DiskUsage"
UNIX_APP_DIR_NAME = ".diskusage"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/DiskUsage
    - Linux/Mac: ~/.diskusage

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        home = os.path.expanduser("~")
        path = os.path.join(home, UNIX_APP_DIR_NAME)

    ok, err = safe_mkdir(path)
    if not ok:
        logger.debug(f"User data directory unavailable '{path}': {err}")

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a directory path string into a clean absolute filesystem path.

    Handles user home shortcuts (~/) and environment variables. Reverts to the
    fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.normpath(os.path.abspath(p))


def rel_to_abs(root_abs: str, rel: str) -> str:
    """Join a root-relative aggregate key back onto the absolute root."""
    if rel == ROOT_KEY:
        return root_abs
    return os.path.join(root_abs, rel)


def parent_key(rel: str) -> str:
    """
    Return the aggregate key of the parent directory of a root-relative key.

    The root has no parent and maps to itself.
    """
    if rel == ROOT_KEY:
        return ROOT_KEY
    parent = os.path.dirname(rel)
    if not parent or parent == rel:
        return ROOT_KEY
    return parent


def add_gz_ext(path: str) -> str:
    """
    Append the gzip suffix to a snapshot target unless it already carries it.

    The suffix check is case-insensitive ('OUT.JSON.GZ' is left untouched).
    """
    if path.lower().endswith(GZIP_SUFFIX):
        return path
    return path + GZIP_SUFFIX

# -----------------------------------------------------------------------------
# FILESYSTEM MUTATION API
# -----------------------------------------------------------------------------

def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to recursively create a directory structure safely.

    Args:
        path: Target directory path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)


def discard_file(path: str) -> bool:
    """
    Remove a partially written artifact, ignoring a file that is already gone.

    Args:
        path: File to delete.

    Returns:
        bool: True if a file was removed.
    """
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"Could not discard partial output '{path}': {e}")
        return False
