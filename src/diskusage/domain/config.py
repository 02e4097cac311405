from __future__ import annotations

"""
Configuration Domain Management.

Handles the default runtime configuration and its persistent storage as JSON
in the user data directory. CLI flags are merged on top of whatever this
module returns.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from diskusage.domain.constants import (
    CURRENT_CONFIG_VERSION,
    DEFAULT_LEVELS,
    WORKERS_PER_CPU,
)
from diskusage.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE_NAME = "config.json"


def default_concurrency() -> int:
    """Worker pool size proportional to the available CPUs."""
    return (os.cpu_count() or 1) * WORKERS_PER_CPU


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.
    This dictionary drives the behavior of the pipeline engine.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Input
        "root_path": os.getcwd(),
        "load_path": "",

        # Scan
        "concurrency": default_concurrency(),

        # Report layout
        "levels": DEFAULT_LEVELS,
        "show_user": False,
        "show_group": False,
        "show_files": False,
        "raw_bytes": False,
        "size_width": 0,
        "files_width": 0,
        "top_n": 0,

        # Snapshot output
        "json_output": "",
        "gzip_output": False,
    }


def get_config_path() -> str:
    """Absolute path of the persisted configuration file."""
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the persisted configuration, filling gaps with defaults.

    A missing file is normal. An unreadable or malformed file is logged and
    ignored so that a broken preference file never blocks a scan.

    Args:
        path: Optional override of the configuration file location.

    Returns:
        Dict[str, Any]: Defaults updated with the stored values.
    """
    config_path = path or get_config_path()
    defaults = get_default_config()

    if not os.path.exists(config_path):
        return defaults

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable config '{config_path}': {e}")
        return defaults

    if not isinstance(data, dict):
        logger.warning(f"Ignoring config '{config_path}': top-level value is not an object.")
        return defaults

    stored = data.get("settings", data)
    if isinstance(stored, dict):
        defaults.update({k: v for k, v in stored.items() if k in defaults})
    return defaults


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> str:
    """
    Persist the reusable part of a configuration to disk.

    Per-run values (root, snapshot targets) are not stored.

    Args:
        config: Configuration dictionary to persist.
        path: Optional override of the configuration file location.

    Returns:
        str: Path of the written file.

    Raises:
        OSError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    transient = {"root_path", "load_path", "json_output"}
    payload = {
        "version": CURRENT_CONFIG_VERSION,
        "settings": {k: v for k, v in config.items() if k not in transient},
    }
    parent = os.path.dirname(os.path.abspath(config_path))
    os.makedirs(parent, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    logger.debug(f"Configuration saved to {config_path}")
    return config_path
