from __future__ import annotations

"""
Unit tests for the Config Domain.

Verifies:
1. Default configuration generation.
2. Resilience against corrupted config files.
3. Persistence (Save/Load) without touching real user data.
"""

import json
import os
from unittest.mock import patch

import pytest

from diskusage.domain.config import (
    default_concurrency,
    get_config_path,
    get_default_config,
    load_config,
    save_config,
)
from diskusage.domain.constants import CURRENT_CONFIG_VERSION


@pytest.fixture
def mock_user_data_dir(tmp_path):
    """
    Fixture to mock the user data directory.
    Prevents tests from reading/writing to the real OS user folder.
    """
    config_dir = tmp_path / "DiskUsage"
    config_dir.mkdir()
    with patch("diskusage.domain.config.get_user_data_dir", return_value=str(config_dir)):
        yield config_dir


def test_default_config_shape() -> None:
    cfg = get_default_config()

    assert cfg["root_path"] == os.getcwd()
    assert cfg["levels"] == 2
    assert cfg["concurrency"] == default_concurrency()
    assert cfg["json_output"] == ""
    assert default_concurrency() >= 2


def test_config_path_lives_in_user_data_dir(mock_user_data_dir) -> None:
    assert get_config_path() == str(mock_user_data_dir / "config.json")


def test_load_missing_file_returns_defaults(mock_user_data_dir) -> None:
    assert load_config() == get_default_config()


def test_load_corrupted_file_returns_defaults(mock_user_data_dir) -> None:
    (mock_user_data_dir / "config.json").write_text("{ not json", encoding="utf-8")
    assert load_config() == get_default_config()


def test_load_non_object_returns_defaults(mock_user_data_dir) -> None:
    (mock_user_data_dir / "config.json").write_text("[1, 2]", encoding="utf-8")
    assert load_config() == get_default_config()


def test_load_flat_legacy_layout(mock_user_data_dir) -> None:
    """A file without the 'settings' envelope is read as flat settings."""
    (mock_user_data_dir / "config.json").write_text(
        json.dumps({"levels": 4, "unknown": True}), encoding="utf-8"
    )
    cfg = load_config()

    assert cfg["levels"] == 4
    assert "unknown" not in cfg


def test_save_and_load_roundtrip(mock_user_data_dir) -> None:
    cfg = get_default_config()
    cfg.update({"levels": 5, "show_user": True, "top_n": 3, "json_output": "x.json"})

    path = save_config(cfg)

    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    assert payload["version"] == CURRENT_CONFIG_VERSION
    # Per-run values are not persisted
    assert "root_path" not in payload["settings"]
    assert "json_output" not in payload["settings"]

    loaded = load_config()
    assert loaded["levels"] == 5
    assert loaded["show_user"] is True
    assert loaded["top_n"] == 3
    assert loaded["json_output"] == ""
