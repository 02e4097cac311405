from __future__ import annotations

"""
Unit tests for the Configuration Validator.

Verifies:
1. Default value injection.
2. Type coercion (String to Bool/Int).
3. Range checks and the concurrency fallback.
4. Strict mode validation.
"""

import pytest

from diskusage.core.pipeline.stages.validator import validate_config
from diskusage.domain.config import default_concurrency


def test_validate_none_returns_defaults() -> None:
    """Passing None should return the full default configuration."""
    cfg, warnings = validate_config(None)

    assert cfg["levels"] == 2
    assert cfg["show_user"] is False
    assert cfg["concurrency"] == default_concurrency()
    assert len(warnings) == 1


def test_validate_complete_dict_is_unchanged(mock_config_dict) -> None:
    cfg, warnings = validate_config(mock_config_dict)

    assert cfg == mock_config_dict
    assert warnings == []


def test_validate_converts_strings() -> None:
    raw = {"show_user": "yes", "raw_bytes": "0", "levels": "3", "top_n": " 5 "}
    cfg, warnings = validate_config(raw)

    assert cfg["show_user"] is True
    assert cfg["raw_bytes"] is False
    assert cfg["levels"] == 3
    assert cfg["top_n"] == 5
    assert len(warnings) == 4


def test_validate_rejects_negative_ints() -> None:
    cfg, warnings = validate_config({"levels": -1, "size_width": -3})

    assert cfg["levels"] == 2
    assert cfg["size_width"] == 0
    assert len(warnings) == 2


def test_non_positive_concurrency_uses_default() -> None:
    cfg, warnings = validate_config({"concurrency": 0})

    assert cfg["concurrency"] == default_concurrency()
    assert warnings == []


def test_unknown_keys_are_dropped() -> None:
    cfg, _ = validate_config({"not_a_setting": 1})
    assert "not_a_setting" not in cfg


def test_blank_strings_fall_back() -> None:
    cfg, _ = validate_config({"json_output": "   "})
    assert cfg["json_output"] == ""


def test_strict_mode_raises_on_type_mismatch() -> None:
    with pytest.raises(TypeError):
        validate_config({"show_files": "maybe"}, strict=True)

    with pytest.raises(TypeError):
        validate_config({"levels": "3"}, strict=True)

    with pytest.raises(TypeError):
        validate_config(["not", "a", "dict"], strict=True)


def test_strict_mode_raises_on_range_violation() -> None:
    with pytest.raises(ValueError):
        validate_config({"top_n": -2}, strict=True)


def test_bool_is_not_an_int() -> None:
    cfg, warnings = validate_config({"levels": True})
    assert cfg["levels"] == 2
    assert len(warnings) == 1
