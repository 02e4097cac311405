from __future__ import annotations

"""
Unit tests for the column-width resolver.

Verifies:
1. Floors of the size and files columns.
2. Maximum taken across directories, owners and groups.
3. Overrides replacing the computed width outright.
"""

from diskusage.core.aggregation.widths import compute_column_layout
from diskusage.domain.aggregate_models import Totals


def test_floors_apply_to_small_values() -> None:
    layout = compute_column_layout({".": Totals(5, 1)}, {}, {})
    assert layout.dir_sizes == {".": "5B"}
    assert layout.size_width == 4
    assert layout.files_width == 3


def test_widest_value_across_sections_wins() -> None:
    dirs = {".": Totals(1536, 3)}
    users = {"alice": Totals(123456789, 12345)}
    groups = {"staff": Totals(10, 1)}

    layout = compute_column_layout(dirs, users, groups, raw_bytes=True)

    assert layout.user_sizes["alice"] == "123456789"
    assert layout.size_width == 9
    assert layout.files_width == 5


def test_humanized_width() -> None:
    layout = compute_column_layout({".": Totals(1536, 1), "a": Totals(1048576 * 700, 1)}, {}, {})
    assert layout.dir_sizes["a"] == "700.0MB"
    assert layout.size_width == len("700.0MB")


def test_override_replaces_computed_width() -> None:
    dirs = {".": Totals(123456789, 12345)}
    layout = compute_column_layout(
        dirs, {}, {}, raw_bytes=True, size_width_override=6, files_width_override=12
    )
    assert layout.size_width == 6
    assert layout.files_width == 12


def test_floors_apply_after_override() -> None:
    dirs = {".": Totals(123456789, 12345)}
    layout = compute_column_layout(
        dirs, {}, {}, raw_bytes=True, size_width_override=2, files_width_override=1
    )
    assert (layout.size_width, layout.files_width) == (4, 3)


def test_zero_override_means_auto() -> None:
    layout = compute_column_layout({".": Totals(1, 1)}, {}, {}, size_width_override=0)
    assert layout.size_width == 4
