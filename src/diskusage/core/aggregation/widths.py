from __future__ import annotations

"""
Column-Width Resolver.

Computes the size strings of every directory, owner and group, and the widths
needed to right-align the size and files columns across the whole report.
One alignment serves all three sections.
"""

from dataclasses import dataclass
from typing import Dict, Mapping

from diskusage.core.analysis.size_format import format_size
from diskusage.domain.aggregate_models import Totals
from diskusage.domain.constants import MIN_FILES_WIDTH, MIN_SIZE_WIDTH


@dataclass(frozen=True)
class ColumnLayout:
    """
    Pre-rendered size strings and resolved column widths.

    Attributes:
        dir_sizes: Size string per directory key.
        user_sizes: Size string per owner name.
        group_sizes: Size string per group name.
        size_width: Width of the size column.
        files_width: Width of the files column.
    """
    dir_sizes: Dict[str, str]
    user_sizes: Dict[str, str]
    group_sizes: Dict[str, str]
    size_width: int
    files_width: int


def compute_column_layout(
        dirs: Mapping[str, Totals],
        users: Mapping[str, Totals],
        groups: Mapping[str, Totals],
        raw_bytes: bool = False,
        size_width_override: int = 0,
        files_width_override: int = 0,
) -> ColumnLayout:
    """
    Render every size value and derive the shared column widths.

    A positive override replaces the computed width; widths are then floored
    at 4 (size) and 3 (files).

    Args:
        dirs: Directory totals.
        users: Owner totals.
        groups: Group totals.
        raw_bytes: Render sizes as plain integers instead of unit strings.
        size_width_override: Fixed size column width (0 = auto-fit).
        files_width_override: Fixed files column width (0 = auto-fit).

    Returns:
        ColumnLayout: Size strings and the resolved widths.
    """
    size_width = 0
    files_width = 0
    sections = []

    for table in (dirs, users, groups):
        rendered: Dict[str, str] = {}
        for key, totals in table.items():
            text = format_size(totals.size, raw_bytes)
            rendered[key] = text
            size_width = max(size_width, len(text))
            files_width = max(files_width, len(str(totals.files)))
        sections.append(rendered)

    if size_width_override > 0:
        size_width = size_width_override
    if files_width_override > 0:
        files_width = files_width_override

    size_width = max(size_width, MIN_SIZE_WIDTH)
    files_width = max(files_width, MIN_FILES_WIDTH)

    return ColumnLayout(
        dir_sizes=sections[0],
        user_sizes=sections[1],
        group_sizes=sections[2],
        size_width=size_width,
        files_width=files_width,
    )
