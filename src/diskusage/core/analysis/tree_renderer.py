from __future__ import annotations

"""
Report Renderer.

Converts an AggregateView into the terminal report: a header row, the
directory tree drawn with box connectors (largest child first, limited to a
depth), and the per-user and per-group summaries.
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from diskusage.core.aggregation.widths import ColumnLayout
from diskusage.core.services.names import NameResolver, display_name, stat_owner
from diskusage.domain.aggregate_models import AggregateView, DirOwner, Totals
from diskusage.domain.constants import (
    DEFAULT_LEVELS,
    OWNER_COLUMN_WIDTH,
    ROOT_KEY,
    SUMMARY_NAME_WIDTH,
)
from diskusage.infra.fs import rel_to_abs


@dataclass(frozen=True)
class ReportOptions:
    """
    Presentation switches of the terminal report.

    Attributes:
        levels: Tree depth below the root (0 = root only).
        show_files: Add the files column.
        show_user: Add the directory owner column.
        show_group: Add the directory group column.
        top_n: Rows per summary section (0 = all).
    """
    levels: int = DEFAULT_LEVELS
    show_files: bool = False
    show_user: bool = False
    show_group: bool = False
    top_n: int = 0


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_report(
        view: AggregateView,
        layout: ColumnLayout,
        options: ReportOptions,
        root_abs: str,
        resolver: NameResolver,
) -> List[str]:
    """
    Render the complete report as a list of lines.

    Directory ownership is taken from the view when it carries stored
    ownership (snapshot replay); otherwise each displayed directory is
    lstat'ed live.

    Args:
        view: Aggregated totals.
        layout: Pre-rendered size strings and column widths.
        options: Presentation switches.
        root_abs: Absolute root path, shown on the root row.
        resolver: Name resolution service for live ownership lookups.

    Returns:
        List[str]: Report lines without trailing newlines.
    """
    lines: List[str] = [_row(options, layout, "Size", "Files", "User", "Group", "Path")]

    ordered = _order_children(view.children, view.dirs)
    _render_dir(
        ROOT_KEY, 0, "", True, lines,
        view=view, layout=layout, options=options,
        children=ordered, root_abs=root_abs, resolver=resolver,
    )

    lines.append("")
    lines.append("Per-user summary:")
    lines.extend(_summary_rows(view.users, layout.user_sizes, layout, options.top_n))

    lines.append("")
    lines.append("Per-group summary:")
    lines.extend(_summary_rows(view.groups, layout.group_sizes, layout, options.top_n))

    return lines


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TREE
# -----------------------------------------------------------------------------

def _render_dir(
        rel: str,
        level: int,
        prefix: str,
        is_last: bool,
        lines: List[str],
        *,
        view: AggregateView,
        layout: ColumnLayout,
        options: ReportOptions,
        children: Dict[str, List[str]],
        root_abs: str,
        resolver: NameResolver,
) -> None:
    totals = view.dirs.get(rel, Totals())
    size_text = layout.dir_sizes.get(rel, str(totals.size))

    user_text = group_text = ""
    if options.show_user or options.show_group:
        owner = _owner_of(rel, view, root_abs, resolver)
        if owner is not None:
            user_text = display_name(owner.user, owner.uid)
            group_text = display_name(owner.group, owner.gid)

    if level == 0:
        name = root_abs
    else:
        connector = "└── " if is_last else "├── "
        name = prefix + connector + os.path.basename(rel)

    lines.append(_row(options, layout, size_text, str(totals.files), user_text, group_text, name))

    if level >= options.levels:
        return

    kids = children.get(rel, [])
    child_prefix = prefix + ("    " if is_last else "│   ")
    for i, kid in enumerate(kids):
        _render_dir(
            kid, level + 1, child_prefix, i == len(kids) - 1, lines,
            view=view, layout=layout, options=options,
            children=children, root_abs=root_abs, resolver=resolver,
        )


def _order_children(
        children: Mapping[str, List[str]],
        dirs: Mapping[str, Totals],
) -> Dict[str, List[str]]:
    """Largest child first; equal sizes fall back to key order."""
    def key(k: str):
        return -dirs.get(k, Totals()).size, k

    return {parent: sorted(kids, key=key) for parent, kids in children.items()}


def _owner_of(
        rel: str,
        view: AggregateView,
        root_abs: str,
        resolver: NameResolver,
) -> Optional[DirOwner]:
    if rel in view.dir_owners:
        return view.dir_owners[rel]
    return stat_owner(rel_to_abs(root_abs, rel), resolver)


def _row(
        options: ReportOptions,
        layout: ColumnLayout,
        size: str,
        files: str,
        user: str,
        group: str,
        path: str,
) -> str:
    cols = [f"{size:>{layout.size_width}}"]
    if options.show_files:
        cols.append(f"{files:>{layout.files_width}}")
    if options.show_user:
        cols.append(f"{user:<{OWNER_COLUMN_WIDTH}}")
    if options.show_group:
        cols.append(f"{group:<{OWNER_COLUMN_WIDTH}}")
    cols.append(path)
    return " ".join(cols)


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: SUMMARIES
# -----------------------------------------------------------------------------

def _summary_rows(
        table: Mapping[str, Totals],
        sizes: Mapping[str, str],
        layout: ColumnLayout,
        top_n: int,
) -> List[str]:
    names = sorted(table, key=lambda n: (-table[n].size, n))
    if 0 < top_n < len(names):
        names = names[:top_n]

    rows = []
    for name in names:
        totals = table[name]
        size_text = sizes.get(name, str(totals.size))
        rows.append(
            f"{name:<{SUMMARY_NAME_WIDTH}} {size_text:>{layout.size_width}} "
            f"{totals.files:>{layout.files_width}} files"
        )
    return rows
