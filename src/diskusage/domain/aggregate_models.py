from __future__ import annotations

"""
Aggregate Domain Data Models.

Defines the value types shared by the scan engine, the snapshot codec and the
report renderer: per-key totals, directory ownership records and the
immutable view of a completed aggregation.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from diskusage.domain.constants import ROOT_KEY

# -----------------------------------------------------------------------------
# VALUE TYPES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Totals:
    """
    Cumulative byte size and file count of one aggregate key.

    Attributes:
        size: Total bytes attributed to the key.
        files: Number of files attributed to the key.
    """
    size: int = 0
    files: int = 0


@dataclass(frozen=True)
class DirOwner:
    """
    Ownership of a single directory inode.

    Names are empty when the numeric identifier could not be resolved.

    Attributes:
        uid: Numeric owner identifier.
        gid: Numeric group identifier.
        user: Resolved owner name.
        group: Resolved group name.
    """
    uid: int = 0
    gid: int = 0
    user: str = ""
    group: str = ""


# -----------------------------------------------------------------------------
# AGGREGATE VIEW
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AggregateView:
    """
    Read-only picture of a finished aggregation.

    Produced either by the live scan (AggregationStore.snapshot) or by decoding
    a persisted snapshot. Both sources expose the same shape so the width
    resolver and the renderer never need to know where the data came from.

    Attributes:
        dirs: Directory totals keyed by path relative to the root ('.' = root).
        users: Owner totals keyed by display name.
        groups: Group totals keyed by display name.
        children: Direct child directory keys per directory key.
        dir_owners: Ownership recorded per directory (snapshot-derived only).
        user_ids: Numeric uid per owner name (snapshot-derived only).
        group_ids: Numeric gid per group name (snapshot-derived only).
    """
    dirs: Dict[str, Totals]
    users: Dict[str, Totals]
    groups: Dict[str, Totals]
    children: Dict[str, List[str]]
    dir_owners: Dict[str, DirOwner] = field(default_factory=dict)
    user_ids: Dict[str, int] = field(default_factory=dict)
    group_ids: Dict[str, int] = field(default_factory=dict)

    @property
    def root(self) -> Totals:
        """Totals of the scan root, zero when nothing was attributed."""
        return self.dirs.get(ROOT_KEY, Totals())
