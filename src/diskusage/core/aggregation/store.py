from __future__ import annotations

"""
Aggregation Store.

Shared mutable state of a scan: per-directory, per-owner and per-group
totals. Worker threads fold one file at a time into the store; a single lock
guards the three mappings and is held only for the additive fold, never for
filesystem or name-service calls.
"""

import threading
from typing import Dict, Iterable, List

from diskusage.domain.aggregate_models import AggregateView, Totals
from diskusage.domain.constants import ROOT_KEY
from diskusage.infra.fs import parent_key

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

class AggregationStore:
    """
    Thread-safe accumulator of directory, owner and group totals.

    Directory entries are created lazily the first time a descendant file is
    attributed to them. Nothing is ever removed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # key -> [size, files]
        self._dirs: Dict[str, List[int]] = {}
        self._users: Dict[str, List[int]] = {}
        self._groups: Dict[str, List[int]] = {}

    def fold(self, directory_rel: str, owner_key: str, group_key: str, size: int) -> None:
        """
        Attribute one file to its directory, every ancestor, its owner and its group.

        Args:
            directory_rel: Root-relative key of the directory holding the file.
            owner_key: Display name (or numeric id string) of the file owner.
            group_key: Display name (or numeric id string) of the file group.
            size: File size in bytes.
        """
        chain = _ancestor_chain(directory_rel)
        with self._lock:
            for key in chain:
                _bump(self._dirs, key, size)
            _bump(self._users, owner_key, size)
            _bump(self._groups, group_key, size)

    def snapshot(self) -> AggregateView:
        """
        Deep-copy the current totals into an immutable view.

        Only meaningful once every worker has drained; intermediate views of a
        running scan are not consistent across directories.

        The root key is always present, with zero totals for a tree without files.

        Returns:
            AggregateView: Copied totals plus the children index.
        """
        with self._lock:
            dirs = _freeze(self._dirs)
            users = _freeze(self._users)
            groups = _freeze(self._groups)
        dirs.setdefault(ROOT_KEY, Totals())

        return AggregateView(
            dirs=dirs,
            users=users,
            groups=groups,
            children=build_children_index(dirs.keys()),
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._dirs)


def build_children_index(keys: Iterable[str]) -> Dict[str, List[str]]:
    """
    Map every directory key to its direct child directory keys.

    Every key gets an entry (leaves map to an empty list) and the root is
    always present. Ancestors missing from the input are linked in, so every
    key is reachable from the root. Child lists are sorted by key.

    Args:
        keys: Root-relative directory keys.

    Returns:
        Dict[str, List[str]]: Parent key -> sorted child keys.
    """
    children: Dict[str, List[str]] = {ROOT_KEY: []}
    for key in keys:
        if key in children:
            continue
        children[key] = []
        # Link the key and any unlisted ancestors up to the root
        while True:
            parent = parent_key(key)
            linked = parent in children
            children.setdefault(parent, []).append(key)
            if linked:
                break
            key = parent

    for kids in children.values():
        kids.sort()
    return children


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _ancestor_chain(directory_rel: str) -> List[str]:
    """Keys from the directory itself up to and including the root."""
    chain = [directory_rel]
    key = directory_rel
    while key != ROOT_KEY:
        key = parent_key(key)
        chain.append(key)
    return chain


def _bump(table: Dict[str, List[int]], key: str, size: int) -> None:
    entry = table.get(key)
    if entry is None:
        table[key] = [size, 1]
    else:
        entry[0] += size
        entry[1] += 1


def _freeze(table: Dict[str, List[int]]) -> Dict[str, Totals]:
    return {key: Totals(size=v[0], files=v[1]) for key, v in table.items()}
