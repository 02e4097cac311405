from __future__ import annotations

"""
Owner and Group Name Resolution Service.

Pluggable translation between numeric uid/gid values and display names. The
system implementation reads the passwd and group databases; every failure is
reported as 'unresolved' (None) and never raised, so a broken name service
only degrades output to numeric identifiers.
"""

import logging
import os
from typing import Callable, Dict, Optional, Tuple

from diskusage.domain.aggregate_models import DirOwner

try:
    import grp
    import pwd
except ImportError:  # Windows has no passwd/group databases
    grp = None  # type: ignore[assignment]
    pwd = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# RESOLVER INTERFACE
# -----------------------------------------------------------------------------

class NameResolver:
    """
    Base resolver: resolves nothing.

    Subclasses override the lookups they can answer. Lookups return None when
    the identity is unknown.
    """

    def user_name(self, uid: int) -> Optional[str]:
        return None

    def group_name(self, gid: int) -> Optional[str]:
        return None

    def user_id(self, name: str) -> Optional[int]:
        return None

    def group_id(self, name: str) -> Optional[int]:
        return None


class SystemNameResolver(NameResolver):
    """Resolver backed by the platform passwd and group databases."""

    def user_name(self, uid: int) -> Optional[str]:
        if pwd is None:
            return None
        try:
            return pwd.getpwuid(uid).pw_name
        except (KeyError, OverflowError):
            return None

    def group_name(self, gid: int) -> Optional[str]:
        if grp is None:
            return None
        try:
            return grp.getgrgid(gid).gr_name
        except (KeyError, OverflowError):
            return None

    def user_id(self, name: str) -> Optional[int]:
        if pwd is None:
            return None
        try:
            return pwd.getpwnam(name).pw_uid
        except KeyError:
            return None

    def group_id(self, name: str) -> Optional[int]:
        if grp is None:
            return None
        try:
            return grp.getgrnam(name).gr_gid
        except KeyError:
            return None


class CachingNameResolver(NameResolver):
    """
    Memoizing wrapper around another resolver.

    Not thread-safe: each scan worker owns its own instance, so no lock is
    needed and no cache is shared across threads. Negative results are cached
    as well.
    """

    def __init__(self, inner: NameResolver) -> None:
        self._inner = inner
        self._users: Dict[int, Optional[str]] = {}
        self._groups: Dict[int, Optional[str]] = {}

    def user_name(self, uid: int) -> Optional[str]:
        if uid not in self._users:
            self._users[uid] = self._inner.user_name(uid)
        return self._users[uid]

    def group_name(self, gid: int) -> Optional[str]:
        if gid not in self._groups:
            self._groups[gid] = self._inner.group_name(gid)
        return self._groups[gid]

    def user_id(self, name: str) -> Optional[int]:
        return self._inner.user_id(name)

    def group_id(self, name: str) -> Optional[int]:
        return self._inner.group_id(name)


# -----------------------------------------------------------------------------
# PUBLIC HELPERS
# -----------------------------------------------------------------------------

def default_resolver() -> NameResolver:
    """Resolver used when the caller does not inject one."""
    return SystemNameResolver()


def display_name(name: Optional[str], numeric_id: int) -> str:
    """Aggregate key of an identity: its name, or the decimal id when unresolved."""
    return name if name else str(numeric_id)


def stat_owner(path: str, resolver: NameResolver) -> Optional[DirOwner]:
    """
    Read the ownership of a path without following symbolic links.

    Names stay empty when they cannot be resolved.

    Args:
        path: Absolute filesystem path.
        resolver: Name resolution service.

    Returns:
        Optional[DirOwner]: Ownership record, or None if the path cannot be stat'ed.
    """
    try:
        st = os.lstat(path)
    except OSError as e:
        logger.debug(f"Owner lookup skipped for {path}: {e}")
        return None

    uid = getattr(st, "st_uid", 0)
    gid = getattr(st, "st_gid", 0)
    return DirOwner(
        uid=uid,
        gid=gid,
        user=resolver.user_name(uid) or "",
        group=resolver.group_name(gid) or "",
    )


def resolve_identity(
        key: str,
        by_name: Callable[[str], Optional[int]],
        by_id: Callable[[int], Optional[str]],
) -> Tuple[str, int]:
    """
    Recover the display name and numeric id behind an aggregate key.

    The key was produced at scan time and is either a resolved name or the
    decimal id of an identity that did not resolve. Lookup order: by name,
    then by numeric id, then the number itself.

    Args:
        key: Owner or group aggregate key.
        by_name: Name to id lookup.
        by_id: Id to name lookup.

    Returns:
        Tuple[str, int]: (display name, numeric id); the id is 0 when unknown.
    """
    numeric = by_name(key)
    if numeric is not None:
        return key, numeric

    if not key.isdigit():
        return key, 0

    value = int(key)
    name = by_id(value)
    return (name or key), value
