from __future__ import annotations

"""
Snapshot Document Models.

Typed records of the persisted snapshot wire format. Each record knows how to
render itself as an ordered JSON-ready dictionary (applying the omit-if-zero and
omit-if-empty rules of the format) and how to rebuild itself from a decoded
dictionary, rejecting anything that violates the schema.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# uid_t / gid_t upper bound
_MAX_ID = 2 ** 32 - 1

_STATS_CORE_KEYS = (
    "started_at",
    "ended_at",
    "runtime_seconds",
    "runtime",
    "dirs_scanned",
    "files_scanned",
    "version",
)

# -----------------------------------------------------------------------------
# ENTRY RECORDS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SnapshotDir:
    """
    One directory of the snapshot.

    Attributes:
        path: Absolute directory path.
        rel: Path relative to the scan root ('.' for the root itself).
        size: Cumulative bytes below the directory.
        files: Cumulative file count below the directory.
        uid: Owner id of the directory inode (omitted when zero).
        user: Owner name (omitted when empty).
        gid: Group id of the directory inode (omitted when zero).
        group: Group name (omitted when empty).
    """
    path: str
    rel: str
    size: int
    files: int
    uid: int = 0
    user: str = ""
    gid: int = 0
    group: str = ""

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "path": self.path,
            "rel": self.rel,
            "size": self.size,
            "files": self.files,
        }
        if self.uid:
            out["uid"] = self.uid
        if self.user:
            out["user"] = self.user
        if self.gid:
            out["gid"] = self.gid
        if self.group:
            out["group"] = self.group
        return out

    @classmethod
    def from_dict(cls, data: Any, where: str) -> SnapshotDir:
        obj = _require_object(data, where)
        return cls(
            path=_require_str(obj, "path", where),
            rel=_require_str(obj, "rel", where),
            size=_require_int(obj, "size", where),
            files=_require_int(obj, "files", where),
            uid=_optional_id(obj, "uid", where),
            user=_optional_str(obj, "user", where),
            gid=_optional_id(obj, "gid", where),
            group=_optional_str(obj, "group", where),
        )


@dataclass(frozen=True)
class SnapshotUser:
    """Owner totals across the whole tree."""
    name: str
    size: int
    files: int
    uid: int = 0

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "size": self.size, "files": self.files}
        if self.uid:
            out["uid"] = self.uid
        return out

    @classmethod
    def from_dict(cls, data: Any, where: str) -> SnapshotUser:
        obj = _require_object(data, where)
        return cls(
            name=_require_str(obj, "name", where),
            size=_require_int(obj, "size", where),
            files=_require_int(obj, "files", where),
            uid=_optional_id(obj, "uid", where),
        )


@dataclass(frozen=True)
class SnapshotGroup:
    """Group totals across the whole tree."""
    name: str
    size: int
    files: int
    gid: int = 0

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "size": self.size, "files": self.files}
        if self.gid:
            out["gid"] = self.gid
        return out

    @classmethod
    def from_dict(cls, data: Any, where: str) -> SnapshotGroup:
        obj = _require_object(data, where)
        return cls(
            name=_require_str(obj, "name", where),
            size=_require_int(obj, "size", where),
            files=_require_int(obj, "files", where),
            gid=_optional_id(obj, "gid", where),
        )


# -----------------------------------------------------------------------------
# RUN STATISTICS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SnapshotStats:
    """
    Run statistics block.

    The core fields are always written. Diagnostic counters live in an ordered
    mapping so that counters written by other producers survive a decode and
    re-encode cycle; zero or empty diagnostics are omitted on output.
    """
    started_at: str = ""
    ended_at: str = ""
    runtime_seconds: float = 0.0
    runtime: str = ""
    dirs_scanned: int = 0
    files_scanned: int = 0
    version: str = ""
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "runtime_seconds": self.runtime_seconds,
            "runtime": self.runtime,
            "dirs_scanned": self.dirs_scanned,
            "files_scanned": self.files_scanned,
        }
        for key, value in self.diagnostics.items():
            if value:
                out[key] = value
        out["version"] = self.version
        return out

    @classmethod
    def from_dict(cls, data: Any) -> SnapshotStats:
        where = "stats"
        obj = _require_object(data, where)

        runtime_seconds = obj.get("runtime_seconds", 0.0)
        if isinstance(runtime_seconds, bool) or not isinstance(runtime_seconds, (int, float)):
            raise ValueError(f"{where}.runtime_seconds: expected number")

        diagnostics: Dict[str, Any] = {}
        for key, value in obj.items():
            if key in _STATS_CORE_KEYS:
                continue
            if value is not None and not isinstance(value, (str, int, float)):
                raise ValueError(f"{where}.{key}: expected scalar diagnostic value")
            diagnostics[key] = value

        return cls(
            started_at=_optional_str(obj, "started_at", where),
            ended_at=_optional_str(obj, "ended_at", where),
            runtime_seconds=float(runtime_seconds),
            runtime=_optional_str(obj, "runtime", where),
            dirs_scanned=_optional_int(obj, "dirs_scanned", where),
            files_scanned=_optional_int(obj, "files_scanned", where),
            version=_optional_str(obj, "version", where),
            diagnostics=diagnostics,
        )


# -----------------------------------------------------------------------------
# DOCUMENT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SnapshotDocument:
    """
    Complete snapshot: root path, run statistics and the three sections.

    Sections are expected in canonical order (dirs by path, users and groups by
    name); the encoder never re-sorts a document it is handed.
    """
    root: str
    stats: SnapshotStats
    dirs: List[SnapshotDir] = field(default_factory=list)
    users: List[SnapshotUser] = field(default_factory=list)
    groups: List[SnapshotGroup] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Materialize the whole document. Used for small documents and tests."""
        return {
            "root": self.root,
            "stats": self.stats.to_dict(),
            "dirs": [d.to_dict() for d in self.dirs],
            "users": [u.to_dict() for u in self.users],
            "groups": [g.to_dict() for g in self.groups],
        }

    @classmethod
    def from_dict(cls, data: Any) -> SnapshotDocument:
        """
        Rebuild a document from decoded JSON.

        Args:
            data: Result of json.load on a snapshot source.

        Returns:
            SnapshotDocument: The validated document.

        Raises:
            ValueError: If any field is missing or of the wrong type.
        """
        obj = _require_object(data, "document")
        root = _require_str(obj, "root", "document")
        if "stats" not in obj:
            raise ValueError("document.stats: missing")
        stats = SnapshotStats.from_dict(obj["stats"])

        dirs = [SnapshotDir.from_dict(item, f"dirs[{i}]")
                for i, item in enumerate(_optional_list(obj, "dirs"))]
        users = [SnapshotUser.from_dict(item, f"users[{i}]")
                 for i, item in enumerate(_optional_list(obj, "users"))]
        groups = [SnapshotGroup.from_dict(item, f"groups[{i}]")
                  for i, item in enumerate(_optional_list(obj, "groups"))]

        return cls(root=root, stats=stats, dirs=dirs, users=users, groups=groups)


# ==============================================================================
# PRIVATE HELPERS: SCHEMA CHECKS
# ==============================================================================

def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _require_object(data: Any, where: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{where}: expected object, got {type(data).__name__}")
    return data


def _require_str(obj: Dict[str, Any], key: str, where: str) -> str:
    if key not in obj:
        raise ValueError(f"{where}.{key}: missing")
    value = obj[key]
    if not isinstance(value, str):
        raise ValueError(f"{where}.{key}: expected string")
    return value


def _require_int(obj: Dict[str, Any], key: str, where: str) -> int:
    if key not in obj:
        raise ValueError(f"{where}.{key}: missing")
    value = obj[key]
    if not _is_int(value):
        raise ValueError(f"{where}.{key}: expected integer")
    return value


def _optional_str(obj: Dict[str, Any], key: str, where: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{where}.{key}: expected string")
    return value


def _optional_int(obj: Dict[str, Any], key: str, where: str) -> int:
    value = obj.get(key)
    if value is None:
        return 0
    if not _is_int(value):
        raise ValueError(f"{where}.{key}: expected integer")
    return value


def _optional_id(obj: Dict[str, Any], key: str, where: str) -> int:
    value = _optional_int(obj, key, where)
    if not 0 <= value <= _MAX_ID:
        raise ValueError(f"{where}.{key}: out of uint32 range")
    return value


def _optional_list(obj: Dict[str, Any], key: str) -> List[Any]:
    value: Optional[Any] = obj.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"document.{key}: expected array")
    return value
