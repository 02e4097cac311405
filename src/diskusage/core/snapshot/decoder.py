from __future__ import annotations

"""
Snapshot Decoder.

Reads a snapshot from standard input, a path or an open binary stream. The
first two bytes are read (retrying short reads) and replayed in front of the
rest of the source to decide between gzip and plain JSON, so non-seekable
sources such as pipes and sockets work. The decoded document can be
turned back into an AggregateView that behaves exactly like a live scan.
"""

import gzip
import io
import json
import logging
import sys
import zlib
from typing import Any, BinaryIO, Dict, Union

from diskusage.core.aggregation.store import build_children_index
from diskusage.domain.aggregate_models import AggregateView, DirOwner, Totals
from diskusage.domain.constants import GZIP_MAGIC, ROOT_KEY, STDIO_MARKER
from diskusage.domain.errors import SnapshotDecodeError
from diskusage.domain.snapshot_models import SnapshotDocument

logger = logging.getLogger(__name__)

_DECODE_ERRORS = (
    ValueError,  # JSONDecodeError, UnicodeDecodeError, gzip.BadGzipFile, schema
    EOFError,
    zlib.error,
    OSError,
)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def load_snapshot(source: Union[str, BinaryIO]) -> SnapshotDocument:
    """
    Decode a snapshot document.

    Args:
        source: '-' for standard input, a filesystem path, or an open binary
                stream (left open).

    Returns:
        SnapshotDocument: The validated document.

    Raises:
        SnapshotDecodeError: On unreadable input, broken gzip framing,
                             non-UTF-8 text, invalid JSON or a schema violation.
    """
    if isinstance(source, str) and source != STDIO_MARKER:
        name = source
        try:
            with open(source, "rb") as f:
                doc = _decode_stream(f)
        except _DECODE_ERRORS as e:
            raise SnapshotDecodeError(name, str(e)) from e
    else:
        if isinstance(source, str):
            name, stream = STDIO_MARKER, sys.stdin.buffer
        else:
            name, stream = getattr(source, "name", "<stream>"), source
        try:
            doc = _decode_stream(stream)
        except _DECODE_ERRORS as e:
            raise SnapshotDecodeError(str(name), str(e)) from e

    logger.info(
        f"Snapshot loaded from {name}: {len(doc.dirs)} dirs, "
        f"{len(doc.users)} users, {len(doc.groups)} groups."
    )
    return doc


def document_to_view(doc: SnapshotDocument) -> AggregateView:
    """
    Rebuild the aggregate view recorded in a snapshot.

    Directories are keyed by their 'rel' field, owners and groups by name.
    Duplicate keys merge additively. The root key is always present.

    Args:
        doc: Decoded snapshot document.

    Returns:
        AggregateView: View with stored ownership and ids attached.
    """
    dirs: Dict[str, Totals] = {}
    owners: Dict[str, DirOwner] = {}
    for d in doc.dirs:
        dirs[d.rel] = _merge(dirs.get(d.rel), d.size, d.files)
        owners[d.rel] = DirOwner(uid=d.uid, gid=d.gid, user=d.user, group=d.group)
    dirs.setdefault(ROOT_KEY, Totals())
    owners.setdefault(ROOT_KEY, DirOwner())

    users: Dict[str, Totals] = {}
    user_ids: Dict[str, int] = {}
    for u in doc.users:
        users[u.name] = _merge(users.get(u.name), u.size, u.files)
        user_ids[u.name] = u.uid

    groups: Dict[str, Totals] = {}
    group_ids: Dict[str, int] = {}
    for g in doc.groups:
        groups[g.name] = _merge(groups.get(g.name), g.size, g.files)
        group_ids[g.name] = g.gid

    return AggregateView(
        dirs=dirs,
        users=users,
        groups=groups,
        children=build_children_index(dirs.keys()),
        dir_owners=owners,
        user_ids=user_ids,
        group_ids=group_ids,
    )


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _decode_stream(stream: BinaryIO) -> SnapshotDocument:
    head = _read_prefix(stream, len(GZIP_MAGIC))
    buffered = io.BufferedReader(_ReplayStream(head, stream))

    if head == GZIP_MAGIC:
        logger.debug("Gzip framing detected.")
        binary: Any = gzip.GzipFile(fileobj=buffered, mode="rb")
    else:
        binary = buffered

    text = io.TextIOWrapper(binary, encoding="utf-8")
    try:
        data = json.load(text)
    finally:
        text.detach()

    return SnapshotDocument.from_dict(data)


def _read_prefix(stream: BinaryIO, size: int) -> bytes:
    """Read exactly size bytes unless EOF comes first; raw reads may be short."""
    head = b""
    while len(head) < size:
        chunk = stream.read(size - len(head))
        if not chunk:
            break
        head += chunk
    return head


class _ReplayStream(io.RawIOBase):
    """
    Raw stream that serves already-read leading bytes, then the rest of the source.

    Closing it leaves the source open; the caller owns the source.
    """

    def __init__(self, prefix: bytes, source: BinaryIO) -> None:
        super().__init__()
        self._prefix = prefix
        self._source = source

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        if self._prefix:
            n = min(len(buffer), len(self._prefix))
            buffer[:n] = self._prefix[:n]
            self._prefix = self._prefix[n:]
            return n
        data = self._source.read(len(buffer)) or b""
        n = len(data)
        buffer[:n] = data
        return n


def _merge(existing: Any, size: int, files: int) -> Totals:
    if existing is None:
        return Totals(size=size, files=files)
    return Totals(size=existing.size + size, files=existing.files + files)

