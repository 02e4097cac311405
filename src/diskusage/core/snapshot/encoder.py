from __future__ import annotations

"""
Snapshot Encoder.

Turns an aggregate view into a SnapshotDocument and streams it as
two-space-indented JSON, optionally gzip framed. Sections are written one
element at a time, so only a single entry is ever materialized as text; the
bytes produced are identical to json.dumps(document, indent=2) plus a
trailing newline.
"""

import gzip
import io
import json
import logging
import sys
from datetime import datetime
from typing import Any, List, Optional, TextIO

from diskusage.core.analysis.size_format import format_duration
from diskusage.core.services.names import NameResolver, resolve_identity, stat_owner
from diskusage.domain.aggregate_models import AggregateView, DirOwner
from diskusage.domain.constants import STDIO_MARKER
from diskusage.domain.errors import SnapshotWriteError
from diskusage.domain.run_models import RunMetadata
from diskusage.domain.snapshot_models import (
    SnapshotDir,
    SnapshotDocument,
    SnapshotGroup,
    SnapshotStats,
    SnapshotUser,
)
from diskusage.infra.fs import add_gz_ext, rel_to_abs

logger = logging.getLogger(__name__)

_MAX_ID = 2 ** 32 - 1
_INDENT = "  "

# -----------------------------------------------------------------------------
# DOCUMENT CONSTRUCTION
# -----------------------------------------------------------------------------

def build_document(
        view: AggregateView,
        metadata: Optional[RunMetadata],
        root_abs: str,
        resolver: NameResolver,
        version: str,
        stats: Optional[SnapshotStats] = None,
) -> SnapshotDocument:
    """
    Build a snapshot document from a finished aggregation.

    Directory ownership comes from the view when it was decoded from a
    snapshot; otherwise each directory is lstat'ed live. Owner and group ids
    come from the view when recorded, otherwise from the resolver.

    Args:
        view: Aggregated totals.
        metadata: Run metadata of the scan.
        root_abs: Absolute root path.
        resolver: Name resolution service.
        version: Producer version written into the stats block.
        stats: Stats block to keep instead of deriving one from metadata
               (re-encoding a loaded snapshot).

    Returns:
        SnapshotDocument: Canonically ordered document.
    """
    dirs: List[SnapshotDir] = []
    for rel, totals in view.dirs.items():
        path = rel_to_abs(root_abs, rel)
        if rel in view.dir_owners:
            owner = view.dir_owners[rel]
        else:
            owner = stat_owner(path, resolver) or DirOwner()
        dirs.append(SnapshotDir(
            path=path,
            rel=rel,
            size=totals.size,
            files=totals.files,
            uid=_clamp_id(owner.uid),
            user=owner.user,
            gid=_clamp_id(owner.gid),
            group=owner.group,
        ))
    dirs.sort(key=lambda d: d.path)

    users: List[SnapshotUser] = []
    for key, totals in view.users.items():
        if key in view.user_ids:
            name, uid = key, view.user_ids[key]
        else:
            name, uid = resolve_identity(key, resolver.user_id, resolver.user_name)
        users.append(SnapshotUser(name=name, size=totals.size, files=totals.files, uid=_clamp_id(uid)))
    users.sort(key=lambda u: u.name)

    groups: List[SnapshotGroup] = []
    for key, totals in view.groups.items():
        if key in view.group_ids:
            name, gid = key, view.group_ids[key]
        else:
            name, gid = resolve_identity(key, resolver.group_id, resolver.group_name)
        groups.append(SnapshotGroup(name=name, size=totals.size, files=totals.files, gid=_clamp_id(gid)))
    groups.sort(key=lambda g: g.name)

    return SnapshotDocument(
        root=root_abs,
        stats=stats if stats is not None else build_stats(metadata, version),
        dirs=dirs,
        users=users,
        groups=groups,
    )


def build_stats(metadata: Optional[RunMetadata], version: str) -> SnapshotStats:
    """Render run metadata as the snapshot stats block."""
    if metadata is None:
        return SnapshotStats(version=version)
    start = metadata.memory_start
    end = metadata.memory_end
    runtime = metadata.runtime_seconds

    diagnostics = {
        "mem_rss_bytes": end.rss_bytes,
        "mem_vms_bytes": end.vms_bytes,
        "peak_rss_bytes": max(start.rss_bytes, end.rss_bytes),
        "num_threads": end.num_threads,
        "cpu_user_seconds": end.cpu_user_seconds,
        "cpu_system_seconds": end.cpu_system_seconds,
        "num_gc": end.gc_collections,
        "gc_collected_objects": end.gc_collected,
        "gc_uncollectable_objects": end.gc_uncollectable,
    }

    return SnapshotStats(
        started_at=_rfc3339(metadata.started_at),
        ended_at=_rfc3339(metadata.ended_at),
        runtime_seconds=runtime,
        runtime=format_duration(runtime),
        dirs_scanned=metadata.dirs_scanned,
        files_scanned=metadata.files_scanned,
        version=version,
        diagnostics=diagnostics,
    )


# -----------------------------------------------------------------------------
# STREAMING
# -----------------------------------------------------------------------------

def stream_document(doc: SnapshotDocument, sink: TextIO) -> None:
    """
    Write a document as indented JSON, one section element at a time.

    Args:
        doc: Document to serialize.
        sink: Text stream receiving the output.
    """
    sink.write("{\n")
    sink.write(f'{_INDENT}"root": {_dump(doc.root)},\n')
    sink.write(f'{_INDENT}"stats": {_nest(_dump(doc.stats.to_dict()), 1)},\n')
    _stream_array(sink, "dirs", doc.dirs, last=False)
    _stream_array(sink, "users", doc.users, last=False)
    _stream_array(sink, "groups", doc.groups, last=True)
    sink.write("}\n")


def encode_to_string(doc: SnapshotDocument) -> str:
    """Serialize a document into memory through the streaming encoder."""
    buf = io.StringIO()
    stream_document(doc, buf)
    return buf.getvalue()


def write_snapshot(doc: SnapshotDocument, target: str, compress: bool = False) -> str:
    """
    Write a document to a file or to standard output.

    Args:
        doc: Document to serialize.
        target: Destination path, or '-' for standard output.
        compress: Frame the output as gzip (mtime 0). A '.gz' suffix is
                  appended to file targets that lack one.

    Returns:
        str: The path actually written ('-' for standard output).

    Raises:
        SnapshotWriteError: If the destination cannot be opened or written.
    """
    if target == STDIO_MARKER:
        try:
            if compress:
                _write_gzip(doc, sys.stdout.buffer)
                sys.stdout.buffer.flush()
            else:
                stream_document(doc, sys.stdout)
                sys.stdout.flush()
        except OSError as e:
            raise SnapshotWriteError(target, e) from e
        return target

    path = add_gz_ext(target) if compress else target
    try:
        if compress:
            with open(path, "wb") as raw:
                _write_gzip(doc, raw)
        else:
            with open(path, "w", encoding="utf-8", newline="\n") as f:
                stream_document(doc, f)
    except OSError as e:
        raise SnapshotWriteError(path, e) from e

    logger.info(
        f"Snapshot written to {path}: {len(doc.dirs)} dirs, "
        f"{len(doc.users)} users, {len(doc.groups)} groups."
    )
    return path


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _write_gzip(doc: SnapshotDocument, raw: Any) -> None:
    """
    Stream through gzip into a binary sink that stays open afterwards.

    No file name and a zero mtime go into the header, so equal documents
    always compress to equal bytes.
    """
    with gzip.GzipFile(filename="", fileobj=raw, mode="wb", mtime=0) as gz:
        text = io.TextIOWrapper(gz, encoding="utf-8", newline="\n")
        try:
            stream_document(doc, text)
            text.flush()
        finally:
            text.detach()


def _stream_array(sink: TextIO, name: str, items: List[Any], last: bool) -> None:
    tail = "\n" if last else ",\n"
    if not items:
        sink.write(f'{_INDENT}"{name}": []{tail}')
        return

    sink.write(f'{_INDENT}"{name}": [\n')
    count = len(items)
    for i, item in enumerate(items):
        sep = ",\n" if i < count - 1 else "\n"
        sink.write(_INDENT * 2 + _nest(_dump(item.to_dict()), 2) + sep)
    sink.write(f"{_INDENT}]{tail}")


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2)


def _nest(text: str, depth: int) -> str:
    """Shift every continuation line of a dumped value by depth indent levels."""
    return text.replace("\n", "\n" + _INDENT * depth)


def _clamp_id(value: int) -> int:
    return value if 0 <= value <= _MAX_ID else 0


def _rfc3339(moment: datetime) -> str:
    """Seconds-precision RFC 3339 timestamp; UTC is written as 'Z'."""
    text = moment.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text
