from __future__ import annotations

"""
Atomic Scan Worker.

Encapsulates the processing of a single file path: re-stat, ownership
resolution and the fold into the shared aggregation store. Also provides the
queue-draining loop executed by every thread of the worker pool.
"""

import logging
import os
import queue
import threading
from typing import Optional

from diskusage.core.aggregation.store import AggregationStore
from diskusage.core.services.names import CachingNameResolver, NameResolver, display_name
from diskusage.domain.constants import ROOT_KEY

logger = logging.getLogger(__name__)

# Queue sentinel: one is enqueued per worker when the producer is done
STOP = None


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def process_file_task(
        file_path: str,
        root_abs: str,
        store: AggregationStore,
        resolver: NameResolver,
) -> bool:
    """
    Attribute one file to the aggregation store.

    The file is re-stat'ed without following links, because it may have
    changed or vanished since it was enumerated. Any stat failure skips the
    file silently.

    Args:
        file_path: Absolute path of the file.
        root_abs: Absolute scan root.
        store: Shared aggregation store.
        resolver: Name resolution service owned by the calling worker.

    Returns:
        bool: True if the file was folded, False if it was skipped.
    """
    try:
        st = os.lstat(file_path)
    except OSError as e:
        logger.debug(f"Skipping {file_path}: {e}")
        return False

    uid = getattr(st, "st_uid", 0)
    gid = getattr(st, "st_gid", 0)

    owner = display_name(resolver.user_name(uid), uid)
    group = display_name(resolver.group_name(gid), gid)

    store.fold(_directory_key(file_path, root_abs), owner, group, st.st_size)
    return True


def run_worker(
        work_queue: queue.Queue,
        root_abs: str,
        store: AggregationStore,
        resolver: NameResolver,
        cancel_event: Optional[threading.Event] = None,
) -> int:
    """
    Drain the work queue until a stop sentinel arrives.

    After cancellation the worker keeps taking paths off the queue without
    processing them, so the producer never blocks on a full queue. A file
    whose processing raises is skipped; the worker keeps draining.

    Args:
        work_queue: Bounded queue of file paths.
        root_abs: Absolute scan root.
        store: Shared aggregation store.
        resolver: Shared name resolution service (wrapped in a private cache).
        cancel_event: Optional cancellation signal.

    Returns:
        int: Number of files folded by this worker.
    """
    local_resolver = CachingNameResolver(resolver)
    folded = 0

    while True:
        path = work_queue.get()
        try:
            if path is STOP:
                return folded
            if cancel_event is not None and cancel_event.is_set():
                continue
            try:
                if process_file_task(path, root_abs, store, local_resolver):
                    folded += 1
            except Exception as e:
                # Name service failures are per-file soft errors
                logger.debug(f"Skipping {path}: {type(e).__name__}: {e}")
        finally:
            work_queue.task_done()


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _directory_key(file_path: str, root_abs: str) -> str:
    """Root-relative key of the directory containing a file."""
    parent = os.path.dirname(file_path)
    try:
        rel = os.path.relpath(parent, root_abs)
    except ValueError:
        # Different drive on Windows
        rel = parent
    return rel or ROOT_KEY
