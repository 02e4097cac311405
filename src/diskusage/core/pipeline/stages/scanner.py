from __future__ import annotations

"""
Concurrent Scan Orchestrator.

Runs the producer/consumer scan: the calling thread walks the tree and feeds a
bounded queue, a fixed pool of worker threads stats each file and folds it into
a shared AggregationStore. Completion is signalled with one stop sentinel per
worker; the scan returns only after every worker has drained the queue.
"""

import logging
import os
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Tuple

from diskusage.core.aggregation.store import AggregationStore
from diskusage.core.pipeline.stages.worker import STOP, run_worker
from diskusage.core.services.memory import sample_process
from diskusage.core.services.names import NameResolver, default_resolver
from diskusage.core.services.walker import WalkCounters, walk_files
from diskusage.domain.config import default_concurrency
from diskusage.domain.constants import QUEUE_SLOTS_PER_WORKER
from diskusage.domain.errors import ScanCancelledError
from diskusage.domain.run_models import RunMetadata
from diskusage.infra.fs import normalize_path

logger = logging.getLogger(__name__)

# How long a put waits on a full queue before checking worker health
_PUT_RETRY_SECONDS = 0.5


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def scan(
        root_path: str,
        concurrency: Optional[int] = None,
        resolver: Optional[NameResolver] = None,
        cancel_event: Optional[threading.Event] = None,
) -> Tuple[AggregationStore, RunMetadata]:
    """
    Aggregate sizes and file counts for a directory tree.

    Args:
        root_path: Directory to scan (relative paths resolve against the cwd).
        concurrency: Worker pool size; defaults to twice the CPU count.
        resolver: Name resolution service; defaults to the system databases.
        cancel_event: Optional event that aborts the scan when set.

    Returns:
        Tuple[AggregationStore, RunMetadata]: The populated store and run data.

    Raises:
        ScanRootError: If the root cannot be scanned.
        ScanCancelledError: If cancel_event was set before the scan completed.
    """
    root_abs = normalize_path(root_path, os.getcwd())
    workers = concurrency if concurrency and concurrency > 0 else default_concurrency()
    resolver = resolver or default_resolver()

    started_at = _now()
    memory_start = sample_process()

    counters = WalkCounters()
    # Raises ScanRootError before any thread exists
    paths = walk_files(root_abs, counters, cancel_event)

    logger.info(f"Scanning '{root_abs}' with {workers} workers.")

    store = AggregationStore()
    work_queue: queue.Queue = queue.Queue(maxsize=workers * QUEUE_SLOTS_PER_WORKER)

    folded = 0
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ScanWorker") as executor:
        futures = [
            executor.submit(run_worker, work_queue, root_abs, store, resolver, cancel_event)
            for _ in range(workers)
        ]
        try:
            for path in paths:
                if not _put(work_queue, path, futures, any):
                    logger.error("A scan worker stopped unexpectedly; no more files are queued.")
                    break
        finally:
            for _ in range(workers):
                if not _put(work_queue, STOP, futures, all):
                    break

        for future in futures:
            folded += future.result()

    if cancel_event is not None and cancel_event.is_set():
        logger.warning(f"Scan of '{root_abs}' cancelled after {folded} files.")
        raise ScanCancelledError(f"scan of '{root_abs}' was cancelled")

    metadata = RunMetadata(
        started_at=started_at,
        ended_at=_now(),
        dirs_scanned=counters.dirs,
        files_scanned=counters.files,
        memory_start=memory_start,
        memory_end=sample_process(),
    )

    logger.info(
        f"Walk complete: {counters.dirs} dirs, {counters.files} files "
        f"({folded} aggregated, {counters.skipped} unreadable) "
        f"in {metadata.runtime_seconds:.3f}s."
    )
    return store, metadata


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _now() -> datetime:
    return datetime.now().astimezone()


def _put(
        work_queue: queue.Queue,
        item: Optional[str],
        futures: List[Future],
        gave_up: Callable[[Iterable[bool]], bool],
) -> bool:
    """
    Enqueue an item, waiting on a full queue only while workers can drain it.

    Returns:
        bool: False if the item was dropped because gave_up() holds for the
              workers' completion flags.
    """
    while True:
        try:
            work_queue.put(item, timeout=_PUT_RETRY_SECONDS)
            return True
        except queue.Full:
            if gave_up(f.done() for f in futures):
                return False
