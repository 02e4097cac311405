from __future__ import annotations

"""
Process Resource Sampling.

Captures memory, CPU and garbage-collector counters of the running process
for the diagnostic block of a snapshot. Sampling failures yield zeroed fields,
which the snapshot format omits.
"""

import gc
import logging

import psutil

from diskusage.domain.run_models import MemorySample

logger = logging.getLogger(__name__)


def sample_process() -> MemorySample:
    """
    Read the current resource usage of this process.

    Returns:
        MemorySample: Memory, thread, CPU and GC counters.
    """
    collections = collected = uncollectable = 0
    for generation in gc.get_stats():
        collections += generation.get("collections", 0)
        collected += generation.get("collected", 0)
        uncollectable += generation.get("uncollectable", 0)

    try:
        proc = psutil.Process()
        with proc.oneshot():
            mem = proc.memory_info()
            cpu = proc.cpu_times()
            threads = proc.num_threads()
    except psutil.Error as e:
        logger.debug(f"Process sampling unavailable: {e}")
        return MemorySample(
            gc_collections=collections,
            gc_collected=collected,
            gc_uncollectable=uncollectable,
        )

    return MemorySample(
        rss_bytes=int(mem.rss),
        vms_bytes=int(mem.vms),
        num_threads=int(threads),
        cpu_user_seconds=float(cpu.user),
        cpu_system_seconds=float(cpu.system),
        gc_collections=collections,
        gc_collected=collected,
        gc_uncollectable=uncollectable,
    )
