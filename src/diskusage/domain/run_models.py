from __future__ import annotations

"""
Run Metadata Models.

Diagnostic data captured around a scan: wall-clock boundaries, traversal
counters and process resource samples. Never used by aggregation logic.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class MemorySample:
    """
    Point-in-time process resource usage.

    Attributes:
        rss_bytes: Resident set size.
        vms_bytes: Virtual memory size.
        num_threads: Live OS threads in the process.
        cpu_user_seconds: Cumulative user CPU time.
        cpu_system_seconds: Cumulative system CPU time.
        gc_collections: Completed garbage collections across all generations.
        gc_collected: Objects reclaimed by the collector.
        gc_uncollectable: Objects the collector could not reclaim.
    """
    rss_bytes: int = 0
    vms_bytes: int = 0
    num_threads: int = 0
    cpu_user_seconds: float = 0.0
    cpu_system_seconds: float = 0.0
    gc_collections: int = 0
    gc_collected: int = 0
    gc_uncollectable: int = 0


@dataclass(frozen=True)
class RunMetadata:
    """
    Summary of one scan execution.

    Attributes:
        started_at: Timezone-aware start instant.
        ended_at: Timezone-aware completion instant.
        dirs_scanned: Directories visited by the walker (root included).
        files_scanned: Non-directory entries handed to the workers.
        memory_start: Resource sample taken before the walk.
        memory_end: Resource sample taken after the workers drained.
    """
    started_at: datetime
    ended_at: datetime
    dirs_scanned: int = 0
    files_scanned: int = 0
    memory_start: MemorySample = field(default_factory=MemorySample)
    memory_end: MemorySample = field(default_factory=MemorySample)

    @property
    def runtime_seconds(self) -> float:
        return (self.ended_at - self.started_at).total_seconds()
