from __future__ import annotations

"""
Domain Error Taxonomy.

Fatal and reportable failures raised by the scan engine and the snapshot
codec. Per-entry filesystem errors never reach this layer; they are absorbed
by the walker and the workers.
"""

from typing import Optional


class DiskUsageError(Exception):
    """Base class for every failure surfaced to the caller."""


class ScanRootError(DiskUsageError):
    """
    The scan root cannot be resolved, is not a directory or cannot be listed.

    Attributes:
        path: Absolute path of the requested root.
        reason: Underlying OS error, when one exists.
    """

    def __init__(self, path: str, reason: Optional[BaseException] = None) -> None:
        self.path = path
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"cannot scan root '{path}'{detail}")


class ScanCancelledError(DiskUsageError):
    """The scan was interrupted through its cancellation event."""


class SnapshotDecodeError(DiskUsageError, ValueError):
    """
    A snapshot source is unreadable or structurally invalid.

    Attributes:
        source: Path of the source, or '-' for standard input.
    """

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"invalid snapshot '{source}': {message}")


class SnapshotWriteError(DiskUsageError):
    """
    The snapshot sink rejected a write. Any partial output is invalid.

    Attributes:
        target: Path of the sink, or '-' for standard output.
    """

    def __init__(self, target: str, reason: BaseException) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"failed to write snapshot '{target}': {reason}")
