from __future__ import annotations

"""
Pipeline Domain Data Models.

Defines the result structure and factory functions used to communicate
execution outcomes between the pipeline engine and the CLI layer.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from diskusage.domain.aggregate_models import AggregateView
from diskusage.domain.run_models import RunMetadata

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class PipelineResult:
    """
    Unified result object of a complete pipeline execution.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        root: Absolute root path that was scanned or loaded.
        source: 'scan' for a live walk, 'snapshot' for a loaded document.
        view: Aggregated data, when the run got that far.
        metadata: Run metadata of a live scan.
        snapshot_path: Where the snapshot was written ('-' for stdout).
        report_lines: Rendered report, empty when a snapshot was written.
        summary: Counters for diagnostics and machine output.
    """
    ok: bool
    error: str

    root: str
    source: str = "scan"

    view: Optional[AggregateView] = None
    metadata: Optional[RunMetadata] = None

    snapshot_path: str = ""
    report_lines: List[str] = field(default_factory=list)

    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        root: str,
        source: str = "scan",
        summary_extra: Optional[Dict[str, Any]] = None
) -> PipelineResult:
    """
    Create a failed pipeline result instance.

    Args:
        error: Detailed error description.
        root: The target root directory or snapshot source.
        source: Origin of the data ('scan' or 'snapshot').
        summary_extra: Additional metadata for the summary payload.

    Returns:
        PipelineResult: An immutable error result object.
    """
    return PipelineResult(
        ok=False,
        error=error,
        root=root,
        source=source,
        summary=summary_extra or {},
    )


def create_success_result(
        root: str,
        view: AggregateView,
        source: str = "scan",
        metadata: Optional[RunMetadata] = None,
        snapshot_path: str = "",
        report_lines: Optional[List[str]] = None,
        summary_extra: Optional[Dict[str, Any]] = None
) -> PipelineResult:
    """
    Create a successful pipeline result instance.

    Args:
        root: Absolute root path of the aggregate.
        view: Aggregated directory, user and group totals.
        source: Origin of the data ('scan' or 'snapshot').
        metadata: Run metadata of a live scan.
        snapshot_path: Written snapshot location, if any.
        report_lines: Rendered report lines, if any.
        summary_extra: Final execution metrics.

    Returns:
        PipelineResult: An immutable success result object.
    """
    summary: Dict[str, Any] = {
        "dirs": len(view.dirs),
        "users": len(view.users),
        "groups": len(view.groups),
        "total_size": view.root.size,
        "total_files": view.root.files,
    }
    if summary_extra:
        summary.update(summary_extra)

    return PipelineResult(
        ok=True,
        error="",
        root=root,
        source=source,
        view=view,
        metadata=metadata,
        snapshot_path=snapshot_path,
        report_lines=report_lines or [],
        summary=summary,
    )
