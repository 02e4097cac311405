from __future__ import annotations

"""
Core orchestration pipeline.

This module coordinates the whole workflow:
1. Validates the configuration.
2. Obtains an aggregate, either by scanning the root or by loading a snapshot.
3. Writes a snapshot (discarding partial output on failure) or renders the
   terminal report.
4. Converts domain errors into a failed PipelineResult.
"""

import logging
import os
import threading
from typing import Any, Dict, Optional

from diskusage.core.aggregation.widths import compute_column_layout
from diskusage.core.analysis.tree_renderer import ReportOptions, render_report
from diskusage.core.pipeline.stages.scanner import scan
from diskusage.core.pipeline.stages.validator import validate_config
from diskusage.core.services.names import NameResolver, default_resolver
from diskusage.core.snapshot.decoder import document_to_view, load_snapshot
from diskusage.core.snapshot.encoder import build_document, write_snapshot
from diskusage.domain.constants import APP_VERSION, STDIO_MARKER
from diskusage.domain.errors import (
    ScanCancelledError,
    ScanRootError,
    SnapshotDecodeError,
    SnapshotWriteError,
)
from diskusage.domain.pipeline_models import (
    PipelineResult,
    create_error_result,
    create_success_result,
)
from diskusage.domain.snapshot_models import SnapshotStats
from diskusage.infra.fs import discard_file, normalize_path

logger = logging.getLogger(__name__)

# Failure categories reported in PipelineResult.summary["error_kind"]
ERROR_ROOT = "root"
ERROR_INPUT = "input"
ERROR_CANCELLED = "cancelled"
ERROR_OUTPUT = "output"
ERROR_INTERNAL = "internal"


def run_pipeline(
        config: Optional[Dict[str, Any]],
        *,
        resolver: Optional[NameResolver] = None,
        cancel_event: Optional[threading.Event] = None,
) -> PipelineResult:
    """
    Execute the full scan (or replay) pipeline.

    Args:
        config: The configuration dictionary (raw or partial).
        resolver: Name resolution service; defaults to the system databases.
        cancel_event: Optional event that aborts a running scan.

    Returns:
        PipelineResult: Object containing status, aggregate and report.
    """
    logger.info("Pipeline execution started.")

    # -------------------------------------------------------------------------
    # 1) Config Normalization
    # -------------------------------------------------------------------------
    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    resolver = resolver or default_resolver()
    load_path = cfg["load_path"]
    source = "snapshot" if load_path else "scan"

    # -------------------------------------------------------------------------
    # 2) Obtain the aggregate
    # -------------------------------------------------------------------------
    metadata = None
    stored_stats: Optional[SnapshotStats] = None
    try:
        if load_path:
            doc = load_snapshot(load_path)
            view = document_to_view(doc)
            root_abs = doc.root
            stored_stats = doc.stats
        else:
            root_abs = normalize_path(cfg["root_path"], os.getcwd())
            store, metadata = scan(
                root_abs,
                concurrency=cfg["concurrency"],
                resolver=resolver,
                cancel_event=cancel_event,
            )
            view = store.snapshot()
    except ScanRootError as e:
        logger.error(str(e))
        return create_error_result(str(e), e.path, source, {"error_kind": ERROR_ROOT})
    except SnapshotDecodeError as e:
        logger.error(str(e))
        return create_error_result(str(e), e.source, source, {"error_kind": ERROR_INPUT})
    except ScanCancelledError as e:
        return create_error_result(
            str(e), cfg["root_path"], source, {"error_kind": ERROR_CANCELLED}
        )

    # -------------------------------------------------------------------------
    # 3a) Snapshot output
    # -------------------------------------------------------------------------
    target = cfg["json_output"]
    if target:
        doc = build_document(
            view, metadata, root_abs, resolver, APP_VERSION, stats=stored_stats
        )
        try:
            written = write_snapshot(doc, target, compress=cfg["gzip_output"])
        except SnapshotWriteError as e:
            logger.error(str(e))
            if e.target != STDIO_MARKER:
                discard_file(e.target)
            return create_error_result(str(e), root_abs, source, {"error_kind": ERROR_OUTPUT})

        return create_success_result(
            root=root_abs,
            view=view,
            source=source,
            metadata=metadata,
            snapshot_path=written,
        )

    # -------------------------------------------------------------------------
    # 3b) Terminal report
    # -------------------------------------------------------------------------
    layout = compute_column_layout(
        view.dirs,
        view.users,
        view.groups,
        raw_bytes=cfg["raw_bytes"],
        size_width_override=cfg["size_width"],
        files_width_override=cfg["files_width"],
    )
    options = ReportOptions(
        levels=cfg["levels"],
        show_files=cfg["show_files"],
        show_user=cfg["show_user"],
        show_group=cfg["show_group"],
        top_n=cfg["top_n"],
    )
    lines = render_report(view, layout, options, root_abs, resolver)

    logger.info("Pipeline finished successfully.")
    return create_success_result(
        root=root_abs,
        view=view,
        source=source,
        metadata=metadata,
        report_lines=lines,
    )


def error_kind(result: PipelineResult) -> str:
    """Failure category of a result ('' on success)."""
    if result.ok:
        return ""
    return str(result.summary.get("error_kind", ERROR_INTERNAL))

