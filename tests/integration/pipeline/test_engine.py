from __future__ import annotations

"""
Integration tests for the pipeline engine.

Covers the three ways a run can go: scan and render, scan and write a
snapshot, load a snapshot and render. Failure paths must come back as an
error result carrying the right category, never as an exception.
"""

import json
import threading
from pathlib import Path
from typing import Any, Dict
from unittest.mock import patch

import pytest

from diskusage.core.pipeline.engine import (
    ERROR_CANCELLED,
    ERROR_INPUT,
    ERROR_OUTPUT,
    ERROR_ROOT,
    error_kind,
    run_pipeline,
)
from diskusage.domain.errors import SnapshotWriteError


@pytest.fixture
def tree(make_tree) -> Path:
    return make_tree({"a/one.bin": 1000, "a/two.bin": 500, "b/c/three.bin": 2000, "top.bin": 10})


@pytest.fixture
def cfg(mock_config_dict: Dict[str, Any], tree: Path) -> Dict[str, Any]:
    mock_config_dict["root_path"] = str(tree)
    return mock_config_dict


def test_report_mode(cfg, tree, fake_resolver) -> None:
    cfg.update({"raw_bytes": True, "show_files": True, "show_user": True, "levels": 1})

    result = run_pipeline(cfg, resolver=fake_resolver)

    assert result.ok
    assert result.source == "scan"
    assert result.snapshot_path == ""
    assert result.summary["total_size"] == 3510
    assert result.summary["total_files"] == 4
    assert result.metadata is not None and result.metadata.files_scanned == 4

    lines = result.report_lines
    assert lines[0].split() == ["Size", "Files", "User", "Path"]
    assert lines[1].endswith(str(tree))
    # Largest child first, no grandchildren at level 1
    assert lines[2].endswith("├── b")
    assert lines[3].endswith("└── a")
    assert not any(line.endswith("c") for line in lines[:5])
    assert "Per-user summary:" in lines
    assert any(line.startswith("alice") and line.endswith("4 files") for line in lines)


def test_json_mode_writes_snapshot(cfg, tmp_path: Path, fake_resolver) -> None:
    target = tmp_path / "out.json"
    cfg["json_output"] = str(target)

    result = run_pipeline(cfg, resolver=fake_resolver)

    assert result.ok
    assert result.report_lines == []
    assert result.snapshot_path == str(target)
    data = json.loads(target.read_text(encoding="utf-8"))
    assert data["stats"]["files_scanned"] == 4
    assert {d["rel"] for d in data["dirs"]} == {".", "a", "b", "b/c"}


def test_json_gzip_mode_appends_suffix(cfg, tmp_path: Path, fake_resolver) -> None:
    cfg.update({"json_output": str(tmp_path / "out.json"), "gzip_output": True})

    result = run_pipeline(cfg, resolver=fake_resolver)

    assert result.snapshot_path == str(tmp_path / "out.json.gz")
    assert (tmp_path / "out.json.gz").read_bytes()[:2] == b"\x1f\x8b"


def test_load_mode_matches_scan(cfg, tmp_path: Path, fake_resolver) -> None:
    cfg.update({"raw_bytes": True, "show_files": True, "show_group": True})
    scanned = run_pipeline(cfg, resolver=fake_resolver)

    snap = tmp_path / "snap.json"
    run_pipeline({**cfg, "json_output": str(snap), "gzip_output": True}, resolver=fake_resolver)

    loaded = run_pipeline(
        {**cfg, "root_path": "/does/not/matter", "load_path": str(snap) + ".gz"},
        resolver=fake_resolver,
    )

    assert loaded.ok
    assert loaded.source == "snapshot"
    assert loaded.metadata is None
    assert loaded.report_lines == scanned.report_lines


def test_reencoding_a_loaded_snapshot_keeps_stats(cfg, tmp_path: Path, fake_resolver) -> None:
    first = tmp_path / "first.json"
    second = tmp_path / "second.json"
    run_pipeline({**cfg, "json_output": str(first)}, resolver=fake_resolver)

    result = run_pipeline(
        {**cfg, "load_path": str(first), "json_output": str(second)},
        resolver=fake_resolver,
    )

    assert result.ok
    assert second.read_bytes() == first.read_bytes()


def test_bad_root(cfg, tmp_path: Path, fake_resolver) -> None:
    cfg["root_path"] = str(tmp_path / "missing")

    result = run_pipeline(cfg, resolver=fake_resolver)

    assert not result.ok
    assert error_kind(result) == ERROR_ROOT
    assert "missing" in result.error


def test_bad_input(cfg, tmp_path: Path, fake_resolver) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{ nope", encoding="utf-8")
    cfg["load_path"] = str(bad)

    result = run_pipeline(cfg, resolver=fake_resolver)

    assert not result.ok
    assert result.source == "snapshot"
    assert error_kind(result) == ERROR_INPUT


def test_cancelled_scan(cfg, fake_resolver) -> None:
    cancel = threading.Event()
    cancel.set()

    result = run_pipeline(cfg, resolver=fake_resolver, cancel_event=cancel)

    assert error_kind(result) == ERROR_CANCELLED


def test_write_failure_discards_partial_output(cfg, tmp_path: Path, fake_resolver) -> None:
    target = tmp_path / "partial.json"
    cfg["json_output"] = str(target)

    def _fail(doc, path, compress=False):
        Path(path).write_text("{ half", encoding="utf-8")
        raise SnapshotWriteError(path, OSError(28, "No space left on device"))

    with patch("diskusage.core.pipeline.engine.write_snapshot", side_effect=_fail):
        result = run_pipeline(cfg, resolver=fake_resolver)

    assert error_kind(result) == ERROR_OUTPUT
    assert "No space left" in result.error
    assert not target.exists()


def test_error_kind_of_success_is_empty(cfg, fake_resolver) -> None:
    assert error_kind(run_pipeline(cfg, resolver=fake_resolver)) == ""
