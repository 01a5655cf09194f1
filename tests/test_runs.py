from __future__ import annotations

import json
import time
from pathlib import Path

from inlay_generator.contracts import InlayDesign
from inlay_generator.design_io import load_design
from inlay_generator.pipeline import build_inlay
from inlay_generator.runs import new_run_dir, record_run, render_summary, run_slug
from inlay_generator.stl_writer import parse_stl_bytes


def test_run_slug():
    assert run_slug("Tray 25mm (v2)") == "tray-25mm-v2"
    assert run_slug("  ***  ") == "inlay"


def test_same_second_runs_get_suffix(tmp_path: Path):
    now = time.gmtime(0)
    first = new_run_dir(tmp_path, "tray", now)
    second = new_run_dir(tmp_path, "tray", now)
    assert first.name == "19700101_000000_tray"
    assert second.name == "19700101_000000_tray_2"
    assert (second / "artifacts").is_dir()


def test_record_run_writes_all_files(tmp_path: Path, reference_config, reference_sections):
    result = build_inlay(reference_config, reference_sections)
    design = result.design
    record = record_run(tmp_path, "Reference tray", design, result, elapsed_s=0.5)

    assert record.run_dir.parent == tmp_path
    assert parse_stl_bytes(record.stl_path.read_bytes()).triangle_count == (
        result.solid.triangle_count
    )
    assert load_design(record.design_path) == design
    assert "- Holes: 8" in record.summary_path.read_text(encoding="utf-8")

    manifest = json.loads(record.manifest_path.read_text(encoding="utf-8"))
    assert manifest["run_id"] == record.run_id
    assert manifest["summary"]["hole_count"] == 8
    assert manifest["artifacts"]["stl"] == str(record.stl_path)


def test_latest_follows_newest_run(tmp_path: Path, reference_config, reference_sections):
    result = build_inlay(reference_config, reference_sections)
    record_run(tmp_path, "first", InlayDesign(), result)
    newest = record_run(tmp_path, "second", InlayDesign(), result)

    latest = tmp_path / "latest"
    if latest.is_symlink():
        assert latest.resolve() == newest.run_dir.resolve()
    else:
        assert latest.read_text(encoding="utf-8").strip() == newest.run_id


def test_render_summary_lists_sections():
    summary = {
        "footprint_mm": [79.7, 121.7],
        "depth_mm": 3.0,
        "hole_count": 3,
        "triangle_count": 900,
        "sections": [
            {"index": 0, "extent_mm": 60.85, "holes": 3, "strategy": "general_grid"},
            {"index": 1, "extent_mm": 60.85, "holes": 0, "strategy": "empty"},
        ],
    }
    text = render_summary("run-1", "tray", 1.234, summary)
    assert text.startswith("# Run run-1\n")
    assert "- Footprint: 79.7 x 121.7 mm" in text
    assert "- #1: 60.85 mm, 0 holes (empty)" in text
