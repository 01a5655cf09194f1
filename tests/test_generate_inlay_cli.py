from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

from inlay_generator.stl_writer import parse_stl_bytes

REPO_ROOT = Path(__file__).resolve().parent.parent
SCRIPT = REPO_ROOT / "scripts" / "generate_inlay.py"


def test_cli_writes_run_folder(tmp_path: Path):
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--name",
        "Tray 25mm",
        "--runs-dir",
        str(tmp_path),
        "--corner-radius",
        "3.2",
        "--clearance",
        "0.2",
        "--base-clearance",
        "0.4",
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode == 0, proc.stderr
    assert "Run ID:" in proc.stdout
    assert "Holes: 8" in proc.stdout

    run_dirs = sorted(
        [path for path in tmp_path.iterdir() if path.is_dir() and path.name != "latest"]
    )
    assert len(run_dirs) == 1
    run_dir = run_dirs[0]
    assert run_dir.name.endswith("tray-25mm")

    artifacts = run_dir / "artifacts"
    assert (artifacts / "inlay.stl").exists()
    assert (run_dir / "summary.md").exists()

    design = json.loads((artifacts / "design.json").read_text(encoding="utf-8"))
    assert design["schema_version"] == "inlay_generator.design.v1"
    assert design["inlay"]["corner_radius"] == 3.2

    manifest = json.loads((run_dir / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["summary"]["hole_count"] == 8
    parsed = parse_stl_bytes((artifacts / "inlay.stl").read_bytes())
    assert parsed.triangle_count == manifest["summary"]["triangle_count"]


def test_cli_out_and_design_file(tmp_path: Path):
    design_path = tmp_path / "design.json"
    design_path.write_text(
        json.dumps({"inlay": {"length": 100.0, "width": 50.0}}), encoding="utf-8"
    )
    out = tmp_path / "small.stl"
    proc = subprocess.run(
        [
            sys.executable,
            str(SCRIPT),
            "--design",
            str(design_path),
            "--base-size",
            "20",
            "--out",
            str(out),
        ],
        capture_output=True,
        text=True,
    )
    assert proc.returncode == 0, proc.stderr
    parsed = parse_stl_bytes(out.read_bytes())
    assert parsed.triangle_count > 0
    assert not any(p.name == "latest" for p in tmp_path.iterdir())


def test_cli_reports_invalid_dimensions(tmp_path: Path):
    proc = subprocess.run(
        [
            sys.executable,
            str(SCRIPT),
            "--corner-radius",
            "100",
            "--out",
            str(tmp_path / "bad.stl"),
        ],
        capture_output=True,
        text=True,
    )
    assert proc.returncode == 2
    assert "error:" in proc.stderr
    assert not (tmp_path / "bad.stl").exists()


def test_cli_reports_malformed_design(tmp_path: Path):
    design_path = tmp_path / "design.json"
    design_path.write_text(
        json.dumps({"inlay": {"depth": "deep"}, "preview": {"wireframe": "false"}}),
        encoding="utf-8",
    )
    proc = subprocess.run(
        [sys.executable, str(SCRIPT), "--design", str(design_path), "--out", str(tmp_path / "x.stl")],
        capture_output=True,
        text=True,
    )
    assert proc.returncode == 2
    assert "error:" in proc.stderr
    assert "Traceback" not in proc.stderr
