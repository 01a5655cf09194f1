"""
Timestamped output folders for command-line inlay builds.

    <runs_root>/<YYYYmmdd_HHMMSS>_<slug>/
        manifest.json
        summary.md
        artifacts/inlay.stl
        artifacts/design.json
    <runs_root>/latest -> newest run
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from inlay_generator.contracts import InlayDesign
from inlay_generator.design_io import design_to_dict, save_design
from inlay_generator.pipeline import InlayResult
from inlay_generator.stl_writer import write_stl

logger = logging.getLogger(__name__)

STAMP_FORMAT = "%Y%m%d_%H%M%S"
LATEST = "latest"


@dataclass(frozen=True)
class RunRecord:
    """Where one command-line build put its files."""

    run_id: str
    run_dir: Path

    @property
    def stl_path(self) -> Path:
        return self.run_dir / "artifacts" / "inlay.stl"

    @property
    def design_path(self) -> Path:
        return self.run_dir / "artifacts" / "design.json"

    @property
    def summary_path(self) -> Path:
        return self.run_dir / "summary.md"

    @property
    def manifest_path(self) -> Path:
        return self.run_dir / "manifest.json"


def run_slug(name: str) -> str:
    return "-".join(re.findall(r"[a-z0-9]+", name.lower())) or "inlay"


def new_run_dir(
    runs_root: Path, name: str, now: Optional[time.struct_time] = None
) -> Path:
    """Create an empty run folder; same-second runs get a numeric suffix."""
    base = f"{time.strftime(STAMP_FORMAT, now or time.gmtime())}_{run_slug(name)}"
    run_dir = runs_root / base
    n = 1
    while run_dir.exists():
        n += 1
        run_dir = runs_root / f"{base}_{n}"
    (run_dir / "artifacts").mkdir(parents=True)
    return run_dir


def render_summary(run_id: str, name: str, elapsed_s: float, summary: dict) -> str:
    width, length = summary["footprint_mm"]
    lines = [
        f"# Run {run_id}",
        "",
        f"- Design: {name}",
        f"- Duration: {elapsed_s:.2f}s",
        f"- Footprint: {width} x {length} mm",
        f"- Depth: {summary['depth_mm']} mm",
        f"- Holes: {summary['hole_count']}",
        f"- Triangles: {summary['triangle_count']}",
        "",
        "## Sections",
    ]
    lines.extend(
        f"- #{s['index']}: {s['extent_mm']} mm, {s['holes']} holes ({s['strategy']})"
        for s in summary["sections"]
    )
    return "\n".join(lines) + "\n"


def record_run(
    runs_root: str | Path,
    name: str,
    design: InlayDesign,
    result: InlayResult,
    elapsed_s: float = 0.0,
) -> RunRecord:
    """Write the STL, design, summary and manifest of one build."""
    root = Path(runs_root)
    run_dir = new_run_dir(root, name)
    record = RunRecord(run_id=run_dir.name, run_dir=run_dir)
    summary = result.summary()

    write_stl(result.solid, str(record.stl_path))
    save_design(record.design_path, design)
    record.summary_path.write_text(
        render_summary(record.run_id, name, elapsed_s, summary), encoding="utf-8"
    )
    manifest = {
        "run_id": record.run_id,
        "design_name": name,
        "created_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "elapsed_s": round(elapsed_s, 3),
        "design": design_to_dict(design),
        "summary": summary,
        "artifacts": {
            "stl": str(record.stl_path),
            "design_json": str(record.design_path),
            "summary": str(record.summary_path),
        },
    }
    with record.manifest_path.open("w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2)

    _point_latest(root, run_dir)
    logger.info("Recorded run %s", record.run_id)
    return record


def _point_latest(runs_root: Path, run_dir: Path) -> None:
    latest = runs_root / LATEST
    if latest.is_symlink() or latest.is_file():
        latest.unlink()
    try:
        latest.symlink_to(run_dir.name, target_is_directory=True)
    except OSError:
        # no symlinks here: record the run name instead
        latest.write_text(run_dir.name + "\n", encoding="utf-8")
