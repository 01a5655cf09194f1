#!/usr/bin/env python3
"""Build a miniature-base inlay and export it as binary STL."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from inlay_generator import InlayDesign, InlayError, build_design
from inlay_generator.design_io import load_design
from inlay_generator.preview import export_preview_glb
from inlay_generator.runs import record_run
from inlay_generator.stl_writer import write_stl

_INLAY_FLAGS = {
    "length": "Outer length in mm (partitioned axis)",
    "width": "Outer width in mm",
    "corner_radius": "Corner radius in mm",
    "depth": "Extrusion depth in mm",
    "margin": "Edge-to-hole clearance in mm",
    "clearance": "Fit tolerance taken off length and width in mm",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a rounded inlay with hex-packed miniature base holes"
    )
    parser.add_argument("--design", help="Design JSON to start from")
    parser.add_argument("--name", default="inlay", help="Design/run name")
    for name, help_text in _INLAY_FLAGS.items():
        parser.add_argument(f"--{name.replace('_', '-')}", type=float, default=None, help=help_text)
    parser.add_argument(
        "--base-size", type=float, default=None, help="Round base diameter in mm"
    )
    parser.add_argument("--base-size-x", type=float, default=None, help="Base size across the width")
    parser.add_argument("--base-size-y", type=float, default=None, help="Base size along the length")
    parser.add_argument("--base-spacing", type=float, default=None, help="Gap between holes in mm")
    parser.add_argument(
        "--base-clearance", type=float, default=None, help="Fit tolerance added to the base size"
    )
    parser.add_argument("--out", help="Write the STL here instead of a run folder")
    parser.add_argument("--runs-dir", default="runs", help="Runs output root")
    parser.add_argument("--preview-glb", help="Also write a coloured GLB preview")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logs"
    )
    return parser


def resolve_design(args: argparse.Namespace) -> InlayDesign:
    design = load_design(args.design) if args.design else InlayDesign()

    overrides = {
        name: getattr(args, name)
        for name in _INLAY_FLAGS
        if getattr(args, name) is not None
    }
    if overrides:
        design = replace(design, inlay=replace(design.inlay, **overrides))

    base = {}
    if args.base_size is not None:
        base["size_x"] = base["size_y"] = args.base_size
    if args.base_size_x is not None:
        base["size_x"] = args.base_size_x
    if args.base_size_y is not None:
        base["size_y"] = args.base_size_y
    if args.base_spacing is not None:
        base["spacing"] = args.base_spacing
    if args.base_clearance is not None:
        base["clearance"] = args.base_clearance
    if base:
        sections = tuple(replace(s, **base) for s in design.sections)
        design = replace(design, sections=sections)
    return design


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    started = time.perf_counter()
    try:
        design = resolve_design(args)
        result = build_design(design)
    except InlayError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    elapsed = time.perf_counter() - started

    if args.out:
        stl_path = Path(write_stl(result.solid, args.out))
        run_id = args.name
    else:
        record = record_run(args.runs_dir, args.name, design, result, elapsed)
        stl_path = record.stl_path
        run_id = record.run_id

    if args.preview_glb:
        export_preview_glb(result, args.preview_glb)

    summary = result.summary()
    print(f"Run ID: {run_id}")
    print(f"Holes: {summary['hole_count']}")
    print(f"Triangles: {summary['triangle_count']}")
    print(f"STL: {stl_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
