"""
Hand-off of a built inlay to a 3D viewer.

The viewer itself lives elsewhere; this module only packages the solid
(coloured, or as a wireframe edge path) and the outline/guide contours
into a trimesh scene, and can write that scene as GLB.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import numpy as np
import trimesh

from inlay_generator.contracts import Contour, PreviewConfig
from inlay_generator.pipeline import InlayResult

logger = logging.getLogger(__name__)

GUIDE_COLOR = (255, 165, 0, 255)


def build_preview_scene(
    result: InlayResult,
    preview: Optional[PreviewConfig] = None,
    include_guides: bool = True,
) -> trimesh.Scene:
    """Scene with the inlay solid and, optionally, margin guide outlines."""
    if preview is None:
        preview = result.design.preview
    rgba = np.array(preview.rgba(), dtype=np.uint8)

    scene = trimesh.Scene()
    mesh = result.solid.to_trimesh()
    if preview.wireframe:
        edges = mesh.vertices[mesh.edges_unique]
        path = trimesh.load_path(edges)
        path.colors = np.tile(rgba, (len(path.entities), 1))
        scene.add_geometry(path, geom_name="inlay")
    else:
        mesh.visual.face_colors = np.tile(rgba, (len(mesh.faces), 1))
        scene.add_geometry(mesh, geom_name="inlay")

    if include_guides:
        depth = result.design.inlay.depth
        scene.add_geometry(_contour_path(result.outer_contour, depth), geom_name="outline")
        for i, guide in enumerate(result.guide_contours):
            scene.add_geometry(_contour_path(guide, depth), geom_name=f"guide_{i}")
    return scene


def export_preview_glb(
    result: InlayResult,
    filepath: str,
    preview: Optional[PreviewConfig] = None,
) -> str:
    scene = build_preview_scene(result, preview, include_guides=False)
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    scene.export(filepath, file_type="glb")
    logger.info("Exported preview GLB: %s", filepath)
    return filepath


def _contour_path(contour: Contour, z: float) -> trimesh.path.Path3D:
    pts = np.asarray(contour.points, dtype=float)
    pts3 = np.column_stack([pts, np.full(len(pts), float(z))])
    path = trimesh.load_path(np.stack([pts3[:-1], pts3[1:]], axis=1))
    path.colors = np.tile(np.array(GUIDE_COLOR, dtype=np.uint8), (len(path.entities), 1))
    return path
