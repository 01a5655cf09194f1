"""
Profile-with-holes to closed triangle solid.

The outline and hole contours are assembled into one Shapely polygon and
validated, the planar region is triangulated (earcut through trimesh),
and the result is extruded from z=0 to z=depth: a top cap, a bottom cap,
and a wall ring for the outline and for every hole.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
import trimesh
from shapely.geometry import Polygon
from shapely.geometry.polygon import orient
from shapely.validation import explain_validity

from inlay_generator.contracts import Contour
from inlay_generator.errors import DegenerateGeometry, InvalidDimension

logger = logging.getLogger(__name__)

MIN_AREA_MM2 = 1e-9


@dataclass(frozen=True)
class Solid:
    """Immutable triangle mesh of the extruded inlay.

    ``faces`` index into ``vertices``; triangles wind counter-clockwise
    seen from outside, so ``face_normals`` point outward.
    """

    vertices: np.ndarray  # (n, 3) float64
    faces: np.ndarray  # (m, 3) int64
    face_normals: np.ndarray  # (m, 3) float64
    cap_triangle_count: int
    wall_triangle_count: int

    @property
    def triangle_count(self) -> int:
        return int(len(self.faces))

    @property
    def triangles(self) -> np.ndarray:
        """(m, 3, 3) vertex positions per triangle."""
        return self.vertices[self.faces]

    @property
    def bounds(self) -> np.ndarray:
        return np.array([self.vertices.min(axis=0), self.vertices.max(axis=0)])

    def to_trimesh(self) -> trimesh.Trimesh:
        return trimesh.Trimesh(
            vertices=self.vertices.copy(),
            faces=self.faces.copy(),
            face_normals=self.face_normals.copy(),
            process=False,
        )


def profile_polygon(outer: Contour, holes: Sequence[Contour]) -> Polygon:
    """Assemble and validate the planar region.

    Raises:
        DegenerateGeometry: Outline or hole is not simple, has no area,
            a hole leaves the outline, or two holes overlap.
    """
    shell = _ring_polygon(outer, "outline")
    hole_polys = [_ring_polygon(h, f"hole {i}") for i, h in enumerate(holes)]
    for i, hole in enumerate(hole_polys):
        if not shell.contains(hole):
            raise DegenerateGeometry(f"hole {i} extends outside the outline")

    polygon = Polygon(
        shell.exterior.coords, [h.exterior.coords for h in hole_polys]
    )
    if not polygon.is_valid:
        raise DegenerateGeometry(f"profile is not simple: {explain_validity(polygon)}")
    # Exterior counter-clockwise, holes clockwise.
    return orient(polygon, sign=1.0)


def extrude_profile(polygon: Polygon, depth: float) -> Solid:
    """Triangulate ``polygon`` and extrude it along +z by ``depth``."""
    if depth <= 0:
        raise InvalidDimension(f"depth must be positive, got {depth}")
    if polygon.is_empty or polygon.area <= MIN_AREA_MM2:
        raise DegenerateGeometry("cannot extrude an empty profile")

    verts_2d, faces_2d = _triangulate(polygon)
    n_cap = len(verts_2d)

    bottom = np.column_stack([verts_2d, np.zeros(n_cap)])
    top = np.column_stack([verts_2d, np.full(n_cap, float(depth))])
    all_verts: List[np.ndarray] = [bottom, top]
    all_faces: List[np.ndarray] = [faces_2d[:, ::-1], faces_2d + n_cap]

    base_idx = 2 * n_cap
    wall_count = 0
    rings = [np.asarray(polygon.exterior.coords[:-1], dtype=float)]
    rings.extend(np.asarray(r.coords[:-1], dtype=float) for r in polygon.interiors)
    for loop in rings:
        n_loop = len(loop)
        lower = np.column_stack([loop, np.zeros(n_loop)])
        upper = np.column_stack([loop, np.full(n_loop, float(depth))])
        all_verts.extend([lower, upper])

        k = np.arange(n_loop)
        k_next = (k + 1) % n_loop
        b0, b1 = base_idx + k, base_idx + k_next
        t0, t1 = base_idx + n_loop + k, base_idx + n_loop + k_next
        # Material is left of each oriented edge, so the outward side is right.
        walls = np.concatenate(
            [np.column_stack([b0, b1, t1]), np.column_stack([b0, t1, t0])]
        )
        all_faces.append(walls)
        wall_count += len(walls)
        base_idx += 2 * n_loop

    # Merge coincident cap and wall vertices into one closed surface.
    mesh = trimesh.Trimesh(
        vertices=np.vstack(all_verts),
        faces=np.vstack(all_faces).astype(np.int64),
        process=True,
        validate=False,
    )
    if not mesh.is_watertight or not mesh.is_winding_consistent:
        raise DegenerateGeometry("extruded profile is not a closed manifold")

    vertices = np.array(mesh.vertices, dtype=np.float64)
    faces = np.array(mesh.faces, dtype=np.int64)
    normals = np.array(mesh.face_normals, dtype=np.float64)
    for arr in (vertices, faces, normals):
        arr.setflags(write=False)

    logger.debug(
        "Extruded %d rings: %d vertices, %d cap + %d wall triangles",
        len(rings), len(vertices), 2 * len(faces_2d), wall_count,
    )
    return Solid(
        vertices=vertices,
        faces=faces,
        face_normals=normals,
        cap_triangle_count=2 * len(faces_2d),
        wall_triangle_count=wall_count,
    )


def build_solid(outer: Contour, holes: Sequence[Contour], depth: float) -> Solid:
    """Outline plus holes to a closed solid; fails atomically."""
    polygon = profile_polygon(outer, holes)
    solid = extrude_profile(polygon, depth)
    logger.info(
        "Built solid: %d holes, %d triangles", len(holes), solid.triangle_count
    )
    return solid


def _ring_polygon(contour: Contour, label: str) -> Polygon:
    if not contour.is_closed:
        raise DegenerateGeometry(f"{label} contour is not closed")
    poly = Polygon(contour.ring)
    if not poly.is_valid:
        raise DegenerateGeometry(f"{label} is not simple: {explain_validity(poly)}")
    if poly.area <= MIN_AREA_MM2:
        raise DegenerateGeometry(f"{label} has zero area")
    return poly


def _triangulate(polygon: Polygon) -> Tuple[np.ndarray, np.ndarray]:
    try:
        verts_2d, faces_2d = trimesh.creation.triangulate_polygon(
            polygon, engine="earcut"
        )
    except ValueError as exc:
        raise DegenerateGeometry(f"triangulation failed: {exc}") from exc
    verts_2d = np.asarray(verts_2d, dtype=float)
    faces_2d = np.asarray(faces_2d, dtype=np.int64).reshape((-1, 3))
    if len(faces_2d) == 0:
        raise DegenerateGeometry("triangulation produced no triangles")

    # Counter-clockwise in the plane, i.e. +z normals for the top cap.
    a, b, c = (verts_2d[faces_2d[:, i]] for i in range(3))
    signed = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (
        c[:, 0] - a[:, 0]
    )
    flip = signed < 0
    faces_2d[flip] = faces_2d[flip][:, ::-1]
    return verts_2d, faces_2d
