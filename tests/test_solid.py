"""Tests for profile assembly, triangulation and extrusion."""
import numpy as np
import pytest

from inlay_generator.contracts import Contour, Segment, SegmentKind
from inlay_generator.errors import DegenerateGeometry, InvalidDimension
from inlay_generator.holes import circle_contour
from inlay_generator.profile import rounded_rectangle
from inlay_generator.solid import build_solid, extrude_profile, profile_polygon


def _polyline_contour(points):
    closed = list(points) + [points[0]]
    return Contour(
        tuple(
            Segment(SegmentKind.LINE, (closed[i], closed[i + 1]))
            for i in range(len(points))
        )
    )


def _ring_points(outer, holes):
    return len(outer.ring) + sum(len(h.ring) for h in holes)


class TestProfilePolygon:
    def test_holes_become_interiors(self, square_outline, center_hole):
        poly = profile_polygon(square_outline, [center_hole])
        assert poly.is_valid
        assert len(poly.interiors) == 1
        assert poly.exterior.is_ccw
        assert not poly.interiors[0].is_ccw

    def test_overlapping_holes_rejected(self, square_outline):
        holes = [circle_contour((0.0, 0.0), 10.0), circle_contour((4.0, 0.0), 10.0)]
        with pytest.raises(DegenerateGeometry):
            profile_polygon(square_outline, holes)

    def test_hole_outside_outline_rejected(self, square_outline):
        with pytest.raises(DegenerateGeometry):
            profile_polygon(square_outline, [circle_contour((18.0, 0.0), 10.0)])

    def test_self_intersecting_outline_rejected(self):
        bowtie = _polyline_contour([(0, 0), (10, 10), (10, 0), (0, 10)])
        with pytest.raises(DegenerateGeometry):
            profile_polygon(bowtie, [])

    def test_zero_area_outline_rejected(self):
        flat = _polyline_contour([(0, 0), (5, 0), (10, 0)])
        with pytest.raises(DegenerateGeometry):
            profile_polygon(flat, [])


class TestExtrusion:
    def test_closed_manifold_with_one_hole(self, square_outline, center_hole):
        solid = build_solid(square_outline, [center_hole], 3.0)
        mesh = solid.to_trimesh()
        assert mesh.is_watertight
        assert mesh.is_winding_consistent
        # One through-hole: genus 1.
        assert mesh.euler_number == 0

        hole_area = 0.5 * 64 * 25.0 * np.sin(2 * np.pi / 64)
        assert mesh.volume == pytest.approx((1600.0 - hole_area) * 3.0, rel=1e-6)

    def test_triangle_accounting(self, square_outline):
        holes = [circle_contour((-10.0, 0.0), 8.0), circle_contour((10.0, 0.0), 8.0)]
        solid = build_solid(square_outline, holes, 2.0)
        ring_points = _ring_points(square_outline, holes)

        assert solid.wall_triangle_count == 2 * ring_points
        assert solid.cap_triangle_count == 2 * (ring_points + 2 * len(holes) - 2)
        assert solid.triangle_count == solid.cap_triangle_count + solid.wall_triangle_count
        assert len(solid.vertices) == 2 * ring_points

    def test_normals_point_outward(self, square_outline, center_hole):
        solid = build_solid(square_outline, [center_hole], 3.0)
        tri_z = solid.triangles[:, :, 2]
        top = np.all(np.isclose(tri_z, 3.0), axis=1)
        bottom = np.all(np.isclose(tri_z, 0.0), axis=1)
        assert top.any() and bottom.any()
        assert np.all(solid.face_normals[top, 2] > 0.99)
        assert np.all(solid.face_normals[bottom, 2] < -0.99)

        # Hole wall normals face the hole axis.
        walls = ~(top | bottom)
        centers = solid.triangles[walls].mean(axis=1)
        radial = np.hypot(centers[:, 0], centers[:, 1])
        inner = radial < 6.0
        dots = np.einsum("ij,ij->i", solid.face_normals[walls][inner][:, :2], centers[inner][:, :2])
        assert np.all(dots < 0)

    def test_bounds_follow_outline_and_depth(self):
        outer = rounded_rectangle(50.0, 30.0, 2.0)
        solid = build_solid(outer, [], 4.0)
        lo, hi = solid.bounds
        assert lo == pytest.approx([-15.0, -25.0, 0.0])
        assert hi == pytest.approx([15.0, 25.0, 4.0])
        assert solid.to_trimesh().euler_number == 2

    def test_buffers_are_read_only(self, square_outline, center_hole):
        solid = build_solid(square_outline, [center_hole], 3.0)
        assert not solid.vertices.flags.writeable
        assert not solid.faces.flags.writeable
        with pytest.raises(ValueError):
            solid.vertices[0, 0] = 99.0

    def test_non_positive_depth(self, square_outline):
        poly = profile_polygon(square_outline, [])
        with pytest.raises(InvalidDimension):
            extrude_profile(poly, 0.0)
