"""Hole outlines: axis-aligned ellipses, circles being the equal-radii case."""

import math

from inlay_generator.contracts import Contour, Segment, SegmentKind, Vec2
from inlay_generator.errors import InvalidDimension

DEFAULT_HOLE_SEGMENTS = 64


def ellipse_contour(
    center: Vec2,
    radius_x: float,
    radius_y: float,
    segments: int = DEFAULT_HOLE_SEGMENTS,
) -> Contour:
    """Sample a closed counter-clockwise ellipse as a single arc segment."""
    if radius_x <= 0 or radius_y <= 0:
        raise InvalidDimension(f"hole radii must be positive, got {radius_x}, {radius_y}")
    if segments < 3:
        raise InvalidDimension(f"hole needs at least 3 segments, got {segments}")
    cx, cy = center
    pts = [
        (
            cx + radius_x * math.cos(2 * math.pi * i / segments),
            cy + radius_y * math.sin(2 * math.pi * i / segments),
        )
        for i in range(segments)
    ]
    pts.append(pts[0])
    return Contour((Segment(SegmentKind.ARC, tuple(pts)),))


def circle_contour(
    center: Vec2, diameter: float, segments: int = DEFAULT_HOLE_SEGMENTS
) -> Contour:
    return ellipse_contour(center, diameter / 2.0, diameter / 2.0, segments)
