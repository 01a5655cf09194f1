"""
Rounded-rectangle outline of the inlay.

The outline is centred on the origin and runs counter-clockwise: four
straight edges joined by four convex quarter-circle arcs. A zero corner
radius gives a plain rectangle with no arc segments.
"""

import logging
import math
from typing import List, Tuple

from inlay_generator.contracts import Contour, Segment, SegmentKind, Vec2
from inlay_generator.errors import InvalidDimension

logger = logging.getLogger(__name__)


def rounded_rectangle(
    length: float,
    width: float,
    corner_radius: float,
    arc_segments: int = 16,
) -> Contour:
    """Build the closed outline of a rounded rectangle.

    Args:
        length: Extent along y.
        width: Extent along x.
        corner_radius: Radius of each corner arc, 0 for sharp corners.
        arc_segments: Chords used to sample each quarter arc.

    Returns:
        Contour starting at the bottom edge, counter-clockwise.

    Raises:
        InvalidDimension: On non-positive sides or a radius larger than
            half the smaller side.
    """
    if length <= 0 or width <= 0:
        raise InvalidDimension(f"profile sides must be positive, got {width} x {length}")
    if corner_radius < 0:
        raise InvalidDimension(f"corner radius must be >= 0, got {corner_radius}")
    if corner_radius > min(length, width) / 2.0:
        raise InvalidDimension(
            f"corner radius {corner_radius} exceeds half the smaller side "
            f"of a {width} x {length} profile"
        )
    if arc_segments < 1:
        raise InvalidDimension(f"arc_segments must be >= 1, got {arc_segments}")

    hx, hy, r = width / 2.0, length / 2.0, corner_radius

    # (arc centre, start angle) for each corner, in counter-clockwise order
    # beginning at the bottom-right.
    corners = [
        ((hx - r, -hy + r), -math.pi / 2),
        ((hx - r, hy - r), 0.0),
        ((-hx + r, hy - r), math.pi / 2),
        ((-hx + r, -hy + r), math.pi),
    ]

    segments: List[Segment] = []
    cursor: Vec2 = (-hx + r, -hy)
    for center, start_angle in corners:
        arc = _quarter_arc(center, r, start_angle, arc_segments)
        if arc[0] != cursor:
            segments.append(Segment(SegmentKind.LINE, (cursor, arc[0])))
        if r > 0:
            segments.append(Segment(SegmentKind.ARC, arc))
        cursor = arc[-1]

    contour = Contour(tuple(segments))
    logger.debug(
        "Outline %.3f x %.3f r=%.3f: %d segments, %d points",
        width, length, r, len(segments), len(contour.ring),
    )
    return contour


def _quarter_arc(
    center: Vec2, radius: float, start_angle: float, segments: int
) -> Tuple[Vec2, ...]:
    cx, cy = center
    if radius == 0:
        return ((cx, cy),)
    pts = []
    for i in range(segments + 1):
        a = start_angle + (math.pi / 2) * i / segments
        pts.append((cx + radius * math.cos(a), cy + radius * math.sin(a)))
    # Snap the ends so they meet the straight edges exactly.
    pts[0] = _snap(pts[0], center, radius, start_angle)
    pts[-1] = _snap(pts[-1], center, radius, start_angle + math.pi / 2)
    return tuple(pts)


def _snap(point: Vec2, center: Vec2, radius: float, angle: float) -> Vec2:
    cx, cy = center
    quarter = round(angle / (math.pi / 2)) % 4
    if quarter == 0:
        return (cx + radius, cy)
    if quarter == 1:
        return (cx, cy + radius)
    if quarter == 2:
        return (cx - radius, cy)
    return (cx, cy - radius)
