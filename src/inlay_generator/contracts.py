"""Contracts for the inlay geometry pipeline.

Axes: x runs across the inlay width, y along its length (the axis the
sections partition), z through its depth. All values are millimetres.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from inlay_generator.errors import InvalidDimension

Vec2 = Tuple[float, float]


@dataclass(frozen=True)
class InlayConfig:
    """Outer plan, depth and tolerances of the inlay."""

    length: float = 121.9
    width: float = 79.9
    corner_radius: float = 1.6
    depth: float = 3.0
    margin: float = 1.0
    clearance: float = 0.25  # subtracted from length and width before profiling

    @property
    def profile_length(self) -> float:
        return self.length - self.clearance

    @property
    def profile_width(self) -> float:
        return self.width - self.clearance

    def validate(self) -> None:
        """Raise InvalidDimension for the first violated constraint."""
        for name in ("length", "width", "corner_radius", "depth", "margin", "clearance"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise InvalidDimension(f"{name} must be finite, got {value!r}")
        if self.length <= 0 or self.width <= 0:
            raise InvalidDimension(
                f"length and width must be positive, got {self.length} x {self.width}"
            )
        if self.corner_radius < 0:
            raise InvalidDimension(f"corner_radius must be >= 0, got {self.corner_radius}")
        if self.depth <= 0:
            raise InvalidDimension(f"depth must be positive, got {self.depth}")
        if self.margin < 0:
            raise InvalidDimension(f"margin must be >= 0, got {self.margin}")
        if self.clearance < 0 or self.clearance >= min(self.length, self.width):
            raise InvalidDimension(
                f"clearance must be in [0, {min(self.length, self.width)}), "
                f"got {self.clearance}"
            )
        smaller = min(self.profile_length, self.profile_width)
        if smaller <= 2 * self.corner_radius:
            raise InvalidDimension(
                f"corner_radius {self.corner_radius} too large for a "
                f"{self.profile_width:.3f} x {self.profile_length:.3f} profile"
            )


@dataclass(frozen=True)
class HoleFootprint:
    """Hole size including fit clearance."""

    diameter_x: float
    diameter_y: float

    @property
    def radius_x(self) -> float:
        return self.diameter_x / 2.0

    @property
    def radius_y(self) -> float:
        return self.diameter_y / 2.0


@dataclass(frozen=True)
class BaseSection:
    """One slice of the partitioned length and the base it holds."""

    share: float = 100.0  # percent of the partitioned length
    size_x: float = 25.0
    size_y: float = 25.0
    spacing: float = 1.0  # minimum gap between neighbouring holes
    clearance: float = 0.5  # added to the base size

    @property
    def hole_diameter_x(self) -> float:
        return self.size_x + self.clearance

    @property
    def hole_diameter_y(self) -> float:
        return self.size_y + self.clearance

    @property
    def footprint(self) -> HoleFootprint:
        return HoleFootprint(self.hole_diameter_x, self.hole_diameter_y)

    def validate(self) -> None:
        for name in ("share", "size_x", "size_y", "spacing", "clearance"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise InvalidDimension(f"section {name} must be finite, got {value!r}")
        if not 0.0 <= self.share <= 100.0:
            raise InvalidDimension(f"share must be in [0, 100], got {self.share}")
        if self.size_x <= 0 or self.size_y <= 0:
            raise InvalidDimension(
                f"base size must be positive, got {self.size_x} x {self.size_y}"
            )
        if self.spacing < 0:
            raise InvalidDimension(f"spacing must be >= 0, got {self.spacing}")
        if self.clearance < 0:
            raise InvalidDimension(f"section clearance must be >= 0, got {self.clearance}")


@dataclass(frozen=True)
class PreviewConfig:
    """Presentation-only settings consumed by the renderer."""

    wireframe: bool = False
    color: str = "#808080"

    def rgba(self) -> Tuple[int, int, int, int]:
        value = self.color.strip()
        if len(value) != 7 or not value.startswith("#"):
            raise ValueError(f"color must look like #rrggbb, got {self.color!r}")
        return (
            int(value[1:3], 16),
            int(value[3:5], 16),
            int(value[5:7], 16),
            255,
        )


class SegmentKind(Enum):
    LINE = "line"
    ARC = "arc"


@dataclass(frozen=True)
class Segment:
    """A sampled piece of a contour, from its start point to its end point."""

    kind: SegmentKind
    points: Tuple[Vec2, ...]

    @property
    def start(self) -> Vec2:
        return self.points[0]

    @property
    def end(self) -> Vec2:
        return self.points[-1]


@dataclass(frozen=True)
class Contour:
    """An immutable closed boundary made of consecutive segments."""

    segments: Tuple[Segment, ...]

    @property
    def points(self) -> Tuple[Vec2, ...]:
        """Sampled points, first point repeated at the end."""
        if not self.segments:
            return ()
        pts = [self.segments[0].start]
        for seg in self.segments:
            pts.extend(seg.points[1:])
        return tuple(pts)

    @property
    def ring(self) -> Tuple[Vec2, ...]:
        """Sampled points without the closing duplicate."""
        return self.points[:-1]

    @property
    def is_closed(self) -> bool:
        pts = self.points
        return len(pts) >= 4 and pts[0] == pts[-1]

    def count(self, kind: SegmentKind) -> int:
        return sum(1 for seg in self.segments if seg.kind is kind)


@dataclass(frozen=True)
class PackingRegion:
    """Axis-aligned rectangle available to one section's holes."""

    length: float  # along y
    width: float  # along x
    center: Vec2 = (0.0, 0.0)

    def contour(self) -> Contour:
        cx, cy = self.center
        hx, hy = self.width / 2.0, self.length / 2.0
        corners = [
            (cx - hx, cy - hy),
            (cx + hx, cy - hy),
            (cx + hx, cy + hy),
            (cx - hx, cy + hy),
        ]
        segs = tuple(
            Segment(SegmentKind.LINE, (corners[i], corners[(i + 1) % 4]))
            for i in range(4)
        )
        return Contour(segs)


@dataclass(frozen=True)
class SectionExtent:
    """Where a section sits along the partitioned length."""

    offset: float
    extent: float

    @property
    def end(self) -> float:
        return self.offset + self.extent


@dataclass(frozen=True)
class Resolution:
    """Sampling density for curved boundaries."""

    hole_segments: int = 64
    arc_segments: int = 16  # per quarter-circle corner

    def validate(self) -> None:
        if self.hole_segments < 3:
            raise InvalidDimension(f"hole_segments must be >= 3, got {self.hole_segments}")
        if self.arc_segments < 1:
            raise InvalidDimension(f"arc_segments must be >= 1, got {self.arc_segments}")


DEFAULT_SECTIONS: Tuple[BaseSection, ...] = (BaseSection(),)


@dataclass(frozen=True)
class InlayDesign:
    """Everything the configuration surface edits."""

    inlay: InlayConfig = field(default_factory=InlayConfig)
    sections: Tuple[BaseSection, ...] = DEFAULT_SECTIONS
    preview: PreviewConfig = field(default_factory=PreviewConfig)
    resolution: Resolution = field(default_factory=Resolution)
