"""Configuration -> outline, packed holes, solid and STL bytes.

``build_inlay`` is a pure function of its inputs. ``InlayEditor`` is the
edit boundary used by an interactive surface: each edit rebuilds the
whole pipeline and, if the edit is rejected, keeps the previous design
and result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Dict, List, Optional, Sequence, Tuple

from shapely.geometry import Polygon
from shapely.prepared import prep

from inlay_generator import sections as section_ops
from inlay_generator.contracts import (
    BaseSection,
    Contour,
    InlayConfig,
    InlayDesign,
    PackingRegion,
    PreviewConfig,
    Resolution,
    SectionExtent,
    Vec2,
)
from inlay_generator.errors import InlayError, InvalidState
from inlay_generator.hex_packing import HexPackingLayout, PackingStrategy
from inlay_generator.holes import ellipse_contour
from inlay_generator.profile import rounded_rectangle
from inlay_generator.solid import Solid, build_solid
from inlay_generator.stl_writer import solid_to_stl_bytes

logger = logging.getLogger(__name__)

# Slack when testing holes against the margin line they are packed up to.
FIT_TOLERANCE_MM = 1e-6


@dataclass(frozen=True)
class SectionLayout:
    """Packing outcome for one section."""

    index: int
    extent: SectionExtent
    region: PackingRegion
    strategy: PackingStrategy
    centers: Tuple[Vec2, ...]
    holes: Tuple[Contour, ...]


@dataclass(frozen=True)
class InlayResult:
    """Everything the renderer and the exporter need from one build."""

    design: InlayDesign
    outer_contour: Contour
    sections: Tuple[SectionLayout, ...]
    solid: Solid

    @property
    def guide_contours(self) -> Tuple[Contour, ...]:
        """Margin guides: the packing rectangle of each section."""
        return tuple(s.region.contour() for s in self.sections)

    @property
    def hole_contours(self) -> Tuple[Contour, ...]:
        return tuple(h for s in self.sections for h in s.holes)

    @property
    def hole_count(self) -> int:
        return sum(len(s.centers) for s in self.sections)

    def to_stl_bytes(self) -> bytes:
        return solid_to_stl_bytes(self.solid)

    def summary(self) -> Dict[str, object]:
        lo, hi = self.solid.bounds
        return {
            "hole_count": self.hole_count,
            "triangle_count": self.solid.triangle_count,
            "footprint_mm": [round(float(hi[0] - lo[0]), 4), round(float(hi[1] - lo[1]), 4)],
            "depth_mm": round(float(hi[2] - lo[2]), 4),
            "sections": [
                {
                    "index": s.index,
                    "offset_mm": round(s.extent.offset, 4),
                    "extent_mm": round(s.extent.extent, 4),
                    "strategy": s.strategy.value,
                    "holes": len(s.centers),
                }
                for s in self.sections
            ],
        }


def section_regions(
    config: InlayConfig,
    sections: Sequence[BaseSection],
    extents: Sequence[SectionExtent],
) -> Tuple[PackingRegion, ...]:
    """Packing rectangle for each section.

    The margin is taken off every side of every section. Where two
    sections meet, each one also gives up half its own spacing so holes
    from neighbouring sections cannot touch across the boundary.
    """
    length = config.profile_length
    width = config.profile_width - 2 * config.margin
    last = len(extents) - 1
    regions = []
    for i, (section, ext) in enumerate(zip(sections, extents)):
        lo = -length / 2 + ext.offset + config.margin
        hi = -length / 2 + ext.end - config.margin
        if i > 0:
            lo += section.spacing / 2
        if i < last:
            hi -= section.spacing / 2
        regions.append(
            PackingRegion(length=max(hi - lo, 0.0), width=max(width, 0.0), center=(0.0, (lo + hi) / 2))
        )
    return tuple(regions)


def usable_area(outer: Contour, margin: float) -> Polygon:
    """The outline shrunk by ``margin``; every hole must fit inside it."""
    outline = Polygon(outer.ring)
    inset = margin - FIT_TOLERANCE_MM
    if inset <= 0:
        return outline
    return outline.buffer(-inset)


def build_inlay(
    config: InlayConfig,
    sections: Sequence[BaseSection],
    resolution: Optional[Resolution] = None,
    preview: Optional[PreviewConfig] = None,
) -> InlayResult:
    """Run the full geometry pipeline.

    Raises:
        InvalidDimension: On out-of-range numeric input.
        InvalidState: If the sections are empty or their shares do not
            sum to 100.
        DegenerateGeometry: If the assembled profile is not simple.
    """
    resolution = resolution or Resolution()
    config.validate()
    resolution.validate()
    section_ops.check_shares(sections)
    for section in sections:
        section.validate()

    outer = rounded_rectangle(
        config.profile_length,
        config.profile_width,
        config.corner_radius,
        arc_segments=resolution.arc_segments,
    )
    extents = section_ops.compute_extents(sections, config.profile_length)
    regions = section_regions(config, sections, extents)

    usable = prep(usable_area(outer, config.margin))

    layouts: List[SectionLayout] = []
    for i, (section, ext, region) in enumerate(zip(sections, extents, regions)):
        layout = HexPackingLayout(region, section.footprint, section.spacing)
        fp = section.footprint
        packed = [
            (c, ellipse_contour(c, fp.radius_x, fp.radius_y, resolution.hole_segments))
            for c in layout
        ]
        # Regions are rectangles; the rounded corners cut some of them away.
        kept = [(c, h) for c, h in packed if usable.contains(Polygon(h.ring))]
        if len(kept) < len(packed):
            logger.debug(
                "Section %d: dropped %d holes crossing the rounded corners",
                i, len(packed) - len(kept),
            )
        centers = tuple(c for c, _ in kept)
        holes = tuple(h for _, h in kept)
        if not centers:
            logger.warning(
                "Section %d (%.2f x %.2f mm) has no room for a %.2f x %.2f mm hole",
                i, region.width, region.length, fp.diameter_x, fp.diameter_y,
            )
        layouts.append(SectionLayout(i, ext, region, layout.strategy, centers, holes))

    all_holes = [h for layout in layouts for h in layout.holes]
    solid = build_solid(outer, all_holes, config.depth)

    design = InlayDesign(
        inlay=config,
        sections=tuple(sections),
        preview=preview or PreviewConfig(),
        resolution=resolution,
    )
    return InlayResult(design=design, outer_contour=outer, sections=tuple(layouts), solid=solid)


def build_design(design: InlayDesign) -> InlayResult:
    return build_inlay(design.inlay, design.sections, design.resolution, design.preview)


_INLAY_FIELDS = {f.name for f in fields(InlayConfig)}
_SECTION_FIELDS = {f.name for f in fields(BaseSection)}


@dataclass
class InlayEditor:
    """Holds the current design and its last valid build."""

    design: InlayDesign = field(default_factory=InlayDesign)
    result: Optional[InlayResult] = None

    def __post_init__(self) -> None:
        if self.result is None:
            self.result = build_design(self.design)

    def set_inlay_field(self, name: str, value: float) -> InlayResult:
        if name not in _INLAY_FIELDS:
            raise InvalidState(f"unknown inlay field {name!r}")
        inlay = replace(self.design.inlay, **{name: float(value)})
        return self._apply(replace(self.design, inlay=inlay))

    def set_section_field(self, index: int, name: str, value: float) -> InlayResult:
        if name not in _SECTION_FIELDS:
            raise InvalidState(f"unknown section field {name!r}")
        current = self.design.sections
        if name == "share":
            updated = section_ops.set_share(current, index, float(value))
        else:
            items = list(current)
            items[index] = replace(items[index], **{name: float(value)})
            updated = tuple(items)
        return self._apply(replace(self.design, sections=updated))

    def insert_section_after(self, index: int) -> InlayResult:
        updated = section_ops.insert_after(self.design.sections, index)
        return self._apply(replace(self.design, sections=updated))

    def remove_section(self, index: int) -> InlayResult:
        updated = section_ops.remove(self.design.sections, index)
        return self._apply(replace(self.design, sections=updated))

    def set_preview(self, wireframe: Optional[bool] = None, color: Optional[str] = None) -> None:
        preview = self.design.preview
        if wireframe is not None:
            preview = replace(preview, wireframe=bool(wireframe))
        if color is not None:
            preview = replace(preview, color=color)
        preview.rgba()
        self.design = replace(self.design, preview=preview)
        self.result = replace(self.result, design=self.design)

    def _apply(self, design: InlayDesign) -> InlayResult:
        try:
            result = build_design(design)
        except InlayError as exc:
            logger.info("Rejected edit, keeping previous model: %s", exc)
            raise
        self.design = design
        self.result = result
        return result
