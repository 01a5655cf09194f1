"""Parametric miniature-base inlay: outline, hex-packed holes, solid, STL."""

from inlay_generator.contracts import (
    BaseSection,
    Contour,
    InlayConfig,
    InlayDesign,
    PreviewConfig,
    Resolution,
)
from inlay_generator.errors import (
    DegenerateGeometry,
    InlayError,
    InvalidDimension,
    InvalidState,
)
from inlay_generator.pipeline import InlayEditor, InlayResult, build_design, build_inlay
from inlay_generator.stl_writer import solid_to_stl_bytes

__all__ = [
    "BaseSection",
    "Contour",
    "DegenerateGeometry",
    "InlayConfig",
    "InlayDesign",
    "InlayEditor",
    "InlayError",
    "InlayResult",
    "InvalidDimension",
    "InvalidState",
    "PreviewConfig",
    "Resolution",
    "build_design",
    "build_inlay",
    "solid_to_stl_bytes",
]
