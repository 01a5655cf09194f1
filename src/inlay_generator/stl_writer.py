"""
Binary STL serialisation through trimesh's exporter.

Layout (all little-endian):
  80-byte header
  uint32 triangle count
  per triangle, 50 bytes: float32 normal[3], float32 vertex[3][3],
  uint16 attribute byte count (always 0)

trimesh writes an all-zero header; only the header bytes are replaced
here. Output depends only on the triangle list, so serialising the same
solid twice yields identical bytes.
"""

import io
import logging
import os
from dataclasses import dataclass
from typing import Optional

import numpy as np
from trimesh.exchange.stl import HeaderError, export_stl, load_stl_binary

from inlay_generator.solid import Solid

logger = logging.getLogger(__name__)

HEADER_SIZE = 80
RECORD_SIZE = 50
DEFAULT_HEADER = b"inlay_generator binary STL"


@dataclass(frozen=True)
class ParsedSTL:
    header: bytes
    normals: np.ndarray  # (m, 3) float32
    triangles: np.ndarray  # (m, 3, 3) float32
    attributes: np.ndarray  # (m,) uint16

    @property
    def triangle_count(self) -> int:
        return int(len(self.triangles))


def solid_to_stl_bytes(solid: Solid, header: bytes = DEFAULT_HEADER) -> bytes:
    """Serialise ``solid`` to binary STL."""
    if len(header) > HEADER_SIZE:
        raise ValueError(f"STL header is limited to {HEADER_SIZE} bytes, got {len(header)}")
    data = export_stl(solid.to_trimesh())
    return header.ljust(HEADER_SIZE, b"\0") + data[HEADER_SIZE:]


def parse_stl_bytes(data: bytes) -> ParsedSTL:
    """Read a binary STL buffer back into arrays.

    Raises:
        ValueError: If the buffer is truncated or its length disagrees
            with the triangle count field.
    """
    try:
        loaded = load_stl_binary(io.BytesIO(data))
    except HeaderError as exc:
        raise ValueError(f"not a valid binary STL: {exc}") from exc

    if "faces" not in loaded:
        # trimesh returns no arrays for a zero-triangle file
        return ParsedSTL(
            header=bytes(data[:HEADER_SIZE]),
            normals=np.zeros((0, 3), dtype=np.float32),
            triangles=np.zeros((0, 3, 3), dtype=np.float32),
            attributes=np.zeros(0, dtype=np.uint16),
        )
    return ParsedSTL(
        header=bytes(data[:HEADER_SIZE]),
        normals=np.array(loaded["face_normals"], dtype=np.float32),
        triangles=np.array(loaded["vertices"], dtype=np.float32).reshape((-1, 3, 3)),
        attributes=np.array(loaded["face_attributes"]["stl"], dtype=np.uint16),
    )


def write_stl(solid: Solid, filepath: str, header: Optional[bytes] = None) -> str:
    """Write ``solid`` to ``filepath`` as binary STL and return the path."""
    data = solid_to_stl_bytes(solid, header if header is not None else DEFAULT_HEADER)
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    with open(filepath, "wb") as f:
        f.write(data)
    logger.info("Exported STL: %s (%d triangles)", filepath, solid.triangle_count)
    return filepath
