"""
Offset-row (hexagonal) placement of hole centres inside a rectangle.

Rows run across the width (x) and stack along the length (y). Even rows
hold every column; odd rows sit half a column over and drop their first
column so the pattern stays a true brick layout inside the rectangle.

Small regions break the hex formula, so the layout picks one of four
strategies up front from the row and column counts:

  EMPTY          nothing fits
  SPARSE_LINE    fewer than 4 rows and one column: holes spread evenly
                 along one line down the middle
  SINGLE_COLUMN  one column, many rows: holes packed at the tighter
                 pitch ``diameter_y + spacing``, block centred
  GENERAL_GRID   the staggered grid

Every strategy keeps each hole footprint inside the rectangle and keeps
at least ``spacing`` between neighbouring footprints along rows and
columns (and between circles in any direction).
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Tuple

from inlay_generator.contracts import HoleFootprint, PackingRegion, Vec2
from inlay_generator.errors import InvalidDimension

logger = logging.getLogger(__name__)

SQRT3 = math.sqrt(3.0)
_EPS = 1e-9
SPARSE_MAX_ROWS = 4


class PackingStrategy(Enum):
    EMPTY = "empty"
    SPARSE_LINE = "sparse_line"
    SINGLE_COLUMN = "single_column"
    GENERAL_GRID = "general_grid"


def row_height(footprint: HoleFootprint, spacing: float) -> float:
    """Pitch between staggered rows (hex packing of the y diameter)."""
    return 1.5 * (footprint.diameter_y / SQRT3) + spacing


def column_spacing(footprint: HoleFootprint, spacing: float) -> float:
    return footprint.diameter_x + spacing


def fit_count(extent: float, size: float, pitch: float) -> int:
    """How many items of ``size`` repeated every ``pitch`` fit in ``extent``."""
    if extent + _EPS < size or pitch <= 0:
        return 0
    return int(math.floor((extent - size) / pitch + _EPS)) + 1


def classify_layout(num_rows: int, num_cols: int) -> PackingStrategy:
    if num_rows <= 0 or num_cols <= 0:
        return PackingStrategy.EMPTY
    if num_rows < SPARSE_MAX_ROWS and num_cols < 2:
        return PackingStrategy.SPARSE_LINE
    if num_cols == 1:
        return PackingStrategy.SINGLE_COLUMN
    return PackingStrategy.GENERAL_GRID


@dataclass(frozen=True)
class HexPackingLayout:
    """Lazy, restartable sequence of hole centres for one region.

    Iterating yields centres in row order (bottom row first, left to
    right). ``region.center`` is added to every centre.
    """

    region: PackingRegion
    footprint: HoleFootprint
    spacing: float = 1.0
    num_rows: int = field(init=False)
    num_cols: int = field(init=False)
    strategy: PackingStrategy = field(init=False)

    def __post_init__(self) -> None:
        if self.footprint.diameter_x <= 0 or self.footprint.diameter_y <= 0:
            raise InvalidDimension(
                f"hole footprint must be positive, got "
                f"{self.footprint.diameter_x} x {self.footprint.diameter_y}"
            )
        if self.spacing < 0:
            raise InvalidDimension(f"spacing must be >= 0, got {self.spacing}")

        rows = fit_count(self.region.length, self.footprint.diameter_y, self.row_height)
        cols = fit_count(self.region.width, self.footprint.diameter_x, self.col_spacing)
        object.__setattr__(self, "num_rows", rows)
        object.__setattr__(self, "num_cols", cols)
        object.__setattr__(self, "strategy", classify_layout(rows, cols))
        logger.debug(
            "Region %.2f x %.2f: rows=%d cols=%d strategy=%s",
            self.region.width, self.region.length, rows, cols, self.strategy.value,
        )

    @property
    def row_height(self) -> float:
        return row_height(self.footprint, self.spacing)

    @property
    def col_spacing(self) -> float:
        return column_spacing(self.footprint, self.spacing)

    @property
    def line_pitch(self) -> float:
        """Pitch used when holes sit on a single line along y."""
        return self.footprint.diameter_y + self.spacing

    def __iter__(self) -> Iterator[Vec2]:
        if self.strategy is PackingStrategy.EMPTY:
            return iter(())
        if self.strategy is PackingStrategy.SPARSE_LINE:
            local = self._sparse_line()
        elif self.strategy is PackingStrategy.SINGLE_COLUMN:
            local = self._single_column()
        else:
            local = self._general_grid()
        ox, oy = self.region.center
        return ((ox + x, oy + y) for x, y in local)

    def __len__(self) -> int:
        if self.strategy is PackingStrategy.EMPTY:
            return 0
        if self.strategy is PackingStrategy.SPARSE_LINE:
            return self._sparse_count()
        if self.strategy is PackingStrategy.SINGLE_COLUMN:
            return self._single_column_count()
        odd_rows = self.num_rows // 2
        return self.num_rows * self.num_cols - odd_rows

    def centers(self) -> Tuple[Vec2, ...]:
        return tuple(self)

    # ─── Strategies (local coordinates, region centred on the origin) ───

    def _general_grid(self) -> Iterator[Vec2]:
        rh, cs = self.row_height, self.col_spacing
        pattern_w = self.num_cols * cs
        pattern_h = self.num_rows * rh
        for row in range(self.num_rows):
            y = -pattern_h / 2 + (row + 0.5) * rh
            odd = row % 2 == 1
            for col in range(self.num_cols):
                if odd and col == 0:
                    continue
                x = -pattern_w / 2 + col * cs + (0.0 if odd else cs / 2)
                yield (x, y)

    def _single_column_count(self) -> int:
        return fit_count(self.region.length, self.footprint.diameter_y, self.line_pitch)

    def _single_column(self) -> Iterator[Vec2]:
        pitch = self.line_pitch
        count = self._single_column_count()
        block = count * pitch
        for i in range(count):
            yield (0.0, -block / 2 + (i + 0.5) * pitch)

    def _sparse_count(self) -> int:
        by_pitch = int(math.floor(self.region.length / self.line_pitch + _EPS))
        return max(1, min(self.num_rows, by_pitch))

    def _sparse_line(self) -> Iterator[Vec2]:
        count = self._sparse_count()
        slot = self.region.length / count
        for i in range(count):
            yield (0.0, -self.region.length / 2 + (i + 0.5) * slot)


def pack_holes(
    region: PackingRegion, footprint: HoleFootprint, spacing: float
) -> Tuple[Vec2, ...]:
    """Convenience wrapper returning the centres as a tuple."""
    return HexPackingLayout(region, footprint, spacing).centers()
