"""2D vector helpers and the cell <-> world mapping."""
from __future__ import annotations

import math
from dataclasses import dataclass

from rumblebees.types import Cell, Point


def sub(a: Point, b: Point) -> Point:
    return a[0] - b[0], a[1] - b[1]


def scale(v: Point, s: float) -> Point:
    return v[0] * s, v[1] * s


def magnitude(v: Point) -> float:
    return math.hypot(v[0], v[1])


def distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def normalize(v: Point) -> Point:
    """Unit vector along ``v``; the zero vector stays zero."""
    mag = magnitude(v)
    if mag == 0.0:
        return 0.0, 0.0
    return v[0] / mag, v[1] / mag


@dataclass(frozen=True)
class MapTransform:
    """Placement of the cell grid in world space."""

    tile_size: float
    origin_x: float = 0.0
    origin_y: float = 0.0
    width: int | None = None
    height: int | None = None

    def cell_center(self, cell: Cell) -> Point:
        half = self.tile_size / 2.0
        return (
            self.origin_x + cell[0] * self.tile_size + half,
            self.origin_y + cell[1] * self.tile_size + half,
        )

    def cell_at(self, point: Point) -> Cell | None:
        """Cell containing ``point``, or None outside the map."""
        x = math.floor((point[0] - self.origin_x) / self.tile_size)
        y = math.floor((point[1] - self.origin_y) / self.tile_size)
        if x < 0 or y < 0:
            return None
        if self.width is not None and x >= self.width:
            return None
        if self.height is not None and y >= self.height:
            return None
        return x, y
