"""Navmesh - boolean walkability grid with 4-connected neighbours."""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterator

from rumblebees.tiles import Tile, solid_alt, solid_main
from rumblebees.types import Cell

if TYPE_CHECKING:
    from rumblebees.terrain import Terrain

# Neighbour enumeration order. Fixed so equal-cost routes resolve the same way.
_NEIGHBOR_OFFSETS = ((0, -1), (-1, 0), (1, 0), (0, 1))


class Navmesh:
    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid navmesh size {width}x{height}")
        self._width = width
        self._height = height
        self._cells: list[bool] = [False] * (width * height)

    @classmethod
    def from_terrain(cls, terrain: Terrain, rule: Callable[[Tile], bool]) -> Navmesh:
        nav = cls(terrain.width, terrain.height)
        for cell, tile in terrain.tiles():
            nav.set_solid(cell, rule(tile))
        return nav

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def in_bounds(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self._width and 0 <= y < self._height

    def solid(self, cell: Cell) -> bool:
        """Cells outside the grid are solid."""
        x, y = cell
        if not (0 <= x < self._width and 0 <= y < self._height):
            return True
        return self._cells[x + self._width * y]

    def set_solid(self, cell: Cell, solid: bool) -> None:
        # Callers keep ``cell`` in bounds.
        x, y = cell
        self._cells[x + self._width * y] = solid

    def neighbors4(self, cell: Cell) -> list[Cell]:
        x, y = cell
        result: list[Cell] = []
        for dx, dy in _NEIGHBOR_OFFSETS:
            n = (x + dx, y + dy)
            if not self.solid(n):
                result.append(n)
        return result

    def open_cells(self) -> Iterator[Cell]:
        for i, solid in enumerate(self._cells):
            if not solid:
                yield i % self._width, i // self._width

    def __repr__(self) -> str:
        blocked = sum(self._cells)
        return f"Navmesh({self._width}x{self._height}, {blocked} solid)"


class DualNavmesh:
    """``main`` blocks on every obstacle, ``alt`` lets diggable tiles through."""

    def __init__(self, main: Navmesh, alt: Navmesh) -> None:
        if (main.width, main.height) != (alt.width, alt.height):
            raise ValueError(
                f"Navmesh sizes differ: {main.width}x{main.height} "
                f"vs {alt.width}x{alt.height}"
            )
        self.main = main
        self.alt = alt

    @classmethod
    def from_terrain(cls, terrain: Terrain) -> DualNavmesh:
        return cls(
            Navmesh.from_terrain(terrain, solid_main),
            Navmesh.from_terrain(terrain, solid_alt),
        )

    def update(self, cell: Cell, tile: Tile) -> None:
        self.main.set_solid(cell, solid_main(tile))
        self.alt.set_solid(cell, solid_alt(tile))
