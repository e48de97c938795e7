"""Terrain tiles, the edit queue, and the system that keeps navmeshes in sync."""
from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Callable, Iterator

from rumblebees.components import DigTarget
from rumblebees.pathfind import Route
from rumblebees.tiles import Tile, TileEdit, is_diggable, solid_main
from rumblebees.types import Cell, Faction, MapFormatError, TileKind

if TYPE_CHECKING:
    from rumblebees.bus import SignalBus
    from rumblebees.navmesh import DualNavmesh
    from rumblebees.types import TickContext
    from rumblebees.world import World

logger = logging.getLogger(__name__)

_GLYPHS: dict[str, tuple[TileKind, Faction | None]] = {
    ".": (TileKind.AIR, None),
    "#": (TileKind.DIRT, None),
    "@": (TileKind.ROCK, None),
    "|": (TileKind.STALK, None),
    ":": (TileKind.DEAD_STALK, None),
    "%": (TileKind.BONES, None),
    "r": (TileKind.EGG, Faction.RED),
    "b": (TileKind.EGG, Faction.BLUE),
    "g": (TileKind.EGG, Faction.GREEN),
}
_GLYPH_OF = {v: k for k, v in _GLYPHS.items()}


class Terrain:
    """Tile table. ``y`` grows upward; row 0 is the floor."""

    def __init__(self, width: int, height: int, tile_health: int = 100) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid terrain size {width}x{height}")
        self._width = width
        self._height = height
        self._tile_health = tile_health
        self._tiles: list[Tile] = [Tile() for _ in range(width * height)]
        self._pending: list[TileEdit] = []

    @classmethod
    def generate(cls, width: int, height: int, ground_height: int = 2,
                 tile_health: int = 100) -> Terrain:
        """Rock floor with ``ground_height`` rows of dirt on top."""
        terrain = cls(width, height, tile_health)
        for x in range(width):
            terrain.apply(TileEdit((x, 0), TileKind.ROCK))
            for y in range(1, min(ground_height + 1, height)):
                terrain.apply(TileEdit((x, y), TileKind.DIRT))
        return terrain

    @classmethod
    def from_ascii(cls, text: str, tile_health: int = 100) -> Terrain:
        """Parse a map drawn top row first.

        Legend: ``.`` air, ``#`` dirt, ``@`` rock, ``|`` stalk, ``:`` dead
        stalk, ``%`` bones, ``r``/``b``/``g`` red/blue/green egg.
        """
        rows = [line.strip() for line in text.strip().splitlines() if line.strip()]
        if not rows:
            raise MapFormatError("Map is empty")
        width = len(rows[0])
        for i, row in enumerate(rows):
            if len(row) != width:
                raise MapFormatError(
                    f"Row {i} has {len(row)} cells, expected {width}"
                )
        terrain = cls(width, len(rows), tile_health)
        for i, row in enumerate(rows):
            y = len(rows) - 1 - i
            for x, glyph in enumerate(row):
                try:
                    kind, faction = _GLYPHS[glyph]
                except KeyError:
                    raise MapFormatError(
                        f"Unknown map glyph {glyph!r} at ({x}, {y})"
                    ) from None
                terrain.apply(TileEdit((x, y), kind, faction))
        return terrain

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def tile_health(self) -> int:
        return self._tile_health

    def in_bounds(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self._width and 0 <= y < self._height

    def tile(self, cell: Cell) -> Tile:
        if not self.in_bounds(cell):
            raise ValueError(
                f"{cell} out of bounds for {self._width}x{self._height} terrain"
            )
        x, y = cell
        return self._tiles[x + self._width * y]

    def tiles(self) -> Iterator[tuple[Cell, Tile]]:
        for i, tile in enumerate(self._tiles):
            yield (i % self._width, i // self._width), tile

    def eggs(self) -> list[tuple[Cell, Faction]]:
        """Eggs with no edit waiting on their cell."""
        pending = self.pending_cells()
        return [
            (cell, tile.faction)
            for cell, tile in self.tiles()
            if tile.kind is TileKind.EGG and tile.faction is not None
            and cell not in pending
        ]

    def surface_cells(self) -> list[Cell]:
        """Air cells resting on something solid (or on the map floor)."""
        result: list[Cell] = []
        for (x, y), tile in self.tiles():
            if tile.kind is not TileKind.AIR:
                continue
            if y == 0 or solid_main(self._tiles[x + self._width * (y - 1)]):
                result.append((x, y))
        return result

    def find_empty_cell(self, rng: random.Random) -> Cell | None:
        """Random surface cell, else any air cell, else None."""
        candidates = self.surface_cells()
        if not candidates:
            candidates = [c for c, t in self.tiles() if t.kind is TileKind.AIR]
        if not candidates:
            return None
        return rng.choice(candidates)

    # -- Edits --

    def submit(self, edit: TileEdit) -> None:
        """Queue an edit for the next terrain pass."""
        if not self.in_bounds(edit.cell):
            raise ValueError(
                f"{edit.cell} out of bounds for {self._width}x{self._height} terrain"
            )
        self._pending.append(edit)

    def paint(self, cell: Cell) -> TileEdit | None:
        """Queue the pointer tool's edit for ``cell``.

        Air becomes dirt; rock and eggs are left alone; anything else is
        cleared to air.
        """
        kind = self.tile(cell).kind
        if kind in (TileKind.ROCK, TileKind.EGG):
            return None
        edit = TileEdit(cell, TileKind.DIRT if kind is TileKind.AIR else TileKind.AIR)
        self.submit(edit)
        return edit

    def pending(self) -> int:
        return len(self._pending)

    def pending_cells(self) -> set[Cell]:
        return {edit.cell for edit in self._pending}

    def drain(self) -> list[TileEdit]:
        edits = self._pending
        self._pending = []
        return edits

    def apply(self, edit: TileEdit) -> Tile:
        tile = self.tile(edit.cell)
        tile.kind = edit.kind
        tile.faction = edit.faction if edit.kind is TileKind.EGG else None
        if is_diggable(tile):
            tile.health = self._tile_health if edit.health is None else edit.health
        else:
            tile.health = 0
        return tile

    def to_ascii(self) -> str:
        rows = []
        for y in range(self._height - 1, -1, -1):
            rows.append("".join(
                _GLYPH_OF[(t.kind, t.faction)]
                for t in self._tiles[y * self._width:(y + 1) * self._width]
            ))
        return "\n".join(rows)


def make_terrain_system(
    terrain: Terrain,
    navmesh: DualNavmesh,
    bus: SignalBus | None = None,
) -> Callable[[World, TickContext], None]:
    """Return the system applying queued edits and invalidating routes.

    All edits of the tick are written and mirrored into both navmeshes
    before any route is checked, so routes are judged against the new
    solidity. A route whose remaining cells include a changed cell is
    dropped; its bee replans in the decision pass.
    """

    def terrain_system(world: World, ctx: TickContext) -> None:
        edits = terrain.drain()
        if not edits:
            return
        changed: set[Cell] = set()
        for edit in edits:
            tile = terrain.apply(edit)
            navmesh.update(edit.cell, tile)
            changed.add(edit.cell)
            if bus is not None:
                bus.publish("tile_changed", cell=edit.cell, kind=tile.kind)

        ordered = sorted(changed)
        for eid, (route,) in list(world.query(Route)):
            hit = next((c for c in ordered if route.crosses(c)), None)
            if hit is not None:
                world.detach(eid, Route)
                logger.debug("Tick %d: route of bee %d invalidated at %s",
                             ctx.tick_number, eid, hit)
                if bus is not None:
                    bus.publish("route_invalidated", eid=eid, cell=hit)

        for eid, (dig,) in list(world.query(DigTarget)):
            if dig.cell in changed and not is_diggable(terrain.tile(dig.cell)):
                world.detach(eid, DigTarget)

    return terrain_system
