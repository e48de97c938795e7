"""Tile state and the solidity rules the two navmeshes are built from."""
from __future__ import annotations

from dataclasses import dataclass

from rumblebees.types import Cell, Faction, TileKind

_SOLID = frozenset({TileKind.DIRT, TileKind.DEAD_STALK, TileKind.STALK, TileKind.ROCK})
_DIGGABLE = frozenset({TileKind.DIRT, TileKind.DEAD_STALK})


@dataclass
class Tile:
    kind: TileKind = TileKind.AIR
    faction: Faction | None = None
    health: int = 0


@dataclass(frozen=True)
class TileEdit:
    """A requested change of one cell. ``health`` of None means full health.

    Eggs must name their faction.
    """

    cell: Cell
    kind: TileKind
    faction: Faction | None = None
    health: int | None = None

    def __post_init__(self) -> None:
        if self.kind is TileKind.EGG and self.faction is None:
            raise ValueError(f"Egg edit at {self.cell} needs a faction")


def is_diggable(tile: Tile) -> bool:
    return tile.kind in _DIGGABLE


def solid_main(tile: Tile) -> bool:
    """Every obstacle blocks."""
    return tile.kind in _SOLID


def solid_alt(tile: Tile) -> bool:
    """Diggable obstacles are treated as walkable."""
    return tile.kind in _SOLID and tile.kind not in _DIGGABLE
