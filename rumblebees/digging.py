"""Digging through the tile that blocks a bee's way to its egg."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from rumblebees.components import DigTarget, Fighter, Position, Route
from rumblebees.pathfind import manhattan
from rumblebees.tiles import TileEdit, is_diggable
from rumblebees.types import TileKind

if TYPE_CHECKING:
    from rumblebees.geometry import MapTransform
    from rumblebees.terrain import Terrain
    from rumblebees.types import TickContext
    from rumblebees.world import World

logger = logging.getLogger(__name__)


def make_dig_system(
    terrain: Terrain,
    transform: MapTransform,
    dig_repeat: float,
    dig_power: int,
) -> Callable[[World, TickContext], None]:
    """Return a system for bees that finished their approach route.

    A bee next to its dig target removes ``dig_power`` health every
    ``dig_repeat`` seconds; at zero health the tile is queued to become
    air and the bee goes idle. Targets the bee is not next to, or that are
    no longer diggable, are dropped.
    """

    def dig_system(world: World, ctx: TickContext) -> None:
        for eid, (pos, dig) in list(world.query(
            Position, DigTarget, without=(Route, Fighter),
        )):
            cell = transform.cell_at((pos.x, pos.y))
            tile = terrain.tile(dig.cell)
            if cell is None or manhattan(cell, dig.cell) != 1 or not is_diggable(tile):
                world.detach(eid, DigTarget)
                continue
            dig.cooldown -= ctx.dt
            if dig.cooldown > 0:
                continue
            dig.cooldown = dig_repeat
            tile.health = max(tile.health - dig_power, 0)
            if tile.health == 0:
                terrain.submit(TileEdit(dig.cell, TileKind.AIR))
                world.detach(eid, DigTarget)
                logger.debug("Tick %d: bee %d dug through %s",
                             ctx.tick_number, eid, dig.cell)

    return dig_system
