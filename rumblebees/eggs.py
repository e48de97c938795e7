"""Eggs: plant growth, capture, and the births captures trigger."""
from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Callable

from rumblebees import geometry
from rumblebees.components import Bee, BeeBorn, Displacement, Hatching, Position, Speed
from rumblebees.tiles import TileEdit
from rumblebees.types import Cell, Faction, TileKind

if TYPE_CHECKING:
    from rumblebees.bus import SignalBus
    from rumblebees.components import GameData
    from rumblebees.config import SimConfig
    from rumblebees.geometry import MapTransform
    from rumblebees.terrain import Terrain
    from rumblebees.types import TickContext
    from rumblebees.world import World

logger = logging.getLogger(__name__)


def newborn_speed(config: SimConfig, eggs_captured: int, rng: random.Random) -> float:
    base = min(config.bee_speed * (1.0 + config.per_egg_speedup * eggs_captured),
               config.bee_speed_max)
    v = config.speed_variance
    return base * rng.uniform(1.0 - v, 1.0 + v)


def grow_plant(terrain: Terrain, rng: random.Random, max_stalk: int) -> tuple[Cell, Faction] | None:
    """Queue a stalk with an egg on top at a random surface cell.

    The stalk is shortened until it and the egg fit in open air; an egg
    directly on the surface always fits. Cells with a queued edit are
    avoided. Returns the egg cell and faction, or None when there is no
    free surface cell.
    """
    pending = terrain.pending_cells()
    surface = [c for c in terrain.surface_cells() if c not in pending]
    if not surface:
        return None
    x, y = rng.choice(surface)
    height = rng.randint(0, max(max_stalk, 0))
    while height > 0:
        cells = [(x, y + k) for k in range(height + 1)]
        if all(terrain.in_bounds(c) and c not in pending
               and terrain.tile(c).kind is TileKind.AIR for c in cells):
            break
        height -= 1

    faction = rng.choice(list(Faction))
    for k in range(height):
        terrain.submit(TileEdit((x, y + k), TileKind.STALK))
    egg = (x, y + height)
    terrain.submit(TileEdit(egg, TileKind.EGG, faction))
    return egg, faction


def kill_stalk(terrain: Terrain, egg: Cell) -> list[Cell]:
    """Queue dead-stalk edits for the stalk column below ``egg``."""
    x, y = egg
    dead: list[Cell] = []
    y -= 1
    while y >= 0:
        kind = terrain.tile((x, y)).kind
        if kind is TileKind.STALK:
            terrain.submit(TileEdit((x, y), TileKind.DEAD_STALK))
            dead.append((x, y))
        elif kind is not TileKind.DEAD_STALK:
            break
        y -= 1
    return dead


def make_egg_spawner_system(
    terrain: Terrain,
    interval: float,
    max_stalk: int = 3,
    bus: SignalBus | None = None,
    on_spawn: Callable[[World, TickContext, Cell, Faction], None] | None = None,
) -> Callable[[World, TickContext], None]:
    """Return a system growing one egg plant every ``interval`` seconds.

    At most one plant grows per tick; intervals a long tick skipped over
    are dropped.
    """
    next_at = interval

    def egg_spawner_system(world: World, ctx: TickContext) -> None:
        nonlocal next_at
        if ctx.elapsed < next_at:
            return
        while next_at <= ctx.elapsed:
            next_at += interval
        planted = grow_plant(terrain, ctx.random, max_stalk)
        if planted is not None:
            cell, faction = planted
            logger.debug("Tick %d: %s egg planted at %s",
                         ctx.tick_number, faction.value, cell)
            if bus is not None:
                bus.publish("egg_spawned", cell=cell, faction=faction)
            if on_spawn is not None:
                on_spawn(world, ctx, cell, faction)

    return egg_spawner_system


def make_egg_capture_system(
    terrain: Terrain,
    transform: MapTransform,
    capture_distance: float,
    game: GameData | None = None,
    bus: SignalBus | None = None,
    on_capture: Callable[[World, TickContext, int, Cell], None] | None = None,
) -> Callable[[World, TickContext], None]:
    """Return a system letting bees take compatible eggs they touch.

    A capture queues air for the egg, kills the stalk below it and queues
    a hatching spawn request. Neutral eggs hatch into the capturer's
    faction. Nothing is captured once *game* is over.
    """

    def egg_capture_system(world: World, ctx: TickContext) -> None:
        if game is not None and game.game_over:
            return
        eggs = terrain.eggs()
        if not eggs:
            return
        taken: set[Cell] = set()
        for eid, (bee, pos) in list(world.query(Bee, Position)):
            for cell, faction in eggs:
                if cell in taken or not bee.faction.compatible(faction):
                    continue
                center = transform.cell_center(cell)
                if geometry.distance((pos.x, pos.y), center) >= capture_distance:
                    continue
                taken.add(cell)
                terrain.submit(TileEdit(cell, TileKind.AIR))
                kill_stalk(terrain, cell)
                hatched = bee.faction if faction is Faction.GREEN else faction
                world.spawn(BeeBorn(faction=hatched, position=center, hatch=True))
                logger.info("Tick %d: bee %d captured %s egg at %s",
                            ctx.tick_number, eid, faction.value, cell)
                if bus is not None:
                    bus.publish("egg_captured", eid=eid, cell=cell, faction=faction)
                if on_capture is not None:
                    on_capture(world, ctx, eid, cell)
                break

    return egg_capture_system


def make_birth_system(
    terrain: Terrain,
    transform: MapTransform,
    config: SimConfig,
    game: GameData,
    bus: SignalBus | None = None,
) -> Callable[[World, TickContext], None]:
    """Return a system turning ``BeeBorn`` requests into bees."""

    def birth_system(world: World, ctx: TickContext) -> None:
        for rid, (req,) in list(world.query(BeeBorn)):
            world.despawn(rid)
            position = req.position
            if position is None:
                cell = terrain.find_empty_cell(ctx.random)
                if cell is None:
                    logger.warning("Tick %d: no room for a %s bee",
                                   ctx.tick_number, req.faction.value)
                    continue
                position = transform.cell_center(cell)
            eid = world.spawn(
                Bee(req.faction),
                Position(*position),
                Speed(newborn_speed(config, game.eggs_captured, ctx.random)),
                Displacement(),
            )
            if req.hatch:
                world.attach(eid, Hatching(config.hatch_time))
            logger.info("Tick %d: %s bee %d born at (%.1f, %.1f)",
                        ctx.tick_number, req.faction.value, eid, *position)
            if bus is not None:
                bus.publish("bee_born", eid=eid, faction=req.faction, position=position)

    return birth_system


def make_hatching_system() -> Callable[[World, TickContext], None]:
    """Return a system counting newborn grace periods down."""

    def hatching_system(world: World, ctx: TickContext) -> None:
        for eid, (hatching,) in list(world.query(Hatching)):
            hatching.remaining -= ctx.dt
            if hatching.remaining <= 0:
                world.detach(eid, Hatching)

    return hatching_system
