"""Proximity fights between opposing bees and their timed resolution."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from rumblebees import geometry
from rumblebees.components import (
    Bee, DigTarget, Fight, Fighter, Hatching, Position, Route,
)
from rumblebees.tiles import TileEdit
from rumblebees.types import TileKind

if TYPE_CHECKING:
    from rumblebees.bus import SignalBus
    from rumblebees.geometry import MapTransform
    from rumblebees.terrain import Terrain
    from rumblebees.types import EntityId, TickContext
    from rumblebees.world import World

logger = logging.getLogger(__name__)


def start_fight(world: World, ctx: TickContext, bee1: EntityId, bee2: EntityId) -> EntityId:
    """Pull two bees into a fight. Both lose their route and dig target."""
    fight = world.spawn(Fight(bee1=bee1, bee2=bee2, started=ctx.elapsed))
    for eid, opponent in ((bee1, bee2), (bee2, bee1)):
        world.detach(eid, Route)
        world.detach(eid, DigTarget)
        world.detach(eid, Hatching)
        world.attach(eid, Fighter(opponent=opponent, fight=fight))
    return fight


def make_fight_collision_system(
    fight_distance: float,
    bus: SignalBus | None = None,
) -> Callable[[World, TickContext], None]:
    """Return a system starting fights between close opposing bees.

    Checks every unordered pair of bees not already fighting: O(n^2).
    A bee joins at most one fight per scan.
    """

    def fight_collision_system(world: World, ctx: TickContext) -> None:
        bees = list(world.query(Bee, Position, without=(Fighter,)))
        engaged: set[int] = set()
        for i, (eid_a, (bee_a, pos_a)) in enumerate(bees):
            if eid_a in engaged:
                continue
            for eid_b, (bee_b, pos_b) in bees[i + 1:]:
                if eid_b in engaged or not bee_a.faction.opposes(bee_b.faction):
                    continue
                if geometry.distance((pos_a.x, pos_a.y), (pos_b.x, pos_b.y)) >= fight_distance:
                    continue
                start_fight(world, ctx, eid_a, eid_b)
                engaged.update((eid_a, eid_b))
                logger.debug("Tick %d: bees %d and %d start fighting",
                             ctx.tick_number, eid_a, eid_b)
                if bus is not None:
                    bus.publish("fight_started", bee1=eid_a, bee2=eid_b)
                break

    return fight_collision_system


def make_fight_resolution_system(
    fight_duration: float,
    terrain: Terrain,
    transform: MapTransform,
    bus: SignalBus | None = None,
    on_kill: Callable[[World, TickContext, int, Bee], None] | None = None,
) -> Callable[[World, TickContext], None]:
    """Return a system ending fights older than ``fight_duration`` seconds.

    The first collider (``bee1``) wins and goes back to idle. The loser is
    despawned and leaves bones on its cell if that cell is open air. The
    *on_kill* callback runs after the despawn with the loser's ``Bee``.
    If one side is already gone the other is released unharmed.
    """

    def fight_resolution_system(world: World, ctx: TickContext) -> None:
        for fid, (fight,) in list(world.query(Fight)):
            if ctx.elapsed - fight.started < fight_duration:
                continue
            world.despawn(fid)
            if not world.alive(fight.bee1):
                world.detach(fight.bee2, Fighter)
                continue

            loser = world.try_get(fight.bee2, Bee)
            if loser is not None:
                pos = world.get(fight.bee2, Position)
                cell = transform.cell_at((pos.x, pos.y))
                world.despawn(fight.bee2)
                if cell is not None and terrain.tile(cell).kind is TileKind.AIR:
                    terrain.submit(TileEdit(cell, TileKind.BONES))
                logger.info("Tick %d: bee %d (%s) killed by bee %d",
                            ctx.tick_number, fight.bee2, loser.faction.value, fight.bee1)
                if bus is not None:
                    bus.publish("bee_killed", eid=fight.bee2, winner=fight.bee1,
                                faction=loser.faction, cell=cell)
                if on_kill is not None:
                    on_kill(world, ctx, fight.bee2, loser)

            world.detach(fight.bee1, Fighter)

    return fight_resolution_system
