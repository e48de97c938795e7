"""Decision pass: give every idle bee somewhere to go.

Fallback chain for a bee without a route:

1. a random compatible egg reachable on the main navmesh;
2. the same egg through the dig navmesh, walking the open prefix and
   digging the first blocking tile;
3. a random reachable open cell (wander), bounded by ``wander_retries``;
4. nothing this tick, unless no open cell is reachable at all, which
   raises ``NoLegalMoveAvailable``.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from rumblebees.components import Bee, DigTarget, Fighter, Hatching, Position, Route
from rumblebees.pathfind import astar, truncate_at_solid
from rumblebees.types import Cell, Faction, NoLegalMoveAvailable

if TYPE_CHECKING:
    from rumblebees.geometry import MapTransform
    from rumblebees.navmesh import DualNavmesh, Navmesh
    from rumblebees.terrain import Terrain
    from rumblebees.types import TickContext
    from rumblebees.world import World

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Plan:
    cells: list[Cell]
    kind: str  # "egg", "dig" or "wander"
    dig: Cell | None = None


def choose_egg(
    faction: Faction, eggs: list[tuple[Cell, Faction]], rng: random.Random,
) -> Cell | None:
    """Uniform pick among eggs the faction may take."""
    targets = [cell for cell, egg_faction in eggs if faction.compatible(egg_faction)]
    if not targets:
        return None
    return rng.choice(targets)


def plan_to_egg(
    navmesh: DualNavmesh, start: Cell, egg: Cell, heuristic_divisor: int = 3,
) -> Plan | None:
    cells = astar(navmesh.main, start, egg, heuristic_divisor)
    if cells is not None:
        return Plan(cells, "egg")
    cells = astar(navmesh.alt, start, egg, heuristic_divisor)
    if cells is None:
        return None
    prefix, blocked = truncate_at_solid(cells, navmesh.main)
    if not prefix or blocked is None:
        return None
    return Plan(prefix, "dig", blocked)


def plan_wander(
    navmesh: Navmesh, start: Cell, rng: random.Random,
    retries: int = 20, heuristic_divisor: int = 3,
) -> Plan | None:
    candidates = [cell for cell in navmesh.open_cells() if cell != start]
    if not candidates:
        return None
    for _ in range(retries):
        target = rng.choice(candidates)
        cells = astar(navmesh, start, target, heuristic_divisor)
        if cells is not None:
            return Plan(cells, "wander")
    return None


def can_move(navmesh: Navmesh, start: Cell) -> bool:
    """Whether any open cell other than ``start`` is reachable."""
    return bool(navmesh.neighbors4(start))


def make_decision_system(
    terrain: Terrain,
    navmesh: DualNavmesh,
    transform: MapTransform,
    wander_retries: int = 20,
    heuristic_divisor: int = 3,
) -> Callable[[World, TickContext], None]:
    """Return the system assigning routes to idle bees.

    Raises ``NoLegalMoveAvailable`` when an idle bee is sealed in.
    """

    def decision_system(world: World, ctx: TickContext) -> None:
        eggs = terrain.eggs()
        idle = list(world.query(
            Bee, Position, without=(Route, Fighter, Hatching, DigTarget),
        ))
        for eid, (bee, pos) in idle:
            cell = transform.cell_at((pos.x, pos.y))
            if cell is None:
                logger.info("Tick %d: bee %d outside map at (%.1f, %.1f)",
                            ctx.tick_number, eid, pos.x, pos.y)
                continue

            plan = None
            egg = choose_egg(bee.faction, eggs, ctx.random)
            if egg is not None:
                plan = plan_to_egg(navmesh, cell, egg, heuristic_divisor)
            if plan is None:
                plan = plan_wander(navmesh.main, cell, ctx.random,
                                   wander_retries, heuristic_divisor)
            if plan is None:
                if not can_move(navmesh.main, cell):
                    logger.warning("Tick %d: bee %d sealed in at %s",
                                   ctx.tick_number, eid, cell)
                    raise NoLegalMoveAvailable(eid, cell)
                continue

            world.attach(eid, Route(plan.cells))
            if plan.dig is not None:
                world.attach(eid, DigTarget(plan.dig))
            logger.debug("Tick %d: bee %d %s route %s -> %s",
                         ctx.tick_number, eid, plan.kind, cell, plan.cells[-1])

    return decision_system
