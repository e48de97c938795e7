"""Build a complete match: terrain, navmeshes, engine and systems in phase order."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from rumblebees.bus import SignalBus, make_signal_system
from rumblebees.combat import make_fight_collision_system, make_fight_resolution_system
from rumblebees.components import (
    Bee, BeeBorn, Displacement, Fighter, GameData, Position, Route, Speed,
)
from rumblebees.config import SimConfig
from rumblebees.digging import make_dig_system
from rumblebees.eggs import (
    make_birth_system, make_egg_capture_system, make_egg_spawner_system,
    make_hatching_system,
)
from rumblebees.engine import Engine
from rumblebees.geometry import MapTransform
from rumblebees.movement import make_movement_system
from rumblebees.navmesh import DualNavmesh
from rumblebees.policy import make_decision_system
from rumblebees.terrain import Terrain, make_terrain_system
from rumblebees.tiles import TileEdit
from rumblebees.types import Cell, Faction, NoLegalMoveAvailable, Point, TileKind

if TYPE_CHECKING:
    from rumblebees.types import EntityId, System, TickContext
    from rumblebees.world import World

logger = logging.getLogger(__name__)


class Simulation:
    """One match. Systems run in this order every tick:

    terrain edits + navmesh update + route invalidation, hatching, births,
    movement, digging, egg capture, fight collisions, fight resolution,
    decisions, egg spawner, signal flush, game-over stop.
    """

    def __init__(
        self,
        config: SimConfig | None = None,
        terrain: Terrain | None = None,
        seed: int | None = None,
        spawn_initial: bool = True,
    ) -> None:
        self.config = config or SimConfig()
        cfg = self.config
        if terrain is None:
            terrain = Terrain.generate(cfg.map_width, cfg.map_height,
                                       cfg.ground_height, cfg.tile_health)
        self.terrain = terrain
        self.navmesh = DualNavmesh.from_terrain(terrain)
        self.transform = MapTransform(cfg.tile_size, cfg.origin_x, cfg.origin_y,
                                      terrain.width, terrain.height)
        self.engine = Engine(tps=cfg.tps, seed=seed)
        self.bus = SignalBus()
        self.game = GameData()

        for system in self._systems():
            self.engine.add_system(system)

        if spawn_initial:
            for _ in range(cfg.initial_bees):
                for faction in (Faction.RED, Faction.BLUE):
                    self.request_bee(faction)
            self.game.game_started = True

    def _systems(self) -> list[System]:
        cfg = self.config
        return [
            make_terrain_system(self.terrain, self.navmesh, self.bus),
            make_hatching_system(),
            make_birth_system(self.terrain, self.transform, cfg, self.game, self.bus),
            make_movement_system(self.transform, cfg.arrival_epsilon),
            make_dig_system(self.terrain, self.transform, cfg.dig_repeat, cfg.dig_power),
            make_egg_capture_system(self.terrain, self.transform, cfg.egg_capture_distance,
                                    self.game, self.bus, on_capture=self._on_capture),
            make_fight_collision_system(cfg.fight_distance, self.bus),
            make_fight_resolution_system(cfg.fight_duration, self.terrain, self.transform,
                                         self.bus, on_kill=self._on_kill),
            self._guard(make_decision_system(
                self.terrain, self.navmesh, self.transform,
                cfg.wander_retries, cfg.heuristic_divisor,
            )),
            make_egg_spawner_system(self.terrain, cfg.egg_spawn_time, cfg.max_stalk,
                                    self.bus, on_spawn=self._on_spawn),
            make_signal_system(self.bus),
            self._stop_when_over,
        ]

    # -- Callbacks --

    def _guard(self, decision: System) -> System:
        def guarded_decision_system(world: World, ctx: TickContext) -> None:
            try:
                decision(world, ctx)
            except NoLegalMoveAvailable as exc:
                self._end(ctx, "no_moves", eid=exc.entity_id, cell=exc.cell)
        return guarded_decision_system

    def _on_capture(self, world: World, ctx: TickContext, eid: int, cell: Cell) -> None:
        self.game.eggs_captured += 1

    def _on_spawn(self, world: World, ctx: TickContext, cell: Cell, faction: Faction) -> None:
        self.game.eggs_spawned += 1

    def _on_kill(self, world: World, ctx: TickContext, eid: int, bee: Bee) -> None:
        if not self.game.game_started or self.game.game_over:
            return
        alive = {b.faction for _, (b,) in world.query(Bee)}
        alive.update(req.faction for _, (req,) in world.query(BeeBorn))
        for faction in (Faction.RED, Faction.BLUE):
            if faction not in alive:
                self._end(ctx, "extinct", faction=faction)
                return

    def _end(self, ctx: TickContext, reason: str, **data: object) -> None:
        if self.game.game_over:
            return
        self.game.game_over = True
        self.game.reason = reason
        logger.warning("Tick %d: game over (%s)", ctx.tick_number, reason)
        self.bus.publish("game_over", reason=reason, **data)

    def _stop_when_over(self, world: World, ctx: TickContext) -> None:
        if self.game.game_over:
            ctx.request_stop()

    # -- External interface --

    @property
    def world(self) -> World:
        return self.engine.world

    def step(self, dt: float | None = None) -> None:
        self.engine.step(dt)

    def run(self, ticks: int) -> int:
        """Run until ``ticks`` ticks pass or the game ends. Returns ticks run."""
        if self.game.game_over:
            return 0
        return self.engine.run(ticks)

    def edit(self, cell: Cell, kind: TileKind, faction: Faction | None = None) -> None:
        """Queue a terrain edit for the next tick.

        Raises ValueError for cells outside the map and for eggs without a
        faction.
        """
        self.terrain.submit(TileEdit(cell, kind, faction))

    def paint(self, cell: Cell) -> TileEdit | None:
        return self.terrain.paint(cell)

    def request_bee(self, faction: Faction, position: Point | None = None) -> EntityId:
        """Queue a bee birth; it appears in the next tick's birth phase."""
        return self.world.spawn(BeeBorn(faction=faction, position=position))

    def spawn_bee(self, faction: Faction, position: Point, speed: float | None = None) -> EntityId:
        """Create a bee immediately, skipping the birth phase."""
        return self.world.spawn(
            Bee(faction), Position(*position),
            Speed(self.config.bee_speed if speed is None else speed),
            Displacement(),
        )

    def bee_counts(self) -> dict[Faction, int]:
        counts = {faction: 0 for faction in Faction}
        for _, (bee,) in self.world.query(Bee):
            counts[bee.faction] += 1
        return counts

    def route_target(self, eid: EntityId) -> Point | None:
        """World point the bee is currently walking to, if it has a route."""
        route = self.world.try_get(eid, Route)
        if route is None:
            return None
        return route.current_target(self.transform.cell_center)

    def is_fighting(self, eid: EntityId) -> bool:
        return self.world.has(eid, Fighter)

    def subscribe(self, signal_name: str, handler: Callable[[str, dict], None]) -> None:
        self.bus.subscribe(signal_name, handler)
