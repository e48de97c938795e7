"""
Test suite for egg plants, captures, births and hatching.

Tests cover:
- Plant growth on the surface
- Stalk cascade after a capture
- Capture rules and neutral eggs
- Birth requests and newborn speed
- Hatching countdown
- Spawner timing
"""

import random

import pytest

from rumblebees.components import (
    Bee, BeeBorn, Displacement, GameData, Hatching, Position, Speed,
)
from rumblebees.config import SimConfig
from rumblebees.eggs import (
    grow_plant, kill_stalk, make_birth_system, make_egg_capture_system,
    make_egg_spawner_system, make_hatching_system, newborn_speed,
)
from rumblebees.engine import Engine
from rumblebees.geometry import MapTransform
from rumblebees.terrain import Terrain
from rumblebees.tiles import TileEdit
from rumblebees.types import Faction, TileKind

STALK_MAP = """
r..
|..
:..
|..
#..
@@@
"""


def transform_for(terrain):
    return MapTransform(50.0, width=terrain.width, height=terrain.height)


class TestNewbornSpeed:
    def test_within_variance(self):
        config = SimConfig()
        rng = random.Random(4)
        for _ in range(100):
            assert 40.0 <= newborn_speed(config, 0, rng) <= 60.0

    def test_speedup_per_captured_egg(self):
        config = SimConfig(speed_variance=0.0)
        assert newborn_speed(config, 10, random.Random(1)) == pytest.approx(55.0)

    def test_capped_at_max(self):
        config = SimConfig(speed_variance=0.0)
        assert newborn_speed(config, 1000, random.Random(1)) == config.bee_speed_max


class TestGrowPlant:
    def test_stalk_then_egg_on_surface(self):
        terrain = Terrain.generate(5, 8, ground_height=1)
        egg, faction = grow_plant(terrain, random.Random(2), max_stalk=3)
        edits = terrain.drain()

        x, y = egg
        assert edits[-1].cell == egg
        assert edits[-1].kind is TileKind.EGG
        assert edits[-1].faction is faction
        assert [e.cell for e in edits[:-1]] == [(x, 2 + k) for k in range(y - 2)]
        assert all(e.kind is TileKind.STALK for e in edits[:-1])
        assert 2 <= y <= 5

    def test_stalk_shrinks_to_fit(self):
        terrain = Terrain.generate(4, 3, ground_height=1)
        for seed in range(10):
            egg, _ = grow_plant(terrain, random.Random(seed), max_stalk=3)
            edits = terrain.drain()
            assert egg[1] == 2
            assert len(edits) == 1

    def test_no_surface(self):
        terrain = Terrain.from_ascii("@@\n@@")
        assert grow_plant(terrain, random.Random(1), max_stalk=3) is None
        assert terrain.pending() == 0

    def test_skips_cells_with_queued_edits(self):
        for seed in range(10):
            terrain = Terrain.from_ascii("...\n@@@")
            terrain.submit(TileEdit((0, 1), TileKind.EGG, Faction.RED))
            terrain.submit(TileEdit((1, 1), TileKind.DIRT))
            egg, _ = grow_plant(terrain, random.Random(seed), max_stalk=3)
            assert egg == (2, 1)

    def test_every_surface_cell_queued(self):
        terrain = Terrain.from_ascii("..\n@@")
        terrain.submit(TileEdit((0, 1), TileKind.DIRT))
        terrain.submit(TileEdit((1, 1), TileKind.DIRT))
        assert grow_plant(terrain, random.Random(1), max_stalk=3) is None
        assert terrain.pending() == 2


class TestKillStalk:
    def test_cascades_through_dead_stalk(self):
        terrain = Terrain.from_ascii(STALK_MAP)
        dead = kill_stalk(terrain, (0, 5))
        assert dead == [(0, 4), (0, 2)]
        assert [(e.cell, e.kind) for e in terrain.drain()] == [
            ((0, 4), TileKind.DEAD_STALK),
            ((0, 2), TileKind.DEAD_STALK),
        ]

    def test_egg_on_ground_has_no_stalk(self):
        terrain = Terrain.from_ascii("r.\n@@")
        assert kill_stalk(terrain, (0, 1)) == []


class TestEggCapture:
    def setup_method(self):
        self.terrain = Terrain.from_ascii(STALK_MAP)
        self.captures = []
        self.engine = Engine(tps=10, seed=1)
        self.engine.add_system(make_egg_capture_system(
            self.terrain, transform_for(self.terrain), capture_distance=20.0,
            on_capture=lambda w, ctx, eid, cell: self.captures.append((eid, cell)),
        ))
        self.world = self.engine.world

    def test_capture_clears_egg_and_requests_bee(self):
        eid = self.world.spawn(Bee(Faction.RED), Position(30.0, 275.0))
        self.engine.step()

        assert self.captures == [(eid, (0, 5))]
        kinds = {e.cell: e.kind for e in self.terrain.drain()}
        assert kinds[(0, 5)] is TileKind.AIR
        assert kinds[(0, 4)] is TileKind.DEAD_STALK
        requests = [req for _, (req,) in self.world.query(BeeBorn)]
        assert len(requests) == 1
        assert requests[0].faction is Faction.RED
        assert requests[0].position == (25.0, 275.0)
        assert requests[0].hatch

    def test_too_far_no_capture(self):
        self.world.spawn(Bee(Faction.RED), Position(60.0, 275.0))
        self.engine.step()
        assert self.captures == []
        assert self.terrain.pending() == 0

    def test_no_capture_after_game_over(self):
        engine = Engine(tps=10, seed=1)
        engine.add_system(make_egg_capture_system(
            self.terrain, transform_for(self.terrain), capture_distance=20.0,
            game=GameData(game_started=True, game_over=True),
            on_capture=lambda w, ctx, eid, cell: self.captures.append((eid, cell)),
        ))
        engine.world.spawn(Bee(Faction.RED), Position(30.0, 275.0))
        engine.step()
        assert self.captures == []
        assert self.terrain.pending() == 0
        assert list(engine.world.query(BeeBorn)) == []

    def test_incompatible_bee_no_capture(self):
        self.world.spawn(Bee(Faction.BLUE), Position(25.0, 275.0))
        self.engine.step()
        assert self.captures == []

    def test_egg_captured_once(self):
        self.world.spawn(Bee(Faction.RED), Position(25.0, 275.0))
        self.world.spawn(Bee(Faction.RED), Position(26.0, 275.0))
        self.engine.run(3)
        assert len(self.captures) == 1
        assert self.world.count(BeeBorn) == 1

    def test_neutral_egg_hatches_for_capturer(self):
        terrain = Terrain.from_ascii("g.\n@@")
        engine = Engine(tps=10, seed=1)
        engine.add_system(make_egg_capture_system(terrain, transform_for(terrain), 20.0))
        engine.world.spawn(Bee(Faction.BLUE), Position(25.0, 75.0))
        engine.step()
        requests = [req for _, (req,) in engine.world.query(BeeBorn)]
        assert [r.faction for r in requests] == [Faction.BLUE]


class TestBirths:
    def setup_method(self):
        self.terrain = Terrain.generate(4, 5, ground_height=2)
        self.config = SimConfig(hatch_time=1.0)
        self.engine = Engine(tps=10, seed=1)
        self.engine.add_system(make_birth_system(
            self.terrain, transform_for(self.terrain), self.config, GameData(),
        ))
        self.world = self.engine.world

    def test_birth_at_requested_position(self):
        rid = self.world.spawn(BeeBorn(Faction.RED, position=(30.0, 40.0), hatch=True))
        self.engine.step()

        assert not self.world.alive(rid)
        bees = list(self.world.query(Bee, Position, Speed, Displacement))
        assert len(bees) == 1
        eid, (bee, pos, speed, _) = bees[0]
        assert bee.faction is Faction.RED
        assert (pos.x, pos.y) == (30.0, 40.0)
        assert 40.0 <= speed.speed <= 60.0
        assert self.world.get(eid, Hatching).remaining == 1.0

    def test_birth_on_random_surface_cell(self):
        self.world.spawn(BeeBorn(Faction.BLUE))
        self.engine.step()
        (eid, (pos,)), = list(self.world.query(Position))
        assert pos.y == 175.0
        assert not self.world.has(eid, Hatching)

    def test_no_room_drops_request(self):
        terrain = Terrain.from_ascii("@@\n@@")
        engine = Engine(tps=10, seed=1)
        engine.add_system(make_birth_system(
            terrain, transform_for(terrain), SimConfig(), GameData(),
        ))
        engine.world.spawn(BeeBorn(Faction.RED))
        engine.step()
        assert engine.world.count(Bee) == 0
        assert engine.world.count(BeeBorn) == 0


class TestHatching:
    def test_counts_down_then_detaches(self):
        engine = Engine(tps=10, seed=1)
        engine.add_system(make_hatching_system())
        eid = engine.world.spawn(Hatching(0.25))
        engine.run(2)
        assert engine.world.has(eid, Hatching)
        engine.step()
        assert not engine.world.has(eid, Hatching)


class TestEggSpawner:
    def test_plants_on_interval(self):
        terrain = Terrain.generate(6, 8, ground_height=1)
        planted = []
        engine = Engine(tps=10, seed=3)
        engine.add_system(make_egg_spawner_system(
            terrain, interval=1.0, max_stalk=2,
            on_spawn=lambda w, ctx, cell, faction: planted.append(cell),
        ))
        engine.run(5)
        assert planted == []
        engine.run(10)
        assert len(planted) == 1
        engine.run(10)
        assert len(planted) == 2

    def test_long_tick_plants_once(self):
        terrain = Terrain.from_ascii("...\n@@@")
        planted = []
        engine = Engine(tps=10, seed=3)
        engine.add_system(make_egg_spawner_system(
            terrain, interval=1.0, max_stalk=2,
            on_spawn=lambda w, ctx, cell, faction: planted.append(cell),
        ))
        engine.step(dt=10.0)
        assert len(planted) == 1
        assert terrain.pending() == 1
        engine.step()
        assert len(planted) == 1
