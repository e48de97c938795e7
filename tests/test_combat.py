"""
Test suite for fights.

Tests cover:
- Collision detection between opposing bees
- Neutral and same-faction bees never fight
- Timed resolution, winner selection and bones
- Fights whose participants vanished early
"""

from rumblebees.combat import make_fight_collision_system, make_fight_resolution_system
from rumblebees.components import Bee, DigTarget, Fight, Fighter, Hatching, Position, Route
from rumblebees.engine import Engine
from rumblebees.geometry import MapTransform
from rumblebees.terrain import Terrain
from rumblebees.types import Faction, TileKind

ARENA = """
......
......
@@@@@@
"""


def spawn_bee(world, faction, x, y=75.0, route=True):
    eid = world.spawn(Bee(faction), Position(x, y))
    if route:
        world.attach(eid, Route([(0, 1), (1, 1)]))
    return eid


class TestFightCollision:
    def setup_method(self):
        self.engine = Engine(tps=10, seed=1)
        self.engine.add_system(make_fight_collision_system(fight_distance=50.0))
        self.world = self.engine.world

    def test_close_opponents_start_fighting(self):
        red = spawn_bee(self.world, Faction.RED, 100.0)
        blue = spawn_bee(self.world, Faction.BLUE, 110.0)
        self.engine.step()

        assert self.world.get(red, Fighter).opponent == blue
        assert self.world.get(blue, Fighter).opponent == red
        assert not self.world.has(red, Route)
        assert not self.world.has(blue, Route)
        assert self.world.count(Fight) == 1
        fight = self.world.get(self.world.get(red, Fighter).fight, Fight)
        assert (fight.bee1, fight.bee2) == (red, blue)
        assert fight.started == self.engine.clock.elapsed

    def test_fight_clears_dig_and_hatching(self):
        red = spawn_bee(self.world, Faction.RED, 100.0)
        self.world.attach(red, DigTarget((3, 1)))
        blue = spawn_bee(self.world, Faction.BLUE, 110.0)
        self.world.attach(blue, Hatching(0.5))
        self.engine.step()
        assert not self.world.has(red, DigTarget)
        assert not self.world.has(blue, Hatching)

    def test_far_apart_no_fight(self):
        spawn_bee(self.world, Faction.RED, 100.0)
        spawn_bee(self.world, Faction.BLUE, 150.0)
        self.engine.step()
        assert self.world.count(Fighter) == 0

    def test_same_faction_no_fight(self):
        spawn_bee(self.world, Faction.RED, 100.0)
        spawn_bee(self.world, Faction.RED, 101.0)
        self.engine.step()
        assert self.world.count(Fighter) == 0

    def test_neutral_never_fights(self):
        spawn_bee(self.world, Faction.GREEN, 100.0)
        spawn_bee(self.world, Faction.BLUE, 101.0)
        spawn_bee(self.world, Faction.GREEN, 102.0)
        self.engine.step()
        assert self.world.count(Fighter) == 0

    def test_one_fight_per_bee(self):
        red = spawn_bee(self.world, Faction.RED, 100.0)
        blue1 = spawn_bee(self.world, Faction.BLUE, 105.0)
        blue2 = spawn_bee(self.world, Faction.BLUE, 110.0)
        self.engine.step()
        assert self.world.get(red, Fighter).opponent == blue1
        assert not self.world.has(blue2, Fighter)
        assert self.world.has(blue2, Route)
        assert self.world.count(Fight) == 1

    def test_fighting_bees_are_not_rematched(self):
        spawn_bee(self.world, Faction.RED, 100.0)
        spawn_bee(self.world, Faction.BLUE, 110.0)
        self.engine.run(5)
        assert self.world.count(Fight) == 1


class TestFightResolution:
    def setup_method(self):
        self.terrain = Terrain.from_ascii(ARENA)
        self.kills = []
        self.engine = Engine(tps=10, seed=1)
        self.engine.add_system(make_fight_collision_system(fight_distance=50.0))
        self.engine.add_system(make_fight_resolution_system(
            fight_duration=5.0,
            terrain=self.terrain,
            transform=MapTransform(50.0, width=6, height=3),
            on_kill=lambda w, ctx, eid, bee: self.kills.append((eid, bee.faction)),
        ))
        self.world = self.engine.world

    def test_fight_lasts_its_duration(self):
        red = spawn_bee(self.world, Faction.RED, 100.0)
        blue = spawn_bee(self.world, Faction.BLUE, 110.0)
        self.engine.run(40)
        assert self.world.alive(red) and self.world.alive(blue)
        assert self.world.has(red, Fighter)

    def test_first_collider_wins(self):
        red = spawn_bee(self.world, Faction.RED, 100.0)
        blue = spawn_bee(self.world, Faction.BLUE, 110.0)
        self.engine.run(60)

        assert self.world.alive(red)
        assert not self.world.alive(blue)
        assert not self.world.has(red, Fighter)
        assert self.world.count(Fight) == 0
        assert self.kills == [(blue, Faction.BLUE)]

    def test_loser_leaves_bones(self):
        spawn_bee(self.world, Faction.RED, 100.0)
        spawn_bee(self.world, Faction.BLUE, 110.0)
        self.engine.run(60)
        edits = self.terrain.drain()
        assert [(e.cell, e.kind) for e in edits] == [((2, 1), TileKind.BONES)]

    def test_loser_already_gone(self):
        red = spawn_bee(self.world, Faction.RED, 100.0)
        blue = spawn_bee(self.world, Faction.BLUE, 110.0)
        self.engine.step()
        self.world.despawn(blue)
        self.engine.run(60)
        assert not self.world.has(red, Fighter)
        assert self.kills == []
        assert self.world.count(Fight) == 0

    def test_winner_already_gone(self):
        red = spawn_bee(self.world, Faction.RED, 100.0)
        blue = spawn_bee(self.world, Faction.BLUE, 110.0)
        self.engine.step()
        self.world.despawn(red)
        self.engine.run(60)
        assert self.world.alive(blue)
        assert not self.world.has(blue, Fighter)
        assert self.kills == []
