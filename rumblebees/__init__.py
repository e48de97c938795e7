"""rumblebees - grid bees that path to eggs, dig, and brawl, on a tick engine."""
from __future__ import annotations

from rumblebees.bus import SignalBus, make_signal_system
from rumblebees.clock import Clock
from rumblebees.combat import make_fight_collision_system, make_fight_resolution_system
from rumblebees.components import (
    Bee, BeeBorn, DigTarget, Displacement, Fight, Fighter, GameData,
    Hatching, Position, Speed,
)
from rumblebees.config import SimConfig
from rumblebees.digging import make_dig_system
from rumblebees.eggs import (
    make_birth_system, make_egg_capture_system, make_egg_spawner_system,
    make_hatching_system,
)
from rumblebees.engine import Engine
from rumblebees.geometry import MapTransform
from rumblebees.movement import make_movement_system, move_toward
from rumblebees.navmesh import DualNavmesh, Navmesh
from rumblebees.pathfind import Route, astar
from rumblebees.policy import make_decision_system
from rumblebees.simulation import Simulation
from rumblebees.terrain import Terrain, make_terrain_system
from rumblebees.tiles import Tile, TileEdit
from rumblebees.types import (
    Cell, DeadEntityError, EntityId, Faction, MapFormatError,
    NoLegalMoveAvailable, RumblebeesError, TickContext, TileKind,
)
from rumblebees.world import World

__all__ = [
    "Engine",
    "World",
    "Clock",
    "TickContext",
    "EntityId",
    "Cell",
    "DeadEntityError",
    "RumblebeesError",
    "NoLegalMoveAvailable",
    "MapFormatError",
    "Faction",
    "TileKind",
    "SimConfig",
    "Simulation",
    "SignalBus",
    "make_signal_system",
    "Navmesh",
    "DualNavmesh",
    "astar",
    "Route",
    "Tile",
    "TileEdit",
    "Terrain",
    "make_terrain_system",
    "MapTransform",
    "move_toward",
    "make_movement_system",
    "make_decision_system",
    "make_fight_collision_system",
    "make_fight_resolution_system",
    "make_dig_system",
    "make_birth_system",
    "make_egg_capture_system",
    "make_egg_spawner_system",
    "make_hatching_system",
    "Bee",
    "BeeBorn",
    "DigTarget",
    "Displacement",
    "Fight",
    "Fighter",
    "GameData",
    "Hatching",
    "Position",
    "Speed",
]
