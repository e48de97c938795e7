"""Simulation configuration dataclass."""
from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping


@dataclass(frozen=True)
class SimConfig:
    """Immutable tuning values for a match.

    Distances are world units, durations are seconds.

    Attributes:
        map_width: Map width in cells.
        map_height: Map height in cells.
        tile_size: Edge length of one cell in world units.
        origin_x: World x of the map's left edge.
        origin_y: World y of the map's bottom edge.
        tps: Engine ticks per second.
        ground_height: Rows of dirt above the rock floor on generated maps.
        initial_bees: Bees per faction (RED and BLUE) at match start.
        bee_speed: Base bee speed in world units per second.
        bee_speed_max: Speed cap after per-egg speedups.
        per_egg_speedup: Fractional speedup of newborns per captured egg.
        speed_variance: Random +/- fraction applied to each newborn's speed.
        arrival_epsilon: Distance under which a route step counts as reached.
        fight_distance: Opposing bees closer than this start a fight.
        fight_duration: Seconds before a fight resolves.
        egg_capture_distance: Bee to egg-centre distance that captures it.
        hatch_time: Seconds a newborn stays inactive.
        dig_repeat: Seconds between two digs.
        dig_power: Health removed per dig.
        tile_health: Health of a freshly placed diggable tile.
        egg_spawn_time: Seconds between two egg plants.
        max_stalk: Tallest stalk grown under a new egg.
        wander_retries: Random wander samples tried per idle bee per tick.
        heuristic_divisor: A* heuristic is Manhattan distance floor-divided
            by this value.
    """

    map_width: int = 32
    map_height: int = 20
    tile_size: float = 50.0
    origin_x: float = 0.0
    origin_y: float = 0.0
    tps: int = 20
    ground_height: int = 2
    initial_bees: int = 1
    bee_speed: float = 50.0
    bee_speed_max: float = 100.0
    per_egg_speedup: float = 0.01
    speed_variance: float = 0.2
    arrival_epsilon: float = 5.0
    fight_distance: float = 50.0
    fight_duration: float = 5.0
    egg_capture_distance: float = 20.0
    hatch_time: float = 1.0
    dig_repeat: float = 0.5
    dig_power: int = 25
    tile_health: int = 100
    egg_spawn_time: float = 6.0
    max_stalk: int = 3
    wander_retries: int = 20
    heuristic_divisor: int = 3

    def __post_init__(self) -> None:
        if self.map_width <= 0 or self.map_height <= 0:
            raise ValueError("map dimensions must be positive")
        if self.tile_size <= 0:
            raise ValueError("tile_size must be positive")
        if self.heuristic_divisor < 1:
            raise ValueError("heuristic_divisor must be at least 1")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SimConfig:
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_file(cls, path: str | Path) -> SimConfig:
        with open(path, encoding="utf-8") as fh:
            return cls.from_dict(json.load(fh))
