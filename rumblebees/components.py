"""Bee components. A bee's state is the set of components it carries.

Idle bees carry none of ``Route``, ``Fighter``, ``Hatching`` or
``DigTarget``. Routed bees carry a ``Route`` (re-exported from
``rumblebees.pathfind``). Fighting bees carry ``Fighter`` and nothing else
of the above. Dead bees are despawned.
"""
from __future__ import annotations

from dataclasses import dataclass

from rumblebees.pathfind import Route
from rumblebees.types import Cell, EntityId, Faction

__all__ = [
    "Bee", "Position", "Speed", "Displacement", "Route", "Hatching",
    "DigTarget", "Fighter", "Fight", "BeeBorn", "GameData",
]


@dataclass
class Bee:
    faction: Faction


@dataclass
class Position:
    x: float
    y: float


@dataclass
class Speed:
    speed: float


@dataclass
class Displacement:
    """Last movement vector, for facing and bobbing in outer layers."""

    dx: float = 0.0
    dy: float = 0.0


@dataclass
class Hatching:
    """Newborn grace period in seconds. The bee ignores the decision pass."""

    remaining: float


@dataclass
class DigTarget:
    """Blocking cell to chip at once the approach route is finished."""

    cell: Cell
    cooldown: float = 0.0


@dataclass
class Fighter:
    opponent: EntityId
    fight: EntityId


@dataclass
class Fight:
    """Fight record. ``bee1`` collided first and wins on resolution."""

    bee1: EntityId
    bee2: EntityId
    started: float


@dataclass
class BeeBorn:
    """Spawn request. ``position`` None means a random free surface cell."""

    faction: Faction
    position: tuple[float, float] | None = None
    hatch: bool = False


@dataclass
class GameData:
    """Match counters shared by systems. Not a component."""

    eggs_spawned: int = 0
    eggs_captured: int = 0
    game_started: bool = False
    game_over: bool = False
    reason: str | None = None
