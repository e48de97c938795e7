"""Shared type aliases, enums and exceptions for rumblebees."""
from __future__ import annotations

import enum
import random as _random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

EntityId = int

Cell = tuple[int, int]
Point = tuple[float, float]


class Faction(enum.Enum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"  # neutral

    def compatible(self, other: Faction) -> bool:
        """Whether an agent of this faction may take an egg of ``other``."""
        return self is other or Faction.GREEN in (self, other)

    def opposes(self, other: Faction) -> bool:
        """Whether agents of the two factions fight on contact."""
        return self is not other and Faction.GREEN not in (self, other)


class TileKind(enum.Enum):
    AIR = "air"
    DIRT = "dirt"
    ROCK = "rock"
    STALK = "stalk"
    DEAD_STALK = "dead_stalk"
    EGG = "egg"
    BONES = "bones"


@dataclass(frozen=True, slots=True)
class TickContext:
    tick_number: int
    dt: float
    elapsed: float
    request_stop: Callable[[], None]
    random: _random.Random


class RumblebeesError(Exception):
    """Base class for simulation errors."""


class NoLegalMoveAvailable(RumblebeesError):
    """Raised when an idle bee cannot reach a single open cell of the map."""

    def __init__(self, entity_id: int, cell: Cell) -> None:
        self.entity_id = entity_id
        self.cell = cell
        super().__init__(f"Bee {entity_id} at {cell} has no reachable open cell")


class MapFormatError(RumblebeesError, ValueError):
    """Raised when an ASCII map cannot be parsed."""


class DeadEntityError(KeyError):
    """Raised when operating on an entity that is not alive."""

    def __init__(self, entity_id: int, message: str) -> None:
        self.entity_id = entity_id
        super().__init__(message)


if TYPE_CHECKING:
    from rumblebees.world import World

System = Callable[["World", TickContext], None]
