"""A* pathfinding over a Navmesh, and the Route cursor agents follow."""
from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from rumblebees.types import Cell, Point

if TYPE_CHECKING:
    from rumblebees.navmesh import Navmesh


def manhattan(a: Cell, b: Cell) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def astar(
    navmesh: Navmesh,
    start: Cell,
    goal: Cell,
    heuristic_divisor: int = 3,
    max_expansions: int | None = None,
) -> list[Cell] | None:
    """Shortest 4-connected path from ``start`` to ``goal``, both included.

    The heuristic is the Manhattan distance floor-divided by
    ``heuristic_divisor``. Any divisor >= 1 underestimates, so the result
    is still a shortest path; larger divisors only widen the search.

    Returns None when the goal is solid or unreachable, or when more than
    ``max_expansions`` cells were expanded. The start cell itself may be
    solid.

    The default cap is the grid area. Each cell is expanded at most once
    and the goal is never expanded, so the default only bounds the search
    and never cuts a path short; pass a smaller cap to give up early.
    """
    if navmesh.solid(goal):
        return None
    if max_expansions is None:
        max_expansions = navmesh.width * navmesh.height

    open_set: list[tuple[int, int, Cell]] = [(0, 0, start)]
    came_from: dict[Cell, Cell] = {}
    g_score: dict[Cell, int] = {start: 0}
    closed: set[Cell] = set()
    counter = 1

    while open_set:
        _, _, current = heapq.heappop(open_set)
        if current in closed:
            continue
        if current == goal:
            path: list[Cell] = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            path.reverse()
            return path
        closed.add(current)
        if len(closed) > max_expansions:
            return None

        for neighbor in navmesh.neighbors4(current):
            tentative = g_score[current] + 1
            if tentative < g_score.get(neighbor, tentative + 1):
                came_from[neighbor] = current
                g_score[neighbor] = tentative
                h = manhattan(neighbor, goal) // heuristic_divisor
                heapq.heappush(open_set, (tentative + h, counter, neighbor))
                counter += 1

    return None


def truncate_at_solid(cells: list[Cell], navmesh: Navmesh) -> tuple[list[Cell], Cell | None]:
    """Split a route at the first cell solid in ``navmesh``.

    Returns the walkable prefix and the blocking cell (None if nothing
    blocks). The start cell is never treated as blocking.
    """
    for i, cell in enumerate(cells[1:], start=1):
        if navmesh.solid(cell):
            return cells[:i], cell
    return list(cells), None


@dataclass
class Route:
    """Planned cells with a cursor on the cell currently being walked to."""

    cells: list[Cell]
    cursor: int = 0

    def __post_init__(self) -> None:
        if not self.cells:
            raise ValueError("Route needs at least one cell")

    @property
    def goal(self) -> Cell:
        return self.cells[-1]

    @property
    def current(self) -> Cell:
        return self.cells[self.cursor]

    def at_end(self) -> bool:
        return self.cursor >= len(self.cells) - 1

    def step(self) -> bool:
        """Advance to the next cell. False (cursor kept) on the last cell."""
        if self.at_end():
            return False
        self.cursor += 1
        return True

    def current_target(self, cell_to_world: Callable[[Cell], Point]) -> Point:
        return cell_to_world(self.cells[self.cursor])

    def remaining(self) -> list[Cell]:
        """Cells not yet passed, the current target included."""
        return self.cells[self.cursor:]

    def crosses(self, cell: Cell) -> bool:
        return cell in self.cells[self.cursor:]
