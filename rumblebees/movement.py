"""Route following: integrate bees toward their current route cell."""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from rumblebees import geometry
from rumblebees.components import Displacement, Position, Route, Speed
from rumblebees.types import Point

if TYPE_CHECKING:
    from rumblebees.geometry import MapTransform
    from rumblebees.types import TickContext
    from rumblebees.world import World


def move_toward(position: Point, target: Point, speed: float, dt: float) -> tuple[Point, Point]:
    """Step ``speed * dt`` toward ``target``. Returns (new position, displacement).

    The step is not clamped at the target; arrival is decided by distance.
    A target on top of ``position`` yields a zero displacement.
    """
    direction = geometry.normalize(geometry.sub(target, position))
    displacement = geometry.scale(direction, speed * dt)
    return (position[0] + displacement[0], position[1] + displacement[1]), displacement


def make_movement_system(
    transform: MapTransform,
    arrival_epsilon: float,
) -> Callable[[World, TickContext], None]:
    """Return a system moving every routed bee one step along its route.

    A bee within ``arrival_epsilon`` of its target cell advances the
    cursor; on the last cell the route is retired.
    """

    def movement_system(world: World, ctx: TickContext) -> None:
        for eid, (pos, speed, route) in list(world.query(Position, Speed, Route)):
            target = route.current_target(transform.cell_center)
            here = (pos.x, pos.y)
            displacement: Point = (0.0, 0.0)
            if geometry.distance(here, target) >= arrival_epsilon:
                (pos.x, pos.y), displacement = move_toward(here, target, speed.speed, ctx.dt)
            disp = world.try_get(eid, Displacement)
            if disp is not None:
                disp.dx, disp.dy = displacement
            if geometry.distance((pos.x, pos.y), target) < arrival_epsilon:
                if not route.step():
                    world.detach(eid, Route)

    return movement_system
