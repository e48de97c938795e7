"""Deferred pub/sub for events the outer layers react to.

Signals published during a tick are delivered when the bus is flushed,
normally by the last system of the tick, so handlers never observe a
half-finished phase.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from rumblebees.types import TickContext
    from rumblebees.world import World

_Handler = Callable[[str, dict[str, Any]], None]

SIGNALS = (
    "tile_changed",
    "route_invalidated",
    "bee_born",
    "egg_spawned",
    "egg_captured",
    "fight_started",
    "bee_killed",
    "game_over",
)


class SignalBus:

    def __init__(self) -> None:
        self._subscribers: dict[str, list[_Handler]] = {}
        self._queue: list[tuple[str, dict[str, Any]]] = []

    def subscribe(self, signal_name: str, handler: _Handler) -> None:
        self._subscribers.setdefault(signal_name, []).append(handler)

    def subscribe_all(self, handler: _Handler) -> None:
        for name in SIGNALS:
            self.subscribe(name, handler)

    def publish(self, signal_name: str, **data: Any) -> None:
        self._queue.append((signal_name, data))

    def pending(self) -> list[str]:
        return [name for name, _ in self._queue]

    def flush(self) -> None:
        # Handlers may publish; those signals wait for the next flush.
        snapshot = self._queue
        self._queue = []
        for signal_name, data in snapshot:
            for handler in self._subscribers.get(signal_name, []):
                handler(signal_name, data)


def make_signal_system(bus: SignalBus) -> Callable[[World, TickContext], None]:
    def signal_system(world: World, ctx: TickContext) -> None:
        bus.flush()

    return signal_system
