"""Engine - ordered system phases over a shared World."""

import os
import random

from rumblebees.clock import Clock
from rumblebees.types import System
from rumblebees.world import World


class Engine:
    def __init__(self, tps: int = 20, seed: int | None = None) -> None:
        self._clock = Clock(tps)
        self._world = World()
        self._systems: list[System] = []
        self._stop_requested: bool = False

        if seed is None:
            seed = int.from_bytes(os.urandom(8), "big")
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def world(self) -> World:
        return self._world

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def random(self) -> random.Random:
        return self._rng

    @property
    def stopped(self) -> bool:
        return self._stop_requested

    def add_system(self, system: System) -> None:
        """Append a system. Systems run in registration order every tick."""
        self._systems.append(system)

    def _request_stop(self) -> None:
        self._stop_requested = True

    def step(self, dt: float | None = None) -> None:
        """Run one tick. A stop request skips the remaining systems."""
        self._stop_requested = False
        self._clock.advance(dt)
        ctx = self._clock.context(self._request_stop, self._rng)
        for system in self._systems:
            system(self._world, ctx)
            if self._stop_requested:
                break

    def run(self, n: int) -> int:
        """Run up to ``n`` ticks; returns the number of ticks executed."""
        for done in range(1, n + 1):
            self.step()
            if self._stop_requested:
                return done
        return n
