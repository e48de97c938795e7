"""Headless match runner.

Usage:
  python -m rumblebees --ticks 2000 --seed 42
  python -m rumblebees --map arena.txt --config tuning.json --chronicle out.jsonl
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from rumblebees.chronicle import ChronicleRecorder
from rumblebees.config import SimConfig
from rumblebees.simulation import Simulation
from rumblebees.terrain import Terrain
from rumblebees.types import Faction, MapFormatError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="rumblebees",
                                description="Run a headless rumblebees match")
    p.add_argument("--ticks", type=int, default=2000, help="Tick limit (default: 2000)")
    p.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    p.add_argument("--bees", type=int, default=None,
                   help="Starting bees per faction (overrides config)")
    p.add_argument("--map", type=str, default=None, metavar="FILE",
                   help="ASCII map, top row first")
    p.add_argument("--config", type=str, default=None, metavar="FILE",
                   help="JSON file of SimConfig fields")
    p.add_argument("--chronicle", type=str, default=None, metavar="FILE",
                   help="Save JSONL chronicle to FILE")
    p.add_argument("--show-map", action="store_true", help="Print the final map")
    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="-v for INFO logs, -vv for DEBUG")
    return p.parse_args(argv)


def build(args: argparse.Namespace) -> Simulation:
    config = SimConfig.from_file(args.config) if args.config else SimConfig()
    if args.bees is not None:
        config = dataclasses.replace(config, initial_bees=args.bees)
    terrain = None
    if args.map:
        terrain = Terrain.from_ascii(Path(args.map).read_text(encoding="utf-8"),
                                     config.tile_health)
    return Simulation(config, terrain=terrain, seed=args.seed)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        sim = build(args)
    except (OSError, ValueError) as exc:
        # MapFormatError is a ValueError.
        kind = "map" if isinstance(exc, MapFormatError) else "setup"
        print(f"rumblebees: {kind} error: {exc}", file=sys.stderr)
        return 2

    chronicle = None
    if args.chronicle:
        chronicle = ChronicleRecorder(sim.bus, lambda: sim.engine.clock.tick_number,
                                      verbose=args.verbose > 1)

    ran = sim.run(args.ticks)

    counts = sim.bee_counts()
    print(f"ticks:         {ran} ({sim.engine.clock.elapsed:.1f}s simulated)")
    print(f"red bees:      {counts[Faction.RED]}")
    print(f"blue bees:     {counts[Faction.BLUE]}")
    print(f"eggs spawned:  {sim.game.eggs_spawned}")
    print(f"eggs captured: {sim.game.eggs_captured}")
    print(f"game over:     {sim.game.reason if sim.game.game_over else 'no'}")
    if args.show_map:
        print(sim.terrain.to_ascii())
    if chronicle is not None:
        n = chronicle.write(args.chronicle)
        print(f"chronicle:     {n} records -> {args.chronicle}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
