"""JSONL chronicle recorder: structured match events for offline analysis."""
from __future__ import annotations

import enum
import json
from pathlib import Path
from typing import Any, Callable

from rumblebees.bus import SIGNALS, SignalBus

# Per-tile and per-route noise is left out unless asked for.
_QUIET = ("tile_changed", "route_invalidated")


def _encode(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    return str(value)


class ChronicleRecorder:
    """Subscribes to a SignalBus and accumulates one record per signal."""

    def __init__(self, bus: SignalBus, clock_fn: Callable[[], int],
                 verbose: bool = False) -> None:
        """*clock_fn* returns the current tick number."""
        self._records: list[dict[str, Any]] = []
        self._clock_fn = clock_fn
        for sig in SIGNALS:
            if verbose or sig not in _QUIET:
                bus.subscribe(sig, self._record)

    def _record(self, signal: str, data: dict[str, Any]) -> None:
        record: dict[str, Any] = {"tick": self._clock_fn(), "type": signal}
        record.update(data)
        self._records.append(record)

    @property
    def count(self) -> int:
        return len(self._records)

    def records(self, signal: str | None = None) -> list[dict[str, Any]]:
        if signal is None:
            return list(self._records)
        return [r for r in self._records if r["type"] == signal]

    def write(self, path: str | Path) -> int:
        """Write all records as JSONL. Returns number of lines written."""
        p = Path(path)
        with p.open("w", encoding="utf-8") as f:
            for record in self._records:
                f.write(json.dumps(record, default=_encode) + "\n")
        return len(self._records)
