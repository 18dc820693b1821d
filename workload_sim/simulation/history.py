"""
Result Snapshots and History

Freezes a run's configuration and final stats into a SimulationResult and
keeps the results most-recent-first. Deleting or editing entries is left to
whoever manages saved results; the engine only ever adds.
"""

from datetime import datetime, timezone
import logging
import re
from typing import Iterator, Mapping, Optional
from uuid import uuid4

from .models import ConfigBundle, LocationStats, SimulationResult

logger = logging.getLogger(__name__)

_AUTO_NAME = re.compile(r"^Simulation (\d+)$")


def snapshot(
    name: str,
    bundle: ConfigBundle,
    stats: Mapping[str, LocationStats]
) -> SimulationResult:
    """Copy configuration and stats into a new read-only result."""
    return SimulationResult(
        id=f"sim-{uuid4().hex}",
        timestamp=datetime.now(timezone.utc).isoformat(),
        name=name,
        stats={
            location_id: location_stats.model_dump()
            for location_id, location_stats in stats.items()
        },
        **bundle.model_dump()
    )


def next_simulation_name(name: str) -> str:
    """'Simulation 3' becomes 'Simulation 4'; any other name is kept."""
    match = _AUTO_NAME.match(name)
    if not match:
        return name
    return f"Simulation {int(match.group(1)) + 1}"


class SimulationHistory:
    """Ordered record of finished runs, newest first."""

    def __init__(self):
        self._entries: list[SimulationResult] = []

    def record(self, result: SimulationResult) -> SimulationResult:
        self._entries.insert(0, result)
        logger.info(
            "Recorded %s (%s): %d originated, %d executed",
            result.name,
            result.id,
            result.total_originated,
            result.total_executed
        )
        return result

    def save(
        self,
        name: str,
        bundle: ConfigBundle,
        stats: Mapping[str, LocationStats]
    ) -> SimulationResult:
        return self.record(snapshot(name, bundle, stats))

    @property
    def entries(self) -> list[SimulationResult]:
        return list(self._entries)

    @property
    def latest(self) -> Optional[SimulationResult]:
        return self._entries[0] if self._entries else None

    def find(self, result_id: str) -> Optional[SimulationResult]:
        return next((r for r in self._entries if r.id == result_id), None)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SimulationResult]:
        return iter(list(self._entries))
