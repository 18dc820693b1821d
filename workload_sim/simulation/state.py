"""
Simulation State

All counters a run mutates, kept in one object owned by the scheduler and
handed to the sample generator. Nothing here is module-global.
"""

from collections import defaultdict
from dataclasses import dataclass, field

from ..core.entities import LocationSet
from .entities import Workload
from .models import Stats, empty_stats


@dataclass
class SimulationState:
    """Mutable run state."""
    stats: Stats = field(default_factory=dict)
    samples_processed: int = 0
    completed: bool = False
    run_token: int = 0  # Bumped on every reset so stale lifecycles can tell

    # Ephemeral workloads, animated mode only
    workloads: dict[str, Workload] = field(default_factory=dict)
    workload_counter: int = 0
    substep_counter: int = 0

    # Renderer bookkeeping
    active_workloads: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    accumulated_dots: dict[str, int] = field(default_factory=lambda: defaultdict(int))

    @classmethod
    def fresh(cls, locations: LocationSet) -> "SimulationState":
        return cls(stats=empty_stats(locations))

    def reset(self, locations: LocationSet) -> None:
        self.stats = empty_stats(locations)
        self.samples_processed = 0
        self.completed = False
        self.run_token += 1
        self.workloads = {}
        self.workload_counter = 0
        self.substep_counter = 0
        self.active_workloads = defaultdict(int)
        self.accumulated_dots = defaultdict(int)

    def next_workload_id(self) -> str:
        workload_id = f"workload-{self.workload_counter}"
        self.workload_counter += 1
        return workload_id

    def next_substep_id(self) -> str:
        substep_id = f"substep-{self.substep_counter}"
        self.substep_counter += 1
        return substep_id

    def record_origin(self, location_id: str) -> None:
        self.stats[location_id].originated += 1

    def record_execution(self, location_id: str) -> None:
        self.stats[location_id].executed += 1

    def add_accumulated_dot(self, location_id: str) -> None:
        self.accumulated_dots[location_id] += 1

    def release_workload(self, location_id: str) -> None:
        if self.active_workloads[location_id] > 0:
            self.active_workloads[location_id] -= 1

    @property
    def total_originated(self) -> int:
        return sum(s.originated for s in self.stats.values())

    @property
    def total_executed(self) -> int:
        return sum(s.executed for s in self.stats.values())
