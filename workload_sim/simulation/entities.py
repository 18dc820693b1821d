"""
Simulation Entities

Ephemeral objects that exist only while an animated run is in flight:
- Workloads moving through originating -> distributing -> completed
- Substeps, one per fan-out draw, moving from origin to target

Instant runs never create these; they only touch the stats.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class WorkloadStatus(Enum):
    """Lifecycle of a workload."""
    ORIGINATING = "originating"
    DISTRIBUTING = "distributing"
    COMPLETED = "completed"


class SubstepStatus(Enum):
    """Lifecycle of one fan-out draw."""
    PENDING = "pending"
    MOVING = "moving"
    COMPLETED = "completed"


@dataclass
class Substep:
    """One execution of a workload at a target location."""
    id: str
    target: str
    status: SubstepStatus = SubstepStatus.PENDING
    is_at_origin: bool = False


@dataclass
class Workload:
    """
    A workload in flight.

    Each workload is a small state machine; `next_transition_at` is the
    simulated time (ms) of its next status change (removal, once completed).
    """
    id: str
    origin: str
    status: WorkloadStatus = WorkloadStatus.ORIGINATING
    substeps: list[Substep] = field(default_factory=list)
    created_at: float = 0.0
    next_transition_at: Optional[float] = None

    def start_distributing(self, next_transition_at: float) -> None:
        self.status = WorkloadStatus.DISTRIBUTING
        for substep in self.substeps:
            substep.status = SubstepStatus.MOVING
        self.next_transition_at = next_transition_at

    def complete(self, removal_at: float) -> None:
        self.status = WorkloadStatus.COMPLETED
        for substep in self.substeps:
            substep.status = SubstepStatus.COMPLETED
        self.next_transition_at = removal_at

    def copy(self) -> "Workload":
        return replace(self, substeps=[replace(s) for s in self.substeps])
