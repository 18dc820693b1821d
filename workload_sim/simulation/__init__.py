"""
Monte Carlo Workload Placement Engine

Purpose: explore "what-if" placement policies (cloud vs. edge) by sampling
where workloads originate and where their fan-out executes, without running
real infrastructure.

Components:
- WeightedSampler: replicate-then-draw selection over percentage maps
- DistributionStore: workload count distribution and normalisation
- SampleGenerator: one origin plus k execution targets per call
- SimulationScheduler: instant or timer-paced runs, pause/resume/complete
- SimulationHistory: immutable snapshots of finished runs
- BUILTIN_PRESETS: ready-made cloud and edge placement scenarios
"""

from .distribution import (
    DistributionStore,
    normalize,
    even_split,
    bell_curve,
    default_distribution
)
from .entities import (
    Workload,
    WorkloadStatus,
    Substep,
    SubstepStatus
)
from .generator import SampleGenerator, WorkloadSample
from .history import SimulationHistory, snapshot, next_simulation_name
from .models import (
    ConfigBundle,
    ExecutionTarget,
    LocationStats,
    SimulationConfig,
    SimulationResult
)
from .mutations import (
    SetOriginPercentage,
    SetExecutionEnabled,
    SetExecutionPercentage,
    SetWorkloadCount,
    SetSimulationOption,
    SimulationOption,
    apply_mutation
)
from .presets import BUILTIN_PRESETS, PlacementPreset, get_preset
from .realtime import RealtimeDriver
from .report import ResultAnalyzer, ResultSummary
from .sampler import RandomSource, WeightedSampler
from .scheduler import FrameSnapshot, SchedulerStatus, SimulationScheduler
from .state import SimulationState

__all__ = [
    "DistributionStore",
    "normalize",
    "even_split",
    "bell_curve",
    "default_distribution",
    "Workload",
    "WorkloadStatus",
    "Substep",
    "SubstepStatus",
    "SampleGenerator",
    "WorkloadSample",
    "SimulationHistory",
    "snapshot",
    "next_simulation_name",
    "ConfigBundle",
    "ExecutionTarget",
    "LocationStats",
    "SimulationConfig",
    "SimulationResult",
    "SetOriginPercentage",
    "SetExecutionEnabled",
    "SetExecutionPercentage",
    "SetWorkloadCount",
    "SetSimulationOption",
    "SimulationOption",
    "apply_mutation",
    "BUILTIN_PRESETS",
    "PlacementPreset",
    "get_preset",
    "RealtimeDriver",
    "ResultAnalyzer",
    "ResultSummary",
    "RandomSource",
    "WeightedSampler",
    "FrameSnapshot",
    "SchedulerStatus",
    "SimulationScheduler",
    "SimulationState"
]
