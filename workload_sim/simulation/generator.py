"""
Sample Generator

Produces exactly one workload sample per call:
1. Pick an origin from the origin weights
2. Pick a fan-out count from the workload count distribution
3. Draw that many execution targets (with replacement) from the origin's
   enabled execution targets

Stats are updated as a side effect. Degenerate configurations never raise:
- No origin weight -> uniform over every known location
- No count weight -> uniform integer in [2, 10]
- No enabled target -> the origin itself, for every draw
"""

from dataclasses import dataclass, field
from typing import Mapping

from ..core.entities import LocationSet
from .models import ExecutionConfig, ExecutionTarget, OriginConfig
from .sampler import RandomSource, WeightedPool, WeightedSampler
from .state import SimulationState

FALLBACK_MIN_FAN_OUT = 2
FALLBACK_MAX_FAN_OUT = 10


@dataclass
class WorkloadSample:
    """Outcome of one sample: where it started and where it ran."""
    origin: str
    targets: list[str] = field(default_factory=list)

    @property
    def fan_out(self) -> int:
        return len(self.targets)


class SampleGenerator:
    """Draws samples against the live configuration."""

    def __init__(self, locations: LocationSet, rng: RandomSource):
        self.locations = locations
        self.sampler = WeightedSampler(rng)

    def generate(
        self,
        state: SimulationState,
        origin_config: OriginConfig,
        execution_config: ExecutionConfig,
        distribution: Mapping[int, int]
    ) -> WorkloadSample:
        origin = self.select_origin(origin_config)
        state.record_origin(origin)

        fan_out = self.select_fan_out(distribution)
        targets = self.select_targets(execution_config, origin, fan_out)
        for target in targets:
            state.record_execution(target)

        return WorkloadSample(origin=origin, targets=targets)

    def select_origin(self, origin_config: OriginConfig) -> str:
        location_ids = self.locations.ids
        origin = self.sampler.select(origin_config, order=location_ids)
        if origin is None:
            origin = self.sampler.choice(location_ids)
        return origin

    def select_fan_out(self, distribution: Mapping[int, int]) -> int:
        usable = {int(c): w for c, w in distribution.items() if int(c) >= 1}
        count = self.sampler.select(usable)
        if count is None:
            span = FALLBACK_MAX_FAN_OUT - FALLBACK_MIN_FAN_OUT + 1
            count = FALLBACK_MIN_FAN_OUT + self.sampler.rng.randrange(span)
        return int(count)

    def select_targets(
        self,
        execution_config: ExecutionConfig,
        origin: str,
        fan_out: int
    ) -> list[str]:
        settings: Mapping[str, ExecutionTarget] = execution_config.get(origin) or {}
        pool = WeightedPool.build(
            (location_id, settings[location_id].percentage)
            for location_id in self.locations.ids
            if location_id in settings and settings[location_id].enabled
        )

        if not pool:
            return [origin] * fan_out

        return [self.sampler.draw(pool) for _ in range(fan_out)]
