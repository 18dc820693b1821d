"""
Pydantic Models for Configuration and Results

These models define the configuration a run is driven by and the immutable
record a finished run leaves behind. They double as the exchange format for
collaborators (preset storage, exporters), so everything serialises with
model_dump().
"""

from types import MappingProxyType
from typing import Annotated, Dict, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, WrapSerializer

from ..core.entities import LocationSet
from .distribution import DEFAULT_MAX_COUNT, default_distribution

OriginConfig = Dict[str, int]


class ExecutionTarget(BaseModel):
    """Execution setting for one origin -> target pair."""
    enabled: bool = Field(default=True, description="Disabled targets are never sampled")
    percentage: int = Field(default=0, ge=0, le=100)


ExecutionConfig = Dict[str, Dict[str, ExecutionTarget]]


class SimulationConfig(BaseModel):
    """Run-level options."""
    num_samples: int = Field(default=10000, ge=1, le=1_000_000)
    speed: float = Field(default=1.0, gt=0, description="Samples per second in animated mode")
    instant_mode: bool = False
    max_workload_count: int = Field(default=DEFAULT_MAX_COUNT, ge=1)
    workload_count_distribution: Dict[int, int] = Field(default_factory=default_distribution)


class ConfigBundle(BaseModel):
    """
    Everything needed to reproduce a run's configuration.

    This is the shape handed to and received from preset storage.
    """
    origin_config: OriginConfig = Field(default_factory=dict)
    execution_config: ExecutionConfig = Field(default_factory=dict)
    simulation_config: SimulationConfig = Field(default_factory=SimulationConfig)

    @classmethod
    def default(cls, locations: LocationSet, **simulation_options) -> "ConfigBundle":
        """Even split everywhere, every target enabled."""
        split = even_location_split(locations)
        return cls(
            origin_config=dict(split),
            execution_config={
                origin: {
                    target: ExecutionTarget(enabled=True, percentage=percentage)
                    for target, percentage in split.items()
                }
                for origin in locations.ids
            },
            simulation_config=SimulationConfig(**simulation_options)
        )


def even_location_split(locations: LocationSet) -> dict[str, int]:
    """floor(100 / n) per location, remainder to the first one."""
    ids = locations.ids
    equal = 100 // len(ids)
    remaining = 100 - equal * len(ids)
    return {
        location_id: equal + remaining if index == 0 else equal
        for index, location_id in enumerate(ids)
    }


class LocationStats(BaseModel):
    """Counters for one location."""
    originated: int = Field(default=0, ge=0)
    executed: int = Field(default=0, ge=0)


Stats = Dict[str, LocationStats]


def empty_stats(locations: LocationSet) -> Stats:
    return {location_id: LocationStats() for location_id in locations.ids}


# Read-only variants stored inside a SimulationResult. Maps are validated into
# fresh dicts and then wrapped, so nothing outside the result holds a reference
# that could change it.

K = TypeVar("K")
V = TypeVar("V")

FrozenMap = Annotated[
    Dict[K, V],
    AfterValidator(MappingProxyType),
    WrapSerializer(lambda value, handler: handler(dict(value)))
]


class RecordedExecutionTarget(ExecutionTarget):
    model_config = ConfigDict(frozen=True)


class RecordedSimulationConfig(SimulationConfig):
    model_config = ConfigDict(frozen=True)

    workload_count_distribution: FrozenMap[int, int] = Field(
        default_factory=default_distribution,
        validate_default=True
    )


class RecordedLocationStats(LocationStats):
    model_config = ConfigDict(frozen=True)


class SimulationResult(BaseModel):
    """
    Frozen snapshot of a finished run.

    Built from plain copies of the configuration and final stats, and
    read-only all the way down: nested models are frozen and every map is a
    MappingProxyType. Use bundle() to get an editable configuration back.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: str
    name: str
    origin_config: FrozenMap[str, int]
    execution_config: FrozenMap[str, FrozenMap[str, RecordedExecutionTarget]]
    simulation_config: RecordedSimulationConfig
    stats: FrozenMap[str, RecordedLocationStats]

    @property
    def total_originated(self) -> int:
        return sum(s.originated for s in self.stats.values())

    @property
    def total_executed(self) -> int:
        return sum(s.executed for s in self.stats.values())

    def bundle(self) -> ConfigBundle:
        """Configuration of this run, ready to load back into an engine."""
        return ConfigBundle.model_validate(
            self.model_dump(include={"origin_config", "execution_config", "simulation_config"})
        )
