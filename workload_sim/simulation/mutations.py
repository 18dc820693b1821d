"""
Configuration Mutations

The closed set of edits a caller can make to a live configuration:
- SetOriginPercentage
- SetExecutionEnabled / SetExecutionPercentage
- SetWorkloadCount
- SetSimulationOption

Every mutation is validated before it is applied and applying one never
mutates the input bundle. Percentages are rounded and clamped to [0, 100] and
workload counts outside 1..max_workload_count are dropped. Unknown locations
and impossible run options raise ConfigurationError.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Union

from pydantic import ValidationError

from ..core.entities import LocationSet
from ..core.errors import ConfigurationError
from .distribution import DEFAULT_MAX_COUNT, DistributionStore
from .models import ConfigBundle, ExecutionTarget, SimulationConfig
from .sampler import round_half_up


class SimulationOption(str, Enum):
    """Run options that can be edited through SetSimulationOption."""
    NUM_SAMPLES = "num_samples"
    SPEED = "speed"
    INSTANT_MODE = "instant_mode"
    MAX_WORKLOAD_COUNT = "max_workload_count"


@dataclass(frozen=True)
class SetOriginPercentage:
    location: str
    percentage: float


@dataclass(frozen=True)
class SetExecutionEnabled:
    origin: str
    target: str
    enabled: bool


@dataclass(frozen=True)
class SetExecutionPercentage:
    origin: str
    target: str
    percentage: float


@dataclass(frozen=True)
class SetWorkloadCount:
    count: int
    percentage: float


@dataclass(frozen=True)
class SetSimulationOption:
    option: SimulationOption
    value: Any


ConfigMutation = Union[
    SetOriginPercentage,
    SetExecutionEnabled,
    SetExecutionPercentage,
    SetWorkloadCount,
    SetSimulationOption
]


def clamp_percentage(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def apply_mutation(
    bundle: ConfigBundle,
    mutation: ConfigMutation,
    locations: LocationSet
) -> ConfigBundle:
    """Return a new bundle with `mutation` applied."""
    updated = bundle.model_copy(deep=True)

    if isinstance(mutation, SetOriginPercentage):
        updated.origin_config[locations.require(mutation.location)] = clamp_percentage(
            mutation.percentage
        )

    elif isinstance(mutation, (SetExecutionEnabled, SetExecutionPercentage)):
        targets = updated.execution_config.setdefault(locations.require(mutation.origin), {})
        current = targets.get(locations.require(mutation.target)) or ExecutionTarget()
        if isinstance(mutation, SetExecutionEnabled):
            current = current.model_copy(update={"enabled": bool(mutation.enabled)})
        else:
            current = current.model_copy(
                update={"percentage": clamp_percentage(mutation.percentage)}
            )
        targets[mutation.target] = current

    elif isinstance(mutation, SetWorkloadCount):
        config = updated.simulation_config
        store = DistributionStore(config.workload_count_distribution, config.max_workload_count)
        store.set_percentage(mutation.count, mutation.percentage)
        config.workload_count_distribution = store.as_dict()

    elif isinstance(mutation, SetSimulationOption):
        updated.simulation_config = set_simulation_option(
            updated.simulation_config, mutation.option, mutation.value
        )

    else:
        raise ConfigurationError(f"Unsupported mutation: {mutation!r}")

    return updated


def set_simulation_option(
    config: SimulationConfig,
    option: Union[SimulationOption, str],
    value: Any
) -> SimulationConfig:
    """Validated copy of `config` with one option changed."""
    try:
        option = SimulationOption(option)
    except ValueError:
        raise ConfigurationError(f"Unknown simulation option: {option}") from None

    data = config.model_dump()
    data[option.value] = value

    if option is SimulationOption.MAX_WORKLOAD_COUNT:
        if not isinstance(value, int) or value < 1:
            raise ConfigurationError(f"max_workload_count must be at least 1, got {value}")
        store = DistributionStore(config.workload_count_distribution, config.max_workload_count)
        store.set_max_count(value)
        data["workload_count_distribution"] = store.as_dict()

    return validate_simulation_config(data)


def validate_simulation_config(data: Union[SimulationConfig, Mapping[str, Any]]) -> SimulationConfig:
    """Build a SimulationConfig, turning pydantic errors into ConfigurationError."""
    data = data.model_dump() if isinstance(data, SimulationConfig) else dict(data)

    # Percentages are rounded and clamped and undrawable counts dropped before
    # pydantic sees them; only an invalid max_workload_count is left to fail
    max_count = data.get("max_workload_count", DEFAULT_MAX_COUNT)
    distribution = data.get("workload_count_distribution")
    if distribution is not None and isinstance(max_count, int) and max_count >= 1:
        data["workload_count_distribution"] = DistributionStore(distribution, max_count).as_dict()

    try:
        return SimulationConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


def validate_origin_config(config: Mapping[str, float], locations: LocationSet) -> dict[str, int]:
    return {
        locations.require(location_id): clamp_percentage(percentage or 0)
        for location_id, percentage in config.items()
    }


def validate_execution_config(
    config: Mapping[str, Mapping[str, Any]],
    locations: LocationSet
) -> dict[str, dict[str, ExecutionTarget]]:
    """
    Validate a whole execution matrix.

    Entries may be ExecutionTarget instances or plain mappings with
    `enabled` and `percentage` keys.
    """
    validated = {}
    for origin, targets in config.items():
        row = {}
        for target, setting in targets.items():
            locations.require(target)
            if isinstance(setting, ExecutionTarget):
                setting = setting.model_dump()
            row[target] = ExecutionTarget(
                enabled=bool(setting.get("enabled", True)),
                percentage=clamp_percentage(setting.get("percentage") or 0)
            )
        validated[locations.require(origin)] = row
    return validated


def validate_bundle(bundle: ConfigBundle, locations: LocationSet) -> ConfigBundle:
    return ConfigBundle(
        origin_config=validate_origin_config(bundle.origin_config, locations),
        execution_config=validate_execution_config(bundle.execution_config, locations),
        simulation_config=validate_simulation_config(bundle.simulation_config)
    )
