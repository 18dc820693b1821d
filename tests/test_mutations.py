import pytest

from workload_sim.core import ConfigurationError
from workload_sim.simulation import (
    ConfigBundle,
    SetExecutionEnabled,
    SetExecutionPercentage,
    SetOriginPercentage,
    SetSimulationOption,
    SetWorkloadCount,
    SimulationOption,
    apply_mutation,
)
from workload_sim.simulation.distribution import even_split


@pytest.fixture
def bundle(locations):
    return ConfigBundle.default(locations)


def test_origin_percentage_is_clamped(bundle, locations):
    updated = apply_mutation(bundle, SetOriginPercentage("pc", 140), locations)
    assert updated.origin_config["pc"] == 100

    updated = apply_mutation(updated, SetOriginPercentage("pc", -3), locations)
    assert updated.origin_config["pc"] == 0


def test_mutation_leaves_input_untouched(bundle, locations):
    before = bundle.model_copy(deep=True)

    apply_mutation(bundle, SetOriginPercentage("pc", 99), locations)
    apply_mutation(bundle, SetExecutionEnabled("pc", "colocation", False), locations)

    assert bundle == before


def test_execution_mutations(bundle, locations):
    updated = apply_mutation(bundle, SetExecutionEnabled("near-edge", "pc", False), locations)
    updated = apply_mutation(updated, SetExecutionPercentage("near-edge", "pc", 77), locations)

    target = updated.execution_config["near-edge"]["pc"]
    assert target.enabled is False
    assert target.percentage == 77


def test_execution_mutation_creates_missing_row(locations):
    updated = apply_mutation(ConfigBundle(), SetExecutionPercentage("pc", "far-edge", 20), locations)

    assert updated.execution_config["pc"]["far-edge"].enabled is True
    assert updated.execution_config["pc"]["far-edge"].percentage == 20


@pytest.mark.parametrize("mutation", [
    SetOriginPercentage("mars", 10),
    SetExecutionEnabled("mars", "pc", True),
    SetExecutionPercentage("pc", "mars", 10),
])
def test_unknown_locations_are_rejected(bundle, locations, mutation):
    with pytest.raises(ConfigurationError):
        apply_mutation(bundle, mutation, locations)


def test_workload_count_mutation(bundle, locations):
    updated = apply_mutation(bundle, SetWorkloadCount(3, 250), locations)
    assert updated.simulation_config.workload_count_distribution[3] == 100

    updated = apply_mutation(bundle, SetWorkloadCount(4, 12.5), locations)
    assert updated.simulation_config.workload_count_distribution[4] == 13


def test_workload_count_outside_range_is_ignored(bundle, locations):
    updated = apply_mutation(bundle, SetWorkloadCount(21, 10), locations)

    assert updated.simulation_config.workload_count_distribution == (
        bundle.simulation_config.workload_count_distribution
    )
    assert 21 not in updated.simulation_config.workload_count_distribution


@pytest.mark.parametrize("option, value", [
    (SimulationOption.NUM_SAMPLES, 0),
    (SimulationOption.NUM_SAMPLES, 1_000_001),
    (SimulationOption.SPEED, -1),
    (SimulationOption.MAX_WORKLOAD_COUNT, 0),
    ("colour", "blue"),
])
def test_invalid_simulation_options(bundle, locations, option, value):
    with pytest.raises(ConfigurationError):
        apply_mutation(bundle, SetSimulationOption(option, value), locations)


def test_simulation_options(bundle, locations):
    updated = apply_mutation(bundle, SetSimulationOption(SimulationOption.SPEED, 4), locations)
    updated = apply_mutation(updated, SetSimulationOption("instant_mode", True), locations)
    updated = apply_mutation(updated, SetSimulationOption("num_samples", 1), locations)

    config = updated.simulation_config
    assert config.speed == 4
    assert config.instant_mode is True
    assert config.num_samples == 1


def test_shrinking_max_workload_count_trims_distribution(locations):
    bundle = ConfigBundle.default(locations, workload_count_distribution=even_split(20))

    updated = apply_mutation(
        bundle,
        SetSimulationOption(SimulationOption.MAX_WORKLOAD_COUNT, 5),
        locations
    )

    assert updated.simulation_config.max_workload_count == 5
    assert sorted(updated.simulation_config.workload_count_distribution) == [1, 2, 3, 4, 5]
