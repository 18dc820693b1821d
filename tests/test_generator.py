import random
from collections import Counter

import pytest

from workload_sim.simulation import ConfigBundle, ExecutionTarget, SampleGenerator, SimulationState
from workload_sim.simulation.generator import FALLBACK_MAX_FAN_OUT, FALLBACK_MIN_FAN_OUT

from conftest import ScriptedRandom


@pytest.fixture
def generator(locations, rng):
    return SampleGenerator(locations, rng)


@pytest.fixture
def state(locations):
    return SimulationState.fresh(locations)


def test_conservation_over_many_samples(locations, generator, state):
    bundle = ConfigBundle.default(locations)
    fan_outs = 0

    for _ in range(1000):
        sample = generator.generate(
            state,
            bundle.origin_config,
            bundle.execution_config,
            bundle.simulation_config.workload_count_distribution
        )
        fan_outs += sample.fan_out

    assert state.total_originated == 1000
    assert state.total_executed == fan_outs


def test_origin_falls_back_to_uniform_choice(locations, generator):
    zero = {location_id: 0 for location_id in locations.ids}

    picks = Counter(generator.select_origin(zero) for _ in range(7000))

    assert set(picks) == set(locations.ids)
    assert all(count > 0 for count in picks.values())


def test_origin_fallback_for_empty_config(locations, generator):
    assert generator.select_origin({}) in locations


def test_zero_origin_weight_is_never_selected(locations, generator):
    config = {location_id: 0 for location_id in locations.ids}
    config["public-cloud"] = 60
    config["pc"] = 40

    picks = Counter(generator.select_origin(config) for _ in range(10000))

    assert set(picks) == {"public-cloud", "pc"}


def test_fan_out_uses_distribution(generator):
    assert {generator.select_fan_out({4: 100}) for _ in range(100)} == {4}


def test_fan_out_falls_back_to_two_through_ten(generator):
    counts = {generator.select_fan_out({}) for _ in range(2000)}
    counts |= {generator.select_fan_out({1: 0, 2: 0}) for _ in range(2000)}

    assert counts == set(range(FALLBACK_MIN_FAN_OUT, FALLBACK_MAX_FAN_OUT + 1))


def test_fan_out_ignores_non_positive_counts(generator):
    assert generator.select_fan_out({0: 100, -1: 100, 3: 1}) == 3


def test_disabled_targets_echo_the_origin(locations, generator, state):
    bundle = ConfigBundle.default(locations)
    for target in bundle.execution_config["far-edge"].values():
        target.enabled = False

    for _ in range(200):
        sample = generator.generate(
            state,
            {"far-edge": 100},
            bundle.execution_config,
            {5: 100}
        )
        assert sample.origin == "far-edge"
        assert sample.targets == ["far-edge"] * 5

    assert state.stats["far-edge"].executed == 1000
    assert state.total_executed == 1000


def test_missing_execution_row_echoes_the_origin(generator):
    assert generator.select_targets({}, "pc", 3) == ["pc", "pc", "pc"]


def test_disabled_target_is_excluded_regardless_of_percentage(generator):
    execution = {
        "pc": {
            "pc": ExecutionTarget(enabled=False, percentage=100),
            "public-cloud": ExecutionTarget(enabled=True, percentage=1),
        }
    }

    assert set(generator.select_targets(execution, "pc", 500)) == {"public-cloud"}


def test_targets_are_drawn_with_replacement_in_location_order(locations, state):
    # Pool for public-cloud is [public-cloud x 50, colocation x 50]
    source = ScriptedRandom(0, 0, 99, 0, 60, 10)
    generator = SampleGenerator(locations, source)
    execution = {
        "public-cloud": {
            "colocation": ExecutionTarget(percentage=50),
            "public-cloud": ExecutionTarget(percentage=50),
        }
    }

    sample = generator.generate(state, {"public-cloud": 100}, execution, {3: 100})

    assert sample.origin == "public-cloud"
    assert sample.targets == ["colocation", "public-cloud", "colocation"]
    assert state.stats["colocation"].executed == 2
    assert state.stats["public-cloud"].executed == 1
    assert source.calls == [100, 100, 100, 100, 100]


def test_generation_is_reproducible_with_a_seed(locations):
    bundle = ConfigBundle.default(locations)

    def run(seed):
        generator = SampleGenerator(locations, random.Random(seed))
        state = SimulationState.fresh(locations)
        return [
            generator.generate(
                state,
                bundle.origin_config,
                bundle.execution_config,
                bundle.simulation_config.workload_count_distribution
            )
            for _ in range(50)
        ]

    assert run(5) == run(5)
