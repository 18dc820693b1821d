import pytest

from workload_sim.core import ConfigurationError
from workload_sim.interfaces import InMemoryPresetStore
from workload_sim.simulation import (
    BUILTIN_PRESETS,
    ConfigBundle,
    SimulationConfig,
    get_preset,
)

EDGE = {"near-edge", "far-edge", "functional-edge", "pc"}


def test_builtin_presets_have_unique_ids():
    ids = [preset.id for preset in BUILTIN_PRESETS]

    assert len(ids) == 7
    assert len(set(ids)) == 7
    assert "edge-to-cloud" in ids


def test_unknown_preset():
    with pytest.raises(ConfigurationError):
        get_preset("moon-base")


@pytest.mark.parametrize("preset", BUILTIN_PRESETS, ids=lambda p: p.id)
def test_every_preset_covers_every_location(preset, locations):
    bundle = preset.bundle(locations)

    assert set(bundle.origin_config) == set(locations.ids)
    assert set(bundle.execution_config) == set(locations.ids)
    for row in bundle.execution_config.values():
        assert set(row) == set(locations.ids)
        assert any(target.enabled for target in row.values())


def test_edge_to_cloud_layout(locations):
    bundle = get_preset("edge-to-cloud").bundle(locations)

    assert bundle.origin_config["near-edge"] == 30
    assert bundle.origin_config["public-cloud"] == 0
    assert sum(bundle.origin_config.values()) == 100

    pc_row = bundle.execution_config["pc"]
    assert pc_row["public-cloud"].enabled is True
    assert pc_row["public-cloud"].percentage == 90
    assert pc_row["near-edge"].enabled is False
    assert pc_row["near-edge"].percentage == 0


def test_balanced_matches_default_layout(locations):
    bundle = get_preset("balanced").bundle(locations)
    default = ConfigBundle.default(locations)

    assert bundle.origin_config == default.origin_config
    assert bundle.execution_config == default.execution_config


def test_preset_keeps_callers_run_options(locations):
    options = SimulationConfig(num_samples=25, instant_mode=True)

    bundle = get_preset("hybrid-cloud").bundle(locations, options)
    bundle.simulation_config.num_samples = 1

    assert options.num_samples == 25
    assert get_preset("hybrid-cloud").bundle(locations, options).simulation_config.num_samples == 25


def test_preset_bundles_are_independent(locations):
    preset = get_preset("cloud-centric")

    first = preset.bundle(locations)
    first.origin_config["public-cloud"] = 0

    assert preset.bundle(locations).origin_config["public-cloud"] == 70


def test_store_with_builtins(locations):
    presets = InMemoryPresetStore.with_builtins(locations)

    assert presets.names() == sorted(preset.id for preset in BUILTIN_PRESETS)
    assert presets.load("edge-heavy").origin_config["far-edge"] == 25


def test_edge_to_cloud_runs_from_the_edge(locations, make_scheduler):
    scheduler = make_scheduler(num_samples=500, instant_mode=True)

    scheduler.load_bundle(
        get_preset("edge-to-cloud").bundle(locations, scheduler.simulation_config)
    )
    scheduler.run()

    stats = scheduler.history.latest.stats
    assert scheduler.history.latest.total_originated == 500
    assert {lid for lid, s in stats.items() if s.originated} <= EDGE
    assert stats["public-cloud"].executed > stats["near-edge"].executed
