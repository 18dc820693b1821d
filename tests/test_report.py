import pytest

from workload_sim.simulation import ConfigBundle, LocationStats, ResultAnalyzer, snapshot
from workload_sim.simulation.models import empty_stats


def make_result(locations, origin_config, originated, executed, num_samples=100):
    bundle = ConfigBundle.default(locations, num_samples=num_samples)
    bundle.origin_config = origin_config
    stats = empty_stats(locations)
    for location_id, count in originated.items():
        stats[location_id] = LocationStats(
            originated=count,
            executed=executed.get(location_id, 0)
        )
    return snapshot("Simulation 1", bundle, stats)


@pytest.fixture
def analyzer(locations):
    return ResultAnalyzer(locations)


def test_summary_matches_configuration(locations, analyzer):
    result = make_result(
        locations,
        {"public-cloud": 60, "pc": 40},
        originated={"public-cloud": 55, "pc": 45},
        executed={"public-cloud": 200, "pc": 100}
    )

    summary = analyzer.summarize(result)

    assert summary.conserved
    assert summary.total_executed == 300
    assert summary.mean_fan_out == pytest.approx(3.0)
    shares = {share.location_id: share for share in summary.locations}
    assert shares["public-cloud"].origin_share == pytest.approx(0.55)
    assert shares["public-cloud"].configured_share == pytest.approx(0.6)
    assert shares["pc"].execution_share == pytest.approx(1 / 3)
    assert shares["far-edge"].configured_share == 0
    assert all(share.within_expectation for share in summary.locations)


def test_configured_shares_fall_back_to_uniform(locations, analyzer):
    result = make_result(locations, {}, originated={"pc": 10}, executed={"pc": 10}, num_samples=10)

    shares = analyzer.configured_shares(result)

    assert set(shares) == set(locations.ids)
    assert all(share == pytest.approx(1 / 7) for share in shares.values())


def test_configured_shares_ignore_negative_weights(locations, analyzer):
    result = make_result(
        locations,
        {"public-cloud": -5, "pc": 10},
        originated={"pc": 1},
        executed={"pc": 1},
        num_samples=1
    )

    shares = analyzer.configured_shares(result)

    assert shares["public-cloud"] == 0
    assert shares["pc"] == 1


def test_proportion_interval():
    interval = ResultAnalyzer.proportion_interval(50, 100)

    assert interval.mean == pytest.approx(0.5)
    assert interval.lower == pytest.approx(0.402, abs=1e-3)
    assert interval.upper == pytest.approx(0.598, abs=1e-3)
    assert interval.contains(0.5)
    assert not interval.contains(0.7)


def test_proportion_interval_edges():
    assert ResultAnalyzer.proportion_interval(0, 0).mean == 0
    full = ResultAnalyzer.proportion_interval(10, 10)
    assert full.lower == full.upper == 1.0


def test_markdown_flags_unexpected_shares(locations, analyzer):
    result = make_result(
        locations,
        {"public-cloud": 60, "pc": 40},
        originated={"public-cloud": 90, "pc": 10},
        executed={"public-cloud": 90, "pc": 10}
    )

    text = analyzer.format_markdown(analyzer.summarize(result))

    assert text.startswith("### Simulation 1")
    assert "| Public Cloud | 90 | 90.0 * |" in text
    assert "| PC | 10 | 10.0 * |" in text
    assert "Samples: 100 / 100" in text


def test_summary_of_a_real_run(locations, analyzer, make_scheduler):
    scheduler = make_scheduler(num_samples=500, instant_mode=True)
    scheduler.run()

    summary = analyzer.summarize(scheduler.history.latest)

    assert summary.conserved
    assert summary.total_executed == sum(scheduler.frame().accumulated_dots.values())
