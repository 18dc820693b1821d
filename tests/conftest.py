import random

import pytest
import simpy

from workload_sim.config import EngineSettings
from workload_sim.core import LocationSet
from workload_sim.simulation import ConfigBundle, SimulationScheduler


class ScriptedRandom:
    """Returns queued indices, in order, then repeats the last one."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = []

    def randrange(self, n):
        self.calls.append(n)
        value = self.values.pop(0) if len(self.values) > 1 else self.values[0]
        assert 0 <= value < n
        return value


@pytest.fixture
def locations():
    return LocationSet()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def settings():
    return EngineSettings(_env_file=None)


@pytest.fixture
def make_scheduler(locations, settings):
    """Scheduler on a fresh virtual-time environment."""

    def factory(bundle=None, seed=1234, on_complete=None, **simulation_options):
        if bundle is None:
            bundle = ConfigBundle.default(locations, **simulation_options)
        return SimulationScheduler(
            locations=locations,
            bundle=bundle,
            rng=random.Random(seed),
            env=simpy.Environment(),
            settings=settings,
            on_complete=on_complete
        )

    return factory
