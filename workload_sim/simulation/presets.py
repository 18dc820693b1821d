"""
Built-in Placement Presets

Ready-made what-if scenarios for the cloud-to-edge continuum:
- Cloud-Centric, Edge-Heavy and Balanced Distribution
- Edge-to-Cloud and Cloud-to-Edge
- Hybrid Cloud and On-Prem Protectionist

A preset only describes placement. Origins it does not name get 0%, and
execution targets it does not name are disabled. Loading one keeps whatever
run options the caller already has.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from ..core.entities import LocationSet
from ..core.errors import ConfigurationError
from .models import ConfigBundle, ExecutionTarget, SimulationConfig, even_location_split


@dataclass(frozen=True)
class PlacementPreset:
    """
    A named origin/execution layout.

    `origin` and `execution` set to None mean an even split with every
    target enabled.
    """
    id: str
    name: str
    description: str
    origin: Optional[Mapping[str, int]] = None
    execution: Optional[Mapping[str, Mapping[str, int]]] = None

    def bundle(
        self,
        locations: LocationSet = None,
        simulation_config: SimulationConfig = None
    ) -> ConfigBundle:
        """Configuration for `locations`; names the set does not know are skipped."""
        locations = locations or LocationSet()
        simulation_config = simulation_config or SimulationConfig()
        return ConfigBundle(
            origin_config=self._origin_config(locations),
            execution_config=self._execution_config(locations),
            simulation_config=simulation_config.model_copy(deep=True)
        )

    def _origin_config(self, locations: LocationSet) -> dict[str, int]:
        if self.origin is None:
            return even_location_split(locations)
        return {
            location_id: self.origin.get(location_id, 0)
            for location_id in locations.ids
        }

    def _execution_config(self, locations: LocationSet) -> dict[str, dict[str, ExecutionTarget]]:
        if self.execution is None:
            split = even_location_split(locations)
            return {
                origin: {target: ExecutionTarget(percentage=p) for target, p in split.items()}
                for origin in locations.ids
            }

        config = {}
        for origin in locations.ids:
            row = self.execution.get(origin, {})
            config[origin] = {
                target: ExecutionTarget(enabled=target in row, percentage=row.get(target, 0))
                for target in locations.ids
            }
        return config


BUILTIN_PRESETS: tuple[PlacementPreset, ...] = (
    PlacementPreset(
        id="cloud-centric",
        name="Cloud-Centric",
        description="Workloads primarily originate and execute in public cloud environments",
        origin={"public-cloud": 70, "colocation": 20, "on-premises": 10},
        execution={
            "public-cloud": {"public-cloud": 80, "colocation": 15, "on-premises": 5},
            "colocation": {"public-cloud": 60, "colocation": 35, "on-premises": 5},
            "on-premises": {"public-cloud": 50, "colocation": 30, "on-premises": 20},
            "near-edge": {"public-cloud": 90, "near-edge": 10},
            "far-edge": {"public-cloud": 95, "far-edge": 5},
            "functional-edge": {"public-cloud": 85, "functional-edge": 15},
            "pc": {"public-cloud": 100},
        },
    ),
    PlacementPreset(
        id="edge-heavy",
        name="Edge-Heavy",
        description="Workloads primarily originate and execute at edge locations",
        origin={"near-edge": 30, "far-edge": 25, "functional-edge": 25, "pc": 20},
        execution={
            "public-cloud": {"near-edge": 40, "far-edge": 30, "functional-edge": 30},
            "colocation": {"near-edge": 50, "far-edge": 30, "functional-edge": 20},
            "on-premises": {"near-edge": 40, "far-edge": 40, "functional-edge": 20},
            "near-edge": {"near-edge": 80, "far-edge": 10, "functional-edge": 10},
            "far-edge": {"near-edge": 10, "far-edge": 80, "functional-edge": 10},
            "functional-edge": {"near-edge": 10, "far-edge": 10, "functional-edge": 80},
            "pc": {"pc": 100},
        },
    ),
    PlacementPreset(
        id="balanced",
        name="Balanced Distribution",
        description="Workloads evenly distributed across all environments",
    ),
    PlacementPreset(
        id="edge-to-cloud",
        name="Edge-to-Cloud",
        description="Workloads originate at edge but execute in the cloud",
        origin={"near-edge": 30, "far-edge": 30, "functional-edge": 20, "pc": 20},
        execution={
            "public-cloud": {"public-cloud": 100},
            "colocation": {"public-cloud": 80, "colocation": 20},
            "on-premises": {"public-cloud": 70, "colocation": 20, "on-premises": 10},
            "near-edge": {"public-cloud": 70, "colocation": 20, "near-edge": 10},
            "far-edge": {"public-cloud": 80, "colocation": 15, "far-edge": 5},
            "functional-edge": {"public-cloud": 75, "colocation": 15, "functional-edge": 10},
            "pc": {"public-cloud": 90, "pc": 10},
        },
    ),
    PlacementPreset(
        id="cloud-to-edge",
        name="Cloud-to-Edge",
        description="Workloads originate in the cloud but execute at edge locations",
        origin={"public-cloud": 60, "colocation": 25, "on-premises": 15},
        execution={
            "public-cloud": {"near-edge": 30, "far-edge": 30, "functional-edge": 30, "pc": 10},
            "colocation": {"near-edge": 35, "far-edge": 35, "functional-edge": 30},
            "on-premises": {"near-edge": 40, "far-edge": 30, "functional-edge": 30},
            "near-edge": {"near-edge": 100},
            "far-edge": {"far-edge": 100},
            "functional-edge": {"functional-edge": 100},
            "pc": {"pc": 100},
        },
    ),
    PlacementPreset(
        id="hybrid-cloud",
        name="Hybrid Cloud",
        description="Workloads distributed between cloud and on-premises environments",
        origin={"public-cloud": 40, "colocation": 20, "on-premises": 40},
        execution={
            "public-cloud": {"public-cloud": 60, "on-premises": 40},
            "colocation": {"public-cloud": 50, "colocation": 20, "on-premises": 30},
            "on-premises": {"public-cloud": 40, "on-premises": 60},
            "near-edge": {"public-cloud": 50, "on-premises": 50},
            "far-edge": {"public-cloud": 50, "on-premises": 50},
            "functional-edge": {"public-cloud": 50, "on-premises": 50},
            "pc": {"public-cloud": 50, "on-premises": 50},
        },
    ),
    PlacementPreset(
        id="on-prem-protectionist",
        name="On-Prem Protectionist",
        description="Strict security boundaries between on-premises and public cloud environments",
        origin={
            "public-cloud": 30,
            "colocation": 15,
            "on-premises": 30,
            "near-edge": 10,
            "far-edge": 5,
            "functional-edge": 5,
            "pc": 5,
        },
        execution={
            # Public cloud never sends work on-premises, and vice versa
            "public-cloud": {
                "public-cloud": 60,
                "colocation": 20,
                "near-edge": 10,
                "far-edge": 5,
                "functional-edge": 5,
            },
            "colocation": {
                "public-cloud": 40,
                "colocation": 40,
                "on-premises": 10,
                "near-edge": 5,
                "far-edge": 5,
            },
            "on-premises": {
                "on-premises": 70,
                "colocation": 15,
                "near-edge": 5,
                "far-edge": 5,
                "functional-edge": 5,
            },
            "near-edge": {
                "near-edge": 50,
                "far-edge": 20,
                "functional-edge": 10,
                "on-premises": 10,
                "colocation": 10,
            },
            "far-edge": {
                "far-edge": 50,
                "near-edge": 20,
                "functional-edge": 10,
                "on-premises": 10,
                "colocation": 10,
            },
            "functional-edge": {
                "functional-edge": 50,
                "near-edge": 20,
                "far-edge": 10,
                "on-premises": 10,
                "colocation": 10,
            },
            "pc": {"pc": 40, "on-premises": 40, "near-edge": 10, "far-edge": 10},
        },
    ),
)


def get_preset(preset_id: str) -> PlacementPreset:
    for preset in BUILTIN_PRESETS:
        if preset.id == preset_id:
            return preset
    raise ConfigurationError(f"Unknown preset: {preset_id}")
