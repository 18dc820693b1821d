"""
Collaborator Interfaces

The engine does not render, store presets or format exports itself. These
protocols describe what it hands to, and expects from, the components that
do.
"""

from typing import Protocol

from .core.entities import LocationSet
from .simulation.models import ConfigBundle, SimulationConfig, SimulationResult
from .simulation.presets import BUILTIN_PRESETS
from .simulation.scheduler import FrameSnapshot


class FrameRenderer(Protocol):
    """Draws in-flight workloads, substeps and counters."""

    def render(self, frame: FrameSnapshot) -> None:
        ...


class PresetStore(Protocol):
    """Named configuration bundles, stored wherever the caller likes."""

    def save(self, name: str, bundle: ConfigBundle) -> None:
        ...

    def load(self, name: str) -> ConfigBundle:
        ...


class ResultExporter(Protocol):
    """Serialises a finished result (JSON, CSV, ...)."""

    def export(self, result: SimulationResult) -> str:
        ...


class InMemoryPresetStore:
    """PresetStore kept in a dict for the lifetime of the process."""

    def __init__(self):
        self._presets: dict[str, ConfigBundle] = {}

    @classmethod
    def with_builtins(
        cls,
        locations: LocationSet = None,
        simulation_config: SimulationConfig = None
    ) -> "InMemoryPresetStore":
        """A store pre-loaded with every built-in placement preset, keyed by id."""
        store = cls()
        for preset in BUILTIN_PRESETS:
            store.save(preset.id, preset.bundle(locations, simulation_config))
        return store

    def save(self, name: str, bundle: ConfigBundle) -> None:
        self._presets[name] = bundle.model_copy(deep=True)

    def load(self, name: str) -> ConfigBundle:
        if name not in self._presets:
            raise KeyError(f"No preset named {name!r}")
        return self._presets[name].model_copy(deep=True)

    def names(self) -> list[str]:
        return sorted(self._presets)


class JsonResultExporter:
    """ResultExporter producing the pydantic JSON form of a result."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def export(self, result: SimulationResult) -> str:
        return result.model_dump_json(indent=self.indent)
