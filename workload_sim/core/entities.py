"""
Location Entities

The simulator works over a small, fixed, ordered set of locations that span
the cloud-to-edge continuum:
- Public cloud and colocation facilities
- On-premises data centres
- Near, far and functional edge sites
- End-user PCs

The order matters: it is the order in which weighted pools are built, so it
must stay stable for the lifetime of an engine.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator

from .errors import ConfigurationError


@dataclass(frozen=True)
class Location:
    """A place where workloads can originate or execute."""
    id: str
    name: str
    angle: float = 0.0  # Position on the renderer's ring, in degrees


DEFAULT_LOCATIONS: tuple[Location, ...] = (
    Location("public-cloud", "Public Cloud", 0.0),
    Location("colocation", "Colocation", 51.43),
    Location("on-premises", "On Premises", 102.86),
    Location("near-edge", "Near Edge", 154.29),
    Location("far-edge", "Far Edge", 205.72),
    Location("functional-edge", "Functional Edge", 257.15),
    Location("pc", "PC", 308.58),
)


class LocationSet:
    """
    Immutable, ordered collection of locations.

    Provides lookup by id and validation helpers used when configuration
    updates arrive.
    """

    def __init__(self, locations: Iterable[Location] = DEFAULT_LOCATIONS):
        self._locations = tuple(locations)
        if not self._locations:
            raise ConfigurationError("At least one location is required")

        self._by_id = {location.id: location for location in self._locations}
        if len(self._by_id) != len(self._locations):
            raise ConfigurationError("Location ids must be unique")

    @property
    def ids(self) -> list[str]:
        return [location.id for location in self._locations]

    def get(self, location_id: str) -> Location:
        try:
            return self._by_id[location_id]
        except KeyError:
            raise ConfigurationError(f"Unknown location: {location_id}") from None

    def require(self, location_id: str) -> str:
        """Return the id unchanged if it is known, raise otherwise."""
        self.get(location_id)
        return location_id

    def __contains__(self, location_id: object) -> bool:
        return location_id in self._by_id

    def __iter__(self) -> Iterator[Location]:
        return iter(self._locations)

    def __len__(self) -> int:
        return len(self._locations)

    def __repr__(self) -> str:
        return f"LocationSet({self.ids!r})"
