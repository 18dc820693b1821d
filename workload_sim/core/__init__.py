"""Core domain types shared by every layer."""

from .entities import Location, LocationSet, DEFAULT_LOCATIONS
from .errors import ConfigurationError

__all__ = [
    "Location",
    "LocationSet",
    "DEFAULT_LOCATIONS",
    "ConfigurationError"
]
