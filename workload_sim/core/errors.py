"""Engine errors."""


class ConfigurationError(ValueError):
    """Raised when a configuration update references something invalid.

    Malformed percentages never raise; only structural mistakes do
    (unknown locations, a non-positive sample count, and so on).
    """
