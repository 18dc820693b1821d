"""
Workload Count Distribution

A workload fans out into `k` execution targets; the distribution maps each
possible `k` (1..max_count) to a percentage weight.

This module provides:
- normalize(): rescale to exactly 100 with deterministic residual correction
- even_split() and bell_curve(): generators used by configuration editors
- default_distribution(): the distribution a fresh engine starts with
- DistributionStore: a validated, mutable holder for one distribution
"""

import logging
import math
from typing import Mapping, Optional

from ..core.errors import ConfigurationError
from .sampler import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_MAX_COUNT = 20


def normalize(distribution: Mapping[int, int]) -> dict[int, int]:
    """
    Scale percentages so they sum to exactly 100.

    An all-zero (or empty) distribution is returned unchanged. Rounding drift
    is added to the first key holding the largest scaled value.
    """
    total = sum(distribution.values())
    if total == 0:
        return dict(distribution)

    normalized = {
        count: round_half_up(percentage / total * 100)
        for count, percentage in distribution.items()
    }

    residual = 100 - sum(normalized.values())
    if residual:
        largest = max(normalized, key=lambda count: normalized[count])
        normalized[largest] += residual

    return normalized


def even_split(max_count: int = DEFAULT_MAX_COUNT) -> dict[int, int]:
    """Same share for every count, remainder to count 1."""
    _check_max_count(max_count)
    equal = 100 // max_count
    remaining = 100 - equal * max_count

    return {
        count: equal + remaining if count == 1 else equal
        for count in range(1, max_count + 1)
    }


def bell_curve(max_count: int = DEFAULT_MAX_COUNT) -> dict[int, int]:
    """Bell-shaped weighting centred on max_count / 2, normalized."""
    _check_max_count(max_count)
    center = max_count / 2
    weights = {
        count: max(1, round_half_up(20 * math.exp(-0.2 * abs(count - center))))
        for count in range(1, max_count + 1)
    }
    return normalize(weights)


def default_distribution(max_count: int = DEFAULT_MAX_COUNT) -> dict[int, int]:
    """
    Initial distribution of a fresh engine.

    A steeper bell centred between 5 and 6 workloads; rounding drift goes to
    count 5 rather than the largest bucket.
    """
    _check_max_count(max_count)
    weights = {
        count: max(1, round_half_up(20 * math.exp(-0.3 * abs(count - 5.5))))
        for count in range(1, max_count + 1)
    }

    total = sum(weights.values())
    distribution = {
        count: round_half_up(weight / total * 100)
        for count, weight in weights.items()
    }

    residual = 100 - sum(distribution.values())
    if residual:
        anchor = 5 if 5 in distribution else max(distribution, key=lambda c: distribution[c])
        distribution[anchor] += residual

    return distribution


def _check_max_count(max_count: int) -> None:
    if max_count < 1:
        raise ConfigurationError(f"max_count must be at least 1, got {max_count}")


class DistributionStore:
    """
    Holds the active workload count distribution.

    Percentages are rounded and clamped to [0, 100]. Counts outside
    1..max_count, or that are not integers at all, could never be drawn, so
    they are dropped with a debug message instead of failing the update.
    """

    def __init__(self, distribution: Mapping[int, float] = None, max_count: int = DEFAULT_MAX_COUNT):
        _check_max_count(max_count)
        self.max_count = max_count
        self._distribution: dict[int, int] = {}
        if distribution is None:
            distribution = default_distribution(max_count)
        self.replace(distribution)

    def replace(self, distribution: Mapping[int, float]) -> None:
        """Swap in a whole distribution, keeping only drawable counts."""
        validated = {}
        for count, percentage in distribution.items():
            checked = self._check_count(count)
            if checked is not None:
                validated[checked] = _clamp(percentage)
        self._distribution = validated

    def set_percentage(self, count: int, percentage: float) -> None:
        checked = self._check_count(count)
        if checked is not None:
            self._distribution[checked] = _clamp(percentage)

    def set_max_count(self, max_count: int) -> None:
        _check_max_count(max_count)
        dropped = [count for count in self._distribution if count > max_count]
        for count in dropped:
            del self._distribution[count]
        if dropped:
            logger.debug("Dropped workload counts above %d: %s", max_count, dropped)
        self.max_count = max_count

    def apply_normalize(self) -> dict[int, int]:
        self._distribution = normalize(self._distribution)
        return self.as_dict()

    def apply_even_split(self) -> dict[int, int]:
        self._distribution = even_split(self.max_count)
        return self.as_dict()

    def apply_bell_curve(self) -> dict[int, int]:
        self._distribution = bell_curve(self.max_count)
        return self.as_dict()

    def total(self) -> int:
        return sum(self._distribution.values())

    def as_dict(self) -> dict[int, int]:
        return dict(self._distribution)

    def _check_count(self, count) -> Optional[int]:
        value = _as_count(count)
        if value is None:
            logger.debug("Ignoring workload count %r: not an integer", count)
            return None
        if not 1 <= value <= self.max_count:
            logger.debug("Ignoring workload count %d outside 1..%d", value, self.max_count)
            return None
        return value


def _as_count(count) -> Optional[int]:
    """Integer value of a distribution key, None if it is not one."""
    if isinstance(count, str):
        count = count.strip()
        return int(count) if count.isdigit() else None
    if isinstance(count, (int, float)) and float(count).is_integer():
        return int(count)
    return None


def _clamp(percentage: Optional[float]) -> int:
    return max(0, min(100, round_half_up(percentage or 0)))
