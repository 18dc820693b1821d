"""
Weighted Sampler

Selects one candidate from a percentage-weighted set.

Selection follows the replicate-then-draw scheme: every candidate is
conceptually repeated round(weight) times and one element of that multiset
is drawn uniformly. The pool is stored as cumulative replicate counts, so a
single index draw in [0, total) lands on exactly the element the expanded
multiset would hold at that index.

Known approximation: weights are rounded half-up before drawing, so
fractional percentages and maps that do not sum to 100 are not sampled in
exact proportion. This is kept on purpose for reproducible behaviour.
"""

from bisect import bisect_right
from dataclasses import dataclass, field
import math
from typing import Generic, Hashable, Iterable, Mapping, Optional, Protocol, TypeVar

T = TypeVar("T", bound=Hashable)


class RandomSource(Protocol):
    """Anything that can draw a uniform integer in [0, n)."""

    def randrange(self, n: int) -> int:
        ...


def round_half_up(value: float) -> int:
    """Round .5 upwards, the way the weights have always been rounded."""
    return int(math.floor(value + 0.5))


def replicate_count(weight: Optional[float]) -> int:
    """Number of multiset copies a weight contributes."""
    if not weight or weight < 0:
        return 0
    return round_half_up(weight)


@dataclass
class WeightedPool(Generic[T]):
    """Cumulative form of the replicated multiset."""
    candidates: list = field(default_factory=list)
    cumulative: list = field(default_factory=list)

    @classmethod
    def build(cls, weights: Iterable[tuple[T, Optional[float]]]) -> "WeightedPool[T]":
        pool = cls()
        running = 0
        for candidate, weight in weights:
            count = replicate_count(weight)
            if count == 0:
                continue
            running += count
            pool.candidates.append(candidate)
            pool.cumulative.append(running)
        return pool

    @property
    def total(self) -> int:
        return self.cumulative[-1] if self.cumulative else 0

    def __bool__(self) -> bool:
        return self.total > 0

    def pick(self, index: int) -> T:
        """Element at position `index` of the expanded multiset."""
        return self.candidates[bisect_right(self.cumulative, index)]


class WeightedSampler:
    """Draws candidates from weight maps with an injectable random source."""

    def __init__(self, rng: RandomSource):
        self.rng = rng

    def select(
        self,
        weights: Mapping[T, Optional[float]],
        fallback: Optional[T] = None,
        order: Optional[Iterable[T]] = None
    ) -> Optional[T]:
        """
        Select one candidate.

        `order` fixes the pool order (defaults to mapping order); keys absent
        from `weights` weigh 0. Returns `fallback` when nothing is selectable.
        """
        keys = list(order) if order is not None else list(weights)
        pool = WeightedPool.build((key, weights.get(key)) for key in keys)
        return self.draw(pool, fallback)

    def draw(self, pool: WeightedPool, fallback: Optional[T] = None) -> Optional[T]:
        if not pool:
            return fallback
        return pool.pick(self.rng.randrange(pool.total))

    def choice(self, candidates: list):
        """Uniform pick, used by the fallbacks."""
        return candidates[self.rng.randrange(len(candidates))]
