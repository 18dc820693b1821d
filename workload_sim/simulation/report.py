"""
Result Analysis

Turns a finished SimulationResult into figures a person can read:
- Observed origin share per location versus the configured share
- Execution share per location and mean fan-out
- 95% normal-approximation interval for each observed origin share

Configured shares come from the normalised origin weights, so a run whose
percentages do not sum to 100 is still compared against what the sampler
actually aims for.
"""

from dataclasses import dataclass, field
import math
from typing import Optional

from ..core.entities import LocationSet
from .models import SimulationResult
from .sampler import replicate_count

Z_95 = 1.96


@dataclass
class ConfidenceInterval:
    """Confidence interval for a proportion."""
    mean: float = 0.0
    lower: float = 0.0
    upper: float = 0.0
    confidence_level: float = 0.95

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper


@dataclass
class LocationShare:
    """How one location fared in a run."""
    location_id: str
    originated: int = 0
    executed: int = 0
    origin_share: float = 0.0
    configured_share: Optional[float] = None
    execution_share: float = 0.0
    origin_ci: ConfidenceInterval = None

    @property
    def within_expectation(self) -> bool:
        if self.configured_share is None or self.origin_ci is None:
            return True
        return self.origin_ci.contains(self.configured_share)


@dataclass
class ResultSummary:
    """Headline numbers for one run."""
    name: str = ""
    num_samples: int = 0
    total_originated: int = 0
    total_executed: int = 0
    mean_fan_out: float = 0.0
    locations: list[LocationShare] = field(default_factory=list)

    @property
    def conserved(self) -> bool:
        """Every sample originated exactly once."""
        return self.total_originated == self.num_samples


class ResultAnalyzer:
    """Builds summaries and markdown tables from results."""

    def __init__(self, locations: LocationSet = None):
        self.locations = locations or LocationSet()

    @staticmethod
    def proportion_interval(successes: int, trials: int, z: float = Z_95) -> ConfidenceInterval:
        if trials == 0:
            return ConfidenceInterval()
        p = successes / trials
        margin = z * math.sqrt(p * (1 - p) / trials)
        return ConfidenceInterval(
            mean=p,
            lower=max(0.0, p - margin),
            upper=min(1.0, p + margin)
        )

    def configured_shares(self, result: SimulationResult) -> dict[str, Optional[float]]:
        """
        Share each location is expected to originate.

        Mirrors the sampler: rounded weights in location order, uniform when
        nothing carries weight.
        """
        ids = [lid for lid in self.locations.ids if lid in result.stats] or list(result.stats)
        weights = {lid: replicate_count(result.origin_config.get(lid)) for lid in ids}
        total = sum(weights.values())
        if total == 0:
            return {lid: 1 / len(ids) for lid in ids} if ids else {}
        return {lid: weight / total for lid, weight in weights.items()}

    def summarize(self, result: SimulationResult) -> ResultSummary:
        total_originated = result.total_originated
        total_executed = result.total_executed
        configured = self.configured_shares(result)

        summary = ResultSummary(
            name=result.name,
            num_samples=result.simulation_config.num_samples,
            total_originated=total_originated,
            total_executed=total_executed,
            mean_fan_out=total_executed / total_originated if total_originated else 0.0
        )

        for location_id, stats in result.stats.items():
            summary.locations.append(LocationShare(
                location_id=location_id,
                originated=stats.originated,
                executed=stats.executed,
                origin_share=stats.originated / total_originated if total_originated else 0.0,
                configured_share=configured.get(location_id),
                execution_share=stats.executed / total_executed if total_executed else 0.0,
                origin_ci=self.proportion_interval(stats.originated, total_originated)
            ))

        return summary

    def format_markdown(self, summary: ResultSummary) -> str:
        """Format a summary as a markdown table."""
        lines = [
            f"### {summary.name}",
            "",
            "| Location | Originated | Origin % | Configured % | Executed | Execution % |",
            "|----------|------------|----------|--------------|----------|-------------|"
        ]

        for share in summary.locations:
            name = share.location_id
            if share.location_id in self.locations:
                name = self.locations.get(share.location_id).name
            configured = "–" if share.configured_share is None else f"{share.configured_share * 100:.1f}"
            marker = "" if share.within_expectation else " *"
            lines.append(
                f"| {name} | {share.originated} | {share.origin_share * 100:.1f}{marker} | "
                f"{configured} | {share.executed} | {share.execution_share * 100:.1f} |"
            )

        lines.append("")
        lines.append(
            f"Samples: {summary.total_originated} / {summary.num_samples}, "
            f"executions: {summary.total_executed}, mean fan-out: {summary.mean_fan_out:.2f}"
        )
        return "\n".join(lines)
