"""CQI result types: component scores, penalties, final index."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import FilterSummary

SINGLE_CONTRIBUTOR = "single contributor"
NO_PRODUCTIVE_WORK = "no productive work"


@dataclass(frozen=True)
class ComponentScores:
    """The four CQI components, each 0-100."""

    effort_balance: float
    loc_balance: float
    temporal_spread: float
    ownership_spread: float

    @classmethod
    def zero(cls) -> "ComponentScores":
        return cls(0.0, 0.0, 0.0, 0.0)

    def weighted_sum(self, weights) -> float:
        return (
            weights.effort * self.effort_balance
            + weights.loc * self.loc_balance
            + weights.temporal * self.temporal_spread
            + weights.ownership * self.ownership_spread
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "effort_balance": self.effort_balance,
            "loc_balance": self.loc_balance,
            "temporal_spread": self.temporal_spread,
            "ownership_spread": self.ownership_spread,
        }


class PenaltyType(str, Enum):
    SOLO_DEVELOPMENT = "SOLO_DEVELOPMENT"
    SEVERE_IMBALANCE = "SEVERE_IMBALANCE"
    HIGH_TRIVIAL_RATIO = "HIGH_TRIVIAL_RATIO"
    LOW_CONFIDENCE = "LOW_CONFIDENCE"
    LATE_WORK = "LATE_WORK"


@dataclass(frozen=True)
class Penalty:
    """A fired penalty: the ratio that triggered it and its multiplier."""

    type: PenaltyType
    ratio: float
    multiplier: float
    reason: str


@dataclass(frozen=True)
class CqiResult:
    """Outcome of one CQI computation.

    Attributes:
        cqi: Final index, clamp(base_score * penalty_multiplier, 0, 100)
        components: The four component scores
        penalties: Fired penalties in evaluation order
        base_score: Weighted component sum before penalties
        penalty_multiplier: Product of all penalty multipliers
        filter_summary: Pre-filter counts, when available
        marker: Set for degenerate inputs ("single contributor",
            "no productive work")
        fallback: True when only the LoC balance was available
    """

    cqi: float
    components: ComponentScores
    penalties: tuple[Penalty, ...] = ()
    base_score: float = 0.0
    penalty_multiplier: float = 1.0
    filter_summary: Optional[FilterSummary] = None
    marker: Optional[str] = None
    fallback: bool = False

    @classmethod
    def single_contributor(
        cls, filter_summary: Optional[FilterSummary] = None
    ) -> "CqiResult":
        return cls(
            cqi=0.0,
            components=ComponentScores.zero(),
            filter_summary=filter_summary,
            marker=SINGLE_CONTRIBUTOR,
        )

    @classmethod
    def no_productive_work(
        cls, filter_summary: Optional[FilterSummary] = None
    ) -> "CqiResult":
        return cls(
            cqi=0.0,
            components=ComponentScores.zero(),
            filter_summary=filter_summary,
            marker=NO_PRODUCTIVE_WORK,
        )

    @property
    def penalty_types(self) -> list[PenaltyType]:
        return [p.type for p in self.penalties]

    def has_penalty(self, penalty_type: PenaltyType) -> bool:
        return any(p.type is penalty_type for p in self.penalties)
