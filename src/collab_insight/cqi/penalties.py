"""Rule-based CQI penalties.

Every rule works on exact statistics computed from the rated chunks
(shares, ratios) rather than on anything the judge asserts directly.
Fired penalties compose multiplicatively.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..config import CqiConfig
from ..logging_config import get_logger
from ..models import CommitLabel, RatedChunk, wall_clock
from .components import late_period_start, project_days
from .models import Penalty, PenaltyType

logger = get_logger(__name__)


class PenaltyDetector:
    def __init__(self, config: Optional[CqiConfig] = None):
        self.config = config or CqiConfig()

    def detect(
        self,
        rated: Sequence[RatedChunk],
        effort_by_author: dict[str, float],
        project_start: Optional[datetime],
        project_end: Optional[datetime],
    ) -> list[Penalty]:
        """Evaluate every rule; returns fired penalties in rule order."""
        if not self.config.penalties_enabled or not rated:
            return []

        thresholds = self.config.thresholds
        multipliers = self.config.penalties
        penalties: list[Penalty] = []

        share = self.max_share(effort_by_author)
        if share > thresholds.solo_development:
            penalties.append(
                Penalty(
                    PenaltyType.SOLO_DEVELOPMENT,
                    share,
                    multipliers.solo_development,
                    f"One contributor has {share:.0%} of effort "
                    f"(>{thresholds.solo_development:.0%})",
                )
            )
        elif share > thresholds.severe_imbalance:
            penalties.append(
                Penalty(
                    PenaltyType.SEVERE_IMBALANCE,
                    share,
                    multipliers.severe_imbalance,
                    f"One contributor has {share:.0%} of effort "
                    f"(>{thresholds.severe_imbalance:.0%})",
                )
            )

        trivial = self.trivial_ratio(rated)
        if trivial > thresholds.high_trivial:
            penalties.append(
                Penalty(
                    PenaltyType.HIGH_TRIVIAL_RATIO,
                    trivial,
                    multipliers.high_trivial,
                    f"{trivial:.0%} of commits are trivial (>{thresholds.high_trivial:.0%})",
                )
            )

        low_conf = self.low_confidence_ratio(rated)
        if low_conf > thresholds.low_confidence:
            penalties.append(
                Penalty(
                    PenaltyType.LOW_CONFIDENCE,
                    low_conf,
                    multipliers.low_confidence,
                    f"{low_conf:.0%} of ratings have low confidence "
                    f"(>{thresholds.low_confidence:.0%})",
                )
            )

        late = self.late_work_ratio(rated, project_start, project_end)
        if late > thresholds.late_work:
            final_pct = 1.0 - thresholds.late_period_start
            penalties.append(
                Penalty(
                    PenaltyType.LATE_WORK,
                    late,
                    multipliers.late_work,
                    f"{late:.0%} of work done in final {final_pct:.0%} of project "
                    f"(>{thresholds.late_work:.0%})",
                )
            )

        for p in penalties:
            logger.info(f"Penalty {p.type.value} x{p.multiplier}: {p.reason}")
        return penalties

    @staticmethod
    def max_share(effort_by_author: dict[str, float]) -> float:
        total = sum(effort_by_author.values())
        if total <= 0:
            return 0.0
        return max(effort_by_author.values()) / total

    @staticmethod
    def trivial_ratio(rated: Sequence[RatedChunk]) -> float:
        if not rated:
            return 0.0
        trivial = sum(1 for r in rated if r.effective_label is CommitLabel.TRIVIAL)
        return trivial / len(rated)

    def low_confidence_ratio(self, rated: Sequence[RatedChunk]) -> float:
        if not rated:
            return 0.0
        cutoff = self.config.thresholds.low_confidence_value
        low = sum(1 for r in rated if r.rating.confidence < cutoff)
        return low / len(rated)

    def late_work_ratio(
        self,
        rated: Sequence[RatedChunk],
        project_start: Optional[datetime],
        project_end: Optional[datetime],
    ) -> float:
        """Share of weighted effort after the late-period cutoff."""
        if not rated or project_start is None or project_end is None:
            return 0.0
        total_days = project_days(project_start, project_end)
        if total_days <= 0:
            return 0.0

        cutoff = late_period_start(
            project_start, total_days, self.config.thresholds.late_period_start
        )
        total = sum(r.weighted_effort for r in rated)
        if total <= 0:
            return 0.0
        late = sum(
            r.weighted_effort
            for r in rated
            if r.chunk.timestamp is not None and wall_clock(r.chunk.timestamp) > cutoff
        )
        return late / total
