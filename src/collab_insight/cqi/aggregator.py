"""Collaboration Quality Index (CQI) aggregation.

    base = 0.40 * effort + 0.25 * loc + 0.20 * temporal + 0.15 * ownership
    CQI  = clamp(base * product(penalty multipliers), 0, 100)

Degenerate inputs never raise: a team of one, or rated work from fewer
than two authors, is a single-contributor result (CQI 0); no rated work
at all is a no-productive-work result (CQI 0).
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional, Sequence

from ..config import CqiConfig
from ..logging_config import get_logger
from ..math import Statistics
from ..models import Chunk, FilterSummary, RatedChunk
from . import components
from .models import ComponentScores, CqiResult
from .penalties import PenaltyDetector

logger = get_logger(__name__)


class CqiAggregator:
    """Compute a team's CQI from rated chunks."""

    def __init__(self, config: Optional[CqiConfig] = None):
        self.config = config or CqiConfig()
        self.penalties = PenaltyDetector(self.config)

    def calculate(
        self,
        rated: Sequence[RatedChunk],
        team_size: int,
        project_start: Optional[datetime] = None,
        project_end: Optional[datetime] = None,
        filter_summary: Optional[FilterSummary] = None,
    ) -> CqiResult:
        if team_size <= 1:
            logger.info("Single contributor team - CQI = 0")
            return CqiResult.single_contributor(filter_summary)

        if not rated:
            logger.info("No rated chunks - CQI = 0 (no productive work)")
            return CqiResult.no_productive_work(filter_summary)

        effort_by_author = components.totals_by_author(
            (r.chunk.author_id, r.weighted_effort) for r in rated
        )
        if len(effort_by_author) < 2:
            logger.info("Only one contributor among rated chunks - CQI = 0")
            return CqiResult.single_contributor(filter_summary)

        loc_by_author = components.totals_by_author(
            (r.chunk.author_id, float(r.chunk.total_lines)) for r in rated
        )

        scores = ComponentScores(
            effort_balance=components.balance_score(effort_by_author),
            loc_balance=components.balance_score(loc_by_author),
            temporal_spread=self._temporal(
                [(r.chunk.timestamp, r.weighted_effort) for r in rated],
                project_start,
                project_end,
            ),
            ownership_spread=self._ownership(
                [(r.chunk.author_id, r.chunk.files) for r in rated], team_size
            ),
        )
        logger.debug(f"Component scores: {scores.to_dict()}")

        base = scores.weighted_sum(self.config.weights)
        penalties = self.penalties.detect(rated, effort_by_author, project_start, project_end)
        multiplier = math.prod(p.multiplier for p in penalties)
        cqi = Statistics.clamp(base * multiplier, 0.0, 100.0)

        logger.info(f"CQI calculated: {cqi:.1f} (base={base:.1f}, penalty={multiplier:.2f})")
        return CqiResult(
            cqi=cqi,
            components=scores,
            penalties=tuple(penalties),
            base_score=base,
            penalty_multiplier=multiplier,
            filter_summary=filter_summary,
        )

    def calculate_fallback(
        self,
        chunks: Sequence[Chunk],
        team_size: int,
        filter_summary: Optional[FilterSummary] = None,
        project_start: Optional[datetime] = None,
        project_end: Optional[datetime] = None,
    ) -> CqiResult:
        """CQI from LoC balance alone, for runs without an effort judge.

        The other git-derived components are reported alongside but do not
        enter the score.
        """
        if team_size <= 1:
            return CqiResult.single_contributor(filter_summary)
        if not chunks:
            return CqiResult.no_productive_work(filter_summary)

        loc_by_author = components.totals_by_author(
            (c.author_id, float(c.total_lines)) for c in chunks
        )
        if len(loc_by_author) < 2:
            return CqiResult.single_contributor(filter_summary)

        scores = self.git_only_components(chunks, team_size, project_start, project_end)
        loc_score = scores.loc_balance
        logger.info(f"Fallback CQI calculated (LoC only): {loc_score:.1f}")
        return CqiResult(
            cqi=loc_score,
            components=scores,
            base_score=loc_score,
            filter_summary=filter_summary,
            fallback=True,
        )

    def git_only_components(
        self,
        chunks: Sequence[Chunk],
        team_size: int,
        project_start: Optional[datetime] = None,
        project_end: Optional[datetime] = None,
    ) -> ComponentScores:
        """Components computable without ratings; changed lines stand in for effort.

        Effort balance is always 0. Missing project bounds are taken from
        the chunk timestamps.
        """
        if not chunks or team_size <= 1:
            return ComponentScores.zero()

        loc_by_author = components.totals_by_author(
            (c.author_id, float(c.total_lines)) for c in chunks
        )
        if len(loc_by_author) < 2:
            return ComponentScores.zero()

        timestamps = sorted(c.timestamp for c in chunks if c.timestamp is not None)
        if timestamps:
            project_start = project_start or timestamps[0]
            project_end = project_end or timestamps[-1]

        return ComponentScores(
            effort_balance=0.0,
            loc_balance=components.balance_score(loc_by_author),
            temporal_spread=self._temporal(
                [(c.timestamp, float(c.total_lines)) for c in chunks],
                project_start,
                project_end,
            ),
            ownership_spread=self._ownership(
                [(c.author_id, c.files) for c in chunks], team_size
            ),
        )

    def _temporal(self, items, start, end) -> float:
        return components.temporal_spread(
            items,
            start,
            end,
            week_days=self.config.week_days,
            neutral=self.config.neutral_temporal_score,
        )

    def _ownership(self, items, team_size: int) -> float:
        return components.ownership_spread(
            items,
            team_size,
            min_chunks=self.config.ownership_min_chunks,
            team_cap=self.config.ownership_team_cap,
            neutral=self.config.neutral_ownership_score,
        )
