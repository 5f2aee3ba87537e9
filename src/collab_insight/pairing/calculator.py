"""Pair-programming signal from commit order and scheduled sessions.

Two signals are combined:

    alternation = fraction of adjacent commit pairs with different authors
    co-editing  = fraction of commits made inside a scheduled session

    score = 100 * (0.78 * alternation + 0.22 * co-editing)

When both signals are below their thresholds the score is multiplied by
0.8. Weights, thresholds and the multiplier come from PairingConfig.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..config import PairingConfig
from ..logging_config import get_logger
from ..math import Statistics
from .models import PairingSignal, ScheduledSession

logger = get_logger(__name__)


class PairingSignalCalculator:
    """Compute a PairingSignal for one team's ordered commits."""

    def __init__(self, config: Optional[PairingConfig] = None):
        self.config = config or PairingConfig()

    def calculate(
        self,
        commits: Sequence[tuple[str, datetime]],
        sessions: Sequence[ScheduledSession] = (),
    ) -> PairingSignal:
        """
        Args:
            commits: (author_id, timestamp) pairs in commit order
            sessions: The team's co-presence windows, possibly empty

        Returns:
            PairingSignal; all zeros when there are fewer than 2 commits
        """
        if len(commits) < 2:
            logger.info("Insufficient commits for pairing analysis")
            return PairingSignal.none()

        cfg = self.config
        alternation = self.alternation_rate([author for author, _ in commits])
        co_editing = self.co_editing_rate([ts for _, ts in commits], sessions)

        score = 100.0 * (
            cfg.alternation_weight * alternation + cfg.co_editing_weight * co_editing
        )
        weak = (
            alternation < cfg.alternation_threshold
            and co_editing < cfg.co_editing_threshold
        )
        if weak:
            logger.debug("Both pairing signals weak, applying penalty")
            score *= cfg.weak_signal_multiplier

        logger.debug(
            f"Pairing signals: alternation={alternation:.3f} "
            f"co_editing={co_editing:.3f} score={score:.1f}"
        )
        return PairingSignal(
            alternation_rate=alternation,
            co_editing_rate=co_editing,
            score=Statistics.clamp(score, 0.0, 100.0),
            weak_signal_penalty=weak,
        )

    @staticmethod
    def alternation_rate(authors: Sequence[str]) -> float:
        if len(authors) < 2 or len(set(authors)) < 2:
            return 0.0
        switches = sum(1 for prev, cur in zip(authors, authors[1:]) if prev != cur)
        return switches / (len(authors) - 1)

    @staticmethod
    def co_editing_rate(
        timestamps: Sequence[datetime], sessions: Sequence[ScheduledSession]
    ) -> float:
        if not timestamps or not sessions:
            return 0.0
        inside = sum(1 for ts in timestamps if any(s.contains(ts) for s in sessions))
        return inside / len(timestamps)
