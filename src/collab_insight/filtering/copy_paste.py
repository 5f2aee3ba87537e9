"""Post-rating weight reduction for suspected copy-paste.

A large chunk the judge rated as both unoriginal and simple keeps its
rating but contributes only a fraction of its weighted effort.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..config import FilterConfig
from ..logging_config import get_logger
from ..models import RatedChunk

logger = get_logger(__name__)


class CopyPasteWeigher:
    def __init__(self, config: Optional[FilterConfig] = None):
        self.config = config or FilterConfig()

    def reason(self, rated: RatedChunk) -> Optional[str]:
        """Why rated looks copy-pasted, or None."""
        rating = rated.rating
        if rating.is_error:
            return None
        cfg = self.config
        lines = rated.chunk.total_lines
        if (
            lines > cfg.copy_paste_min_lines
            and rating.novelty < cfg.copy_paste_max_novelty
            and rating.complexity < cfg.copy_paste_max_complexity
        ):
            return (
                f"Suspected copy-paste: {lines} lines, novelty={rating.novelty:.1f}, "
                f"complexity={rating.complexity:.1f}"
            )
        return None

    def apply(self, rated_chunks: Iterable[RatedChunk]) -> list[RatedChunk]:
        result = []
        reduced = 0
        for rated in rated_chunks:
            why = self.reason(rated)
            if why is not None:
                rated = rated.with_weight(self.config.copy_paste_weight, why)
                reduced += 1
            result.append(rated)
        if reduced:
            logger.info(f"Reduced weight of {reduced} suspected copy-paste chunks")
        return result
