"""Cheap structural and message checks run before any chunk is rated.

Rules are evaluated in a fixed order and the first match wins:

    1. empty            no changed lines
    2. merge            merge-commit message
    3. revert           revert message
    4. rename-only      rename flag with <= 2 lines, or "rename"/"move"
                        in the message with <= 5 lines
    5. format-only      format flag, or a format message over more than one
                        file averaging < 10 lines per file
    6. mass reformat    mass-reformat flag, or >= 10 files averaging < 5
                        lines per file with a format message
    7. generated only   every file is a lock file or build output
    8. trivial message  "wip", "fix typo", "lint", ...

The order settles overlaps: a small merge commit that mentions a rename is
a merge. The filter is pure; running it again on kept chunks keeps them all.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Optional

from ..config import FilterConfig
from ..logging_config import get_logger
from ..models import Chunk, FilterDecision, FilterReason, FilterSummary
from . import patterns

logger = get_logger(__name__)


class PreFilter:
    """Classify chunks as productive (KEEP) or excludable."""

    def __init__(self, config: Optional[FilterConfig] = None):
        self.config = config or FilterConfig()

    def evaluate(self, chunk: Chunk) -> FilterDecision:
        cfg = self.config
        lines = chunk.total_lines
        message = chunk.message

        if lines == 0:
            return FilterDecision.exclude(FilterReason.EXCLUDE_EMPTY, "No code changes")

        if patterns.is_merge_message(message):
            return FilterDecision.exclude(FilterReason.EXCLUDE_MERGE, "Merge commit")

        if patterns.is_revert_message(message):
            return FilterDecision.exclude(FilterReason.EXCLUDE_REVERT, "Revert commit")

        if self._is_rename_only(chunk):
            return FilterDecision.exclude(
                FilterReason.EXCLUDE_RENAME_ONLY,
                f"Rename-only: {chunk.file_count} files renamed",
            )

        if self._is_format_only(chunk):
            return FilterDecision.exclude(
                FilterReason.EXCLUDE_FORMAT_ONLY, "Format/whitespace-only changes"
            )

        if self._is_mass_reformat(chunk):
            return FilterDecision.exclude(
                FilterReason.EXCLUDE_MASS_REFORMAT,
                f"Mass reformat: {chunk.file_count} files with avg "
                f"{chunk.avg_lines_per_file:.1f} lines each",
            )

        if chunk.files and all(patterns.is_generated_file(f) for f in chunk.files):
            return FilterDecision.exclude(
                FilterReason.EXCLUDE_GENERATED_ONLY,
                "Only generated files: " + ", ".join(chunk.files),
            )

        trivial = patterns.match_trivial_message(message)
        if trivial is not None:
            if lines <= cfg.small_commit_lines:
                return FilterDecision.exclude(
                    FilterReason.EXCLUDE_TRIVIAL_MESSAGE,
                    f"Small commit ({lines} lines) with trivial message: {trivial}",
                )
            logger.info(
                f"Excluding {lines}-line chunk {chunk.commit_sha[:8]} "
                f"on trivial message alone: {message!r}"
            )
            return FilterDecision.exclude(
                FilterReason.EXCLUDE_TRIVIAL_MESSAGE, f"Trivial message pattern: {trivial}"
            )

        return FilterDecision.keep_chunk()

    def _is_rename_only(self, chunk: Chunk) -> bool:
        if chunk.rename_detected:
            return chunk.total_lines <= self.config.rename_flag_max_lines
        return (
            patterns.mentions_rename(chunk.message)
            and chunk.total_lines <= self.config.rename_message_max_lines
        )

    def _is_format_only(self, chunk: Chunk) -> bool:
        if chunk.format_only:
            return True
        return (
            patterns.is_format_message(chunk.message)
            and chunk.file_count > 1
            and chunk.avg_lines_per_file < self.config.format_max_avg_lines
        )

    def _is_mass_reformat(self, chunk: Chunk) -> bool:
        if chunk.mass_reformat:
            return True
        return (
            chunk.file_count >= self.config.mass_reformat_min_files
            and chunk.avg_lines_per_file < self.config.mass_reformat_max_avg_lines
            and patterns.is_format_message(chunk.message)
        )

    def apply(
        self, chunks: Iterable[Chunk]
    ) -> tuple[list[Chunk], list[tuple[Chunk, FilterDecision]], FilterSummary]:
        """Filter a team's chunks.

        Returns:
            (kept chunks, excluded chunks with their decisions, summary)
        """
        kept: list[Chunk] = []
        excluded: list[tuple[Chunk, FilterDecision]] = []
        counts: Counter[str] = Counter()

        for chunk in chunks:
            decision = self.evaluate(chunk)
            if decision.keep:
                kept.append(chunk)
            else:
                excluded.append((chunk, decision))
                counts[decision.reason.value] += 1

        total = len(kept) + len(excluded)
        summary = FilterSummary(total=total, kept=len(kept), counts=dict(counts))
        if total == 0:
            logger.warning("No chunks provided for pre-filtering")
        else:
            logger.info(
                f"Pre-filter complete: {len(kept)} of {total} chunks will be rated. "
                f"{summary.to_summary()}"
            )
        return kept, excluded, summary
