"""Core data models: commits, change units, effort ratings, filter decisions."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

# Commit-level flag heuristics
FORMAT_ONLY_WHITESPACE_RATIO = 0.8
MASS_REFORMAT_MIN_FILES = 10
MASS_REFORMAT_MAX_AVG_LINES = 5.0


@dataclass(frozen=True)
class FileDelta:
    """Change to a single file within one commit."""

    path: str
    diff_text: str
    lines_added: int
    lines_deleted: int
    is_rename: bool = False
    whitespace_only_lines: int = 0

    @property
    def total_lines(self) -> int:
        return self.lines_added + self.lines_deleted


@dataclass(frozen=True)
class RawCommit:
    """One commit with its per-file deltas and derived commit-level flags."""

    sha: str
    author_id: Optional[str]
    author_email: str
    message: str
    timestamp: Optional[datetime]
    file_deltas: tuple[FileDelta, ...] = ()
    rename_detected: bool = False
    format_only: bool = False
    mass_reformat: bool = False
    is_root: bool = False

    @property
    def total_lines(self) -> int:
        return sum(d.total_lines for d in self.file_deltas)

    @classmethod
    def build(
        cls,
        sha: str,
        author_email: str,
        message: str,
        timestamp: Optional[datetime],
        file_deltas: Iterable[FileDelta],
        author_id: Optional[str] = None,
        detect_renames: bool = True,
        detect_formatting: bool = True,
        is_root: bool = False,
    ) -> "RawCommit":
        """Create a commit and derive rename/format/mass-reformat flags.

        format_only: more than 80% of changed lines are whitespace-only.
        mass_reformat: at least 10 files with fewer than 5 lines each on average.
        """
        deltas = tuple(file_deltas)
        total = sum(d.total_lines for d in deltas)

        rename = detect_renames and any(d.is_rename for d in deltas)

        format_only = False
        mass_reformat = False
        if detect_formatting and deltas and total > 0:
            whitespace = sum(d.whitespace_only_lines for d in deltas)
            format_only = whitespace / total > FORMAT_ONLY_WHITESPACE_RATIO
        if detect_formatting and len(deltas) >= MASS_REFORMAT_MIN_FILES:
            mass_reformat = total / len(deltas) < MASS_REFORMAT_MAX_AVG_LINES

        return cls(
            sha=sha,
            author_id=author_id,
            author_email=author_email,
            message=message,
            timestamp=timestamp,
            file_deltas=deltas,
            rename_detected=rename,
            format_only=format_only,
            mass_reformat=mass_reformat,
            is_root=is_root,
        )

    def with_author(self, author_id: str) -> "RawCommit":
        return replace(self, author_id=author_id)


@dataclass(frozen=True)
class Chunk:
    """A bounded unit of work sent through filtering and rating.

    Either a slice of one commit's file deltas (split) or the union of
    several small commits by the same author (bundled).
    """

    commit_sha: str
    author_id: Optional[str]
    author_email: str
    message: str
    timestamp: Optional[datetime]
    file_deltas: tuple[FileDelta, ...]
    chunk_index: int = 0
    total_chunks: int = 1
    is_bundled: bool = False
    bundled_shas: tuple[str, ...] = ()
    rename_detected: bool = False
    format_only: bool = False
    mass_reformat: bool = False

    @property
    def files(self) -> list[str]:
        return [d.path for d in self.file_deltas]

    @property
    def file_count(self) -> int:
        return len(self.file_deltas)

    @property
    def diff_text(self) -> str:
        return "\n".join(d.diff_text for d in self.file_deltas)

    @property
    def lines_added(self) -> int:
        return sum(d.lines_added for d in self.file_deltas)

    @property
    def lines_deleted(self) -> int:
        return sum(d.lines_deleted for d in self.file_deltas)

    @property
    def total_lines(self) -> int:
        return self.lines_added + self.lines_deleted

    @property
    def avg_lines_per_file(self) -> float:
        if not self.file_deltas:
            return 0.0
        return self.total_lines / len(self.file_deltas)


class CommitLabel(str, Enum):
    """Classification assigned by the effort judge."""

    FEATURE = "FEATURE"
    BUG_FIX = "BUG_FIX"
    TEST = "TEST"
    REFACTOR = "REFACTOR"
    TRIVIAL = "TRIVIAL"

    @classmethod
    def parse(cls, value: object) -> "CommitLabel":
        """Lenient parse; anything unrecognised is TRIVIAL."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.TRIVIAL
        key = value.strip().upper().replace("-", "_").replace(" ", "_")
        if key == "BUGFIX":
            key = "BUG_FIX"
        try:
            return cls(key)
        except ValueError:
            return cls.TRIVIAL


@dataclass(frozen=True)
class EffortRating:
    """Effort judgement for one chunk. Scores are 0-10, confidence 0-1."""

    effort_score: float
    complexity: float
    novelty: float
    label: CommitLabel
    confidence: float
    reasoning: str
    is_error: bool = False
    error_message: Optional[str] = None

    @property
    def quality_multiplier(self) -> float:
        """0.5 + 0.3*complexity/10 + 0.2*novelty/10, in [0.5, 1.0]."""
        return 0.5 + (0.3 * self.complexity / 10.0) + (0.2 * self.novelty / 10.0)

    @property
    def weighted_effort(self) -> float:
        return self.effort_score * self.quality_multiplier

    @classmethod
    def trivial(cls, reason: str, confidence: float = 0.0) -> "EffortRating":
        return cls(1.0, 1.0, 1.0, CommitLabel.TRIVIAL, confidence, reason)

    @classmethod
    def disabled(cls) -> "EffortRating":
        return cls(5.0, 5.0, 5.0, CommitLabel.TRIVIAL, 0.0, "AI disabled")

    @classmethod
    def error(cls, message: str) -> "EffortRating":
        return cls(0.0, 0.0, 0.0, CommitLabel.TRIVIAL, 0.0, message, True, message)


@dataclass(frozen=True)
class RatedChunk:
    """A chunk paired with its rating and the caller-side adjustments.

    effective_label is TRIVIAL when the rating's confidence fell below the
    configured threshold; the raw rating is kept untouched.
    """

    chunk: Chunk
    rating: EffortRating
    effective_label: CommitLabel
    weight_multiplier: float = 1.0
    weight_reason: Optional[str] = None

    @classmethod
    def from_rating(
        cls, chunk: Chunk, rating: EffortRating, confidence_threshold: float = 0.0
    ) -> "RatedChunk":
        label = rating.label
        if rating.confidence < confidence_threshold:
            label = CommitLabel.TRIVIAL
        return cls(chunk=chunk, rating=rating, effective_label=label)

    @property
    def weighted_effort(self) -> float:
        return self.rating.weighted_effort * self.weight_multiplier

    def with_weight(self, multiplier: float, reason: str) -> "RatedChunk":
        return replace(self, weight_multiplier=multiplier, weight_reason=reason)


class FilterReason(str, Enum):
    """Pre-filter outcome categories, in evaluation priority order."""

    KEEP = "KEEP"
    EXCLUDE_EMPTY = "EXCLUDE_EMPTY"
    EXCLUDE_MERGE = "EXCLUDE_MERGE"
    EXCLUDE_REVERT = "EXCLUDE_REVERT"
    EXCLUDE_RENAME_ONLY = "EXCLUDE_RENAME_ONLY"
    EXCLUDE_FORMAT_ONLY = "EXCLUDE_FORMAT_ONLY"
    EXCLUDE_MASS_REFORMAT = "EXCLUDE_MASS_REFORMAT"
    EXCLUDE_GENERATED_ONLY = "EXCLUDE_GENERATED_ONLY"
    EXCLUDE_TRIVIAL_MESSAGE = "EXCLUDE_TRIVIAL_MESSAGE"


@dataclass(frozen=True)
class FilterDecision:
    reason: FilterReason
    detail: str = ""

    @property
    def keep(self) -> bool:
        return self.reason is FilterReason.KEEP

    @classmethod
    def keep_chunk(cls) -> "FilterDecision":
        return cls(FilterReason.KEEP, "")

    @classmethod
    def exclude(cls, reason: FilterReason, detail: str) -> "FilterDecision":
        return cls(reason, detail)


@dataclass(frozen=True)
class FilterSummary:
    """Aggregate counts of pre-filter decisions for one team."""

    total: int
    kept: int
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def filtered(self) -> int:
        return self.total - self.kept

    @property
    def filtered_percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return 100.0 * self.filtered / self.total

    def count(self, reason: FilterReason) -> int:
        return self.counts.get(reason.value, 0)

    def to_summary(self) -> str:
        parts = [f"{k.removeprefix('EXCLUDE_').lower()}={v}" for k, v in self.counts.items() if v]
        detail = ", ".join(parts) if parts else "nothing filtered"
        return f"kept {self.kept}/{self.total} ({detail})"

    @classmethod
    def empty(cls) -> "FilterSummary":
        return cls(total=0, kept=0, counts={})


def wall_clock(ts: datetime) -> datetime:
    """Drop tzinfo, keeping the author's local wall-clock time.

    Git reports author timestamps with the author's own offset; schedule
    windows and project bounds are local times, so all time arithmetic
    happens on naive wall-clock values.
    """
    return ts.replace(tzinfo=None)
