"""Team report: the produced result of one fairness analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .cqi.models import CqiResult, PenaltyType
from .models import CommitLabel, FilterSummary
from .pairing.models import PairingSignal


class FairnessFlag(str, Enum):
    """Review flags; each maps from one penalty type."""

    SOLO_CONTRIBUTOR = "SOLO_CONTRIBUTOR"
    UNEVEN_DISTRIBUTION = "UNEVEN_DISTRIBUTION"
    HIGH_TRIVIAL_RATIO = "HIGH_TRIVIAL_RATIO"
    LOW_CONFIDENCE = "LOW_CONFIDENCE"
    LATE_WORK = "LATE_WORK"
    ANALYSIS_ERROR = "ANALYSIS_ERROR"


PENALTY_FLAGS = {
    PenaltyType.SOLO_DEVELOPMENT: FairnessFlag.SOLO_CONTRIBUTOR,
    PenaltyType.SEVERE_IMBALANCE: FairnessFlag.UNEVEN_DISTRIBUTION,
    PenaltyType.HIGH_TRIVIAL_RATIO: FairnessFlag.HIGH_TRIVIAL_RATIO,
    PenaltyType.LOW_CONFIDENCE: FairnessFlag.LOW_CONFIDENCE,
    PenaltyType.LATE_WORK: FairnessFlag.LATE_WORK,
}


def flags_from_result(result: CqiResult) -> list[FairnessFlag]:
    flags: list[FairnessFlag] = []
    for penalty in result.penalties:
        flag = PENALTY_FLAGS[penalty.type]
        if flag not in flags:
            flags.append(flag)
    return flags


class ReportStatus(str, Enum):
    OK = "OK"
    ERROR = "ERROR"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class AuthorDetail:
    author_id: str
    email: str
    total_effort: float
    effort_share: float
    chunk_count: int
    average_effort: float
    low_confidence_count: int
    chunks_by_label: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class AnalyzedChunk:
    """One chunk as shown in the report, team or external."""

    commit_sha: str
    author_id: Optional[str]
    author_email: str
    label: str
    weighted_effort: float
    complexity: float
    novelty: float
    confidence: float
    reasoning: str
    commit_shas: tuple[str, ...]
    message: str
    timestamp: Optional[datetime]
    lines_changed: int
    is_bundled: bool = False
    chunk_index: int = 0
    total_chunks: int = 1
    is_error: bool = False
    error_message: Optional[str] = None
    is_external: bool = False
    weight_reason: Optional[str] = None


@dataclass(frozen=True)
class ReportMetadata:
    total_commits: int = 0
    total_chunks: int = 0
    rated_chunks: int = 0
    bundled_chunks: int = 0
    external_chunks: int = 0
    average_confidence: float = 0.0
    low_confidence_ratings: int = 0
    duration_ms: int = 0


@dataclass(frozen=True)
class TeamReport:
    """Everything produced for one team; assembled once, never mutated."""

    team: str
    status: ReportStatus
    cqi: Optional[CqiResult] = None
    pairing: Optional[PairingSignal] = None
    effort_share: dict[str, float] = field(default_factory=dict)
    authors: tuple[AuthorDetail, ...] = ()
    flags: tuple[FairnessFlag, ...] = ()
    chunks: tuple[AnalyzedChunk, ...] = ()
    metadata: ReportMetadata = field(default_factory=ReportMetadata)
    error: Optional[str] = None

    @property
    def score(self) -> float:
        return self.cqi.cqi if self.cqi is not None else 0.0

    @property
    def filter_summary(self) -> FilterSummary:
        if self.cqi is not None and self.cqi.filter_summary is not None:
            return self.cqi.filter_summary
        return FilterSummary.empty()

    @property
    def requires_review(self) -> bool:
        return bool(self.flags) or self.status is not ReportStatus.OK

    @classmethod
    def failed(cls, team: str, message: str) -> "TeamReport":
        return cls(
            team=team,
            status=ReportStatus.ERROR,
            flags=(FairnessFlag.ANALYSIS_ERROR,),
            error=message,
        )

    @classmethod
    def cancelled(cls, team: str, stage: str) -> "TeamReport":
        return cls(team=team, status=ReportStatus.CANCELLED, error=f"Cancelled {stage}")


def label_counts(labels: list[CommitLabel]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for label in labels:
        counts[label.value] = counts.get(label.value, 0) + 1
    return counts
