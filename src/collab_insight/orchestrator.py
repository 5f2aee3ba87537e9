"""Per-team fairness analysis pipeline.

    partition commits (team / external)
      -> build chunks
      -> pre-filter
      -> rate survivors (external judge, bounded concurrency)
      -> copy-paste weighting
      -> CQI (or LoC-only fallback without a judge)
      -> pairing signal
      -> TeamReport

External contributors' chunks appear in the report for display only and
never enter a score. Any unexpected failure inside one team's pipeline
becomes an ERROR report for that team; cancellation becomes a CANCELLED
report with no partial scores.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from .cancellation import CancellationToken
from .chunking import ChangeUnitBuilder
from .config import AnalysisConfig
from .cqi import CqiAggregator, CqiResult
from .exceptions import AnalysisCancelledError
from .filtering import CopyPasteWeigher, PreFilter
from .judge import EffortJudgeAdapter
from .logging_config import get_logger
from .models import Chunk, EffortRating, RatedChunk, RawCommit
from .pairing import PairingSignal, PairingSignalCalculator, ScheduleSnapshot
from .report import (
    AnalyzedChunk,
    AuthorDetail,
    ReportMetadata,
    ReportStatus,
    TeamReport,
    flags_from_result,
    label_counts,
)
from .roster import TeamRoster

logger = get_logger(__name__)

EXTERNAL_LABEL = "EXTERNAL"
EXTERNAL_REASONING = "External contributor - not included in CQI calculation"


@dataclass(frozen=True)
class TeamJob:
    """Input for one team's analysis."""

    roster: TeamRoster
    commits: Sequence[RawCommit]
    project_start: Optional[datetime] = None
    project_end: Optional[datetime] = None


class FairnessOrchestrator:
    """Run the analysis pipeline for one team or a batch of teams."""

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        judge: Optional[EffortJudgeAdapter] = None,
        schedule: Optional[ScheduleSnapshot] = None,
    ):
        self.config = config or AnalysisConfig()
        self.judge = judge
        self.schedule = schedule or ScheduleSnapshot.empty()

        self.builder = ChangeUnitBuilder(self.config.chunking)
        self.prefilter = PreFilter(self.config.filter)
        self.copy_paste = CopyPasteWeigher(self.config.filter)
        self.aggregator = CqiAggregator(self.config.cqi)
        self.pairing = PairingSignalCalculator(self.config.pairing)

    @property
    def judge_enabled(self) -> bool:
        return self.judge is not None and self.judge.enabled

    def analyze(self, job: TeamJob, cancel: Optional[CancellationToken] = None) -> TeamReport:
        """Analyse one team. Never raises; failures become ERROR/CANCELLED reports."""
        team = job.roster.name
        try:
            return self._run(job, cancel)
        except AnalysisCancelledError as e:
            logger.info(f"Analysis for team {team} cancelled {e.stage}")
            return TeamReport.cancelled(team, e.stage)
        except Exception as e:
            logger.exception(f"Fairness analysis failed for team {team}")
            return TeamReport.failed(team, f"Analysis error: {e}")

    def analyze_batch(
        self,
        jobs: Sequence[TeamJob],
        max_workers: Optional[int] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> list[TeamReport]:
        """Analyse teams concurrently; reports come back in job order.

        A KeyboardInterrupt while waiting cancels the batch: teams still
        queued or waiting on the judge come back CANCELLED and the reports
        gathered so far are returned. The caller sees ``cancel.cancelled``.
        """
        if not jobs:
            return []
        token = cancel if cancel is not None else CancellationToken()
        workers = min(max_workers or self.config.workers, len(jobs))
        reports: list[Optional[TeamReport]] = [None] * len(jobs)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(self.analyze, job, token): i for i, job in enumerate(jobs)}
            try:
                for future in as_completed(futures):
                    reports[futures[future]] = future.result()
            except KeyboardInterrupt:
                token.cancel()
                logger.warning("Batch interrupted; cancelling remaining teams")
                for future, index in futures.items():
                    reports[index] = future.result()

        done = [r for r in reports if r is not None]
        ok = sum(1 for r in done if r.status is ReportStatus.OK)
        logger.info(f"Batch complete: {ok}/{len(done)} teams analysed successfully")
        return done

    def _run(self, job: TeamJob, cancel: Optional[CancellationToken]) -> TeamReport:
        started = time.perf_counter()
        roster = job.roster
        if cancel is not None:
            cancel.raise_if_cancelled("before analysis")

        team_commits, external_commits = roster.partition(job.commits)
        chunks = self.builder.build(team_commits)
        external_chunks = self.builder.build(external_commits) if external_commits else []

        kept, _, summary = self.prefilter.apply(chunks)

        judge = self.judge if self.judge_enabled else None
        if judge is not None:
            rated = self.copy_paste.apply(judge.rate_all(kept, cancel))
        else:
            rated = [RatedChunk.from_rating(c, EffortRating.disabled()) for c in kept]

        start, end = self._project_bounds(job, kept)
        if cancel is not None:
            cancel.raise_if_cancelled("before aggregation")

        if judge is not None:
            result = self.aggregator.calculate(rated, roster.size, start, end, summary)
        else:
            result = self.aggregator.calculate_fallback(kept, roster.size, summary, start, end)

        pairing = self._pairing(roster.name, team_commits)

        effort = self._effort_by_author(rated)
        total_effort = sum(effort.values())
        shares = (
            {author: value / total_effort for author, value in effort.items()}
            if total_effort > 0
            else {}
        )

        analyzed = [self._analyzed(r) for r in rated]
        analyzed.extend(self._external(c) for c in external_chunks)

        duration_ms = int((time.perf_counter() - started) * 1000)
        report = TeamReport(
            team=roster.name,
            status=ReportStatus.OK,
            cqi=result,
            pairing=pairing,
            effort_share=shares,
            authors=tuple(self._author_details(rated, effort, shares)),
            flags=tuple(flags_from_result(result)),
            chunks=tuple(analyzed),
            metadata=self._metadata(team_commits, chunks, rated, external_chunks, duration_ms),
        )
        logger.info(
            f"Fairness analysis completed for team {roster.name}: CQI={result.cqi:.1f}, "
            f"chunks={len(kept)}, filtered={summary.filtered}, "
            f"external={len(external_chunks)}, duration={duration_ms}ms"
        )
        return report

    def _project_bounds(
        self, job: TeamJob, kept: Sequence[Chunk]
    ) -> tuple[Optional[datetime], Optional[datetime]]:
        timestamps = sorted(c.timestamp for c in kept if c.timestamp is not None)
        start = job.project_start or (timestamps[0] if timestamps else None)
        end = job.project_end or (timestamps[-1] if timestamps else None)
        return start, end

    def _pairing(self, team: str, commits: Sequence[RawCommit]) -> PairingSignal:
        ordered = [(c.author_id, c.timestamp) for c in commits if c.timestamp is not None]
        return self.pairing.calculate(ordered, self.schedule.sessions_for(team))

    def _effort_by_author(self, rated: Sequence[RatedChunk]) -> dict[str, float]:
        """Weighted effort per author; changed lines when there is no judge."""
        totals: dict[str, float] = {}
        for r in rated:
            author = r.chunk.author_id
            if author is None:
                continue
            value = r.weighted_effort if self.judge_enabled else float(r.chunk.total_lines)
            totals[author] = totals.get(author, 0.0) + value
        return totals

    def _author_details(
        self,
        rated: Sequence[RatedChunk],
        effort: dict[str, float],
        shares: dict[str, float],
    ) -> list[AuthorDetail]:
        threshold = self.config.judge.confidence_threshold
        by_author: dict[str, list[RatedChunk]] = {}
        for r in rated:
            if r.chunk.author_id is not None:
                by_author.setdefault(r.chunk.author_id, []).append(r)

        details = []
        for author, items in by_author.items():
            total = effort.get(author, 0.0)
            details.append(
                AuthorDetail(
                    author_id=author,
                    email=items[0].chunk.author_email,
                    total_effort=total,
                    effort_share=shares.get(author, 0.0),
                    chunk_count=len(items),
                    average_effort=total / len(items),
                    low_confidence_count=sum(
                        1 for r in items if r.rating.confidence < threshold
                    ),
                    chunks_by_label=label_counts([r.effective_label for r in items]),
                )
            )
        details.sort(key=lambda d: d.total_effort, reverse=True)
        return details

    @staticmethod
    def _analyzed(r: RatedChunk) -> AnalyzedChunk:
        c = r.chunk
        return AnalyzedChunk(
            commit_sha=c.commit_sha,
            author_id=c.author_id,
            author_email=c.author_email,
            label=r.effective_label.value,
            weighted_effort=r.weighted_effort,
            complexity=r.rating.complexity,
            novelty=r.rating.novelty,
            confidence=r.rating.confidence,
            reasoning=r.rating.reasoning,
            commit_shas=c.bundled_shas or (c.commit_sha,),
            message=c.message,
            timestamp=c.timestamp,
            lines_changed=c.total_lines,
            is_bundled=c.is_bundled,
            chunk_index=c.chunk_index,
            total_chunks=c.total_chunks,
            is_error=r.rating.is_error,
            error_message=r.rating.error_message,
            weight_reason=r.weight_reason,
        )

    @staticmethod
    def _external(c: Chunk) -> AnalyzedChunk:
        return AnalyzedChunk(
            commit_sha=c.commit_sha,
            author_id=c.author_id,
            author_email=c.author_email,
            label=EXTERNAL_LABEL,
            weighted_effort=0.0,
            complexity=0.0,
            novelty=0.0,
            confidence=0.0,
            reasoning=EXTERNAL_REASONING,
            commit_shas=c.bundled_shas or (c.commit_sha,),
            message=c.message,
            timestamp=c.timestamp,
            lines_changed=c.total_lines,
            is_bundled=c.is_bundled,
            chunk_index=c.chunk_index,
            total_chunks=c.total_chunks,
            is_external=True,
        )

    def _metadata(
        self,
        commits: Sequence[RawCommit],
        chunks: Sequence[Chunk],
        rated: Sequence[RatedChunk],
        external: Sequence[Chunk],
        duration_ms: int,
    ) -> ReportMetadata:
        judged = rated if self.judge_enabled else []
        threshold = self.config.judge.confidence_threshold
        return ReportMetadata(
            total_commits=len(commits),
            total_chunks=len(chunks),
            rated_chunks=len(judged),
            bundled_chunks=sum(1 for c in chunks if c.is_bundled),
            external_chunks=len(external),
            average_confidence=(
                sum(r.rating.confidence for r in judged) / len(judged) if judged else 0.0
            ),
            low_confidence_ratings=sum(1 for r in judged if r.rating.confidence < threshold),
            duration_ms=duration_ms,
        )


def summarize(result: CqiResult) -> str:
    """One-line description of a CQI result for logs and console output."""
    if result.marker:
        return f"CQI {result.cqi:.1f} ({result.marker})"
    if result.fallback:
        return f"CQI {result.cqi:.1f} (LoC balance only)"
    penalties = ", ".join(p.type.value for p in result.penalties) or "no penalties"
    return f"CQI {result.cqi:.1f} (base {result.base_score:.1f}, {penalties})"
