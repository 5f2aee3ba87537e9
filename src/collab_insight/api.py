"""Public API for Collab Insight.

Example:
    >>> from collab_insight import analyze, TeamMember
    >>>
    >>> report = analyze(
    ...     "/path/to/team-repo",
    ...     team="team-07",
    ...     members=[TeamMember("alice", "alice@tum.de"), TeamMember("bob", "bob@tum.de")],
    ...     judge_enabled=False,
    ... )
    >>> report.score
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from .cancellation import CancellationToken
from .config import load_config
from .exceptions import DiffSourceError
from .judge import EffortJudgeAdapter, JudgeClient, OpenAIJudgeClient
from .logging_config import get_logger
from .orchestrator import FairnessOrchestrator, TeamJob
from .pairing import ScheduleSnapshot
from .report import TeamReport
from .roster import TeamMember, TeamRoster
from .temporal import GitDiffSource

logger = get_logger(__name__)


def analyze(
    path: str,
    team: str,
    members: Sequence[TeamMember],
    rev: str = "HEAD",
    project_start: Optional[datetime] = None,
    project_end: Optional[datetime] = None,
    schedule: Optional[ScheduleSnapshot] = None,
    judge_client: Optional[JudgeClient] = None,
    cancel: Optional[CancellationToken] = None,
    template_author_email: Optional[str] = None,
    config_file: Optional[Path] = None,
    **overrides,
) -> TeamReport:
    """Analyse one team's repository and return its report.

    Pipeline:
    1. Load configuration (auto-discover TOML + apply overrides)
    2. Read every commit reachable from ``rev``
    3. Run the fairness pipeline for the roster

    Args:
        path: Path to the team's git repository
        team: Team name (also used to look up scheduled sessions)
        members: Roster; commits from anyone else are treated as external
        template_author_email: Author of the course template; their commits
            are ignored. Without it, root commits by non-members are ignored.
        judge_client: Client for the effort judge. Defaults to an
            OpenAI-compatible client when the judge is enabled and an API
            key is configured.
        **overrides: Configuration overrides (e.g., judge_enabled=False)

    Raises:
        ConfigurationError: If configuration is invalid
        DiffSourceError: If path is not a readable git repository
    """
    config = load_config(config_file=config_file, **overrides)

    source = GitDiffSource(path)
    if not source.is_git_repo():
        raise DiffSourceError(path, "not a git repository")
    commits = source.load(source.list_commits(rev))

    if judge_client is None and config.judge.enabled and config.judge.api_key:
        judge_client = OpenAIJudgeClient(config.judge)
    judge = EffortJudgeAdapter(judge_client, config.judge) if judge_client is not None else None
    if judge is None:
        logger.info("No effort judge available; scoring LoC balance only")

    roster = TeamRoster(
        name=team,
        members=list(members),
        institutional_domains=config.institutional_domains,
        template_author_email=template_author_email,
    )
    orchestrator = FairnessOrchestrator(config, judge, schedule)
    return orchestrator.analyze(
        TeamJob(roster, commits, project_start=project_start, project_end=project_end),
        cancel,
    )
