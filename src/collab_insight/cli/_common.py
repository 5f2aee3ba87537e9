"""Shared CLI helpers: config resolution, team files, judge and schedule setup."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Optional

from rich.console import Console

from ..config import AnalysisConfig, load_config
from ..exceptions import ConfigurationError
from ..judge import EffortJudgeAdapter, OpenAIJudgeClient
from ..logging_config import get_logger
from ..orchestrator import TeamJob
from ..pairing import ScheduleRegistry, ScheduleSnapshot
from ..roster import TeamMember, TeamRoster
from ..temporal import GitDiffSource

logger = get_logger(__name__)

console = Console()


@dataclass(frozen=True)
class TeamSpec:
    """One team as described in a team file."""

    roster: TeamRoster
    repo: Optional[Path] = None
    rev: str = "HEAD"
    project_start: Optional[datetime] = None
    project_end: Optional[datetime] = None


def resolve_config(
    config: Optional[Path] = None,
    verbose: bool = False,
    no_judge: bool = False,
    workers: Optional[int] = None,
    model: Optional[str] = None,
) -> AnalysisConfig:
    """Build config from CLI options."""
    overrides: dict[str, Any] = {}
    if verbose:
        overrides["verbose"] = True
    if no_judge:
        overrides["judge_enabled"] = False
    if workers is not None:
        overrides["workers"] = workers
    if model is not None:
        overrides["model"] = model
    return load_config(config_file=config, **overrides)


def as_datetime(value: Any, key: str) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    raise ConfigurationError(f"Invalid {key}: {value!r} (expected an ISO date)")


def parse_team_table(
    table: dict[str, Any], domains: tuple[str, ...], base_dir: Optional[Path] = None
) -> TeamSpec:
    """Build a TeamSpec from one TOML table.

    Expected keys: ``name``, ``[[members]]`` with ``id``/``email``/``name``
    and optional ``aliases``, and optionally ``repo``, ``rev``,
    ``project_start``, ``project_end``, ``template_author_email``.
    """
    name = table.get("name")
    if not name:
        raise ConfigurationError("Team entry is missing a name")

    members = []
    for entry in table.get("members", []):
        if "email" not in entry:
            raise ConfigurationError(f"Team {name}: member entry without email")
        members.append(
            TeamMember(
                id=str(entry.get("id") or entry["email"]),
                email=str(entry["email"]),
                name=entry.get("name"),
                aliases=tuple(str(a) for a in entry.get("aliases", [])),
            )
        )
    if not members:
        raise ConfigurationError(f"Team {name} has no members")

    repo = None
    if table.get("repo"):
        repo = Path(table["repo"])
        if base_dir is not None and not repo.is_absolute():
            repo = base_dir / repo

    return TeamSpec(
        roster=TeamRoster(
            name=str(name),
            members=members,
            institutional_domains=domains,
            template_author_email=table.get("template_author_email"),
        ),
        repo=repo,
        rev=str(table.get("rev", "HEAD")),
        project_start=as_datetime(table.get("project_start"), "project_start"),
        project_end=as_datetime(table.get("project_end"), "project_end"),
    )


def read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Cannot read {path}: {e}")


def load_commits(repo: Path, rev: str):
    source = GitDiffSource(str(repo))
    if not source.is_git_repo():
        raise ConfigurationError(f"Not a git repository: {repo}")
    return source.load(source.list_commits(rev))


def build_job(spec: TeamSpec, repo: Path) -> TeamJob:
    return TeamJob(
        roster=spec.roster,
        commits=load_commits(repo, spec.rev),
        project_start=spec.project_start,
        project_end=spec.project_end,
    )


def build_judge(config: AnalysisConfig) -> Optional[EffortJudgeAdapter]:
    """Judge adapter for the configured endpoint, or None for LoC-only runs."""
    if not config.judge.enabled:
        logger.info("Effort judge disabled; using LoC balance only")
        return None
    if not config.judge.api_key:
        logger.warning("No judge API key configured; using LoC balance only")
        return None
    return EffortJudgeAdapter(OpenAIJudgeClient(config.judge), config.judge)


def build_schedule(
    config: AnalysisConfig,
    schedule: Optional[Path],
    semester_start: Optional[datetime],
    semester_end: Optional[datetime],
) -> ScheduleSnapshot:
    if schedule is None:
        return ScheduleSnapshot.empty()
    if semester_start is None or semester_end is None:
        raise ConfigurationError("--schedule requires --semester-start and --semester-end")
    try:
        text = schedule.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read schedule {schedule}: {e}")
    registry = ScheduleRegistry(timedelta(minutes=config.pairing.session_minutes))
    registry.load_csv(text, semester_start.date(), semester_end.date())
    return registry.snapshot()
