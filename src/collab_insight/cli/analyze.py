"""Analyze CLI command: score one team's repository."""

from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from ..cancellation import CancellationToken
from ..exceptions import CollabInsightError
from ..formatters import get_formatter
from ..logging_config import setup_logging
from ..orchestrator import FairnessOrchestrator, summarize
from ..report import ReportStatus
from . import app
from ._common import (
    build_job,
    build_judge,
    build_schedule,
    console,
    parse_team_table,
    read_toml,
    resolve_config,
)


@app.command()
def analyze(
    repo: Path = typer.Argument(
        ...,
        help="Path to the team's git repository",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    team: Path = typer.Option(
        ...,
        "--team",
        "-t",
        help="Team file (TOML) listing the members",
        exists=True,
        dir_okay=False,
    ),
    schedule: Optional[Path] = typer.Option(
        None,
        "--schedule",
        help="Pair-programming schedule CSV (Team,Weekday,HH:MM-HH:MM)",
        exists=True,
        dir_okay=False,
    ),
    semester_start: Optional[datetime] = typer.Option(
        None, "--semester-start", formats=["%Y-%m-%d"], help="First day of the semester"
    ),
    semester_end: Optional[datetime] = typer.Option(
        None, "--semester-end", formats=["%Y-%m-%d"], help="Last day of the semester"
    ),
    no_judge: bool = typer.Option(
        False,
        "--no-judge",
        help="Skip the effort judge and score LoC balance only",
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        help="Judge model name",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output with debug logs",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (TOML format)",
        exists=True,
        dir_okay=False,
    ),
):
    """
    Compute the Collaboration Quality Index for one team.

    [bold cyan]Examples:[/bold cyan]

      collab-insight analyze ./repo --team team.toml

      collab-insight analyze ./repo --team team.toml --no-judge --json

      collab-insight analyze ./repo -t team.toml --schedule slots.csv \\
          --semester-start 2024-04-15 --semester-end 2024-07-19
    """
    logger = setup_logging(verbose=verbose)
    cancel = CancellationToken()

    try:
        settings = resolve_config(config=config, verbose=verbose, no_judge=no_judge, model=model)
        spec = parse_team_table(
            read_toml(team), settings.institutional_domains, base_dir=team.parent
        )
        snapshot = build_schedule(settings, schedule, semester_start, semester_end)
        orchestrator = FairnessOrchestrator(settings, build_judge(settings), snapshot)

        job = build_job(spec, repo)
        report = orchestrator.analyze(job, cancel)

        get_formatter("json" if json_output else "rich").render([report])

        if report.status is not ReportStatus.OK:
            raise typer.Exit(1)
        if report.cqi is not None:
            logger.info(f"{report.team}: {summarize(report.cqi)}")

    except typer.Exit:
        raise

    except CollabInsightError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        cancel.cancel()
        logger.info("Analysis interrupted by user")
        console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)
