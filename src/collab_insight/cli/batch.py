"""Batch CLI command: score every team listed in one file."""

from pathlib import Path
from typing import Optional

import typer

from ..cancellation import CancellationToken
from ..exceptions import CollabInsightError
from ..formatters import get_formatter
from ..logging_config import setup_logging
from ..orchestrator import FairnessOrchestrator
from ..report import ReportStatus
from . import app
from ._common import (
    as_datetime,
    build_job,
    build_judge,
    build_schedule,
    console,
    parse_team_table,
    read_toml,
    resolve_config,
)


@app.command()
def batch(
    teams_file: Path = typer.Argument(
        ...,
        help="TOML file with one [[teams]] table per team",
        exists=True,
        dir_okay=False,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Teams analysed in parallel",
        min=1,
        max=32,
    ),
    no_judge: bool = typer.Option(
        False,
        "--no-judge",
        help="Skip the effort judge and score LoC balance only",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="One line per team",
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
    Compute the Collaboration Quality Index for a list of teams.

    Each [[teams]] table needs name, repo and [[teams.members]]. Optional
    top-level keys schedule, semester_start and semester_end enable pairing
    signals. A team whose analysis fails is reported as an error and the
    rest still complete.

    [bold cyan]Examples:[/bold cyan]

      collab-insight batch teams.toml

      collab-insight batch teams.toml --workers 4 --json
    """
    logger = setup_logging(verbose=verbose, quiet=quiet)
    cancel = CancellationToken()

    try:
        settings = resolve_config(config=config, verbose=verbose, no_judge=no_judge, workers=workers)
        document = read_toml(teams_file)
        base_dir = teams_file.parent

        schedule = document.get("schedule")
        snapshot = build_schedule(
            settings,
            base_dir / schedule if schedule else None,
            as_datetime(document.get("semester_start"), "semester_start"),
            as_datetime(document.get("semester_end"), "semester_end"),
        )
        orchestrator = FairnessOrchestrator(settings, build_judge(settings), snapshot)

        specs = [
            parse_team_table(table, settings.institutional_domains, base_dir=base_dir)
            for table in document.get("teams", [])
        ]
        if not specs:
            console.print("[yellow]No teams found.[/yellow]")
            raise typer.Exit(0)

        jobs = []
        for spec in specs:
            if spec.repo is None:
                raise CollabInsightError(f"Team {spec.roster.name} has no repo")
            jobs.append(build_job(spec, spec.repo))

        reports = orchestrator.analyze_batch(jobs, settings.workers, cancel)

        name = "json" if json_output else "quiet" if quiet else "rich"
        get_formatter(name).render(reports)

        if cancel.cancelled:
            console.print("\n[yellow]Batch interrupted[/yellow]")
            raise typer.Exit(130)

        failed = [r.team for r in reports if r.status is not ReportStatus.OK]
        if failed:
            logger.warning(f"{len(failed)} team(s) not analysed: {', '.join(failed)}")
            raise typer.Exit(1)

    except typer.Exit:
        raise

    except CollabInsightError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        cancel.cancel()
        logger.info("Batch interrupted by user")
        console.print("\n[yellow]Batch interrupted[/yellow]")
        raise typer.Exit(130)
