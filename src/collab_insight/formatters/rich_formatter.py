"""Rich terminal formatter for Collab Insight."""

from typing import List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..report import ReportStatus, TeamReport
from .base import BaseFormatter

console = Console(stderr=True)


def _cqi_label(score: float) -> str:
    if score >= 80:
        return "[green]balanced[/green]"
    elif score >= 60:
        return "[yellow]moderate[/yellow]"
    elif score >= 40:
        return "[red]uneven[/red]"
    else:
        return "[red bold]critical[/red bold]"


class RichFormatter(BaseFormatter):
    """Summary table across teams, then a detail block per team."""

    def render(self, reports: List[TeamReport]) -> None:
        self._print_summary(reports)
        for report in reports:
            self._print_team(report)

    def format(self, reports: List[TeamReport]) -> str:
        # Rich output goes directly to console; return empty string
        self.render(reports)
        return ""

    def _print_summary(self, reports: List[TeamReport]) -> None:
        table = Table(title="Collaboration Quality Index", expand=True)
        table.add_column("Team", style="yellow", ratio=2)
        table.add_column("CQI", justify="right", width=7)
        table.add_column("Rating", justify="center", width=12)
        table.add_column("Pairing", justify="right", width=8)
        table.add_column("Flags", ratio=3)

        for r in reports:
            if r.status is not ReportStatus.OK:
                table.add_row(r.team, "-", f"[red]{r.status.value}[/red]", "-", r.error or "")
                continue
            pairing = f"{r.pairing.score:.1f}" if r.pairing is not None else "-"
            flags = ", ".join(f.value for f in r.flags) or "-"
            table.add_row(r.team, f"{r.score:.1f}", _cqi_label(r.score), pairing, flags)

        console.print(table)
        console.print()

    def _print_team(self, report: TeamReport) -> None:
        if report.status is not ReportStatus.OK or report.cqi is None:
            return
        result = report.cqi

        lines = [f"CQI: [bold]{result.cqi:.1f}[/bold] ({_cqi_label(result.cqi)})"]
        if result.marker:
            lines.append(f"[dim]{result.marker}[/dim]")
        elif result.fallback:
            lines.append("[dim]LoC balance only (effort judge disabled)[/dim]")
        else:
            c = result.components
            lines.append(
                f"Effort {c.effort_balance:.1f}  LoC {c.loc_balance:.1f}  "
                f"Temporal {c.temporal_spread:.1f}  Ownership {c.ownership_spread:.1f}"
            )
            lines.append(
                f"Base {result.base_score:.1f} x penalties {result.penalty_multiplier:.2f}"
            )
        for p in result.penalties:
            lines.append(f"[red]-[/red] {p.type.value} x{p.multiplier:.2f}: {p.reason}")
        lines.append(f"[dim]Pre-filter: {report.filter_summary.to_summary()}[/dim]")

        console.print(
            Panel("\n".join(lines), title=f"[bold cyan]{report.team}[/bold cyan]", expand=False)
        )

        if report.authors:
            table = Table(expand=False)
            table.add_column("Author", style="yellow")
            table.add_column("Effort", justify="right")
            table.add_column("Share", justify="right")
            table.add_column("Chunks", justify="right")
            table.add_column("Low conf.", justify="right")
            for a in report.authors:
                table.add_row(
                    a.email,
                    f"{a.total_effort:.1f}",
                    f"{a.effort_share:.0%}",
                    str(a.chunk_count),
                    str(a.low_confidence_count),
                )
            console.print(table)
        console.print()
