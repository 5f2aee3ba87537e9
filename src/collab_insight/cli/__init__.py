"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="collab-insight",
    help="Collab Insight - Team Contribution Fairness Analyzer",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback()
def main() -> None:
    """Score how evenly a student team shared the work in its repository."""


# Import subcommands to register them
from .analyze import analyze as _analyze  # noqa: F401, E402
from .batch import batch as _batch  # noqa: F401, E402
