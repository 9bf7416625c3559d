"""
CLI entry point using Typer.

Provides commands for logging workouts and reading statistics:
- init: Create the data directory with the default exercise catalog
- log / use-template: Log a day's sets
- show-history: Display logged workouts
- stats / coverage: Totals, streaks and calendar coverage
- plot-max / compare / set-stats: Per-exercise progression
- consistency: Rest-pattern classification
- targets: Goal progress

Running without a command opens an interactive menu.
"""

from typing import Annotated

import typer

from . import views
from .app import app, configure_logging

# Importing the command modules registers their commands on the app.
from .commands import exercises, stats, targets, templates, transfer, workouts  # noqa: F401


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Show debug logging"),
    ] = False,
) -> None:
    """
    Bodyweight workout tracker. Run without a command for interactive mode.
    """
    configure_logging(verbose)

    if ctx.invoked_subcommand is not None:
        return

    views.console.print()
    views.console.print("[bold cyan]rep-tracker[/bold cyan]: workout log and statistics")
    views.console.print()

    menu = {
        "1": (workouts.log, "Log sets for today"),
        "2": (stats.stats, "Overview: streaks, coverage, activity"),
        "3": (workouts.show_history, "Show workout history"),
        "4": (targets.targets, "Target progress"),
        "5": (stats.consistency, "Consistency per category"),
        "6": (stats.coverage, "Monthly coverage"),
        "7": (stats.compare, "This year vs last year"),
        "8": (templates.list_templates, "List templates"),
        "9": (exercises.list_exercises, "List exercises"),
        "i": (exercises.init, "Initialize data directory"),
        "0": (None, "Quit"),
    }

    for key, (_, desc) in menu.items():
        views.console.print(f"  \\[{key}] {desc}")

    views.console.print()
    choice = views.console.input("Choose [2]: ").strip() or "2"

    if choice not in menu:
        views.print_error(f"Unknown choice: {choice}")
        raise typer.Exit(1)

    command = menu[choice][0]
    if command is None:
        raise typer.Exit(0)

    ctx.invoke(command)


def main() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    main()
