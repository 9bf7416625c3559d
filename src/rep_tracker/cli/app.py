"""Shared Typer app object, shared option types, and store utilities."""

import logging
from datetime import datetime, time
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.logging import RichHandler

from ..core.catalog import resolve_exercise
from ..core.dates import parse_day
from ..core.engine.config_loader import StatsThresholds, stats_thresholds
from ..core.models import Exercise, Scope, TrackerState, is_builtin_category
from ..io.serializers import ValidationError
from ..io.tracker_store import TrackerStore, get_default_data_dir
from . import views

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-d", help="Directory holding the tracker JSON files"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

TodayOption = Annotated[
    Optional[str],
    typer.Option("--today", help="Evaluate as if today were YYYY-MM-DD"),
]

app = typer.Typer(
    name="rep-tracker",
    help="Log bodyweight workouts and see streaks, coverage, records and consistency.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def configure_logging(verbose: bool) -> None:
    """Route library logging through Rich; debug level when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=views.console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def get_store(data_dir: Path | None) -> TrackerStore:
    """Get tracker store from path or default location."""
    if data_dir is None:
        data_dir = get_default_data_dir()
    return TrackerStore(data_dir)


def load_state(store: TrackerStore) -> TrackerState:
    """Load all collections, or print the problem and exit."""
    if not store.exists():
        views.print_error(f"No tracker data in {store.data_dir}")
        views.print_info("Run 'init' first to create the exercise catalog.")
        raise typer.Exit(1)

    try:
        return store.load_state()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def resolve_now(today: str | None) -> datetime:
    """
    The evaluation time for a command.

    Args:
        today: Optional YYYY-MM-DD override

    Returns:
        Now, or noon on the given day
    """
    if today is None:
        return datetime.now()
    try:
        return datetime.combine(parse_day(today), time(12))
    except ValueError:
        views.print_error(f"Invalid date: {today}. Expected YYYY-MM-DD")
        raise typer.Exit(1)


def require_exercise(state: TrackerState, key: str) -> Exercise:
    """Find an exercise by id or name, or print an error and exit."""
    exercise = resolve_exercise(state.exercises, key)
    if exercise is None:
        return require_item(state.exercises, key, "exercise")
    return exercise


def build_scope(state: TrackerState, exercise: str | None, category: str | None) -> Scope:
    """Scope from --exercise / --category options (exercise wins)."""
    if exercise is not None:
        return Scope(exercise_id=require_exercise(state, exercise).id)
    if category is not None:
        known = {e.category for e in state.exercises}
        if category not in known and not is_builtin_category(category):
            views.print_error(f"Unknown category: {category}")
            raise typer.Exit(1)
        return Scope(category=category)
    return Scope()


def get_thresholds() -> StatsThresholds:
    """Tunable thresholds from stats.yaml, or print the problem and exit."""
    try:
        return stats_thresholds()
    except ValueError as e:
        views.print_error(f"Invalid stats.yaml: {e}")
        raise typer.Exit(1)


def require_item(items: list, key: str, kind: str):
    """
    Find a template, target or workout by name, full ID or ID prefix.

    The 8-character IDs shown in tables are accepted as prefixes.
    """
    lowered = key.strip().lower()
    exact = [i for i in items if i.id == key or getattr(i, "name", "").lower() == lowered]
    matches = exact or [i for i in items if i.id.startswith(key)]
    if not matches:
        views.print_error(f"No {kind} matches '{key}'")
        raise typer.Exit(1)
    if len(matches) > 1:
        views.print_error(f"'{key}' matches {len(matches)} {kind}s; use the full ID")
        raise typer.Exit(1)
    return matches[0]
