"""Catalog commands: init, list-exercises, add-exercise, edit-exercise, delete-exercise."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.catalog import add_exercise as catalog_add_exercise
from ...core.catalog import default_exercises
from ...core.catalog import delete_exercise as catalog_delete_exercise
from ...core.catalog import edit_exercise as catalog_edit_exercise
from ...core.models import CATEGORY_LABELS, TrackerState
from ...io.serializers import exercise_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store, load_state, require_exercise

CategoryOption = Annotated[
    Optional[str],
    typer.Option(
        "--category",
        "-c",
        help=f"Category: {', '.join(CATEGORY_LABELS)} (or any custom label)",
    ),
]


@app.command()
def init(
    data_dir: DataDirOption = None,
    empty: Annotated[
        bool,
        typer.Option("--empty", help="Start with an empty exercise catalog"),
    ] = False,
) -> None:
    """
    Create the data directory and seed the default exercise catalog.
    """
    store = get_store(data_dir)

    if store.exists():
        views.print_warning(f"Tracker data already exists in {store.data_dir}")
        return

    exercises = [] if empty else default_exercises(datetime.now())
    store.init(TrackerState(exercises=exercises))

    views.print_success(f"Initialized rep-tracker in {store.data_dir}")
    if exercises:
        views.print_info(f"Added {len(exercises)} default exercises. See 'list-exercises'.")


@app.command("list-exercises")
def list_exercises(
    data_dir: DataDirOption = None,
    category: CategoryOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the exercise catalog.
    """
    state = load_state(get_store(data_dir))
    exercises = [e for e in state.exercises if category is None or e.category == category]

    if json_out:
        print(json.dumps([exercise_to_dict(e) for e in exercises], indent=2))
        return

    if not exercises:
        views.console.print("[yellow]No exercises found.[/yellow]")
        return
    views.console.print(views.format_exercise_table(exercises))


@app.command("add-exercise")
def add_exercise(
    name: Annotated[str, typer.Argument(help="Exercise name, e.g. 'Diamond Push-Ups'")],
    category: CategoryOption = None,
    description: Annotated[
        Optional[str],
        typer.Option("--description", help="Optional description"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Add an exercise to the catalog.
    """
    store = get_store(data_dir)
    state = load_state(store)

    if category is None:
        category = views.console.input(
            f"Category ({', '.join(CATEGORY_LABELS)}): "
        ).strip()

    try:
        exercises, created = catalog_add_exercise(
            state.exercises, name, category, datetime.now(), description
        )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.save_collection("exercises", exercises)
    views.print_success(f"Added {created.name} ({created.category}) [{created.id[:8]}]")


@app.command("edit-exercise")
def edit_exercise(
    exercise: Annotated[str, typer.Argument(help="Exercise name or ID")],
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="New name")] = None,
    category: CategoryOption = None,
    description: Annotated[
        Optional[str],
        typer.Option("--description", help="New description"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Rename an exercise or change its category or description.

    Logged sets keep pointing at the same exercise.
    """
    store = get_store(data_dir)
    state = load_state(store)
    target = require_exercise(state, exercise)

    if name is None and category is None and description is None:
        views.print_error("Nothing to change. Pass --name, --category or --description.")
        raise typer.Exit(1)

    try:
        exercises = catalog_edit_exercise(state.exercises, target.id, name, category, description)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.save_collection("exercises", exercises)
    views.print_success(f"Updated {target.name}")


@app.command("delete-exercise")
def delete_exercise(
    exercise: Annotated[str, typer.Argument(help="Exercise name or ID")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Remove an exercise together with its logged sets and template entries.

    Workouts and templates left empty are removed as well.
    """
    store = get_store(data_dir)
    state = load_state(store)
    target = require_exercise(state, exercise)

    n_sets = sum(len(w.sets_for(target.id)) for w in state.workouts)
    views.console.print(
        f"Exercise to delete: [bold]{target.name}[/bold] ({n_sets} logged set{'s' if n_sets != 1 else ''})"
    )

    if not force and not views.confirm_action("Delete this exercise and all its sets?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    new_state = catalog_delete_exercise(state, target.id)
    store.save_state(new_state)

    views.print_success(
        f"Deleted {target.name}: "
        f"{len(state.workouts) - len(new_state.workouts)} workout(s), "
        f"{len(state.templates) - len(new_state.templates)} template(s) removed"
    )
