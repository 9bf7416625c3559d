"""Target commands: add-target, targets, edit-target, delete-target."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.catalog import add_target as catalog_add_target
from ...core.catalog import delete_target as catalog_delete_target
from ...core.catalog import edit_target as catalog_edit_target
from ...core.models import TARGET_PERIODS, TARGET_TYPES, WorkoutTarget, new_id
from ...core.targets import evaluate_targets
from ...io.serializers import target_progress_to_dict, target_to_dict
from .. import views
from ..app import (
    DataDirOption,
    JsonOption,
    TodayOption,
    app,
    build_scope,
    get_store,
    load_state,
    require_item,
    resolve_now,
)


@app.command("add-target")
def add_target(
    name: Annotated[str, typer.Argument(help="Target name, e.g. 'Daily push-ups'")],
    value: Annotated[int, typer.Option("--value", "-v", help="Sets or reps to reach per period")],
    target_type: Annotated[
        str,
        typer.Option("--type", "-t", help=f"What to count: {', '.join(TARGET_TYPES)}"),
    ] = "reps",
    period: Annotated[
        str,
        typer.Option("--period", "-p", help=f"Period: {', '.join(TARGET_PERIODS)}"),
    ] = "weekly",
    exercise: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Only count this exercise"),
    ] = None,
    category: Annotated[
        Optional[str],
        typer.Option("--category", "-c", help="Only count exercises in this category"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Add a recurring sets or reps goal.

    Without --exercise or --category every logged set counts.
    """
    store = get_store(data_dir)
    state = load_state(store)
    scope = build_scope(state, exercise, category)

    try:
        target = WorkoutTarget(
            id=new_id(),
            name=name.strip(),
            target_type=target_type,
            target_value=value,
            period=period,
            created_at=datetime.now(),
            exercise_id=scope.exercise_id,
            category=scope.category,
        )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.save_collection("targets", catalog_add_target(state.targets, target))
    views.print_success(f"Added target '{target.name}': {value} {target_type} {period}")


@app.command()
def targets(
    show_all: Annotated[
        bool,
        typer.Option("--all", "-a", help="Include inactive targets"),
    ] = False,
    data_dir: DataDirOption = None,
    today: TodayOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show targets with progress for the current period.
    """
    state = load_state(get_store(data_dir))
    now = resolve_now(today)

    rows = evaluate_targets(
        state.targets, state.workouts, state.exercises, now, active_only=not show_all
    )

    if json_out:
        print(json.dumps([
            {**target_to_dict(target), "progress": target_progress_to_dict(progress)}
            for target, progress in rows
        ], indent=2))
        return

    views.print_targets(rows, state.exercises)


@app.command("edit-target")
def edit_target(
    target_key: Annotated[str, typer.Argument(help="Target name or ID")],
    value: Annotated[
        Optional[int],
        typer.Option("--value", "-v", help="New goal value"),
    ] = None,
    active: Annotated[
        Optional[bool],
        typer.Option("--active/--inactive", help="Resume or pause the target"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Change a target's goal value or pause it.
    """
    store = get_store(data_dir)
    state = load_state(store)
    target = require_item(state.targets, target_key, "target")

    changes: dict = {}
    if value is not None:
        changes["target_value"] = value
    if active is not None:
        changes["is_active"] = active
    if not changes:
        views.print_error("Nothing to change. Pass --value or --active/--inactive.")
        raise typer.Exit(1)

    try:
        updated = catalog_edit_target(state.targets, target.id, **changes)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.save_collection("targets", updated)
    views.print_success(f"Updated target '{target.name}'")


@app.command("delete-target")
def delete_target(
    target_key: Annotated[str, typer.Argument(help="Target name or ID")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Remove a target.
    """
    store = get_store(data_dir)
    state = load_state(store)
    target = require_item(state.targets, target_key, "target")

    if not force and not views.confirm_action(f"Delete target '{target.name}'?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    store.save_collection("targets", catalog_delete_target(state.targets, target.id))
    views.print_success(f"Deleted target '{target.name}'")
