"""Workout commands: log, show-history, delete-workout, and helpers."""

import json
from typing import Annotated, Optional

import typer

from ...core.catalog import (
    add_templates,
    commit_draft,
    draft_from_workout,
    find_workout_for_day,
    template_from_draft,
)
from ...core.catalog import delete_workout as catalog_delete_workout
from ...core.dates import parse_day
from ...core.metrics import sorted_newest_first
from ...core.models import DraftSet, ImportSingle, TrackerState, WorkoutDraft
from ...io.serializers import ValidationError, parse_reps_string, workout_to_dict
from .. import views
from ..app import (
    DataDirOption,
    JsonOption,
    app,
    get_store,
    load_state,
    require_exercise,
    require_item,
    resolve_now,
)


def _parse_entry(state: TrackerState, entry: str) -> list[DraftSet]:
    """Turn 'Push-Ups=10,8,8' into draft sets."""
    name, sep, reps_text = entry.rpartition("=")
    if not sep or not name.strip():
        views.print_error(f"Invalid entry '{entry}'. Use EXERCISE=REPS, e.g. Push-Ups=10,8,8")
        raise typer.Exit(1)

    exercise = require_exercise(state, name)
    try:
        reps = parse_reps_string(reps_text)
    except ValidationError as e:
        views.print_error(f"Invalid reps for {exercise.name}: {e}")
        raise typer.Exit(1)
    return [DraftSet(exercise_id=exercise.id, reps=r) for r in reps]


def _interactive_sets(state: TrackerState) -> list[DraftSet]:
    """
    Prompt for exercises and reps until an empty exercise name is entered.

    Reps accept "10,8,8" (one number per set) or "3x10" (sets x reps).
    """
    views.console.print()
    views.console.print("[bold]Enter sets per exercise.[/bold]")
    views.console.print(
        "  Reps: [green]10,8,8[/green] (one per set) or [green]3x10[/green] (sets x reps)"
    )
    views.console.print("  Press [bold]Enter[/bold] on an empty exercise name when done.\n")

    sets: list[DraftSet] = []
    while True:
        name = views.console.input("  Exercise: ").strip()
        if not name:
            if sets:
                return sets
            views.print_warning("Enter at least one set.")
            continue

        exercise = None
        for candidate in state.exercises:
            if candidate.name.lower() == name.lower() or candidate.id.startswith(name):
                exercise = candidate
                break
        if exercise is None:
            views.print_error(f"Unknown exercise: {name}")
            continue

        raw = views.console.input(f"  Reps for {exercise.name}: ").strip()
        try:
            reps = parse_reps_string(raw)
        except ValidationError as e:
            views.print_error(str(e))
            continue
        sets.extend(DraftSet(exercise_id=exercise.id, reps=r) for r in reps)


@app.command()
def log(
    entries: Annotated[
        Optional[list[str]],
        typer.Argument(help='Sets as EXERCISE=REPS, e.g. "Push-Ups=10,8,8" "Squats=3x15"'),
    ] = None,
    day: Annotated[
        Optional[str],
        typer.Option("--date", help="Workout day YYYY-MM-DD (default: today)"),
    ] = None,
    notes: Annotated[
        Optional[str],
        typer.Option("--notes", help="Notes for the workout"),
    ] = None,
    replace_day: Annotated[
        bool,
        typer.Option("--replace", help="Replace the day's sets instead of adding to them"),
    ] = False,
    save_template: Annotated[
        Optional[str],
        typer.Option("--save-template", help="Also save the day's sets as a template with this name"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Log sets for a day.

    There is one workout per day: sets logged for a day that already has a
    workout are added to it (or replace it with --replace).
    """
    store = get_store(data_dir)
    state = load_state(store)
    now = resolve_now(day)
    workout_day = now.date()

    new_sets: list[DraftSet] = []
    if entries:
        for entry in entries:
            new_sets.extend(_parse_entry(state, entry))
    else:
        new_sets = _interactive_sets(state)

    existing = find_workout_for_day(state.workouts, workout_day)
    if existing is not None and not replace_day:
        draft = draft_from_workout(existing)
        draft.sets.extend(new_sets)
    else:
        draft = WorkoutDraft(sets=new_sets)
    if notes is not None:
        draft.notes = notes

    try:
        workouts, saved = commit_draft(state.workouts, draft, workout_day)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    store.save_collection("workouts", workouts)

    if save_template:
        template = template_from_draft(save_template, draft, now)
        store.save_collection("templates", add_templates(state.templates, ImportSingle(template)))

    if json_out:
        print(json.dumps(workout_to_dict(saved), indent=2))
        return

    views.print_workout(saved, state.exercises)
    verb = "Updated" if existing is not None else "Logged"
    views.print_success(f"{verb} workout for {saved.date.isoformat()}")
    if save_template:
        views.print_success(f"Saved template '{save_template}'")


@app.command("show-history")
def show_history(
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-n", help="Show only the N most recent workouts"),
    ] = None,
    exercise: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Only workouts containing this exercise"),
    ] = None,
    day: Annotated[
        Optional[str],
        typer.Option("--date", help="Show every set of the workout on YYYY-MM-DD"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Display workout history, newest first.
    """
    state = load_state(get_store(data_dir))

    if day is not None:
        try:
            wanted = parse_day(day)
        except ValueError:
            views.print_error(f"Invalid date: {day}. Expected YYYY-MM-DD")
            raise typer.Exit(1)
        workout = find_workout_for_day(state.workouts, wanted)
        if workout is None:
            views.print_error(f"No workout on {wanted.isoformat()}")
            raise typer.Exit(1)
        if json_out:
            print(json.dumps(workout_to_dict(workout), indent=2))
        else:
            views.print_workout(workout, state.exercises)
        return

    workouts = sorted_newest_first(state.workouts)
    if exercise is not None:
        exercise_id = require_exercise(state, exercise).id
        workouts = [w for w in workouts if w.sets_for(exercise_id)]
    if limit is not None:
        workouts = workouts[:limit]

    if json_out:
        print(json.dumps([workout_to_dict(w) for w in workouts], indent=2))
        return

    views.print_history(workouts, state.exercises)


@app.command("delete-workout")
def delete_workout(
    key: Annotated[
        str,
        typer.Argument(help="Workout date (YYYY-MM-DD) or ID (see show-history)"),
    ],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Remove a workout and all of its sets.
    """
    store = get_store(data_dir)
    state = load_state(store)

    try:
        target = find_workout_for_day(state.workouts, parse_day(key))
    except ValueError:
        target = None
    if target is None:
        target = require_item(state.workouts, key, "workout")

    views.console.print(
        f"Workout to delete: [bold]{target.date.isoformat()}[/bold] "
        f"({len(target.sets)} sets, {target.total_reps} reps)"
    )

    if not force and not views.confirm_action("Delete this workout?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    store.save_collection("workouts", catalog_delete_workout(state.workouts, target.id))
    views.print_success(f"Deleted workout for {target.date.isoformat()}")
