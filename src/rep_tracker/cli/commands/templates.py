"""Template commands: list-templates, add-template, use-template, delete-template."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.catalog import (
    add_templates,
    commit_draft,
    draft_from_template,
    draft_from_workout,
    exercise_name,
    find_workout_for_day,
    template_from_draft,
)
from ...core.catalog import delete_template as catalog_delete_template
from ...core.dates import parse_day
from ...core.models import ImportSingle, TemplateEntry, WorkoutTemplate, new_id
from ...io.serializers import ValidationError, parse_reps_string, template_to_dict
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


@app.command("list-templates")
def list_templates(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show saved workout templates.
    """
    state = load_state(get_store(data_dir))

    if json_out:
        print(json.dumps([template_to_dict(t) for t in state.templates], indent=2))
        return

    views.print_templates(state.templates, state.exercises)


@app.command("add-template")
def add_template(
    name: Annotated[str, typer.Argument(help="Template name")],
    entries: Annotated[
        Optional[list[str]],
        typer.Option(
            "--exercise",
            "-e",
            help='EXERCISE=SETS, repeatable, e.g. -e "Push-Ups=3" -e "Squats=4"',
        ),
    ] = None,
    from_date: Annotated[
        Optional[str],
        typer.Option("--from-date", help="Copy the exercises and set counts of the workout on YYYY-MM-DD"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Save a reusable workout template.
    """
    store = get_store(data_dir)
    state = load_state(store)

    if from_date is not None:
        try:
            workout = find_workout_for_day(state.workouts, parse_day(from_date))
        except ValueError:
            views.print_error(f"Invalid date: {from_date}. Expected YYYY-MM-DD")
            raise typer.Exit(1)
        if workout is None:
            views.print_error(f"No workout on {from_date}")
            raise typer.Exit(1)
        template = template_from_draft(name, draft_from_workout(workout), datetime.now())
    elif entries:
        template_entries: list[TemplateEntry] = []
        for entry in entries:
            ex_name, sep, count = entry.rpartition("=")
            if not sep or not count.strip().isdecimal() or int(count) < 1:
                views.print_error(f"Invalid entry '{entry}'. Use EXERCISE=SETS, e.g. Push-Ups=3")
                raise typer.Exit(1)
            exercise = require_exercise(state, ex_name)
            template_entries.append(TemplateEntry(exercise_id=exercise.id, sets=int(count)))
        try:
            template = WorkoutTemplate(
                id=new_id(), name=name.strip(), exercises=template_entries, created_at=datetime.now()
            )
        except ValueError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
    else:
        views.print_error("Pass --exercise EXERCISE=SETS (repeatable) or --from-date YYYY-MM-DD")
        raise typer.Exit(1)

    store.save_collection("templates", add_templates(state.templates, ImportSingle(template)))
    views.print_success(f"Saved template '{template.name}' ({template.total_sets} sets)")


@app.command("use-template")
def use_template(
    template_key: Annotated[str, typer.Argument(help="Template name or ID")],
    reps: Annotated[
        Optional[str],
        typer.Option("--reps", "-r", help="Reps for every planned set in order, e.g. 10,8,8,15,15"),
    ] = None,
    day: Annotated[
        Optional[str],
        typer.Option("--date", help="Workout day YYYY-MM-DD (default: today)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Log a workout from a template.

    Without --reps you are prompted for each planned set. The result
    replaces any workout already logged for that day.
    """
    store = get_store(data_dir)
    state = load_state(store)
    template = require_item(state.templates, template_key, "template")
    workout_day = resolve_now(day).date()

    draft = draft_from_template(template)

    if reps is not None:
        try:
            values = parse_reps_string(reps)
        except ValidationError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
        if len(values) != len(draft.sets):
            views.print_error(
                f"Template '{template.name}' has {len(draft.sets)} sets, got {len(values)} rep counts"
            )
            raise typer.Exit(1)
        for draft_set, value in zip(draft.sets, values):
            draft_set.reps = value
    else:
        views.console.print(f"[bold]{template.name}[/bold]: enter reps per set\n")
        for draft_set in draft.sets:
            label = exercise_name(state.exercises, draft_set.exercise_id)
            while True:
                raw = views.console.input(f"  {label}: ").strip()
                if raw.isdecimal():
                    draft_set.reps = int(raw)
                    break
                views.print_error("Enter a whole number of reps")

    workouts, saved = commit_draft(state.workouts, draft, workout_day)
    store.save_collection("workouts", workouts)

    views.print_workout(saved, state.exercises)
    views.print_success(f"Logged '{template.name}' for {saved.date.isoformat()}")


@app.command("delete-template")
def delete_template(
    template_key: Annotated[str, typer.Argument(help="Template name or ID")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Remove a template. Workouts logged from it are kept.
    """
    store = get_store(data_dir)
    state = load_state(store)
    template = require_item(state.templates, template_key, "template")

    if not force and not views.confirm_action(f"Delete template '{template.name}'?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    store.save_collection("templates", catalog_delete_template(state.templates, template.id))
    views.print_success(f"Deleted template '{template.name}'")
