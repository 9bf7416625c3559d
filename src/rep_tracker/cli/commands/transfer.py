"""Backup commands: export, import."""

from pathlib import Path
from typing import Annotated

import typer

from ...core.catalog import merge_import
from ...io.serializers import ValidationError
from ...io.tracker_store import read_export
from .. import views
from ..app import DataDirOption, app, get_store, load_state


@app.command()
def export(
    path: Annotated[Path, typer.Argument(help="File to write, e.g. backup.json")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Write every exercise, workout, template and target to one JSON file.
    """
    store = get_store(data_dir)
    state = load_state(store)

    written = store.export_state(path)
    views.print_success(
        f"Exported {len(state.exercises)} exercises, {len(state.workouts)} workouts, "
        f"{len(state.templates)} templates and {len(state.targets)} targets to {written}"
    )


@app.command("import")
def import_data(
    path: Annotated[Path, typer.Argument(help="Export file to merge in")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Merge an export file into the current data.

    Nothing is overwritten: entries already present (same ID) are skipped and
    sets for a day that already has a workout are added to it.
    """
    store = get_store(data_dir)
    state = load_state(store)

    try:
        imported = read_export(path)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    merged = merge_import(state, imported)
    store.save_state(merged)

    views.print_success(
        f"Imported {len(merged.exercises) - len(state.exercises)} exercises, "
        f"{len(merged.workouts) - len(state.workouts)} workouts, "
        f"{len(merged.templates) - len(state.templates)} templates and "
        f"{len(merged.targets) - len(state.targets)} targets"
    )
