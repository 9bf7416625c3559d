"""
Operations on the persisted collections.

Every function returns fresh collections and leaves its inputs untouched;
the caller decides when to persist the result. Drafts coming from the
presentation layer enter here only at commit time.
"""

import logging
from collections import Counter
from dataclasses import replace
from datetime import date, datetime
from typing import Sequence

from .config import UNKNOWN_EXERCISE_NAME
from .dates import to_day
from .engine.config_loader import load_default_exercise_specs
from .models import (
    DraftSet,
    Exercise,
    ImportBatch,
    ImportSingle,
    TemplateEntry,
    TemplateImport,
    TrackerState,
    Workout,
    WorkoutDraft,
    WorkoutSet,
    WorkoutTarget,
    WorkoutTemplate,
    new_id,
)

logger = logging.getLogger(__name__)


# =============================================================================
# EXERCISES
# =============================================================================


def default_exercises(now: datetime) -> list[Exercise]:
    """Bundled starter catalog with fresh ids."""
    return [
        Exercise(
            id=new_id(),
            name=spec["name"],
            category=spec["category"],
            description=spec.get("description"),
            created_at=now,
        )
        for spec in load_default_exercise_specs()
    ]


def find_exercise(exercises: Sequence[Exercise], exercise_id: str) -> Exercise | None:
    """Exercise with the given id, or None."""
    for exercise in exercises:
        if exercise.id == exercise_id:
            return exercise
    return None


def exercise_name(exercises: Sequence[Exercise], exercise_id: str) -> str:
    """Display name for an exercise id; dangling ids show as Unknown Exercise."""
    exercise = find_exercise(exercises, exercise_id)
    return exercise.name if exercise is not None else UNKNOWN_EXERCISE_NAME


def resolve_exercise(exercises: Sequence[Exercise], key: str) -> Exercise | None:
    """
    Look an exercise up by id, then by case-insensitive name.

    Args:
        exercises: Catalog
        key: Id or name typed by the user

    Returns:
        Matching Exercise or None
    """
    found = find_exercise(exercises, key)
    if found is not None:
        return found
    lowered = key.strip().lower()
    for exercise in exercises:
        if exercise.name.lower() == lowered:
            return exercise
    return None


def add_exercise(
    exercises: Sequence[Exercise],
    name: str,
    category: str,
    now: datetime,
    description: str | None = None,
) -> tuple[list[Exercise], Exercise]:
    """Append a new exercise; returns (new catalog, created exercise)."""
    exercise = Exercise(
        id=new_id(),
        name=name.strip(),
        category=category.strip(),
        description=description,
        created_at=now,
    )
    return [*exercises, exercise], exercise


def edit_exercise(
    exercises: Sequence[Exercise],
    exercise_id: str,
    name: str | None = None,
    category: str | None = None,
    description: str | None = None,
) -> list[Exercise]:
    """
    Change name, category, or description of one exercise.

    Raises:
        KeyError: If the exercise does not exist
    """
    if find_exercise(exercises, exercise_id) is None:
        raise KeyError(exercise_id)

    updated: list[Exercise] = []
    for exercise in exercises:
        if exercise.id == exercise_id:
            exercise = replace(
                exercise,
                name=name.strip() if name is not None else exercise.name,
                category=category.strip() if category is not None else exercise.category,
                description=description if description is not None else exercise.description,
            )
        updated.append(exercise)
    return updated


def delete_exercise(state: TrackerState, exercise_id: str) -> TrackerState:
    """
    Remove an exercise and everything that only existed because of it.

    - sets of the exercise are stripped from every workout; workouts left
      with no sets are dropped
    - template entries for it are stripped; empty templates are dropped
    - targets are kept; one naming the exercise resolves to "Unknown Exercise"
      and reports no progress

    Sibling sets of other exercises are kept in their original order.
    """
    workouts: list[Workout] = []
    for workout in state.workouts:
        kept = [s for s in workout.sets if s.exercise_id != exercise_id]
        if kept:
            workouts.append(replace(workout, sets=kept))

    templates: list[WorkoutTemplate] = []
    for template in state.templates:
        entries = [e for e in template.exercises if e.exercise_id != exercise_id]
        if entries:
            templates.append(replace(template, exercises=entries))

    logger.info(
        "Deleted exercise %s: %d workout(s) and %d template(s) removed",
        exercise_id,
        len(state.workouts) - len(workouts),
        len(state.templates) - len(templates),
    )

    return TrackerState(
        exercises=[e for e in state.exercises if e.id != exercise_id],
        workouts=workouts,
        templates=templates,
        targets=list(state.targets),
    )


# =============================================================================
# WORKOUTS
# =============================================================================


def find_workout_for_day(workouts: Sequence[Workout], day: date | datetime) -> Workout | None:
    """The workout logged on a calendar day, or None."""
    target = to_day(day)
    for workout in workouts:
        if to_day(workout.date) == target:
            return workout
    return None


def commit_draft(
    workouts: Sequence[Workout],
    draft: WorkoutDraft,
    day: date | datetime,
) -> tuple[list[Workout], Workout]:
    """
    Save a draft as the workout for a day.

    There is at most one workout per calendar day: if one exists its sets
    and notes are replaced by the draft (keeping its id), otherwise a new
    workout is appended.

    Args:
        workouts: Current workout log
        draft: Sets and notes entered by the user
        day: Calendar day the workout belongs to

    Returns:
        (new workout log, saved workout)

    Raises:
        ValueError: If the draft has no sets
    """
    if not draft.sets:
        raise ValueError("Cannot save a workout with no sets")

    sets = [
        WorkoutSet(id=new_id(), exercise_id=d.exercise_id, reps=d.reps, notes=d.notes)
        for d in draft.sets
    ]
    notes = draft.notes.strip() if draft.notes and draft.notes.strip() else None

    existing = find_workout_for_day(workouts, day)
    if existing is not None:
        saved = replace(existing, sets=sets, notes=notes)
        return [saved if w.id == existing.id else w for w in workouts], saved

    saved = Workout(id=new_id(), date=to_day(day), sets=sets, notes=notes)
    return [*workouts, saved], saved


def draft_from_workout(workout: Workout) -> WorkoutDraft:
    """Editable draft pre-filled with a logged workout."""
    return WorkoutDraft(
        sets=[DraftSet(exercise_id=s.exercise_id, reps=s.reps, notes=s.notes) for s in workout.sets],
        notes=workout.notes,
    )


def delete_workout(workouts: Sequence[Workout], workout_id: str) -> list[Workout]:
    """
    Remove one workout.

    Raises:
        KeyError: If no workout has that id
    """
    kept = [w for w in workouts if w.id != workout_id]
    if len(kept) == len(workouts):
        raise KeyError(workout_id)
    return kept


# =============================================================================
# TEMPLATES
# =============================================================================


def draft_from_template(template: WorkoutTemplate) -> WorkoutDraft:
    """A draft with one zero-rep set per planned set of the template."""
    return WorkoutDraft(
        sets=[
            DraftSet(exercise_id=entry.exercise_id)
            for entry in template.exercises
            for _ in range(entry.sets)
        ]
    )


def template_from_draft(name: str, draft: WorkoutDraft, now: datetime) -> WorkoutTemplate:
    """
    Build a template from the sets of a draft.

    Sets are counted per exercise; exercises keep the order in which they
    first appear.
    """
    counts = Counter(d.exercise_id for d in draft.sets)
    order = list(dict.fromkeys(d.exercise_id for d in draft.sets))
    return WorkoutTemplate(
        id=new_id(),
        name=name.strip(),
        exercises=[TemplateEntry(exercise_id=ex_id, sets=counts[ex_id]) for ex_id in order],
        created_at=now,
    )


def add_templates(
    templates: Sequence[WorkoutTemplate],
    payload: TemplateImport,
) -> list[WorkoutTemplate]:
    """
    Add one template or a batch of templates.

    Templates whose id already exists are skipped.
    """
    if isinstance(payload, ImportSingle):
        incoming = [payload.template]
    elif isinstance(payload, ImportBatch):
        incoming = list(payload.templates)
    else:
        raise TypeError(f"Unsupported template import: {type(payload).__name__}")

    known = {t.id for t in templates}
    added = [t for t in incoming if t.id not in known]
    logger.debug("Adding %d template(s), skipped %d", len(added), len(incoming) - len(added))
    return [*templates, *added]


def edit_template(
    templates: Sequence[WorkoutTemplate],
    template_id: str,
    name: str | None = None,
    exercises: list[TemplateEntry] | None = None,
) -> list[WorkoutTemplate]:
    """
    Rename a template or replace its entries.

    Raises:
        KeyError: If the template does not exist
    """
    if not any(t.id == template_id for t in templates):
        raise KeyError(template_id)
    return [
        replace(
            t,
            name=name.strip() if name is not None else t.name,
            exercises=exercises if exercises is not None else t.exercises,
        )
        if t.id == template_id
        else t
        for t in templates
    ]


def delete_template(templates: Sequence[WorkoutTemplate], template_id: str) -> list[WorkoutTemplate]:
    """Remove a template; workouts created from it are not affected."""
    kept = [t for t in templates if t.id != template_id]
    if len(kept) == len(templates):
        raise KeyError(template_id)
    return kept


# =============================================================================
# TARGETS
# =============================================================================


def add_target(targets: Sequence[WorkoutTarget], target: WorkoutTarget) -> list[WorkoutTarget]:
    return [*targets, target]


def edit_target(
    targets: Sequence[WorkoutTarget],
    target_id: str,
    **changes,
) -> list[WorkoutTarget]:
    """
    Apply field changes to one target (validated by WorkoutTarget).

    Raises:
        KeyError: If the target does not exist
    """
    if not any(t.id == target_id for t in targets):
        raise KeyError(target_id)
    return [replace(t, **changes) if t.id == target_id else t for t in targets]


def delete_target(targets: Sequence[WorkoutTarget], target_id: str) -> list[WorkoutTarget]:
    kept = [t for t in targets if t.id != target_id]
    if len(kept) == len(targets):
        raise KeyError(target_id)
    return kept


# =============================================================================
# IMPORT
# =============================================================================


def merge_import(state: TrackerState, imported: TrackerState) -> TrackerState:
    """
    Additively merge an imported snapshot into the current state.

    Entities whose id is already present are skipped. An imported workout
    on a day that already has a workout contributes its sets to the
    existing workout (new set ids are skipped if already present), so the
    one-workout-per-day rule holds after the merge.
    """
    exercise_ids = {e.id for e in state.exercises}
    exercises = [*state.exercises, *(e for e in imported.exercises if e.id not in exercise_ids)]

    workouts = list(state.workouts)
    workout_ids = {w.id for w in workouts}
    for incoming in sorted(imported.workouts, key=lambda w: w.date):
        if incoming.id in workout_ids:
            continue
        existing = find_workout_for_day(workouts, incoming.date)
        if existing is None:
            workouts.append(incoming)
            workout_ids.add(incoming.id)
            continue
        set_ids = {s.id for s in existing.sets}
        extra = [s for s in incoming.sets if s.id not in set_ids]
        merged = replace(existing, sets=[*existing.sets, *extra])
        workouts = [merged if w.id == existing.id else w for w in workouts]

    templates = add_templates(state.templates, ImportBatch(tuple(imported.templates)))

    target_ids = {t.id for t in state.targets}
    targets = [*state.targets, *(t for t in imported.targets if t.id not in target_ids)]

    logger.info(
        "Imported %d exercise(s), %d workout(s), %d template(s), %d target(s)",
        len(exercises) - len(state.exercises),
        len(workouts) - len(state.workouts),
        len(templates) - len(state.templates),
        len(targets) - len(state.targets),
    )
    return TrackerState(exercises=exercises, workouts=workouts, templates=templates, targets=targets)
