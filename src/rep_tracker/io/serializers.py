"""
JSON serialization for tracker data models.

Handles conversion between dataclasses and JSON-compatible dicts. Calendar
days are stored as YYYY-MM-DD strings and timestamps as ISO 8601. Readers
also accept the camelCase keys used by older exports.
"""

import re
from datetime import date, datetime
from typing import Any

from ..core.dates import parse_day
from ..core.models import (
    TARGET_PERIODS,
    TARGET_TYPES,
    ConsistencyStats,
    CoverageResult,
    Exercise,
    MaxRepPoint,
    SetPositionStats,
    TargetProgress,
    TemplateEntry,
    TrackerState,
    Workout,
    WorkoutSet,
    WorkoutTarget,
    WorkoutTemplate,
    YearSummary,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(value: Any) -> date:
    """
    Validate a stored date and reduce it to a calendar day.

    Args:
        value: ISO date or datetime string

    Returns:
        The calendar day

    Raises:
        ValidationError: If the value is not an ISO date
    """
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date: {value!r}. Expected an ISO date string")
    try:
        return parse_day(value)
    except ValueError as e:
        raise ValidationError(f"Invalid date: {value}. Expected YYYY-MM-DD") from e


def validate_timestamp(value: Any) -> datetime:
    """
    Validate an ISO timestamp; a bare date means midnight.

    Raises:
        ValidationError: If the value is not ISO formatted
    """
    if not isinstance(value, str):
        raise ValidationError(f"Invalid timestamp: {value!r}")
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp: {value}") from e


def validate_non_empty(value: Any, name: str) -> str:
    """
    Validate that a value is a non-blank string.

    Raises:
        ValidationError: If value is missing or blank
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} must be a non-empty string, got {value!r}")
    return value


def validate_non_negative(value: Any, name: str) -> int:
    """
    Validate that an integer value is non-negative.

    Args:
        value: Value to check
        name: Field name for error message

    Returns:
        The value as int

    Raises:
        ValidationError: If value is not an integer or is negative
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return int(value)


def validate_positive(value: Any, name: str) -> int:
    """
    Validate that an integer value is positive.

    Raises:
        ValidationError: If value is not a positive integer
    """
    value = validate_non_negative(value, name)
    if value == 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def validate_choice(value: Any, choices: tuple[str, ...], name: str) -> str:
    """
    Validate that a value is one of a fixed set of strings.

    Raises:
        ValidationError: If value is not one of choices
    """
    if value not in choices:
        raise ValidationError(f"Invalid {name}: {value!r}. Must be one of: {', '.join(choices)}")
    return value


def _get(data: dict[str, Any], key: str, legacy: str | None = None, default: Any = None) -> Any:
    """Read a snake_case key, falling back to its camelCase spelling."""
    if key in data:
        return data[key]
    if legacy is not None and legacy in data:
        return data[legacy]
    return default


def _require(data: dict[str, Any], key: str, legacy: str | None = None) -> Any:
    value = _get(data, key, legacy)
    if value is None:
        raise ValidationError(f"Missing required field: {key}")
    return value


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Expected text, got {value!r}")
    return value or None


# =============================================================================
# Entities
# =============================================================================


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    """
    Convert Exercise to JSON-compatible dict.

    Args:
        exercise: Exercise to convert

    Returns:
        Dict representation
    """
    data: dict[str, Any] = {
        "id": exercise.id,
        "name": exercise.name,
        "category": exercise.category,
        "created_at": exercise.created_at.isoformat(),
    }
    if exercise.description:
        data["description"] = exercise.description
    return data


def dict_to_exercise(data: dict[str, Any]) -> Exercise:
    """
    Convert dict to Exercise.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        return Exercise(
            id=validate_non_empty(data.get("id"), "id"),
            name=validate_non_empty(data.get("name"), "name"),
            category=validate_non_empty(data.get("category"), "category"),
            created_at=validate_timestamp(_require(data, "created_at", "createdAt")),
            description=_optional_text(data.get("description")),
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def set_to_dict(workout_set: WorkoutSet) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": workout_set.id,
        "exercise_id": workout_set.exercise_id,
        "reps": workout_set.reps,
    }
    if workout_set.notes:
        data["notes"] = workout_set.notes
    return data


def dict_to_set(data: dict[str, Any]) -> WorkoutSet:
    """
    Convert dict to WorkoutSet.

    Raises:
        ValidationError: If data is invalid
    """
    return WorkoutSet(
        id=validate_non_empty(data.get("id"), "set id"),
        exercise_id=validate_non_empty(_require(data, "exercise_id", "exerciseId"), "exercise_id"),
        reps=validate_non_negative(_require(data, "reps"), "reps"),
        notes=_optional_text(data.get("notes")),
    )


def workout_to_dict(workout: Workout) -> dict[str, Any]:
    """
    Convert Workout to JSON-compatible dict.

    Args:
        workout: Workout to convert

    Returns:
        Dict representation; set order is preserved
    """
    data: dict[str, Any] = {
        "id": workout.id,
        "date": workout.date.isoformat(),
        "sets": [set_to_dict(s) for s in workout.sets],
    }
    if workout.notes:
        data["notes"] = workout.notes
    return data


def dict_to_workout(data: dict[str, Any]) -> Workout:
    """
    Convert dict to Workout.

    Timestamps are accepted and truncated to their calendar day.

    Raises:
        ValidationError: If data is invalid
    """
    sets = data.get("sets", [])
    if not isinstance(sets, list):
        raise ValidationError("Workout sets must be a list")
    return Workout(
        id=validate_non_empty(data.get("id"), "workout id"),
        date=validate_date(_require(data, "date")),
        sets=[dict_to_set(s) for s in sets],
        notes=_optional_text(data.get("notes")),
    )


def template_to_dict(template: WorkoutTemplate) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": template.id,
        "name": template.name,
        "exercises": [
            {"exercise_id": e.exercise_id, "sets": e.sets} for e in template.exercises
        ],
    }
    if template.created_at is not None:
        data["created_at"] = template.created_at.isoformat()
    return data


def dict_to_template(data: dict[str, Any]) -> WorkoutTemplate:
    """
    Convert dict to WorkoutTemplate.

    Raises:
        ValidationError: If data is invalid
    """
    entries = data.get("exercises", [])
    if not isinstance(entries, list):
        raise ValidationError("Template exercises must be a list")
    created = _get(data, "created_at", "createdAt")
    try:
        return WorkoutTemplate(
            id=validate_non_empty(data.get("id"), "template id"),
            name=validate_non_empty(data.get("name"), "template name"),
            exercises=[
                TemplateEntry(
                    exercise_id=validate_non_empty(
                        _require(e, "exercise_id", "exerciseId"), "exercise_id"
                    ),
                    sets=validate_positive(_require(e, "sets"), "sets"),
                )
                for e in entries
            ],
            created_at=validate_timestamp(created) if created is not None else None,
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def target_to_dict(target: WorkoutTarget) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": target.id,
        "name": target.name,
        "target_type": target.target_type,
        "target_value": target.target_value,
        "period": target.period,
        "is_active": target.is_active,
        "created_at": target.created_at.isoformat(),
    }
    if target.exercise_id is not None:
        data["exercise_id"] = target.exercise_id
    if target.category is not None:
        data["category"] = target.category
    return data


def dict_to_target(data: dict[str, Any]) -> WorkoutTarget:
    """
    Convert dict to WorkoutTarget.

    Raises:
        ValidationError: If data is invalid
    """
    is_active = _get(data, "is_active", "isActive", True)
    if not isinstance(is_active, bool):
        raise ValidationError(f"is_active must be a boolean, got {is_active!r}")
    return WorkoutTarget(
        id=validate_non_empty(data.get("id"), "target id"),
        name=validate_non_empty(data.get("name"), "target name"),
        target_type=validate_choice(
            _require(data, "target_type", "targetType"), TARGET_TYPES, "target_type"
        ),
        target_value=validate_positive(_require(data, "target_value", "targetValue"), "target_value"),
        period=validate_choice(_require(data, "period"), TARGET_PERIODS, "period"),
        created_at=validate_timestamp(_require(data, "created_at", "createdAt")),
        exercise_id=_optional_text(_get(data, "exercise_id", "exerciseId")),
        category=_optional_text(data.get("category")),
        is_active=is_active,
    )


ENTITY_WRITERS = {
    "exercises": exercise_to_dict,
    "workouts": workout_to_dict,
    "templates": template_to_dict,
    "targets": target_to_dict,
}

ENTITY_READERS = {
    "exercises": dict_to_exercise,
    "workouts": dict_to_workout,
    "templates": dict_to_template,
    "targets": dict_to_target,
}

COLLECTION_KEYS = tuple(ENTITY_WRITERS)


def state_to_dict(state: TrackerState) -> dict[str, Any]:
    """All four collections as one JSON-compatible dict."""
    return {key: [ENTITY_WRITERS[key](item) for item in getattr(state, key)] for key in COLLECTION_KEYS}


def dict_to_state(data: dict[str, Any]) -> TrackerState:
    """
    Convert an export document to TrackerState.

    Missing collections are treated as empty.

    Raises:
        ValidationError: If any collection or entity is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Export must be a JSON object")
    collections: dict[str, list] = {}
    for key in COLLECTION_KEYS:
        items = data.get(key, [])
        if not isinstance(items, list):
            raise ValidationError(f"'{key}' must be a list")
        collections[key] = [ENTITY_READERS[key](item) for item in items]
    return TrackerState(**collections)


# =============================================================================
# Derived results (for --json output)
# =============================================================================


def coverage_to_dict(result: CoverageResult) -> dict[str, Any]:
    return {
        "start": result.start.isoformat(),
        "end": result.end.isoformat(),
        "percentage": result.percentage,
        "workout_days": result.workout_days,
        "total_days": result.total_days,
    }


def max_rep_point_to_dict(point: MaxRepPoint) -> dict[str, Any]:
    return {
        "date": point.date.isoformat(),
        "max_reps": point.max_reps,
        "set_position": point.set_position,
    }


def year_summary_to_dict(summary: YearSummary) -> dict[str, Any]:
    return {
        "year": summary.year,
        "total_reps": summary.total_reps,
        "workout_days": summary.workout_days,
        "daily_average": summary.daily_average,
        "reps_per_day": summary.reps_per_day,
        "total_days": summary.total_days,
    }


def set_position_to_dict(stats: SetPositionStats) -> dict[str, Any]:
    return {
        "set_position": stats.set_position,
        "max_reps": stats.max_reps,
        "average_reps": stats.average_reps,
        "total_sets": stats.total_sets,
    }


def consistency_to_dict(stats: ConsistencyStats) -> dict[str, Any]:
    trend = stats.trend
    return {
        "workout_count": stats.workout_count,
        "median_rest_days": stats.median_rest_days,
        "pattern": stats.pattern,
        "trend": None
        if trend is None
        else {
            "direction": trend.direction,
            "change_pct": trend.change_pct,
            "earlier_median": trend.earlier_median,
            "recent_median": trend.recent_median,
        },
    }


def target_progress_to_dict(progress: TargetProgress) -> dict[str, Any]:
    return {
        "target_id": progress.target_id,
        "current_value": progress.current_value,
        "target_value": progress.target_value,
        "percentage": round(progress.percentage, 1),
        "raw_percentage": round(progress.raw_percentage, 1),
        "is_completed": progress.is_completed,
        "is_exceeded": progress.is_exceeded,
        "period_start": progress.period_start.isoformat(),
        "period_end": progress.period_end.isoformat(),
    }


# =============================================================================
# Command-line input
# =============================================================================


_SETS_X_REPS = re.compile(r"^\s*(\d+)\s*[xX×]\s*(\d+)\s*$")


def parse_reps_string(text: str) -> list[int]:
    """
    Parse a compact rep list typed on the command line.

    Accepted forms:
      - "10,8,8"  -> [10, 8, 8]
      - "10 8 8"  -> [10, 8, 8]
      - "3x10"    -> [10, 10, 10]  (sets x reps)

    Raises:
        ValidationError: If the text cannot be parsed or is empty
    """
    match = _SETS_X_REPS.match(text)
    if match:
        n_sets = int(match.group(1))
        if n_sets < 1:
            raise ValidationError(f"Set count must be at least 1: {text}")
        return [int(match.group(2))] * n_sets

    parts = [p for p in re.split(r"[,\s]+", text.strip()) if p]
    if not parts:
        raise ValidationError("No reps given")
    reps: list[int] = []
    for part in parts:
        if not part.isdecimal():
            raise ValidationError(f"Invalid rep count: {part!r}")
        reps.append(int(part))
    return reps
