"""
Target progress evaluation.

Progress is recomputed from the workout log for the target's current
period every time; it is never stored on the target.
"""

from datetime import date, datetime
from typing import Sequence

from .config import MAX_PERCENTAGE
from .dates import month_start, to_day, week_start, year_start
from .models import Exercise, TargetPeriod, TargetProgress, Workout, WorkoutTarget


def period_window(period: TargetPeriod, now: date | datetime) -> tuple[date, date]:
    """
    First and last day of the current period, both inclusive.

    The window ends today: workouts dated in the future do not count yet.

    Args:
        period: "daily", "weekly" (ISO week), "monthly", or "yearly"
        now: Evaluation time

    Returns:
        (start, today)
    """
    today = to_day(now)
    if period == "daily":
        return today, today
    if period == "weekly":
        return week_start(today), today
    if period == "monthly":
        return month_start(today), today
    if period == "yearly":
        return year_start(today), today
    raise ValueError(f"Invalid period: {period}")


def target_current_value(
    target: WorkoutTarget,
    workouts: Sequence[Workout],
    exercises: Sequence[Exercise],
    start: date,
    end: date,
) -> int:
    """
    Sets counted or reps summed for a target between start and end.

    A target naming an exercise counts only that exercise; one naming a
    category counts sets whose exercise is in that category; otherwise all
    sets count.
    """
    scope = target.scope
    categories = {e.id: e.category for e in exercises}
    value = 0
    for workout in workouts:
        if not start <= to_day(workout.date) <= end:
            continue
        for s in workout.sets:
            if not scope.matches(s, categories):
                continue
            value += 1 if target.target_type == "sets" else s.reps
    return value


def evaluate_target(
    target: WorkoutTarget,
    workouts: Sequence[Workout],
    exercises: Sequence[Exercise],
    now: date | datetime,
) -> TargetProgress:
    """
    Live progress of a target for its current period.

    Args:
        target: Target to evaluate
        workouts: Logged workouts
        exercises: Exercise catalog
        now: Evaluation time

    Returns:
        TargetProgress; percentage is capped at 100 while raw_percentage
        keeps the uncapped value
    """
    start, end = period_window(target.period, now)
    current = target_current_value(target, workouts, exercises, start, end)
    raw = current / target.target_value * 100

    return TargetProgress(
        target_id=target.id,
        current_value=current,
        target_value=target.target_value,
        percentage=min(raw, MAX_PERCENTAGE),
        raw_percentage=raw,
        is_completed=current >= target.target_value,
        is_exceeded=current > target.target_value,
        period_start=start,
        period_end=end,
    )


def evaluate_targets(
    targets: Sequence[WorkoutTarget],
    workouts: Sequence[Workout],
    exercises: Sequence[Exercise],
    now: date | datetime,
    active_only: bool = True,
) -> list[tuple[WorkoutTarget, TargetProgress]]:
    """Evaluate every (active) target, in collection order."""
    return [
        (t, evaluate_target(t, workouts, exercises, now))
        for t in targets
        if t.is_active or not active_only
    ]
