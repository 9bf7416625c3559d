"""
Pure metric computation functions: totals and streaks.

All functions are pure and typed for testability. "now" is always passed
in; nothing here reads the clock.
"""

import math
from datetime import date, datetime
from typing import Iterable, Sequence

from .config import STREAK_WALK_LIMIT
from .dates import ONE_DAY, to_day
from .models import AggregateStats, Workout


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round half away from zero for non-negative display values.

    Python's round() uses banker's rounding (round(2.5) == 2); percentages
    and averages are shown rounded the conventional way (2.5 -> 3).

    Args:
        value: Value to round
        digits: Decimal places to keep

    Returns:
        Rounded value
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def workout_days(workouts: Iterable[Workout]) -> set[date]:
    """Distinct calendar days that contain a workout."""
    return {to_day(w.date) for w in workouts}


def workout_total_reps(workout: Workout) -> int:
    """
    Get total reps across all sets of a workout.

    Args:
        workout: Logged workout

    Returns:
        Sum of reps
    """
    return sum(s.reps for s in workout.sets)


def total_sets(workouts: Iterable[Workout]) -> int:
    """Count of all sets across all workouts."""
    return sum(len(w.sets) for w in workouts)


def total_reps(workouts: Iterable[Workout]) -> int:
    """Sum of all rep values across all sets in all workouts."""
    return sum(workout_total_reps(w) for w in workouts)


def current_streak(workouts: Sequence[Workout], now: date | datetime) -> int:
    """
    Count consecutive training days ending today or yesterday.

    If there is no workout today the walk starts from yesterday, so the
    streak is not shown as broken before the day is over. The walk goes
    back one day at a time and stops at the first day without a workout.

    The walk is capped at STREAK_WALK_LIMIT iterations, so the result never
    exceeds that value.

    Args:
        workouts: Logged workouts (any order)
        now: Evaluation time

    Returns:
        Current streak length in days
    """
    days = workout_days(workouts)
    if not days:
        return 0

    check = to_day(now)
    if check not in days:
        check -= ONE_DAY

    streak = 0
    for _ in range(STREAK_WALK_LIMIT):
        if check not in days:
            break
        streak += 1
        check -= ONE_DAY

    return streak


def longest_streak(workouts: Sequence[Workout]) -> int:
    """
    Length of the longest run of consecutive training days ever logged.

    Args:
        workouts: Logged workouts (any order)

    Returns:
        Longest streak in days, 0 for no workouts
    """
    days = sorted(workout_days(workouts))
    if not days:
        return 0

    longest = 1
    run = 1
    for prev, curr in zip(days, days[1:]):
        if (curr - prev).days == 1:
            run += 1
        else:
            longest = max(longest, run)
            run = 1

    return max(longest, run)


def compute_aggregate_stats(
    workouts: Sequence[Workout],
    now: date | datetime,
) -> AggregateStats:
    """
    Overall totals and streaks for the whole workout log.

    Args:
        workouts: Logged workouts (any order)
        now: Evaluation time

    Returns:
        AggregateStats; all zeros for an empty log
    """
    return AggregateStats(
        total_workouts=len(workouts),
        total_sets=total_sets(workouts),
        total_reps=total_reps(workouts),
        current_streak=current_streak(workouts, now),
        longest_streak=longest_streak(workouts),
    )


def last_workout(workouts: Sequence[Workout]) -> Workout | None:
    """Most recent workout by date, or None."""
    if not workouts:
        return None
    return max(workouts, key=lambda w: w.date)


def sorted_newest_first(workouts: Iterable[Workout]) -> list[Workout]:
    """Workouts ordered by date, newest first."""
    return sorted(workouts, key=lambda w: w.date, reverse=True)
