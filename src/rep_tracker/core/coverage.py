"""
Calendar coverage: the share of elapsed days in a period that were
training days, plus the per-day and per-category activity breakdowns
shown alongside it.

Future days inside a period never count toward the denominator, so a
week in progress is divided by the days elapsed so far.
"""

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Sequence

from .dates import (
    enumerate_days,
    month_end,
    month_start,
    to_day,
    week_start,
    year_end,
    year_start,
)
from .metrics import round_half_up, workout_days
from .models import CoverageResult, DailyActivity, Exercise, ExerciseUsage, Workout


def coverage_breakdown(
    workouts: Sequence[Workout],
    start: date | datetime,
    end: date | datetime,
    now: date | datetime,
) -> CoverageResult:
    """
    Count training days in [start, min(end, today)].

    Args:
        workouts: Logged workouts
        start: First day of the period
        end: Nominal last day of the period
        now: Evaluation time; days after today are ignored

    Returns:
        CoverageResult with a 0-100 percentage rounded to the nearest integer.
        A period that has not started yet yields 0 of 0 days (0%).

    Raises:
        InvalidRangeError: If start is after end
    """
    first, last = to_day(start), to_day(end)
    enumerate_days(first, last)  # validates the nominal range
    effective_end = min(last, to_day(now))

    if first > effective_end:
        return CoverageResult(
            start=first, end=effective_end, percentage=0, workout_days=0, total_days=0
        )

    trained = workout_days(workouts)
    days = enumerate_days(first, effective_end)
    covered = sum(1 for d in days if d in trained)
    total = len(days)

    return CoverageResult(
        start=first,
        end=effective_end,
        percentage=int(round_half_up(covered / total * 100)),
        workout_days=covered,
        total_days=total,
    )


def compute_coverage(
    workouts: Sequence[Workout],
    start: date | datetime,
    end: date | datetime,
    now: date | datetime,
) -> int:
    """Percentage (0-100) of elapsed days in [start, end] with a workout."""
    return coverage_breakdown(workouts, start, end, now).percentage


def current_week_coverage(workouts: Sequence[Workout], now: date | datetime) -> CoverageResult:
    """Coverage of the current ISO week (Monday to today)."""
    monday = week_start(now)
    return coverage_breakdown(workouts, monday, monday + timedelta(days=6), now)


def current_month_coverage(workouts: Sequence[Workout], now: date | datetime) -> CoverageResult:
    """Coverage of the current calendar month up to today."""
    return coverage_breakdown(workouts, month_start(now), month_end(now), now)


def current_year_coverage(workouts: Sequence[Workout], now: date | datetime) -> CoverageResult:
    """Coverage of the current calendar year up to today."""
    return coverage_breakdown(workouts, year_start(now), year_end(now), now)


def monthly_coverage(
    workouts: Sequence[Workout],
    year: int,
    now: date | datetime,
) -> list[CoverageResult]:
    """
    Coverage of each month of a year, January first.

    Months that have not started by today are omitted; the current month
    is capped at today, every other month uses its full length.

    Args:
        workouts: Logged workouts
        year: Calendar year
        now: Evaluation time

    Returns:
        One CoverageResult per started month
    """
    today = to_day(now)
    results: list[CoverageResult] = []
    for month in range(1, 13):
        first = date(year, month, 1)
        if first > today:
            break
        results.append(coverage_breakdown(workouts, first, month_end(first), today))
    return results


def available_years(workouts: Sequence[Workout]) -> list[int]:
    """Distinct years with at least one workout, newest first."""
    return sorted({to_day(w.date).year for w in workouts}, reverse=True)


def yearly_coverage(workouts: Sequence[Workout], now: date | datetime) -> list[CoverageResult]:
    """
    Coverage of every year that appears in the workout history.

    The current year is capped at today; past years use all 365/366 days.

    Returns:
        One CoverageResult per year, newest first
    """
    return [
        coverage_breakdown(workouts, date(year, 1, 1), date(year, 12, 31), now)
        for year in available_years(workouts)
    ]


def daily_activity(
    workouts: Sequence[Workout],
    now: date | datetime,
    days: int = 7,
) -> list[DailyActivity]:
    """
    Sets and reps for each of the last N days, oldest first.

    Days without a workout are reported with zero sets and reps.
    """
    today = to_day(now)
    by_day: dict[date, Workout] = {to_day(w.date): w for w in workouts}
    result: list[DailyActivity] = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        workout = by_day.get(day)
        result.append(
            DailyActivity(
                date=day,
                sets=len(workout.sets) if workout else 0,
                reps=workout.total_reps if workout else 0,
            )
        )
    return result


def category_set_counts(
    workouts: Sequence[Workout],
    exercises: Sequence[Exercise],
    start: date | datetime,
    end: date | datetime,
) -> dict[str, int]:
    """
    Number of sets per category logged in [start, end].

    Sets referencing an exercise missing from the catalog are skipped.

    Raises:
        InvalidRangeError: If start is after end
    """
    window = enumerate_days(start, end)
    categories = {e.id: e.category for e in exercises}
    counts: Counter[str] = Counter()
    for workout in workouts:
        if workout.date not in window:
            continue
        for s in workout.sets:
            category = categories.get(s.exercise_id)
            if category is not None:
                counts[category] += 1
    return dict(counts)


def exercise_usage(
    workouts: Sequence[Workout],
    exercises: Sequence[Exercise],
    year: int | None = None,
) -> list[ExerciseUsage]:
    """
    Set counts per exercise, most used first.

    Args:
        workouts: Logged workouts
        exercises: Exercise catalog
        year: Restrict to one calendar year (None = all time)

    Returns:
        ExerciseUsage list; exercises missing from the catalog are left out
    """
    by_id = {e.id: e for e in exercises}
    counts: Counter[str] = Counter()
    for workout in workouts:
        if year is not None and to_day(workout.date).year != year:
            continue
        for s in workout.sets:
            counts[s.exercise_id] += 1

    usage = [
        ExerciseUsage(exercise=by_id[ex_id], set_count=n)
        for ex_id, n in counts.items()
        if ex_id in by_id
    ]
    usage.sort(key=lambda u: (-u.set_count, u.exercise.name))
    return usage
