"""
Per-exercise progression: personal-record timelines, year-over-year
comparison, and per-set-position guidance.
"""

from datetime import date, datetime
from typing import Iterator, Sequence

from .config import MAX_REP_WINDOW_YEARS, SET_POSITION_WINDOW_MONTHS
from .dates import days_in_year, shift_months, shift_years, to_day
from .metrics import round_half_up
from .models import (
    Exercise,
    MaxRepPoint,
    Scope,
    SetPositionStats,
    Workout,
    YearOverYear,
    YearSummary,
)


class MaxRepSeries:
    """
    Running-maximum step series for one exercise.

    Iterating yields a MaxRepPoint each time a workout's best set strictly
    beats every earlier workout in the window. The series is lazy and can be
    iterated any number of times; it holds its own copy of the input list.
    """

    def __init__(
        self,
        workouts: Sequence[Workout],
        exercise_id: str,
        window_start: date,
        window_end: date,
    ):
        self.exercise_id = exercise_id
        self.window_start = window_start
        self.window_end = window_end
        self._workouts = tuple(workouts)

    def __iter__(self) -> Iterator[MaxRepPoint]:
        relevant = sorted(
            (
                w for w in self._workouts
                if self.window_start <= to_day(w.date) <= self.window_end
                and any(s.exercise_id == self.exercise_id for s in w.sets)
            ),
            key=lambda w: w.date,
        )

        running_max = 0
        for workout in relevant:
            reps = [s.reps for s in workout.sets if s.exercise_id == self.exercise_id]
            best = max(reps)
            if best > running_max:
                running_max = best
                yield MaxRepPoint(
                    date=to_day(workout.date),
                    max_reps=best,
                    set_position=reps.index(best) + 1,
                )

    def latest(self) -> MaxRepPoint | None:
        """The current personal record, or None if nothing was logged."""
        last = None
        for last in self:
            pass
        return last


def compute_max_rep_series(
    workouts: Sequence[Workout],
    exercise_id: str,
    now: date | datetime,
    window_years: int = MAX_REP_WINDOW_YEARS,
) -> MaxRepSeries:
    """
    Personal-record timeline for an exercise over the last N years.

    Args:
        workouts: Logged workouts
        exercise_id: Exercise to track
        now: Evaluation time; the window is [now - window_years, today]
        window_years: Lookback in years

    Returns:
        MaxRepSeries (non-decreasing in max_reps)
    """
    today = to_day(now)
    return MaxRepSeries(workouts, exercise_id, shift_years(today, -window_years), today)


def max_rep_chart_points(series: MaxRepSeries) -> list[MaxRepPoint]:
    """
    Points for an area/line chart of a max-rep series.

    Adds a zero point at the window start and a point at the window end
    holding the last known max, so the chart covers the whole window.

    Returns:
        Chart points, or [] when the series is empty
    """
    points = list(series)
    if not points:
        return []

    chart = [MaxRepPoint(date=series.window_start, max_reps=0, set_position=0)]
    chart.extend(points)
    last = points[-1]
    if last.date != series.window_end:
        chart.append(
            MaxRepPoint(date=series.window_end, max_reps=last.max_reps, set_position=last.set_position)
        )
    return chart


def _year_summary(
    workouts: Sequence[Workout],
    scope: Scope,
    categories: dict[str, str],
    year: int,
    total_days: int,
) -> YearSummary:
    reps = 0
    days: set[date] = set()
    for workout in workouts:
        day = to_day(workout.date)
        if day.year != year:
            continue
        matched = [s for s in workout.sets if scope.matches(s, categories)]
        if not matched:
            continue
        days.add(day)
        reps += sum(s.reps for s in matched)

    return YearSummary(
        year=year,
        total_reps=reps,
        workout_days=len(days),
        daily_average=round_half_up(reps / len(days), 1) if days else 0.0,
        reps_per_day=round_half_up(reps / total_days, 1) if total_days > 0 else 0.0,
        total_days=total_days,
    )


def compute_year_over_year(
    workouts: Sequence[Workout],
    scope: Scope | str | None,
    now: date | datetime,
    exercises: Sequence[Exercise] = (),
) -> YearOverYear:
    """
    Compare the current year-to-date with the whole previous year.

    reps_per_day divides by calendar days (rest days included): elapsed
    days for the current year, 365/366 for the prior year, so the two are
    directly comparable.

    Args:
        workouts: Logged workouts
        scope: A Scope, an exercise id, or None for every set
        now: Evaluation time
        exercises: Catalog, needed for category scopes

    Returns:
        YearOverYear
    """
    if scope is None:
        scope = Scope()
    elif isinstance(scope, str):
        scope = Scope(exercise_id=scope)

    today = to_day(now)
    categories = {e.id: e.category for e in exercises}
    elapsed = (today - date(today.year, 1, 1)).days + 1
    last = today.year - 1

    return YearOverYear(
        current_year=_year_summary(workouts, scope, categories, today.year, elapsed),
        last_year=_year_summary(workouts, scope, categories, last, days_in_year(last)),
    )


def _position_reps(
    workouts: Sequence[Workout],
    exercise_id: str,
    since: date,
    until: date,
) -> dict[int, list[int]]:
    """Reps logged at each 1-based set position of an exercise."""
    by_position: dict[int, list[int]] = {}
    for workout in workouts:
        if not since <= to_day(workout.date) <= until:
            continue
        for position, s in enumerate(workout.sets_for(exercise_id), 1):
            by_position.setdefault(position, []).append(s.reps)
    return by_position


def _position_stats(position: int, reps: list[int]) -> SetPositionStats:
    if not reps:
        return SetPositionStats(set_position=position, max_reps=0, average_reps=0.0, total_sets=0)
    return SetPositionStats(
        set_position=position,
        max_reps=max(reps),
        average_reps=round_half_up(sum(reps) / len(reps), 1),
        total_sets=len(reps),
    )


def compute_set_position_stats(
    workouts: Sequence[Workout],
    exercise_id: str,
    set_position: int,
    now: date | datetime,
    window_months: int = SET_POSITION_WINDOW_MONTHS,
) -> SetPositionStats:
    """
    Max and average reps achieved in the Nth set of an exercise.

    Args:
        workouts: Logged workouts
        exercise_id: Exercise to inspect
        set_position: 1-based set position within a workout
        now: Evaluation time
        window_months: Trailing window in months

    Returns:
        SetPositionStats; zeros when that position was never reached
    """
    if set_position < 1:
        raise ValueError("set_position must be at least 1")
    today = to_day(now)
    by_position = _position_reps(workouts, exercise_id, shift_months(today, -window_months), today)
    return _position_stats(set_position, by_position.get(set_position, []))


def all_set_position_stats(
    workouts: Sequence[Workout],
    exercise_id: str,
    now: date | datetime,
    window_months: int = SET_POSITION_WINDOW_MONTHS,
) -> list[SetPositionStats]:
    """SetPositionStats for every position logged in the window, in order."""
    today = to_day(now)
    by_position = _position_reps(workouts, exercise_id, shift_months(today, -window_months), today)
    return [_position_stats(pos, by_position[pos]) for pos in sorted(by_position)]
