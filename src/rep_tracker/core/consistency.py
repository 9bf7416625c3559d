"""
Consistency classification: how evenly spaced the training sessions of a
category (or single exercise) are.

The analysis looks at the gaps, in days, between consecutive training days
inside a trailing window:

    dispersion = pstdev(gaps) / median(gaps)

    dispersion < 0.4  -> Stable
    dispersion < 0.8  -> Variable
    otherwise         -> Irregular

With fewer than MIN_GAPS_FOR_SPREAD gaps the spread says little, so a
median gap longer than LARGE_GAP_DAYS is classified Irregular outright.
Fewer than two training days give no pattern at all (None), which is a
different outcome from Irregular.

Trend compares the median gap of the first half of the window's gaps with
the second half; a recent median more than 10% shorter is "improving".
"""

import math
import statistics
from datetime import date, datetime
from typing import Sequence

from .config import (
    CONSISTENCY_WINDOW_MONTHS,
    LARGE_GAP_DAYS,
    MIN_GAPS_FOR_SPREAD,
    MIN_GAPS_FOR_TREND,
    MIN_WORKOUTS_FOR_PATTERN,
    STABLE_CV_THRESHOLD,
    TREND_CHANGE_THRESHOLD_PCT,
    VARIABLE_CV_THRESHOLD,
)
from .dates import shift_months, to_day
from .metrics import round_half_up
from .models import ConsistencyStats, ConsistencyTrend, Exercise, Pattern, Scope, Workout


def rest_gaps(days: Sequence[date]) -> list[int]:
    """
    Gaps in days between consecutive training days.

    Args:
        days: Training days (duplicates and order do not matter)

    Returns:
        len(unique days) - 1 gaps, oldest first
    """
    ordered = sorted(set(days))
    return [(b - a).days for a, b in zip(ordered, ordered[1:])]


def median(values: Sequence[float]) -> float:
    """Median; even-length inputs average the two middle values."""
    if not values:
        raise ValueError("median of empty sequence")
    return float(statistics.median(values))


def dispersion(gaps: Sequence[int]) -> float:
    """Population standard deviation of the gaps relative to their median."""
    mid = median(gaps)
    if mid <= 0:
        return 0.0
    return statistics.pstdev(gaps) / mid


def classify_pattern(
    gaps: Sequence[int],
    stable_cv: float = STABLE_CV_THRESHOLD,
    variable_cv: float = VARIABLE_CV_THRESHOLD,
) -> Pattern | None:
    """
    Classify a list of rest gaps as Stable, Variable, or Irregular.

    Args:
        gaps: Rest gaps in days
        stable_cv: Dispersion below which the pattern is Stable
        variable_cv: Dispersion below which the pattern is Variable

    Returns:
        Pattern label, or None for an empty gap list
    """
    if not gaps:
        return None

    if len(gaps) < MIN_GAPS_FOR_SPREAD and median(gaps) > LARGE_GAP_DAYS:
        return "Irregular"

    spread = dispersion(gaps)
    if spread < stable_cv:
        return "Stable"
    if spread < variable_cv:
        return "Variable"
    return "Irregular"


def consistency_trend(
    gaps: Sequence[int],
    threshold_pct: float = TREND_CHANGE_THRESHOLD_PCT,
) -> ConsistencyTrend | None:
    """
    Compare earlier rest gaps with recent ones.

    Args:
        gaps: Rest gaps in days, oldest first
        threshold_pct: Minimum absolute % change to call a direction

    Returns:
        ConsistencyTrend, or None with fewer than two gaps
    """
    if len(gaps) < MIN_GAPS_FOR_TREND:
        return None

    half = len(gaps) // 2
    earlier = median(gaps[:half])
    recent = median(gaps[half:])
    change = (recent - earlier) / earlier * 100 if earlier > 0 else 0.0

    if change < -threshold_pct:
        direction = "improving"
    elif change > threshold_pct:
        direction = "declining"
    else:
        direction = "stable"

    return ConsistencyTrend(
        direction=direction,
        change_pct=math.copysign(round_half_up(abs(change), 1), change),
        earlier_median=earlier,
        recent_median=recent,
    )


def scope_days(
    workouts: Sequence[Workout],
    exercises: Sequence[Exercise],
    scope: Scope,
    since: date,
    until: date,
) -> list[date]:
    """Sorted distinct days in [since, until] with at least one set in scope."""
    categories = {e.id: e.category for e in exercises}
    days = {
        to_day(w.date)
        for w in workouts
        if since <= to_day(w.date) <= until
        and any(scope.matches(s, categories) for s in w.sets)
    }
    return sorted(days)


def compute_consistency(
    workouts: Sequence[Workout],
    exercises: Sequence[Exercise],
    scope: Scope,
    now: date | datetime,
    window_months: int = CONSISTENCY_WINDOW_MONTHS,
    stable_cv: float = STABLE_CV_THRESHOLD,
    variable_cv: float = VARIABLE_CV_THRESHOLD,
    trend_threshold_pct: float = TREND_CHANGE_THRESHOLD_PCT,
) -> ConsistencyStats:
    """
    Rest-interval analysis for one scope over a trailing window.

    Args:
        workouts: Logged workouts
        exercises: Exercise catalog (for category scopes)
        scope: Category or exercise to analyse
        now: Evaluation time
        window_months: Trailing window in months
        stable_cv: Stable threshold (see classify_pattern)
        variable_cv: Variable threshold (see classify_pattern)
        trend_threshold_pct: Minimum % change in median rest to report a trend

    Returns:
        ConsistencyStats; with fewer than two training days the median,
        pattern, and trend are all None
    """
    today = to_day(now)
    days = scope_days(workouts, exercises, scope, shift_months(today, -window_months), today)

    if len(days) < MIN_WORKOUTS_FOR_PATTERN:
        return ConsistencyStats(
            workout_count=len(days), median_rest_days=None, pattern=None, trend=None
        )

    gaps = rest_gaps(days)
    return ConsistencyStats(
        workout_count=len(days),
        median_rest_days=round_half_up(median(gaps), 1),
        pattern=classify_pattern(gaps, stable_cv, variable_cv),
        trend=consistency_trend(gaps, trend_threshold_pct),
    )


def category_consistency(
    workouts: Sequence[Workout],
    exercises: Sequence[Exercise],
    now: date | datetime,
    window_months: int = CONSISTENCY_WINDOW_MONTHS,
    stable_cv: float = STABLE_CV_THRESHOLD,
    variable_cv: float = VARIABLE_CV_THRESHOLD,
    trend_threshold_pct: float = TREND_CHANGE_THRESHOLD_PCT,
) -> dict[str, ConsistencyStats]:
    """
    ConsistencyStats for every category present in the catalog.

    Returns:
        {category: ConsistencyStats}, categories in alphabetical order
    """
    categories = sorted({e.category for e in exercises})
    return {
        category: compute_consistency(
            workouts,
            exercises,
            Scope(category=category),
            now,
            window_months=window_months,
            stable_cv=stable_cv,
            variable_cv=variable_cv,
            trend_threshold_pct=trend_threshold_pct,
        )
        for category in categories
    }
