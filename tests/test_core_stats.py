"""
Unit tests for the statistics engine.

Expected values are hand-computed in comments so the tests double as
worked examples. Every test injects "now"; nothing reads the clock.
"""

from datetime import date, datetime, timedelta

import pytest

from rep_tracker.core.config import STREAK_WALK_LIMIT
from rep_tracker.core.consistency import (
    category_consistency,
    classify_pattern,
    compute_consistency,
    consistency_trend,
    dispersion,
    rest_gaps,
)
from rep_tracker.core.coverage import (
    category_set_counts,
    compute_coverage,
    coverage_breakdown,
    current_week_coverage,
    daily_activity,
    exercise_usage,
    monthly_coverage,
    yearly_coverage,
)
from rep_tracker.core.dates import (
    InvalidRangeError,
    days_ago,
    enumerate_days,
    is_same_day,
    parse_day,
    shift_months,
    shift_years,
    to_day,
    week_start,
)
from rep_tracker.core.engine.config_loader import load_stats_config, stats_thresholds
from rep_tracker.core.metrics import (
    compute_aggregate_stats,
    current_streak,
    longest_streak,
    round_half_up,
)
from rep_tracker.core.models import (
    Exercise,
    Scope,
    Workout,
    WorkoutSet,
    WorkoutTarget,
)
from rep_tracker.core.progression import (
    all_set_position_stats,
    compute_max_rep_series,
    compute_set_position_stats,
    compute_year_over_year,
    max_rep_chart_points,
)
from rep_tracker.core.targets import evaluate_target, evaluate_targets, period_window

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

NOW = datetime(2024, 1, 10, 18, 30)  # Wednesday

PUSH = "push"
SQUAT = "squat"


def _exercise(ex_id: str, category: str) -> Exercise:
    return Exercise(id=ex_id, name=ex_id.title(), category=category, created_at=datetime(2023, 1, 1))


EXERCISES = [_exercise(PUSH, "chest"), _exercise(SQUAT, "legs")]

_counter = 0


def _workout(day: str | date, *sets: tuple[str, int], notes: str | None = None) -> Workout:
    """Workout on a day with (exercise_id, reps) sets in logged order."""
    global _counter
    items = []
    for ex_id, reps in sets:
        _counter += 1
        items.append(WorkoutSet(id=f"s{_counter}", exercise_id=ex_id, reps=reps))
    d = date.fromisoformat(day) if isinstance(day, str) else day
    return Workout(id=f"w-{d.isoformat()}", date=d, sets=items, notes=notes)


def _target(value: int, target_type: str = "reps", period: str = "weekly", **scope) -> WorkoutTarget:
    return WorkoutTarget(
        id="t1",
        name="Goal",
        target_type=target_type,
        target_value=value,
        period=period,
        created_at=datetime(2024, 1, 1),
        **scope,
    )


# ===========================================================================
# dates.py
# ===========================================================================

class TestDates:
    """Day truncation and calendar arithmetic."""

    def test_to_day_drops_time(self):
        assert to_day(datetime(2024, 1, 10, 23, 59, 59, 999999)) == date(2024, 1, 10)

    def test_same_day_ignores_time_of_day(self):
        assert is_same_day(datetime(2024, 1, 10, 0, 0), datetime(2024, 1, 10, 23, 59))
        assert not is_same_day(datetime(2024, 1, 10, 23, 59), datetime(2024, 1, 11, 0, 0))

    def test_days_ago_is_signed(self):
        assert days_ago(date(2024, 1, 9), NOW) == 1
        assert days_ago(date(2024, 1, 12), NOW) == -2

    def test_week_starts_on_monday(self):
        # 2024-01-14 is a Sunday; its ISO week began Monday 2024-01-08
        assert week_start(date(2024, 1, 14)) == date(2024, 1, 8)
        assert week_start(date(2024, 1, 8)) == date(2024, 1, 8)

    def test_shift_months_clamps_day(self):
        assert shift_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
        assert shift_months(date(2024, 1, 15), -4) == date(2023, 9, 15)

    def test_shift_years_from_leap_day(self):
        assert shift_years(date(2024, 2, 29), -1) == date(2023, 2, 28)

    def test_enumerate_days_inclusive(self):
        days = enumerate_days(date(2024, 1, 8), date(2024, 1, 10))
        assert list(days) == [date(2024, 1, 8), date(2024, 1, 9), date(2024, 1, 10)]
        assert len(days) == 3

    def test_enumerate_days_is_restartable(self):
        days = enumerate_days(date(2024, 1, 1), date(2024, 1, 5))
        assert list(days) == list(days)

    def test_single_day_range(self):
        assert list(enumerate_days(NOW, NOW)) == [date(2024, 1, 10)]

    def test_start_after_end_raises(self):
        with pytest.raises(InvalidRangeError):
            enumerate_days(date(2024, 1, 11), date(2024, 1, 10))

    def test_invalid_range_is_value_error(self):
        assert issubclass(InvalidRangeError, ValueError)

    def test_parse_day_accepts_timestamps(self):
        assert parse_day("2024-01-10") == date(2024, 1, 10)
        assert parse_day("2024-01-10T07:15:00") == date(2024, 1, 10)

    def test_parse_day_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_day("10/01/2024")


# ===========================================================================
# metrics.py
# ===========================================================================

class TestRounding:
    """Half-up rounding for displayed values."""

    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(66.666) == 67

    def test_one_decimal(self):
        assert round_half_up(0.25, 1) == pytest.approx(0.3)
        assert round_half_up(7.04, 1) == pytest.approx(7.0)


class TestStreaks:
    """Current streak walks back from today (or yesterday); longest scans all days."""

    WORKOUTS = [
        _workout("2024-01-10", (PUSH, 10)),
        _workout("2024-01-09", (PUSH, 10)),
        _workout("2024-01-08", (PUSH, 10)),
    ]

    def test_streak_ending_today(self):
        assert current_streak(self.WORKOUTS, datetime(2024, 1, 10, 9, 0)) == 3

    def test_streak_continues_through_yesterday(self):
        # No workout yet today: the walk starts from yesterday
        assert current_streak(self.WORKOUTS, date(2024, 1, 11)) == 3

    def test_streak_broken_after_gap(self):
        assert current_streak(self.WORKOUTS, date(2024, 1, 12)) == 0

    def test_empty_log(self):
        assert current_streak([], NOW) == 0
        assert longest_streak([]) == 0

    def test_order_does_not_matter(self):
        assert current_streak(list(reversed(self.WORKOUTS)), NOW) == 3

    def test_streak_capped_at_walk_limit(self):
        # 400 consecutive days: current streak stops at the cap, longest does not
        workouts = [_workout(NOW.date() - timedelta(days=d), (PUSH, 5)) for d in range(400)]
        assert current_streak(workouts, NOW) == STREAK_WALK_LIMIT
        assert longest_streak(workouts) == 400

    def test_longest_streak_picks_longest_run(self):
        workouts = [
            _workout(f"2024-01-0{d}", (PUSH, 5)) for d in (1, 2, 3, 5, 6)
        ]
        assert longest_streak(workouts) == 3

    def test_current_never_exceeds_longest(self):
        workouts = self.WORKOUTS + [_workout("2024-01-01", (PUSH, 1))]
        for day in range(1, 15):
            now = date(2024, 1, day)
            assert current_streak(workouts, now) <= longest_streak(workouts)


class TestAggregateStats:
    """Totals over the whole log."""

    def test_totals(self):
        workouts = [
            _workout("2024-01-09", (PUSH, 10), (PUSH, 8), (SQUAT, 20)),
            _workout("2024-01-10", (PUSH, 12)),
        ]
        stats = compute_aggregate_stats(workouts, NOW)
        assert stats.total_workouts == 2
        assert stats.total_sets == 4
        assert stats.total_reps == 50
        assert stats.current_streak == 2
        assert stats.longest_streak == 2

    def test_empty(self):
        stats = compute_aggregate_stats([], NOW)
        assert (stats.total_workouts, stats.total_sets, stats.total_reps) == (0, 0, 0)


# ===========================================================================
# coverage.py
# ===========================================================================

class TestCoverage:
    """Share of elapsed days with a workout."""

    def test_week_in_progress_divides_by_elapsed_days(self):
        # Mon..Wed elapsed, workouts Mon and Wed: 2/3 = 66.7% -> 67
        workouts = [_workout("2024-01-08", (PUSH, 5)), _workout("2024-01-10", (PUSH, 5))]
        assert compute_coverage(workouts, date(2024, 1, 8), date(2024, 1, 14), NOW) == 67

        result = current_week_coverage(workouts, NOW)
        assert (result.workout_days, result.total_days) == (2, 3)
        assert result.end == date(2024, 1, 10)

    def test_bounds(self):
        workouts = [_workout(NOW.date() - timedelta(days=d), (PUSH, 5)) for d in range(10)]
        assert compute_coverage(workouts, date(2024, 1, 1), date(2024, 1, 10), NOW) == 100
        assert compute_coverage([], date(2024, 1, 1), date(2024, 1, 10), NOW) == 0

    def test_future_period_is_zero_without_division(self):
        result = coverage_breakdown([], date(2024, 2, 1), date(2024, 2, 29), NOW)
        assert result.percentage == 0
        assert result.total_days == 0

    def test_start_after_end_raises(self):
        with pytest.raises(InvalidRangeError):
            compute_coverage([], date(2024, 1, 10), date(2024, 1, 1), NOW)

    def test_adding_a_workout_never_decreases_coverage(self):
        base = [_workout("2024-01-03", (PUSH, 5))]
        before = compute_coverage(base, date(2024, 1, 1), date(2024, 1, 31), NOW)
        after = compute_coverage(
            base + [_workout("2024-01-05", (PUSH, 5))], date(2024, 1, 1), date(2024, 1, 31), NOW
        )
        assert after >= before

    def test_monthly_coverage_stops_at_current_month(self):
        workouts = [_workout("2024-03-01", (PUSH, 5))]
        results = monthly_coverage(workouts, 2024, date(2024, 3, 15))
        assert [r.start.month for r in results] == [1, 2, 3]
        assert results[1].total_days == 29  # full February
        assert results[2].total_days == 15  # March up to today
        assert results[2].workout_days == 1

    def test_yearly_coverage_newest_first(self):
        workouts = [
            _workout("2023-05-01", (PUSH, 5)),
            _workout("2023-05-02", (PUSH, 5)),
            _workout("2024-01-02", (PUSH, 5)),
        ]
        results = yearly_coverage(workouts, NOW)
        assert [r.start.year for r in results] == [2024, 2023]
        assert results[0].total_days == 10
        assert results[1].total_days == 365
        assert results[1].workout_days == 2

    def test_daily_activity_oldest_first_with_zero_days(self):
        workouts = [_workout("2024-01-10", (PUSH, 10), (SQUAT, 15))]
        activity = daily_activity(workouts, NOW)
        assert len(activity) == 7
        assert activity[0].date == date(2024, 1, 4)
        assert activity[-1].date == date(2024, 1, 10)
        assert (activity[-1].sets, activity[-1].reps) == (2, 25)
        assert activity[0].sets == 0

    def test_category_counts_skip_dangling_references(self):
        workouts = [_workout("2024-01-09", (PUSH, 10), (PUSH, 8), (SQUAT, 20), ("deleted", 5))]
        counts = category_set_counts(workouts, EXERCISES, date(2024, 1, 8), NOW)
        assert counts == {"chest": 2, "legs": 1}

    def test_exercise_usage_most_used_first(self):
        workouts = [
            _workout("2023-12-30", (PUSH, 10), (PUSH, 10), (PUSH, 10)),
            _workout("2024-01-09", (SQUAT, 10), (SQUAT, 10), ("deleted", 1)),
        ]
        usage = exercise_usage(workouts, EXERCISES)
        assert [(u.exercise.id, u.set_count) for u in usage] == [(PUSH, 3), (SQUAT, 2)]

        this_year = exercise_usage(workouts, EXERCISES, year=2024)
        assert [(u.exercise.id, u.set_count) for u in this_year] == [(SQUAT, 2)]


# ===========================================================================
# progression.py
# ===========================================================================

class TestMaxRepSeries:
    """Personal-record step series."""

    WORKOUTS = [
        _workout("2023-06-01", (PUSH, 3), (PUSH, 5)),
        _workout("2023-07-01", (PUSH, 8)),
        _workout("2023-08-01", (PUSH, 6), (SQUAT, 40)),
        _workout("2023-09-01", (PUSH, 10), (PUSH, 4)),
    ]

    def test_only_new_maxima_are_emitted(self):
        # Daily maxima 5, 8, 6, 10 -> points 5, 8, 10
        series = compute_max_rep_series(self.WORKOUTS, PUSH, NOW)
        points = list(series)
        assert [p.max_reps for p in points] == [5, 8, 10]
        assert [p.set_position for p in points] == [2, 1, 1]
        assert points[0].date == date(2023, 6, 1)

    def test_series_is_non_decreasing_and_restartable(self):
        series = compute_max_rep_series(self.WORKOUTS, PUSH, NOW)
        first = list(series)
        assert first == list(series)
        assert all(a.max_reps <= b.max_reps for a, b in zip(first, first[1:]))

    def test_window_excludes_old_workouts(self):
        old = [_workout("2020-01-01", (PUSH, 50))]
        series = compute_max_rep_series(old + self.WORKOUTS, PUSH, NOW, window_years=3)
        assert [p.max_reps for p in series] == [5, 8, 10]

    def test_latest_is_current_record(self):
        series = compute_max_rep_series(self.WORKOUTS, PUSH, NOW)
        assert series.latest().max_reps == 10
        assert compute_max_rep_series([], PUSH, NOW).latest() is None

    def test_chart_points_span_window(self):
        series = compute_max_rep_series(self.WORKOUTS, PUSH, NOW)
        chart = max_rep_chart_points(series)
        assert chart[0].date == date(2021, 1, 10)
        assert chart[0].max_reps == 0
        assert chart[-1].date == date(2024, 1, 10)
        assert chart[-1].max_reps == 10
        assert len(chart) == 5

    def test_empty_series_has_no_chart(self):
        assert max_rep_chart_points(compute_max_rep_series([], PUSH, NOW)) == []


class TestYearOverYear:
    """Year-to-date vs the whole previous year."""

    WORKOUTS = [
        _workout("2023-06-01", (PUSH, 30)),
        _workout("2024-01-05", (PUSH, 10), (SQUAT, 5)),
        _workout("2024-02-10", (PUSH, 20)),
    ]

    def test_exercise_scope(self):
        # 2024-01-01..2024-03-01 = 31 + 29 + 1 = 61 days
        yoy = compute_year_over_year(self.WORKOUTS, PUSH, date(2024, 3, 1))
        current, last = yoy.current_year, yoy.last_year
        assert (current.year, current.total_reps, current.workout_days) == (2024, 30, 2)
        assert current.daily_average == pytest.approx(15.0)
        assert current.total_days == 61
        assert current.reps_per_day == pytest.approx(0.5)  # 30 / 61 = 0.49
        assert (last.year, last.total_reps, last.workout_days) == (2023, 30, 1)
        assert last.total_days == 365
        assert last.reps_per_day == pytest.approx(0.1)  # 30 / 365 = 0.08
        assert yoy.reps_delta == 0

    def test_unscoped_counts_every_set(self):
        yoy = compute_year_over_year(self.WORKOUTS, None, date(2024, 3, 1))
        assert yoy.current_year.total_reps == 35

    def test_category_scope(self):
        yoy = compute_year_over_year(
            self.WORKOUTS, Scope(category="legs"), date(2024, 3, 1), EXERCISES
        )
        assert yoy.current_year.total_reps == 5
        assert yoy.current_year.workout_days == 1

    def test_leap_year_prior_year(self):
        yoy = compute_year_over_year([], None, date(2025, 2, 1))
        assert yoy.last_year.total_days == 366
        assert yoy.last_year.daily_average == 0.0


class TestSetPositionStats:
    """Max and average reps per set number."""

    WORKOUTS = [
        _workout("2024-01-02", (PUSH, 10), (SQUAT, 30), (PUSH, 8), (PUSH, 6)),
        _workout("2024-01-05", (PUSH, 12), (PUSH, 7)),
        _workout("2023-08-01", (PUSH, 40), (PUSH, 40)),  # outside the 3-month window
    ]

    def test_second_set(self):
        stats = compute_set_position_stats(self.WORKOUTS, PUSH, 2, NOW)
        assert stats.max_reps == 8
        assert stats.average_reps == pytest.approx(7.5)
        assert stats.total_sets == 2

    def test_positions_count_per_exercise(self):
        # The squat set between push sets does not shift push positions
        stats = compute_set_position_stats(self.WORKOUTS, PUSH, 3, NOW)
        assert (stats.max_reps, stats.total_sets) == (6, 1)

    def test_unreached_position_is_zero(self):
        stats = compute_set_position_stats(self.WORKOUTS, PUSH, 4, NOW)
        assert (stats.max_reps, stats.average_reps, stats.total_sets) == (0, 0.0, 0)

    def test_position_must_be_positive(self):
        with pytest.raises(ValueError):
            compute_set_position_stats(self.WORKOUTS, PUSH, 0, NOW)

    def test_all_positions(self):
        rows = all_set_position_stats(self.WORKOUTS, PUSH, NOW)
        assert [r.set_position for r in rows] == [1, 2, 3]
        assert rows[0].max_reps == 12
        assert rows[0].average_reps == pytest.approx(11.0)


# ===========================================================================
# consistency.py
# ===========================================================================

class TestPatternClassification:
    """dispersion = pstdev / median; < 0.4 Stable, < 0.8 Variable, else Irregular."""

    def test_rest_gaps(self):
        days = [date(2024, 1, 6), date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 3)]
        assert rest_gaps(days) == [2, 3]

    def test_even_gaps_are_stable(self):
        assert dispersion([2, 2, 2, 2]) == 0.0
        assert classify_pattern([2, 2, 2, 2]) == "Stable"

    def test_moderate_spread_is_variable(self):
        # median 2, pstdev 1 -> 0.5
        assert dispersion([1, 3, 1, 3]) == pytest.approx(0.5)
        assert classify_pattern([1, 3, 1, 3]) == "Variable"

    def test_high_spread_is_irregular(self):
        # median 1, pstdev ~2.17
        assert classify_pattern([1, 1, 6, 1]) == "Irregular"

    def test_few_large_gaps_are_irregular(self):
        assert classify_pattern([10, 12]) == "Irregular"

    def test_few_small_gaps_use_spread(self):
        assert classify_pattern([2]) == "Stable"

    def test_thresholds_are_configurable(self):
        assert classify_pattern([1, 3, 1, 3], stable_cv=0.6, variable_cv=0.9) == "Stable"

    def test_no_gaps_no_pattern(self):
        assert classify_pattern([]) is None


class TestConsistencyTrend:
    """Median of the earlier half vs the recent half of the gaps."""

    def test_shorter_recent_rests_improve(self):
        trend = consistency_trend([4, 4, 2, 2])
        assert trend.direction == "improving"
        assert trend.change_pct == pytest.approx(-50.0)

    def test_longer_recent_rests_decline(self):
        trend = consistency_trend([2, 2, 4, 4])
        assert trend.direction == "declining"
        assert trend.change_pct == pytest.approx(100.0)

    def test_small_change_is_stable(self):
        assert consistency_trend([10, 10, 10, 11]).direction == "stable"

    @pytest.mark.parametrize("gaps,expected", [([16, 17], 6.3), ([16, 15], -6.3)])
    def test_change_rounds_half_away_from_zero(self, gaps, expected):
        # 1/16 is exactly 6.25%
        trend = consistency_trend(gaps)
        assert trend.direction == "stable"
        assert trend.change_pct == pytest.approx(expected)

    def test_odd_count_puts_extra_gap_in_recent_half(self):
        # earlier [4] -> 4, recent [3, 2] -> 2.5: -37.5%
        trend = consistency_trend([4, 3, 2])
        assert trend.earlier_median == 4
        assert trend.recent_median == 2.5

    def test_single_gap_has_no_trend(self):
        assert consistency_trend([3]) is None


class TestComputeConsistency:
    """Scope filtering, window, and insufficient samples."""

    WORKOUTS = [
        _workout("2024-01-01", (PUSH, 10)),
        _workout("2024-01-02", (SQUAT, 10)),
        _workout("2024-01-03", (PUSH, 10)),
        _workout("2024-01-05", (PUSH, 10)),
        _workout("2024-01-07", (PUSH, 10)),
        _workout("2023-06-01", (PUSH, 10)),  # outside the 4-month window
    ]

    def test_category_scope(self):
        stats = compute_consistency(self.WORKOUTS, EXERCISES, Scope(category="chest"), NOW)
        assert stats.workout_count == 4
        assert stats.median_rest_days == 2.0
        assert stats.pattern == "Stable"
        assert stats.has_pattern

    def test_single_workout_has_no_pattern(self):
        stats = compute_consistency(self.WORKOUTS, EXERCISES, Scope(exercise_id=SQUAT), NOW)
        assert stats.workout_count == 1
        assert stats.pattern is None
        assert stats.median_rest_days is None
        assert stats.trend is None

    def test_no_workouts(self):
        stats = compute_consistency([], EXERCISES, Scope(category="legs"), NOW)
        assert stats.workout_count == 0
        assert not stats.has_pattern

    def test_deterministic(self):
        a = compute_consistency(self.WORKOUTS, EXERCISES, Scope(category="chest"), NOW)
        b = compute_consistency(list(reversed(self.WORKOUTS)), EXERCISES, Scope(category="chest"), NOW)
        assert a == b

    def test_every_category(self):
        result = category_consistency(self.WORKOUTS, EXERCISES, NOW)
        assert list(result) == ["chest", "legs"]
        assert result["legs"].pattern is None


# ===========================================================================
# targets.py
# ===========================================================================

class TestTargets:
    """Live progress for the current period."""

    def test_exceeded_weekly_reps(self):
        # This week (Mon 8th..Wed 10th): 10 + 15 = 25 reps; Sunday 7th is last week
        workouts = [
            _workout("2024-01-07", (PUSH, 50)),
            _workout("2024-01-08", (PUSH, 10)),
            _workout("2024-01-10", (PUSH, 15)),
        ]
        progress = evaluate_target(_target(20, exercise_id=PUSH), workouts, EXERCISES, NOW)
        assert progress.current_value == 25
        assert progress.is_completed
        assert progress.is_exceeded
        assert progress.percentage == 100.0
        assert progress.raw_percentage == pytest.approx(125.0)

    def test_exactly_met_is_not_exceeded(self):
        workouts = [_workout("2024-01-10", (PUSH, 20))]
        progress = evaluate_target(_target(20), workouts, EXERCISES, NOW)
        assert progress.is_completed
        assert not progress.is_exceeded

    def test_daily_sets_by_category(self):
        workouts = [_workout("2024-01-10", (PUSH, 10), (PUSH, 10), (SQUAT, 10))]
        target = _target(4, target_type="sets", period="daily", category="chest")
        progress = evaluate_target(target, workouts, EXERCISES, NOW)
        assert progress.current_value == 2
        assert progress.percentage == pytest.approx(50.0)
        assert not progress.is_completed

    def test_future_workouts_do_not_count(self):
        workouts = [_workout("2024-01-12", (PUSH, 100))]
        assert evaluate_target(_target(10), workouts, EXERCISES, NOW).current_value == 0

    def test_unscoped_target_counts_all_sets(self):
        workouts = [_workout("2024-01-09", (PUSH, 10), (SQUAT, 5))]
        assert evaluate_target(_target(100), workouts, EXERCISES, NOW).current_value == 15

    def test_period_windows(self):
        assert period_window("daily", NOW) == (date(2024, 1, 10), date(2024, 1, 10))
        assert period_window("weekly", NOW) == (date(2024, 1, 8), date(2024, 1, 10))
        assert period_window("monthly", NOW) == (date(2024, 1, 1), date(2024, 1, 10))
        assert period_window("yearly", NOW) == (date(2024, 1, 1), date(2024, 1, 10))

    def test_inactive_targets_skipped(self):
        paused = _target(10)
        paused.is_active = False
        assert evaluate_targets([paused], [], EXERCISES, NOW) == []
        assert len(evaluate_targets([paused], [], EXERCISES, NOW, active_only=False)) == 1

    def test_invalid_target_value(self):
        with pytest.raises(ValueError):
            _target(0)

    def test_invalid_period(self):
        with pytest.raises(ValueError):
            _target(10, period="hourly")


# ===========================================================================
# engine/config_loader.py
# ===========================================================================

class TestStatsConfig:
    """stats.yaml loading and user overrides."""

    def test_bundled_defaults(self, monkeypatch, tmp_path):
        monkeypatch.setenv("REP_TRACKER_HOME", str(tmp_path))
        thresholds = stats_thresholds()
        assert thresholds.stable_cv == 0.4
        assert thresholds.variable_cv == 0.8
        assert thresholds.consistency_window_months == 4
        assert thresholds.max_rep_window_years == 3

    def test_user_override_merges(self, monkeypatch, tmp_path):
        monkeypatch.setenv("REP_TRACKER_HOME", str(tmp_path))
        (tmp_path / "stats.yaml").write_text("consistency:\n  STABLE_CV_THRESHOLD: 0.3\n")
        thresholds = stats_thresholds()
        assert thresholds.stable_cv == 0.3
        assert thresholds.variable_cv == 0.8

    def test_broken_user_file_is_ignored_with_warning(self, monkeypatch, tmp_path):
        monkeypatch.setenv("REP_TRACKER_HOME", str(tmp_path))
        (tmp_path / "stats.yaml").write_text("consistency: [unclosed\n")
        with pytest.warns(UserWarning):
            config = load_stats_config()
        assert config["consistency"]["STABLE_CV_THRESHOLD"] == 0.4

    def test_missing_keys_fall_back(self):
        assert stats_thresholds({}).trend_change_threshold_pct == 10.0

    def test_inverted_thresholds_rejected(self):
        with pytest.raises(ValueError):
            stats_thresholds({"consistency": {"STABLE_CV_THRESHOLD": 0.9}})
