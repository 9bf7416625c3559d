"""Statistics commands: stats, coverage, plot-max, compare, set-stats, consistency."""

import json
from typing import Annotated, Optional

import typer

from ...core.catalog import exercise_name
from ...core.consistency import category_consistency, compute_consistency
from ...core.coverage import (
    category_set_counts,
    current_month_coverage,
    current_week_coverage,
    current_year_coverage,
    daily_activity,
    exercise_usage,
    monthly_coverage,
    yearly_coverage,
)
from ...core.dates import month_end, month_start, shift_months, to_day, week_start
from ...core.metrics import compute_aggregate_stats, last_workout
from ...core.models import ExerciseUsage, Scope, TrackerState, category_label
from ...core.progression import (
    all_set_position_stats,
    compute_max_rep_series,
    compute_set_position_stats,
    compute_year_over_year,
    max_rep_chart_points,
)
from ...io.serializers import (
    consistency_to_dict,
    coverage_to_dict,
    max_rep_point_to_dict,
    set_position_to_dict,
    year_summary_to_dict,
)
from .. import views
from ..app import (
    DataDirOption,
    JsonOption,
    TodayOption,
    app,
    build_scope,
    get_store,
    get_thresholds,
    load_state,
    require_exercise,
    resolve_now,
)

ExerciseScopeOption = Annotated[
    Optional[str],
    typer.Option("--exercise", "-e", help="Limit to one exercise (name or ID)"),
]

CategoryScopeOption = Annotated[
    Optional[str],
    typer.Option("--category", "-c", help="Limit to one category"),
]


def _scope_label(state: TrackerState, scope: Scope) -> str:
    if scope.exercise_id is not None:
        return exercise_name(state.exercises, scope.exercise_id)
    if scope.category is not None:
        return category_label(scope.category)
    return "All exercises"


def _usage_dicts(usage: list[ExerciseUsage]) -> list[dict]:
    return [{"exercise_id": u.exercise.id, "name": u.exercise.name, "sets": u.set_count} for u in usage]


@app.command()
def stats(
    data_dir: DataDirOption = None,
    today: TodayOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show totals, streaks, coverage and recent activity.
    """
    state = load_state(get_store(data_dir))
    now = resolve_now(today)
    thresholds = get_thresholds()
    day = to_day(now)

    aggregate = compute_aggregate_stats(state.workouts, now)
    coverage = {
        "week": current_week_coverage(state.workouts, now),
        "month": current_month_coverage(state.workouts, now),
        "year": current_year_coverage(state.workouts, now),
    }
    activity = daily_activity(state.workouts, now, thresholds.daily_activity_days)

    previous_month = shift_months(month_start(day), -1)
    categories = {
        "This week": category_set_counts(state.workouts, state.exercises, week_start(day), day),
        "This month": category_set_counts(state.workouts, state.exercises, month_start(day), day),
        "Last month": category_set_counts(
            state.workouts, state.exercises, previous_month, month_end(previous_month)
        ),
    }
    usage_year = exercise_usage(state.workouts, state.exercises, year=day.year)
    usage_all = exercise_usage(state.workouts, state.exercises)
    latest = last_workout(state.workouts)

    if json_out:
        print(json.dumps({
            "total_workouts": aggregate.total_workouts,
            "total_sets": aggregate.total_sets,
            "total_reps": aggregate.total_reps,
            "current_streak": aggregate.current_streak,
            "longest_streak": aggregate.longest_streak,
            "last_workout": latest.date.isoformat() if latest else None,
            "coverage": {k: coverage_to_dict(v) for k, v in coverage.items()},
            "daily_activity": [
                {"date": a.date.isoformat(), "sets": a.sets, "reps": a.reps} for a in activity
            ],
            "category_sets": {
                "this_week": categories["This week"],
                "this_month": categories["This month"],
                "last_month": categories["Last month"],
            },
            "exercise_usage": {
                "this_year": _usage_dicts(usage_year),
                "all_time": _usage_dicts(usage_all),
            },
        }, indent=2))
        return

    views.console.print()
    views.console.print(views.format_aggregate_display(aggregate))
    if latest is not None:
        views.console.print(f"- Last workout: {latest.date.strftime('%a %Y-%m-%d')}")
    views.console.print()
    views.print_coverage_summary([
        ("This week", coverage["week"]),
        ("This month", coverage["month"]),
        ("This year", coverage["year"]),
    ])
    views.console.print()
    views.print_daily_activity(activity)
    views.console.print()
    views.print_category_counts(categories)
    views.console.print()
    views.print_exercise_usage(usage_year, f"Most Used in {day.year}")
    views.console.print()
    views.print_exercise_usage(usage_all, "Most Used (all time)")
    views.console.print()


@app.command()
def coverage(
    year: Annotated[
        Optional[int],
        typer.Option("--year", "-y", help="Monthly coverage of this year (default: current year)"),
    ] = None,
    yearly: Annotated[
        bool,
        typer.Option("--yearly", help="Coverage of every year with workouts"),
    ] = False,
    data_dir: DataDirOption = None,
    today: TodayOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the share of days that were training days, per month or per year.
    """
    state = load_state(get_store(data_dir))
    now = resolve_now(today)

    if yearly:
        results = yearly_coverage(state.workouts, now)
        if json_out:
            print(json.dumps({"years": [coverage_to_dict(r) for r in results]}, indent=2))
            return
        if not results:
            views.console.print("[yellow]No workouts recorded yet.[/yellow]")
            return
        views.print_coverage_chart(results, "%Y", "Coverage per Year")
        return

    selected = year if year is not None else to_day(now).year
    results = monthly_coverage(state.workouts, selected, now)

    if json_out:
        print(json.dumps({"year": selected, "months": [coverage_to_dict(r) for r in results]}, indent=2))
        return

    if not results:
        views.print_info(f"{selected} has not started yet.")
        return
    views.print_coverage_chart(results, "%b", f"Coverage per Month ({selected})")


@app.command("plot-max")
def plot_max(
    exercise: Annotated[str, typer.Argument(help="Exercise name or ID")],
    years: Annotated[
        Optional[int],
        typer.Option("--years", help="Lookback window in years"),
    ] = None,
    data_dir: DataDirOption = None,
    today: TodayOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Plot the personal-record timeline of an exercise.

    A point is drawn each time a workout's best set beat every earlier one.
    """
    state = load_state(get_store(data_dir))
    now = resolve_now(today)
    target = require_exercise(state, exercise)
    window = years if years is not None else get_thresholds().max_rep_window_years

    series = compute_max_rep_series(state.workouts, target.id, now, window)
    points = list(series)

    if json_out:
        print(json.dumps({
            "exercise_id": target.id,
            "window_start": series.window_start.isoformat(),
            "window_end": series.window_end.isoformat(),
            "records": [max_rep_point_to_dict(p) for p in points],
            "chart": [max_rep_point_to_dict(p) for p in max_rep_chart_points(series)],
        }, indent=2))
        return

    views.print_max_plot(max_rep_chart_points(series), target.name)
    if points:
        best = points[-1]
        views.console.print(
            f"\nCurrent max: [bold]{best.max_reps}[/bold] reps "
            f"(set {best.set_position}, {best.date.isoformat()})"
        )


@app.command()
def compare(
    exercise: ExerciseScopeOption = None,
    category: CategoryScopeOption = None,
    data_dir: DataDirOption = None,
    today: TodayOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Compare this year to date with the whole of last year.
    """
    state = load_state(get_store(data_dir))
    now = resolve_now(today)
    scope = build_scope(state, exercise, category)

    comparison = compute_year_over_year(state.workouts, scope, now, state.exercises)

    if json_out:
        print(json.dumps({
            "current_year": year_summary_to_dict(comparison.current_year),
            "last_year": year_summary_to_dict(comparison.last_year),
            "reps_delta": comparison.reps_delta,
            "reps_per_day_delta": comparison.reps_per_day_delta,
        }, indent=2))
        return

    views.print_year_over_year(comparison, _scope_label(state, scope))


@app.command("set-stats")
def set_stats(
    exercise: Annotated[str, typer.Argument(help="Exercise name or ID")],
    position: Annotated[
        Optional[int],
        typer.Option("--position", "-n", help="Only this set number (1 = first set)"),
    ] = None,
    months: Annotated[
        Optional[int],
        typer.Option("--months", help="Lookback window in months"),
    ] = None,
    data_dir: DataDirOption = None,
    today: TodayOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show max and average reps for each set number of an exercise.

    Useful to pick a realistic rep count for the next set.
    """
    state = load_state(get_store(data_dir))
    now = resolve_now(today)
    target = require_exercise(state, exercise)
    window = months if months is not None else get_thresholds().set_position_window_months

    if position is not None:
        try:
            rows = [compute_set_position_stats(state.workouts, target.id, position, now, window)]
        except ValueError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
    else:
        rows = all_set_position_stats(state.workouts, target.id, now, window)

    if json_out:
        print(json.dumps({
            "exercise_id": target.id,
            "window_months": window,
            "positions": [set_position_to_dict(r) for r in rows],
        }, indent=2))
        return

    views.print_set_position_table(rows, target.name)


@app.command()
def consistency(
    exercise: ExerciseScopeOption = None,
    category: CategoryScopeOption = None,
    data_dir: DataDirOption = None,
    today: TodayOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Classify rest patterns as Stable, Variable or Irregular.

    Without --exercise or --category every category in the catalog is shown.
    """
    state = load_state(get_store(data_dir))
    now = resolve_now(today)
    thresholds = get_thresholds()
    options = dict(
        window_months=thresholds.consistency_window_months,
        stable_cv=thresholds.stable_cv,
        variable_cv=thresholds.variable_cv,
        trend_threshold_pct=thresholds.trend_change_threshold_pct,
    )

    if exercise is None and category is None:
        results = category_consistency(state.workouts, state.exercises, now, **options)
        labels = {c: category_label(c) for c in results}
    else:
        scope = build_scope(state, exercise, category)
        key = scope.exercise_id or scope.category
        results = {key: compute_consistency(state.workouts, state.exercises, scope, now, **options)}
        labels = {key: _scope_label(state, scope)}

    if json_out:
        print(json.dumps({key: consistency_to_dict(s) for key, s in results.items()}, indent=2))
        return

    views.print_consistency_table(
        {labels[key]: s for key, s in results.items()},
        title=f"Consistency (last {thresholds.consistency_window_months} months)",
    )
