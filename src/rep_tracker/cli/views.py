"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of workouts and statistics.
"""

from rich.console import Console
from rich.table import Table

from ..core.ascii_plot import (
    create_coverage_chart,
    create_daily_activity_chart,
    create_max_reps_plot,
    create_simple_bar_chart,
)
from ..core.catalog import exercise_name
from ..core.models import (
    AggregateStats,
    ConsistencyStats,
    CoverageResult,
    DailyActivity,
    Exercise,
    ExerciseUsage,
    MaxRepPoint,
    SetPositionStats,
    TargetProgress,
    Workout,
    WorkoutTarget,
    WorkoutTemplate,
    YearOverYear,
    category_label,
)

console = Console()

PATTERN_STYLES = {"Stable": "green", "Variable": "yellow", "Irregular": "red"}
TREND_ARROWS = {"improving": "↑", "declining": "↓", "stable": "→"}


def _short_id(value: str) -> str:
    return value[:8]


def _fmt_sets(workout: Workout, exercises: list[Exercise]) -> str:
    """Group a workout's sets per exercise: 'Push-Ups 10/8/8, Squats 15'."""
    grouped: dict[str, list[int]] = {}
    for s in workout.sets:
        grouped.setdefault(s.exercise_id, []).append(s.reps)
    return ", ".join(
        f"{exercise_name(exercises, ex_id)} {'/'.join(str(r) for r in reps)}"
        for ex_id, reps in grouped.items()
    )


def _progress_bar(percentage: float, width: int = 20) -> str:
    filled = int(round(percentage / 100 * width))
    return "█" * filled + "░" * (width - filled)


def format_exercise_table(exercises: list[Exercise]) -> Table:
    """
    Create a Rich table of the exercise catalog.

    Args:
        exercises: Exercises to display

    Returns:
        Rich Table object
    """
    table = Table(title="Exercises")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Category", style="magenta")
    table.add_column("Description")

    for exercise in sorted(exercises, key=lambda e: (e.category, e.name)):
        table.add_row(
            _short_id(exercise.id),
            exercise.name,
            category_label(exercise.category),
            exercise.description or "",
        )
    return table


def format_workout_table(workouts: list[Workout], exercises: list[Exercise]) -> Table:
    """
    Create a Rich table displaying workout history, newest first.

    Args:
        workouts: Workouts to display (already ordered)
        exercises: Catalog for resolving names

    Returns:
        Rich Table object
    """
    table = Table(title="Workout History")

    table.add_column("Date", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Sets", justify="right")
    table.add_column("Reps", justify="right", style="bold")
    table.add_column("Exercises")
    table.add_column("Notes", style="dim")

    for workout in workouts:
        table.add_row(
            workout.date.strftime("%a %Y-%m-%d"),
            _short_id(workout.id),
            str(len(workout.sets)),
            str(workout.total_reps),
            _fmt_sets(workout, exercises),
            workout.notes or "",
        )
    return table


def print_history(workouts: list[Workout], exercises: list[Exercise]) -> None:
    """
    Print workout history to console.

    Args:
        workouts: Workouts to display
        exercises: Catalog for resolving names
    """
    if not workouts:
        console.print("[yellow]No workouts recorded yet.[/yellow]")
        return
    console.print(format_workout_table(workouts, exercises))


def print_workout(workout: Workout, exercises: list[Exercise]) -> None:
    """Print every set of one workout."""
    table = Table(title=f"Workout {workout.date.isoformat()}")
    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Exercise", style="bold")
    table.add_column("Set", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("Notes", style="dim")

    positions: dict[str, int] = {}
    for i, s in enumerate(workout.sets, 1):
        positions[s.exercise_id] = positions.get(s.exercise_id, 0) + 1
        table.add_row(
            str(i),
            exercise_name(exercises, s.exercise_id),
            str(positions[s.exercise_id]),
            str(s.reps),
            s.notes or "",
        )
    console.print(table)
    console.print(f"Total: [bold]{len(workout.sets)}[/bold] sets, [bold]{workout.total_reps}[/bold] reps")


def print_templates(templates: list[WorkoutTemplate], exercises: list[Exercise]) -> None:
    if not templates:
        console.print("[yellow]No templates saved yet.[/yellow]")
        return

    table = Table(title="Templates")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Sets", justify="right")
    table.add_column("Exercises")

    for template in templates:
        table.add_row(
            _short_id(template.id),
            template.name,
            str(template.total_sets),
            ", ".join(
                f"{exercise_name(exercises, e.exercise_id)} ×{e.sets}" for e in template.exercises
            ),
        )
    console.print(table)


def _target_scope_label(target: WorkoutTarget, exercises: list[Exercise]) -> str:
    if target.exercise_id is not None:
        return exercise_name(exercises, target.exercise_id)
    if target.category is not None:
        return category_label(target.category)
    return "All exercises"


def print_targets(
    rows: list[tuple[WorkoutTarget, TargetProgress]],
    exercises: list[Exercise],
) -> None:
    """
    Print targets with their live progress.

    Args:
        rows: (target, progress) pairs
        exercises: Catalog for resolving names
    """
    if not rows:
        console.print("[yellow]No targets set.[/yellow]")
        return

    table = Table(title="Targets")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Scope")
    table.add_column("Period", style="magenta")
    table.add_column("Progress")
    table.add_column("", justify="right")

    for target, progress in rows:
        style = "green" if progress.is_completed else "cyan"
        status = f"{progress.current_value}/{progress.target_value} {target.target_type}"
        if progress.is_exceeded:
            status += f" ({progress.raw_percentage:.0f}%)"
        name = target.name if target.is_active else f"[dim]{target.name} (inactive)[/dim]"
        table.add_row(
            _short_id(target.id),
            name,
            _target_scope_label(target, exercises),
            target.period,
            f"[{style}]{_progress_bar(progress.percentage)}[/{style}]",
            status,
        )
    console.print(table)


def format_aggregate_display(stats: AggregateStats) -> str:
    """
    Format overall stats as text block.

    Args:
        stats: AggregateStats to display

    Returns:
        Formatted string
    """
    lines = [
        "Overview",
        f"- Workouts: {stats.total_workouts}",
        f"- Sets:     {stats.total_sets}",
        f"- Reps:     {stats.total_reps}",
        f"- Current streak: {stats.current_streak} day{'s' if stats.current_streak != 1 else ''}",
        f"- Longest streak: {stats.longest_streak} day{'s' if stats.longest_streak != 1 else ''}",
    ]
    return "\n".join(lines)


def print_coverage_summary(label_results: list[tuple[str, CoverageResult]]) -> None:
    table = Table(title="Coverage", show_header=True)
    table.add_column("Period")
    table.add_column("Days", justify="right")
    table.add_column("Coverage", justify="right", style="bold")
    table.add_column("")

    for label, result in label_results:
        table.add_row(
            label,
            f"{result.workout_days}/{result.total_days}",
            f"{result.percentage}%",
            _progress_bar(result.percentage),
        )
    console.print(table)


def print_coverage_chart(results: list[CoverageResult], label_format: str, title: str) -> None:
    console.print(create_coverage_chart(results, label_format, title))


def print_daily_activity(activity: list[DailyActivity]) -> None:
    console.print(create_daily_activity_chart(activity))


def print_category_counts(columns: dict[str, dict[str, int]]) -> None:
    """
    Print sets per category for several periods side by side.

    Args:
        columns: {period label: {category: set count}}
    """
    categories = sorted({c for counts in columns.values() for c in counts})
    if not categories:
        console.print("[yellow]No sets logged in these periods.[/yellow]")
        return

    table = Table(title="Sets per Category")
    table.add_column("Category", style="magenta")
    for label in columns:
        table.add_column(label, justify="right")
    for category in categories:
        table.add_row(
            category_label(category),
            *(str(counts.get(category, 0)) for counts in columns.values()),
        )
    console.print(table)


def print_exercise_usage(usage: list[ExerciseUsage], title: str, limit: int = 5) -> None:
    if not usage:
        return
    top = usage[:limit]
    console.print(
        create_simple_bar_chart(
            [u.exercise.name for u in top],
            [float(u.set_count) for u in top],
            width=30,
            title=title,
            value_format="{:.0f} sets",
        )
    )


def print_max_plot(points: list[MaxRepPoint], exercise_label: str) -> None:
    """
    Print ASCII step chart of personal records.

    Args:
        points: Chart points including window edges
        exercise_label: Display name shown in the chart title
    """
    console.print(create_max_reps_plot(points, exercise_label))


def print_year_over_year(comparison: YearOverYear, scope_label: str) -> None:
    current, last = comparison.current_year, comparison.last_year

    table = Table(title=f"Year over Year: {scope_label}")
    table.add_column("")
    table.add_column(str(last.year), justify="right")
    table.add_column(f"{current.year} (to date)", justify="right", style="bold")

    table.add_row("Total reps", str(last.total_reps), str(current.total_reps))
    table.add_row("Workout days", str(last.workout_days), str(current.workout_days))
    table.add_row("Reps per workout day", f"{last.daily_average:.1f}", f"{current.daily_average:.1f}")
    table.add_row("Reps per calendar day", f"{last.reps_per_day:.1f}", f"{current.reps_per_day:.1f}")
    table.add_row("Days counted", str(last.total_days), str(current.total_days))
    console.print(table)

    delta = comparison.reps_per_day_delta
    style = "green" if delta > 0 else "red" if delta < 0 else "dim"
    console.print(f"Reps per day vs last year: [{style}]{delta:+.1f}[/{style}]")


def print_set_position_table(rows: list[SetPositionStats], exercise_label: str) -> None:
    if not rows or all(r.total_sets == 0 for r in rows):
        console.print(f"[yellow]No sets of {exercise_label} in this window.[/yellow]")
        return

    table = Table(title=f"Set Positions: {exercise_label}")
    table.add_column("Set", justify="right")
    table.add_column("Max", justify="right", style="bold")
    table.add_column("Avg", justify="right")
    table.add_column("Sets logged", justify="right", style="dim")

    for row in rows:
        table.add_row(
            str(row.set_position),
            str(row.max_reps),
            f"{row.average_reps:.1f}",
            str(row.total_sets),
        )
    console.print(table)


def format_consistency_cells(stats: ConsistencyStats) -> tuple[str, str, str]:
    """Pattern, median rest and trend cells; insufficient data shows dashes."""
    if not stats.has_pattern:
        return "[dim]not enough data[/dim]", "-", "-"

    style = PATTERN_STYLES[stats.pattern]
    pattern = f"[{style}]{stats.pattern}[/{style}]"
    rest = f"{stats.median_rest_days:.1f} d"
    if stats.trend is None:
        trend = "-"
    else:
        trend = f"{TREND_ARROWS[stats.trend.direction]} {stats.trend.direction} ({stats.trend.change_pct:+.0f}%)"
    return pattern, rest, trend


def print_consistency_table(rows: dict[str, ConsistencyStats], title: str = "Consistency") -> None:
    """
    Print the rest-pattern analysis per category (or per scope label).

    Args:
        rows: {label: ConsistencyStats}
        title: Table title
    """
    table = Table(title=title)
    table.add_column("Scope", style="magenta")
    table.add_column("Days", justify="right")
    table.add_column("Pattern")
    table.add_column("Median rest", justify="right")
    table.add_column("Trend")

    for label, stats in rows.items():
        table.add_row(label, str(stats.workout_count), *format_consistency_cells(stats))
    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} \\[y/N]: ")
    return response.lower() in ("y", "yes")
