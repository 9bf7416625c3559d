"""
ASCII charts for the terminal.

Renders personal-record timelines as a step chart and period summaries
(coverage, daily activity, category sets) as horizontal bar charts.
"""

from datetime import date

from .models import CoverageResult, DailyActivity, MaxRepPoint


def _place_label(row: list[str], x: int, text: str, plot_width: int) -> None:
    """Write text right of column x, or left of it when it would overflow."""
    start = x + 2
    if start + len(text) >= plot_width:
        start = x - len(text) - 1
    if start < 0:
        return
    for j, ch in enumerate(text):
        if start + j < plot_width:
            row[start + j] = ch


def create_max_reps_plot(
    points: list[MaxRepPoint],
    exercise_name: str,
    width: int = 60,
    height: int = 16,
) -> str:
    """
    Step chart of a running-maximum series.

    Args:
        points: Chart points (see progression.max_rep_chart_points); the
            first and last may be synthetic window-edge points
        exercise_name: Shown in the title
        width: Plot width in characters, including the y-axis labels
        height: Plot height in lines, including title and x-axis

    Returns:
        ASCII art string
    """
    if not points:
        return f"No sets of {exercise_name} logged in this window."

    min_date = points[0].date
    max_date = points[-1].date
    date_range = max((max_date - min_date).days, 1)

    y_max = max(p.max_reps for p in points) + 1
    y_range = max(y_max, 1)

    plot_width = width - 6
    plot_height = height - 3
    grid = [[" " for _ in range(plot_width)] for _ in range(plot_height)]

    def _pos(day: date, reps: int) -> tuple[int, int]:
        x = int(((day - min_date).days / date_range) * (plot_width - 1))
        y = plot_height - 1 - int((reps / y_range) * (plot_height - 1))
        return x, y

    coords = [(*_pos(p.date, p.max_reps), p) for p in points]

    # Step lines: hold the previous max horizontally, then rise at the new record.
    for (x1, y1, _), (x2, y2, _) in zip(coords, coords[1:]):
        for x in range(x1 + 1, x2):
            if grid[y1][x] == " ":
                grid[y1][x] = "─"
        if y2 < y1:
            grid[y1][x2] = "╯"
            for r in range(y2 + 1, y1):
                if grid[r][x2] == " ":
                    grid[r][x2] = "│"

    for x, y, p in coords:
        # Window-edge points carry set_position 0 and are not records.
        grid[y][x] = "●" if p.set_position > 0 else "·"

    lines = [f"Max Reps Progress ({exercise_name})", "─" * width]

    for i, row in enumerate(grid):
        y_val = y_max - int((i / (plot_height - 1)) * y_range) if plot_height > 1 else y_max
        row_chars = list(row)
        for x, y, p in coords:
            if y == i and p.set_position > 0:
                _place_label(row_chars, x, f"({p.max_reps})", plot_width)
        lines.append(f"{y_val:3d} ┤" + "".join(row_chars))

    lines.append("─" * width)

    label_line = [" "] * plot_width
    mid_date = min_date + (max_date - min_date) / 2
    for x_pos, day in ((0, min_date), (plot_width // 2, mid_date), (plot_width - 10, max_date)):
        for i, ch in enumerate(day.strftime("%b %Y")):
            if 0 <= x_pos + i < plot_width:
                label_line[x_pos + i] = ch
    lines.append("      " + "".join(label_line))
    lines.append("● new max   · window edge")

    return "\n".join(lines)


def create_simple_bar_chart(
    labels: list[str],
    values: list[float],
    width: int = 40,
    title: str = "",
    value_format: str = "{:.1f}",
) -> str:
    """
    Create a simple horizontal bar chart.

    Args:
        labels: Labels for each bar
        values: Values for each bar
        width: Maximum bar width
        title: Chart title
        value_format: Format applied to the value printed after each bar

    Returns:
        ASCII bar chart string
    """
    if not values:
        return "No data to display."

    max_val = max(values)
    max_label_len = max(len(label) for label in labels) if labels else 0

    lines = []

    if title:
        lines.append(title)
        lines.append("─" * (max_label_len + width + 5))

    for label, value in zip(labels, values):
        bar_len = int((value / max_val) * width) if max_val > 0 else 0
        lines.append(f"{label:>{max_label_len}} │{'█' * bar_len} {value_format.format(value)}")

    return "\n".join(lines)


def create_daily_activity_chart(activity: list[DailyActivity]) -> str:
    """Bar chart of reps per day, oldest first."""
    return create_simple_bar_chart(
        [a.date.strftime("%a %d") for a in activity],
        [float(a.reps) for a in activity],
        title="Last 7 Days (reps)" if len(activity) == 7 else "Daily Activity (reps)",
        value_format="{:.0f}",
    )


def create_coverage_chart(coverage: list[CoverageResult], label_format: str, title: str) -> str:
    """
    Bar chart of coverage percentages.

    Args:
        coverage: Results in display order
        label_format: strftime format for each result's start date
        title: Chart title
    """
    return create_simple_bar_chart(
        [c.start.strftime(label_format) for c in coverage],
        [float(c.percentage) for c in coverage],
        width=30,
        title=title,
        value_format="{:.0f}%",
    )
