"""
Data models for rep-tracker.

All core dataclasses representing the exercise catalog, the workout log,
templates, targets, and the derived statistics returned by the engine.
Exercises are referenced by id everywhere (weak references); nothing embeds
an Exercise by value.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Literal

TargetType = Literal["sets", "reps"]
TargetPeriod = Literal["daily", "weekly", "monthly", "yearly"]
Pattern = Literal["Stable", "Variable", "Irregular"]
TrendDirection = Literal["improving", "declining", "stable"]

TARGET_TYPES = ("sets", "reps")
TARGET_PERIODS = ("daily", "weekly", "monthly", "yearly")


class Category(str, Enum):
    """Built-in exercise categories. Users may add their own labels."""

    ABS = "abs"
    LEGS = "legs"
    ARMS = "arms"
    BACK = "back"
    SHOULDERS = "shoulders"
    CHEST = "chest"
    CARDIO = "cardio"
    FULL_BODY = "full-body"


CATEGORY_LABELS: dict[str, str] = {
    Category.ABS.value: "Abs",
    Category.LEGS.value: "Legs",
    Category.ARMS.value: "Arms",
    Category.BACK.value: "Back",
    Category.SHOULDERS.value: "Shoulders",
    Category.CHEST.value: "Chest",
    Category.CARDIO.value: "Cardio",
    Category.FULL_BODY.value: "Full Body",
}


def is_builtin_category(category: str) -> bool:
    """Return True if the label is one of the closed built-in categories."""
    return category in CATEGORY_LABELS


def category_label(category: str) -> str:
    """Display label for a category; custom labels are title-cased."""
    return CATEGORY_LABELS.get(category, category.replace("-", " ").title())


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return str(uuid.uuid4())


@dataclass
class Exercise:
    """
    A user-defined exercise.

    Only name, description and category may change after creation.
    """

    id: str
    name: str
    category: str
    created_at: datetime
    description: str | None = None

    def __post_init__(self) -> None:
        """Validate exercise data."""
        if not self.name or not self.name.strip():
            raise ValueError("Exercise name must be non-empty")
        if not self.category or not self.category.strip():
            raise ValueError("Exercise category must be non-empty")


@dataclass
class WorkoutSet:
    """
    One performance of one exercise within a workout.

    Owned by its Workout; exercise_id is a weak reference into the catalog.
    """

    id: str
    exercise_id: str
    reps: int
    notes: str | None = None

    def __post_init__(self) -> None:
        if self.reps < 0:
            raise ValueError("reps must be non-negative")


@dataclass
class Workout:
    """
    All sets performed on a single calendar day.

    The order of ``sets`` matters: it encodes set 1, set 2, ... of each
    exercise for per-position statistics.
    """

    id: str
    date: date
    sets: list[WorkoutSet] = field(default_factory=list)
    notes: str | None = None

    def __post_init__(self) -> None:
        # Day granularity only: a datetime is truncated to its calendar day.
        if isinstance(self.date, datetime):
            self.date = self.date.date()

    @property
    def total_reps(self) -> int:
        """Sum of reps across all sets in this workout."""
        return sum(s.reps for s in self.sets)

    def sets_for(self, exercise_id: str) -> list[WorkoutSet]:
        """Sets of one exercise, in logged order."""
        return [s for s in self.sets if s.exercise_id == exercise_id]


@dataclass
class TemplateEntry:
    """One (exercise, set count) line of a template."""

    exercise_id: str
    sets: int

    def __post_init__(self) -> None:
        if self.sets < 1:
            raise ValueError("Template set count must be at least 1")


@dataclass
class WorkoutTemplate:
    """A reusable blueprint for quickly populating a workout."""

    id: str
    name: str
    exercises: list[TemplateEntry] = field(default_factory=list)
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Template name must be non-empty")

    @property
    def total_sets(self) -> int:
        return sum(e.sets for e in self.exercises)


@dataclass(frozen=True)
class Scope:
    """
    Which sets a statistic looks at.

    A specific exercise takes precedence over a category; with neither set
    every set qualifies.
    """

    exercise_id: str | None = None
    category: str | None = None

    @property
    def is_unscoped(self) -> bool:
        return self.exercise_id is None and self.category is None

    def matches(self, workout_set: WorkoutSet, categories: dict[str, str]) -> bool:
        """
        Return True if the set falls inside this scope.

        Args:
            workout_set: Set to test
            categories: Mapping exercise_id -> category for the catalog

        A set whose exercise is missing from the catalog never matches a
        category scope.
        """
        if self.exercise_id is not None:
            return workout_set.exercise_id == self.exercise_id
        if self.category is not None:
            return categories.get(workout_set.exercise_id) == self.category
        return True


@dataclass
class WorkoutTarget:
    """
    A recurring goal evaluated against the current period.

    Progress is never stored; see core.targets.evaluate_target.
    """

    id: str
    name: str
    target_type: TargetType
    target_value: int
    period: TargetPeriod
    created_at: datetime
    exercise_id: str | None = None
    category: str | None = None
    is_active: bool = True

    def __post_init__(self) -> None:
        """Validate target data."""
        if not self.name or not self.name.strip():
            raise ValueError("Target name must be non-empty")
        if self.target_type not in TARGET_TYPES:
            raise ValueError(f"Invalid target_type: {self.target_type}")
        if self.period not in TARGET_PERIODS:
            raise ValueError(f"Invalid period: {self.period}")
        if self.target_value <= 0:
            raise ValueError("target_value must be positive")

    @property
    def scope(self) -> Scope:
        return Scope(exercise_id=self.exercise_id, category=self.category)


@dataclass
class TrackerState:
    """
    Complete application state: the four persisted collections.
    """

    exercises: list[Exercise] = field(default_factory=list)
    workouts: list[Workout] = field(default_factory=list)
    templates: list[WorkoutTemplate] = field(default_factory=list)
    targets: list[WorkoutTarget] = field(default_factory=list)


# =============================================================================
# Collaborator-boundary values
# =============================================================================


@dataclass
class DraftSet:
    """A set being entered, before it has an id."""

    exercise_id: str
    reps: int = 0
    notes: str | None = None


@dataclass
class WorkoutDraft:
    """
    Partially entered workout data.

    Held by the presentation layer and handed to the core only on save
    (see core.catalog.commit_draft).
    """

    sets: list[DraftSet] = field(default_factory=list)
    notes: str | None = None


@dataclass(frozen=True)
class ImportSingle:
    """One template to add to the catalog."""

    template: WorkoutTemplate


@dataclass(frozen=True)
class ImportBatch:
    """Several templates to add to the catalog at once."""

    templates: tuple[WorkoutTemplate, ...]


TemplateImport = ImportSingle | ImportBatch


# =============================================================================
# Derived statistics
# =============================================================================


@dataclass(frozen=True)
class AggregateStats:
    """Overall counts and streaks."""

    total_workouts: int
    total_sets: int
    total_reps: int
    current_streak: int
    longest_streak: int


@dataclass(frozen=True)
class CoverageResult:
    """Share of elapsed days in a period that contain a workout."""

    start: date
    end: date  # effective end (capped at today)
    percentage: int
    workout_days: int
    total_days: int


@dataclass(frozen=True)
class DailyActivity:
    """Sets and reps logged on one calendar day."""

    date: date
    sets: int
    reps: int


@dataclass(frozen=True)
class ExerciseUsage:
    """How many sets of an exercise were logged."""

    exercise: Exercise
    set_count: int


@dataclass(frozen=True)
class MaxRepPoint:
    """A personal-record step: a new running maximum for an exercise."""

    date: date
    max_reps: int
    set_position: int  # 1-based among that exercise's sets; 0 for synthetic points


@dataclass(frozen=True)
class YearSummary:
    """Rep totals for one calendar year (year-to-date for the current year)."""

    year: int
    total_reps: int
    workout_days: int
    daily_average: float  # reps per workout day
    reps_per_day: float  # reps per calendar day, rest days included
    total_days: int


@dataclass(frozen=True)
class YearOverYear:
    """Current year-to-date compared with the full prior year."""

    current_year: YearSummary
    last_year: YearSummary

    @property
    def reps_delta(self) -> int:
        return self.current_year.total_reps - self.last_year.total_reps

    @property
    def reps_per_day_delta(self) -> float:
        return round(self.current_year.reps_per_day - self.last_year.reps_per_day, 1)


@dataclass(frozen=True)
class SetPositionStats:
    """Max and average reps achieved in the Nth set of an exercise."""

    set_position: int
    max_reps: int
    average_reps: float
    total_sets: int


@dataclass(frozen=True)
class ConsistencyTrend:
    """Direction of change in rest intervals across a window."""

    direction: TrendDirection
    change_pct: float  # signed; negative = shorter recent rests
    earlier_median: float
    recent_median: float


@dataclass(frozen=True)
class ConsistencyStats:
    """
    Rest-interval analysis for a category or exercise.

    ``pattern`` and ``median_rest_days`` are None when fewer than two
    workouts qualify: no data is distinct from noisy data.
    """

    workout_count: int
    median_rest_days: float | None
    pattern: Pattern | None
    trend: ConsistencyTrend | None = None

    @property
    def has_pattern(self) -> bool:
        return self.pattern is not None


@dataclass(frozen=True)
class TargetProgress:
    """Live progress of a target in its current period."""

    target_id: str
    current_value: int
    target_value: int
    percentage: float  # capped at 100 for display
    raw_percentage: float  # uncapped
    is_completed: bool
    is_exceeded: bool
    period_start: date
    period_end: date
