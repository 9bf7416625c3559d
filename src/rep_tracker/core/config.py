"""
Configuration constants for the statistics engine.

All adjustable parameters are centralized here. Thresholds that users may
want to tune are also exposed through stats.yaml (see
core/engine/config_loader.py); the values below are the fallbacks.
"""

from typing import Final

# =============================================================================
# STREAKS
# =============================================================================

# Safety bound on the current-streak walk. A streak is never reported above
# this value; longer runs still count fully in the longest streak.
STREAK_WALK_LIMIT: Final[int] = 365

# =============================================================================
# LOOKBACK WINDOWS
# =============================================================================

MAX_REP_WINDOW_YEARS: Final[int] = 3  # Max-reps-over-time chart
SET_POSITION_WINDOW_MONTHS: Final[int] = 3  # Per-set guidance in the logger
CONSISTENCY_WINDOW_MONTHS: Final[int] = 4  # Rest-interval analysis
DAILY_ACTIVITY_DAYS: Final[int] = 7  # "Last 7 days" panel

# =============================================================================
# CONSISTENCY CLASSIFICATION
# =============================================================================

# Dispersion = population std-dev of rest gaps / median rest gap.
STABLE_CV_THRESHOLD: Final[float] = 0.4  # below: Stable
VARIABLE_CV_THRESHOLD: Final[float] = 0.8  # below: Variable, else Irregular

# With only a couple of gaps the spread is meaningless; long gaps then mean
# the scope is trained irregularly.
MIN_GAPS_FOR_SPREAD: Final[int] = 3
LARGE_GAP_DAYS: Final[float] = 7.0

MIN_WORKOUTS_FOR_PATTERN: Final[int] = 2
MIN_GAPS_FOR_TREND: Final[int] = 2
TREND_CHANGE_THRESHOLD_PCT: Final[float] = 10.0  # |change| above this is a trend

# =============================================================================
# DISPLAY
# =============================================================================

UNKNOWN_EXERCISE_NAME: Final[str] = "Unknown Exercise"
MAX_PERCENTAGE: Final[float] = 100.0
