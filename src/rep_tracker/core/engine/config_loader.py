"""
YAML -> typed config loader.

Loads tunable thresholds from stats.yaml (bundled with the package) and
optionally merges user overrides from ~/.rep-tracker/stats.yaml. Also
loads the bundled default exercise catalog (exercises.yaml).

Usage:
    from rep_tracker.core.engine.config_loader import stats_thresholds
    thresholds = stats_thresholds()
    thresholds.stable_cv  # 0.4 unless overridden

If the bundled YAML cannot be read, all lookups return the Python defaults
from config.py. If the user override file exists but has parse errors, a
warning is emitted and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ..config import (
    CONSISTENCY_WINDOW_MONTHS,
    DAILY_ACTIVITY_DAYS,
    MAX_REP_WINDOW_YEARS,
    SET_POSITION_WINDOW_MONTHS,
    STABLE_CV_THRESHOLD,
    TREND_CHANGE_THRESHOLD_PCT,
    VARIABLE_CV_THRESHOLD,
)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file.

    Raises:
        OSError: If the file cannot be read
        yaml.YAMLError: If the file is not valid YAML
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _bundled_path(name: str) -> Path | None:
    ref = importlib.resources.files("rep_tracker").joinpath(name)
    if not ref.is_file():
        return None
    return Path(str(ref))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_user_config_dir() -> Path:
    """~/.rep-tracker, or $REP_TRACKER_HOME when set."""
    override = os.environ.get("REP_TRACKER_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".rep-tracker"


def get_user_yaml_path() -> Path | None:
    """Return the user's stats.yaml if it exists, else None."""
    p = get_user_config_dir() / "stats.yaml"
    return p if p.exists() else None


def load_stats_config() -> dict[str, Any]:
    """
    Load and merge stats configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/rep_tracker/stats.yaml
    2. User override at ~/.rep-tracker/stats.yaml

    Returns:
        Merged dict of config sections. Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = _bundled_path("stats.yaml")
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        try:
            user_cfg = _load_yaml_file(user)
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"rep-tracker: ignoring {user}: {exc}", stacklevel=2)
        else:
            config = _deep_merge(config, user_cfg)

    return config


@dataclass(frozen=True)
class StatsThresholds:
    """Typed view of the tunable values in stats.yaml."""

    stable_cv: float = STABLE_CV_THRESHOLD
    variable_cv: float = VARIABLE_CV_THRESHOLD
    consistency_window_months: int = CONSISTENCY_WINDOW_MONTHS
    trend_change_threshold_pct: float = TREND_CHANGE_THRESHOLD_PCT
    max_rep_window_years: int = MAX_REP_WINDOW_YEARS
    set_position_window_months: int = SET_POSITION_WINDOW_MONTHS
    daily_activity_days: int = DAILY_ACTIVITY_DAYS

    def __post_init__(self) -> None:
        if not 0 < self.stable_cv < self.variable_cv:
            raise ValueError(
                "STABLE_CV_THRESHOLD must be positive and below VARIABLE_CV_THRESHOLD"
            )


def stats_thresholds(config: dict[str, Any] | None = None) -> StatsThresholds:
    """
    Build StatsThresholds from a loaded config (or load it now).

    Missing keys fall back to the constants in config.py.
    """
    if config is None:
        config = load_stats_config()
    consistency = config.get("consistency", {}) or {}
    progression = config.get("progression", {}) or {}
    activity = config.get("activity", {}) or {}

    return StatsThresholds(
        stable_cv=float(consistency.get("STABLE_CV_THRESHOLD", STABLE_CV_THRESHOLD)),
        variable_cv=float(consistency.get("VARIABLE_CV_THRESHOLD", VARIABLE_CV_THRESHOLD)),
        consistency_window_months=int(consistency.get("WINDOW_MONTHS", CONSISTENCY_WINDOW_MONTHS)),
        trend_change_threshold_pct=float(
            consistency.get("TREND_CHANGE_THRESHOLD_PCT", TREND_CHANGE_THRESHOLD_PCT)
        ),
        max_rep_window_years=int(progression.get("MAX_REP_WINDOW_YEARS", MAX_REP_WINDOW_YEARS)),
        set_position_window_months=int(
            progression.get("SET_POSITION_WINDOW_MONTHS", SET_POSITION_WINDOW_MONTHS)
        ),
        daily_activity_days=int(activity.get("DAILY_ACTIVITY_DAYS", DAILY_ACTIVITY_DAYS)),
    )


def load_default_exercise_specs() -> list[dict[str, Any]]:
    """
    Return the bundled default exercise definitions.

    Each entry is a dict with "name", "category" and optional
    "description".
    """
    path = _bundled_path("exercises.yaml")
    if path is None:
        return []
    entries = _load_yaml_file(path).get("exercises") or []
    return [e for e in entries if isinstance(e, dict)]
