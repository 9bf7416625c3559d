"""rep-tracker: workout log and statistics engine for bodyweight training."""

__version__ = "0.1.0"
