"""helix-train: training protocols, workout sessions and progress tracking."""

__version__ = "0.1.0"
