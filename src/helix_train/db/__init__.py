"""Database layer for helix-train."""

from .engine import connect, get_db_path, init_db, seed_exercises
from .repositories import (
    ExerciseRepository,
    ProtocolRepository,
    WorkoutInstanceRepository,
)

__all__ = [
    "connect",
    "ExerciseRepository",
    "get_db_path",
    "init_db",
    "ProtocolRepository",
    "seed_exercises",
    "WorkoutInstanceRepository",
]
