"""Data models for helix-train."""

from .duration import DurationUnit, DurationValue, format_clock, to_seconds
from .exercises import Exercise, MovementPattern, MuscleGroup
from .instance import WorkoutBlockExerciseInstance, WorkoutBlockInstance, WorkoutInstance
from .load import LoadUnit, LoadValue
from .protocol import BlockType, Protocol, WorkoutBlock, WorkoutBlockExercise

__all__ = [
    "BlockType",
    "DurationUnit",
    "DurationValue",
    "Exercise",
    "LoadUnit",
    "LoadValue",
    "format_clock",
    "MovementPattern",
    "MuscleGroup",
    "Protocol",
    "to_seconds",
    "WorkoutBlock",
    "WorkoutBlockExercise",
    "WorkoutBlockExerciseInstance",
    "WorkoutBlockInstance",
    "WorkoutInstance",
]
