"""Exercise catalog definitions."""

from dataclasses import dataclass, field
from enum import Enum


class MuscleGroup(str, Enum):
    """Major muscle groups."""

    CHEST = "chest"
    BACK = "back"
    SHOULDERS = "shoulders"
    BICEPS = "biceps"
    TRICEPS = "triceps"
    QUADS = "quads"
    HAMSTRINGS = "hamstrings"
    GLUTES = "glutes"
    CALVES = "calves"
    ABS = "abs"
    LATS = "lats"
    CARDIO = "cardio"


class MovementPattern(str, Enum):
    """Fundamental movement patterns."""

    PUSH_HORIZONTAL = "push_horizontal"
    PUSH_VERTICAL = "push_vertical"
    PULL_HORIZONTAL = "pull_horizontal"
    PULL_VERTICAL = "pull_vertical"
    SQUAT = "squat"
    HINGE = "hinge"
    LUNGE = "lunge"
    CARRY = "carry"
    ISOMETRIC = "isometric"
    CONDITIONING = "conditioning"


@dataclass
class Exercise:
    """A movement that template exercises reference by id."""

    name: str
    muscle_groups: list[MuscleGroup]
    movement_pattern: MovementPattern
    aliases: list[str] = field(default_factory=list)
    description: str = ""
    is_compound: bool = False
    id: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "name": self.name,
            "muscle_groups": [mg.value for mg in self.muscle_groups],
            "movement_pattern": self.movement_pattern.value,
            "aliases": self.aliases,
            "description": self.description,
            "is_compound": self.is_compound,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Exercise":
        """Create from dictionary."""
        return cls(
            id=data.get("id"),
            name=data["name"],
            muscle_groups=[MuscleGroup(mg) for mg in data.get("muscle_groups", [])],
            movement_pattern=MovementPattern(data["movement_pattern"]),
            aliases=data.get("aliases", []),
            description=data.get("description", ""),
            is_compound=data.get("is_compound", False),
        )


# Seed library; ids are stable slugs so seeded protocols can reference them
COMMON_EXERCISES: list[Exercise] = [
    Exercise(
        id="back-squat",
        name="Back Squat",
        muscle_groups=[MuscleGroup.QUADS, MuscleGroup.GLUTES],
        movement_pattern=MovementPattern.SQUAT,
        aliases=["Squat", "BB Squat"],
        is_compound=True,
    ),
    Exercise(
        id="deadlift",
        name="Deadlift",
        muscle_groups=[MuscleGroup.HAMSTRINGS, MuscleGroup.GLUTES, MuscleGroup.BACK],
        movement_pattern=MovementPattern.HINGE,
        aliases=["Conventional Deadlift"],
        is_compound=True,
    ),
    Exercise(
        id="bench-press",
        name="Bench Press",
        muscle_groups=[MuscleGroup.CHEST, MuscleGroup.TRICEPS, MuscleGroup.SHOULDERS],
        movement_pattern=MovementPattern.PUSH_HORIZONTAL,
        aliases=["Flat Bench", "BB Bench"],
        is_compound=True,
    ),
    Exercise(
        id="overhead-press",
        name="Overhead Press",
        muscle_groups=[MuscleGroup.SHOULDERS, MuscleGroup.TRICEPS],
        movement_pattern=MovementPattern.PUSH_VERTICAL,
        aliases=["OHP", "Military Press"],
        is_compound=True,
    ),
    Exercise(
        id="pull-up",
        name="Pull Up",
        muscle_groups=[MuscleGroup.LATS, MuscleGroup.BICEPS],
        movement_pattern=MovementPattern.PULL_VERTICAL,
        aliases=["Pullup", "Chin Up"],
        is_compound=True,
    ),
    Exercise(
        id="bent-over-row",
        name="Bent Over Row",
        muscle_groups=[MuscleGroup.BACK, MuscleGroup.LATS, MuscleGroup.BICEPS],
        movement_pattern=MovementPattern.PULL_HORIZONTAL,
        aliases=["Barbell Row", "BB Row"],
        is_compound=True,
    ),
    Exercise(
        id="walking-lunge",
        name="Walking Lunge",
        muscle_groups=[MuscleGroup.QUADS, MuscleGroup.GLUTES],
        movement_pattern=MovementPattern.LUNGE,
        aliases=["Lunge"],
        is_compound=True,
    ),
    Exercise(
        id="farmers-carry",
        name="Farmer's Carry",
        muscle_groups=[MuscleGroup.BACK, MuscleGroup.ABS],
        movement_pattern=MovementPattern.CARRY,
        aliases=["Farmer Walk"],
        is_compound=True,
    ),
    Exercise(
        id="plank",
        name="Plank",
        muscle_groups=[MuscleGroup.ABS],
        movement_pattern=MovementPattern.ISOMETRIC,
        aliases=["Front Plank"],
    ),
    Exercise(
        id="rowing-erg",
        name="Rowing Erg",
        muscle_groups=[MuscleGroup.CARDIO, MuscleGroup.BACK],
        movement_pattern=MovementPattern.CONDITIONING,
        aliases=["Row", "Concept2"],
    ),
    Exercise(
        id="jump-rope",
        name="Jump Rope",
        muscle_groups=[MuscleGroup.CARDIO, MuscleGroup.CALVES],
        movement_pattern=MovementPattern.CONDITIONING,
        aliases=["Skipping"],
    ),
]


def get_common_exercise(exercise_id: str) -> Exercise | None:
    """Look up a seeded exercise by id."""
    for exercise in COMMON_EXERCISES:
        if exercise.id == exercise_id:
            return exercise
    return None
