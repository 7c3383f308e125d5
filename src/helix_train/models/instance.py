"""Workout instance models.

Instances are the mutable record of a performed session. Each tier keeps
its own copy of the template's display fields and prescribed values, and
refers back to the template only by id. Those ids are lookups, not
ownership: the template may be edited or deleted without touching history.
"""

from dataclasses import dataclass, field
from datetime import datetime

from .duration import DurationValue
from .identity import format_timestamp, new_id, parse_timestamp, utcnow
from .load import LoadValue
from .protocol import BlockType


def _duration_dict(duration: DurationValue | None) -> dict | None:
    return duration.to_dict() if duration else None


def _load_dict(load: LoadValue | None) -> dict | None:
    return load.to_dict() if load else None


@dataclass
class WorkoutBlockExerciseInstance:
    """A single logged set of an exercise (the leaf tier)."""

    exercise_id: str
    exercise_name: str = ""
    position: int = 0
    set_number: int = 1
    template_exercise_id: str | None = None
    # Copied from the template at instantiation
    prescribed_sets: int = 1
    prescribed_reps: int | None = None
    prescribed_duration: DurationValue | None = None
    prescribed_rest: DurationValue | None = None
    prescribed_load: LoadValue | None = None
    # Actual performance
    reps_completed: int = 0
    actual_duration: DurationValue | None = None
    actual_rest: DurationValue | None = None
    actual_load: LoadValue | None = None
    rpe: float | None = None
    notes: str = ""
    complete: bool = False
    completed_at: datetime | None = None
    id: str = field(default_factory=new_id)

    def mark_complete(
        self,
        reps: int | None = None,
        duration: DurationValue | None = None,
        rest: DurationValue | None = None,
        load: LoadValue | None = None,
        at: datetime | None = None,
    ) -> None:
        """Record performance and flag the set as done."""
        if reps is not None:
            self.reps_completed = reps
        if duration is not None:
            self.actual_duration = duration
        if rest is not None:
            self.actual_rest = rest
        if load is not None:
            self.actual_load = load
        self.complete = True
        self.completed_at = at or utcnow()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "template_exercise_id": self.template_exercise_id,
            "exercise_id": self.exercise_id,
            "exercise_name": self.exercise_name,
            "position": self.position,
            "set_number": self.set_number,
            "prescribed_sets": self.prescribed_sets,
            "prescribed_reps": self.prescribed_reps,
            "prescribed_duration": _duration_dict(self.prescribed_duration),
            "prescribed_rest": _duration_dict(self.prescribed_rest),
            "prescribed_load": _load_dict(self.prescribed_load),
            "reps_completed": self.reps_completed,
            "actual_duration": _duration_dict(self.actual_duration),
            "actual_rest": _duration_dict(self.actual_rest),
            "actual_load": _load_dict(self.actual_load),
            "rpe": self.rpe,
            "notes": self.notes,
            "complete": self.complete,
            "completed_at": format_timestamp(self.completed_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutBlockExerciseInstance":
        """Create from dictionary."""
        return cls(
            id=data.get("id") or new_id(),
            template_exercise_id=data.get("template_exercise_id"),
            exercise_id=data["exercise_id"],
            exercise_name=data.get("exercise_name", ""),
            position=data.get("position", 0),
            set_number=data.get("set_number", 1),
            prescribed_sets=data.get("prescribed_sets", 1),
            prescribed_reps=data.get("prescribed_reps"),
            prescribed_duration=DurationValue.from_dict(data.get("prescribed_duration")),
            prescribed_rest=DurationValue.from_dict(data.get("prescribed_rest")),
            prescribed_load=LoadValue.from_dict(data.get("prescribed_load")),
            reps_completed=data.get("reps_completed", 0),
            actual_duration=DurationValue.from_dict(data.get("actual_duration")),
            actual_rest=DurationValue.from_dict(data.get("actual_rest")),
            actual_load=LoadValue.from_dict(data.get("actual_load")),
            rpe=data.get("rpe"),
            notes=data.get("notes", ""),
            complete=data.get("complete", False),
            completed_at=parse_timestamp(data.get("completed_at")),
        )


@dataclass
class WorkoutBlockInstance:
    """A performed block within a session."""

    name: str
    exercises: list[WorkoutBlockExerciseInstance] = field(default_factory=list)
    position: int = 0
    template_block_id: str | None = None
    block_type: BlockType = BlockType.MAIN
    prescribed_rest: DurationValue | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None
    id: str = field(default_factory=new_id)

    def get_exercise(self, exercise_instance_id: str) -> WorkoutBlockExerciseInstance | None:
        for exercise in self.exercises:
            if exercise.id == exercise_instance_id:
                return exercise
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "template_block_id": self.template_block_id,
            "name": self.name,
            "position": self.position,
            "block_type": self.block_type.value,
            "prescribed_rest": _duration_dict(self.prescribed_rest),
            "exercises": [ex.to_dict() for ex in self.exercises],
            "started_at": format_timestamp(self.started_at),
            "ended_at": format_timestamp(self.ended_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutBlockInstance":
        """Create from dictionary."""
        return cls(
            id=data.get("id") or new_id(),
            template_block_id=data.get("template_block_id"),
            name=data.get("name", ""),
            position=data.get("position", 0),
            block_type=BlockType(data.get("block_type", BlockType.MAIN.value)),
            prescribed_rest=DurationValue.from_dict(data.get("prescribed_rest")),
            exercises=[
                WorkoutBlockExerciseInstance.from_dict(ex)
                for ex in data.get("exercises", [])
            ],
            started_at=parse_timestamp(data.get("started_at")),
            ended_at=parse_timestamp(data.get("ended_at")),
        )


@dataclass
class WorkoutInstance:
    """A single performed session, owned by one user."""

    user_id: str
    blocks: list[WorkoutBlockInstance] = field(default_factory=list)
    template_protocol_id: str | None = None  # None for freeform sessions
    protocol_name: str = ""
    started_at: datetime | None = None
    ended_at: datetime | None = None
    notes: str = ""
    id: str = field(default_factory=new_id)

    @property
    def is_completed(self) -> bool:
        return self.ended_at is not None

    def leaves(self) -> list[WorkoutBlockExerciseInstance]:
        """All exercise instances in block then position order."""
        return [ex for block in self.blocks for ex in block.exercises]

    def find_exercise(
        self, exercise_instance_id: str
    ) -> tuple[WorkoutBlockInstance, WorkoutBlockExerciseInstance] | None:
        """Locate a leaf and the block that holds it."""
        for block in self.blocks:
            exercise = block.get_exercise(exercise_instance_id)
            if exercise is not None:
                return block, exercise
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "template_protocol_id": self.template_protocol_id,
            "protocol_name": self.protocol_name,
            "blocks": [block.to_dict() for block in self.blocks],
            "started_at": format_timestamp(self.started_at),
            "ended_at": format_timestamp(self.ended_at),
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutInstance":
        """Create from dictionary."""
        return cls(
            id=data.get("id") or new_id(),
            user_id=data["user_id"],
            template_protocol_id=data.get("template_protocol_id"),
            protocol_name=data.get("protocol_name", ""),
            blocks=[WorkoutBlockInstance.from_dict(b) for b in data.get("blocks", [])],
            started_at=parse_timestamp(data.get("started_at")),
            ended_at=parse_timestamp(data.get("ended_at")),
            notes=data.get("notes", ""),
        )
