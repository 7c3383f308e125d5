"""Training protocol template models.

A Protocol owns an ordered sequence of WorkoutBlocks, each owning an ordered
sequence of WorkoutBlockExercises. Templates are only validated here; all
computation lives in the services layer.
"""

from collections.abc import Iterable
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ..errors import ValidationError
from .duration import DurationValue, to_seconds
from .identity import format_timestamp, new_id, parse_timestamp
from .load import LoadValue


class BlockType(str, Enum):
    """Role of a block within a session."""

    WARM_UP = "warm_up"
    PREP = "prep"
    MAIN = "main"
    ACCESSORY = "accessory"
    FINISHER = "finisher"
    COOL_DOWN = "cool_down"
    OTHER = "other"


def _duration_dict(duration: DurationValue | None) -> dict | None:
    return duration.to_dict() if duration else None


def _is_count(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _check_positions(items: Iterable, label: str) -> None:
    """Positions must be unique and strictly increasing in sequence order."""
    previous = None
    for item in items:
        if not _is_count(item.position):
            raise ValidationError(f"{label} has invalid position {item.position!r}")
        if previous is not None and item.position <= previous:
            raise ValidationError(
                f"{label} positions must be unique and ascending "
                f"({item.position} follows {previous})"
            )
        previous = item.position


def _position(data: dict, index: int) -> int:
    position = data.get("position")
    return index if position is None else position


def _block_type(raw) -> BlockType:
    try:
        return BlockType(raw)
    except ValueError:
        raise ValidationError(f"Unknown block type {raw!r}") from None


@contextmanager
def _malformed(label: str):
    """Report structurally bad input as a ValidationError."""
    try:
        yield
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Malformed {label}: {e}") from e


@dataclass
class WorkoutBlockExercise:
    """One prescribed movement within a block."""

    exercise_id: str
    exercise_name: str = ""
    position: int = 0
    sets: int = 1
    reps: int | None = None
    duration: DurationValue | None = None  # None for rep-based work
    rest: DurationValue | None = None
    load: LoadValue | None = None
    rpe: float | None = None
    tempo: str = ""
    notes: str = ""
    id: str = field(default_factory=new_id)

    def validate(self, known_exercise_ids: set[str] | None = None) -> None:
        """Check the exercise reference and prescription values."""
        if not self.exercise_id or not isinstance(self.exercise_id, str):
            raise ValidationError("Exercise must reference an exercise id")
        if known_exercise_ids is not None and self.exercise_id not in known_exercise_ids:
            raise ValidationError(f"Unknown exercise id {self.exercise_id!r}")
        if not _is_count(self.sets):
            raise ValidationError(f"Sets must be a non-negative integer, got {self.sets!r}")
        if self.reps is not None and not _is_count(self.reps):
            raise ValidationError(f"Reps must be a non-negative integer, got {self.reps!r}")

    def prescribed_seconds(self) -> float:
        """Time prescribed for all sets including rest."""
        return max(self.sets, 1) * (to_seconds(self.duration) + to_seconds(self.rest))

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "exercise_id": self.exercise_id,
            "exercise_name": self.exercise_name,
            "position": self.position,
            "sets": self.sets,
            "reps": self.reps,
            "duration": _duration_dict(self.duration),
            "rest": _duration_dict(self.rest),
            "load": self.load.to_dict() if self.load else None,
            "rpe": self.rpe,
            "tempo": self.tempo,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict, position: int = 0) -> "WorkoutBlockExercise":
        """Create from dictionary."""
        if not isinstance(data, dict):
            raise ValidationError(f"Exercise entry must be an object, got {data!r}")
        return cls(
            id=data.get("id") or new_id(),
            exercise_id=data.get("exercise_id", ""),
            exercise_name=data.get("exercise_name", ""),
            position=_position(data, position),
            sets=data.get("sets", 1),
            reps=data.get("reps"),
            duration=DurationValue.from_dict(data.get("duration")),
            rest=DurationValue.from_dict(data.get("rest")),
            load=LoadValue.from_dict(data.get("load")),
            rpe=data.get("rpe"),
            tempo=data.get("tempo", ""),
            notes=data.get("notes", ""),
        )


@dataclass
class WorkoutBlock:
    """A named, ordered grouping of exercises."""

    name: str
    exercises: list[WorkoutBlockExercise] = field(default_factory=list)
    position: int = 0
    rest: DurationValue | None = None
    block_type: BlockType = BlockType.MAIN
    circuit: bool = False
    notes: str = ""
    id: str = field(default_factory=new_id)

    def add_exercise(self, exercise: WorkoutBlockExercise) -> WorkoutBlockExercise:
        """Append an exercise at the next free position."""
        exercise.position = self.exercises[-1].position + 1 if self.exercises else 0
        self.exercises.append(exercise)
        return exercise

    def validate(self, known_exercise_ids: set[str] | None = None) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Block name is required")
        _check_positions(self.exercises, f"Exercises in block {self.name!r}")
        for exercise in self.exercises:
            exercise.validate(known_exercise_ids)

    def prescribed_seconds(self) -> float:
        return sum(ex.prescribed_seconds() for ex in self.exercises) + to_seconds(self.rest)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "position": self.position,
            "exercises": [ex.to_dict() for ex in self.exercises],
            "rest": _duration_dict(self.rest),
            "block_type": self.block_type.value,
            "circuit": self.circuit,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict, position: int = 0) -> "WorkoutBlock":
        """Create from dictionary and validate the result."""
        with _malformed("block"):
            block = cls(
                id=data.get("id") or new_id(),
                name=data.get("name", ""),
                position=_position(data, position),
                exercises=[
                    WorkoutBlockExercise.from_dict(ex, position=i)
                    for i, ex in enumerate(data.get("exercises", []))
                ],
                rest=DurationValue.from_dict(data.get("rest")),
                block_type=_block_type(data.get("block_type", BlockType.MAIN.value)),
                circuit=data.get("circuit", False),
                notes=data.get("notes", ""),
            )
            block.validate()
        return block


@dataclass
class Protocol:
    """A reusable, authored workout template."""

    name: str
    blocks: list[WorkoutBlock] = field(default_factory=list)
    description: str = ""
    objectives: list[str] = field(default_factory=list)
    days_per_week: int | None = None
    id: str = field(default_factory=new_id)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def add_block(self, block: WorkoutBlock) -> WorkoutBlock:
        """Append a block at the next free position."""
        block.position = self.blocks[-1].position + 1 if self.blocks else 0
        self.blocks.append(block)
        return block

    def validate(self, known_exercise_ids: set[str] | None = None) -> None:
        """Validate the whole template tree.

        Raises:
            ValidationError: on an empty name, bad positions or bad exercises
        """
        if not self.name or not self.name.strip():
            raise ValidationError("Protocol name is required")
        _check_positions(self.blocks, f"Blocks in protocol {self.name!r}")
        for block in self.blocks:
            block.validate(known_exercise_ids)

    def get_block(self, block_id: str) -> WorkoutBlock | None:
        for block in self.blocks:
            if block.id == block_id:
                return block
        return None

    @property
    def exercise_count(self) -> int:
        return sum(len(block.exercises) for block in self.blocks)

    def prescribed_seconds(self) -> float:
        """Total prescribed work and rest across all blocks."""
        return sum(block.prescribed_seconds() for block in self.blocks)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "objectives": self.objectives,
            "days_per_week": self.days_per_week,
            "blocks": [block.to_dict() for block in self.blocks],
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Protocol":
        """Create from dictionary and validate the result.

        Raises:
            ValidationError: on missing, mistyped or out-of-range fields
        """
        with _malformed("protocol"):
            protocol = cls(
                id=data.get("id") or new_id(),
                name=data.get("name", ""),
                description=data.get("description") or "",
                objectives=data.get("objectives", []),
                days_per_week=data.get("days_per_week"),
                blocks=[
                    WorkoutBlock.from_dict(block, position=i)
                    for i, block in enumerate(data.get("blocks", []))
                ],
                created_at=parse_timestamp(data.get("created_at")),
                updated_at=parse_timestamp(data.get("updated_at")),
            )
            protocol.validate()
        return protocol

    def get_summary(self) -> str:
        """Generate a text summary of the protocol."""
        summary = f"Protocol: {self.name}\n"
        if self.description:
            summary += f"Description: {self.description}\n"
        summary += f"Blocks: {len(self.blocks)}, exercises: {self.exercise_count}\n\n"

        for block in self.blocks:
            label = f"{block.name} [{block.block_type.value}]"
            if block.circuit:
                label += " (circuit)"
            summary += f"  {label}:\n"
            for ex in block.exercises:
                summary += f"    - {ex.exercise_name or ex.exercise_id}: {_format_prescription(ex)}\n"
        return summary


def _format_prescription(ex: WorkoutBlockExercise) -> str:
    parts = []
    if ex.reps is not None:
        parts.append(f"{ex.sets}x{ex.reps}")
    else:
        parts.append(f"{ex.sets} set(s)")
    if ex.load:
        parts[-1] += f" @ {ex.load.value:g}{ex.load.unit.value}"
    if ex.duration:
        parts.append(f"{ex.duration.value:g}{ex.duration.unit.value}")
    if ex.rest:
        parts.append(f"rest {ex.rest.value:g}{ex.rest.unit.value}")
    return ", ".join(parts)
