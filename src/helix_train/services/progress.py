"""Elapsed time, completion and volume for workout instances.

Everything here is recomputed from the instance tree on every call; no
running totals are cached on parent nodes. The functions never mutate the
instance and never raise on missing data.
"""

from dataclasses import dataclass, field

from ..models.duration import format_clock, to_seconds
from ..models.instance import (
    WorkoutBlockExerciseInstance,
    WorkoutBlockInstance,
    WorkoutInstance,
)
from ..models.load import to_kilograms


def _completion_ratio(leaves: list[WorkoutBlockExerciseInstance]) -> float:
    # Nothing to do counts as done
    if not leaves:
        return 1.0
    return sum(1 for leaf in leaves if leaf.complete) / len(leaves)


def _elapsed(leaves: list[WorkoutBlockExerciseInstance]) -> float:
    return sum(to_seconds(leaf.actual_duration) for leaf in leaves if leaf.complete)


def _remaining(leaves: list[WorkoutBlockExerciseInstance]) -> float:
    return sum(
        to_seconds(leaf.prescribed_duration) + to_seconds(leaf.prescribed_rest)
        for leaf in leaves
        if not leaf.complete
    )


def _volume(leaves: list[WorkoutBlockExerciseInstance]) -> float:
    # The logged load wins; an unlogged set is assumed to be at the prescribed load
    return sum(
        leaf.reps_completed * to_kilograms(leaf.actual_load or leaf.prescribed_load)
        for leaf in leaves
        if leaf.complete
    )


def compute_elapsed(instance: WorkoutInstance) -> float:
    """Seconds actually performed across all completed exercises."""
    return _elapsed(instance.leaves())


def compute_completion_ratio(instance: WorkoutInstance) -> float:
    """Fraction of exercises completed, in [0, 1].

    An instance with no exercises is vacuously complete (1.0).
    """
    return _completion_ratio(instance.leaves())


def compute_remaining(instance: WorkoutInstance) -> float:
    """Prescribed work and rest still ahead, in seconds."""
    return _remaining(instance.leaves())


def compute_volume(instance: WorkoutInstance) -> float:
    """Total load moved (reps times load) over completed sets, in kilograms."""
    return _volume(instance.leaves())


@dataclass
class BlockProgress:
    """Per-block subtotal."""

    block_id: str
    name: str
    completed: int
    total: int
    elapsed_seconds: float
    remaining_seconds: float
    volume_kg: float = 0.0

    @property
    def ratio(self) -> float:
        return 1.0 if self.total == 0 else self.completed / self.total

    def to_dict(self) -> dict:
        return {
            "block_id": self.block_id,
            "name": self.name,
            "completed": self.completed,
            "total": self.total,
            "ratio": self.ratio,
            "elapsed_seconds": self.elapsed_seconds,
            "elapsed_clock": format_clock(self.elapsed_seconds),
            "remaining_seconds": self.remaining_seconds,
            "remaining_clock": format_clock(self.remaining_seconds),
            "volume_kg": self.volume_kg,
        }


def _block_progress(block: WorkoutBlockInstance) -> BlockProgress:
    return BlockProgress(
        block_id=block.id,
        name=block.name,
        completed=sum(1 for ex in block.exercises if ex.complete),
        total=len(block.exercises),
        elapsed_seconds=_elapsed(block.exercises),
        remaining_seconds=_remaining(block.exercises),
        volume_kg=_volume(block.exercises),
    )


def block_subtotals(instance: WorkoutInstance) -> list[BlockProgress]:
    """Progress of each block in sequence order."""
    return [_block_progress(block) for block in instance.blocks]


@dataclass
class ProgressSummary:
    """Session-level progress for display."""

    instance_id: str
    elapsed_seconds: float
    remaining_seconds: float
    completion_ratio: float
    completed: int
    total: int
    is_completed: bool
    volume_kg: float = 0.0
    blocks: list[BlockProgress] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "instance_id": self.instance_id,
            "elapsed_seconds": self.elapsed_seconds,
            "elapsed_clock": format_clock(self.elapsed_seconds),
            "remaining_seconds": self.remaining_seconds,
            "remaining_clock": format_clock(self.remaining_seconds),
            "completion_ratio": self.completion_ratio,
            "completed": self.completed,
            "total": self.total,
            "is_completed": self.is_completed,
            "volume_kg": self.volume_kg,
            "blocks": [block.to_dict() for block in self.blocks],
        }


def summarize(instance: WorkoutInstance) -> ProgressSummary:
    """Compute every progress figure for an instance."""
    blocks = block_subtotals(instance)
    leaves = instance.leaves()
    return ProgressSummary(
        instance_id=instance.id,
        elapsed_seconds=_elapsed(leaves),
        remaining_seconds=_remaining(leaves),
        completion_ratio=_completion_ratio(leaves),
        completed=sum(b.completed for b in blocks),
        total=len(leaves),
        is_completed=instance.is_completed,
        volume_kg=_volume(leaves),
        blocks=blocks,
    )
