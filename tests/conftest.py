"""Pytest configuration and fixtures."""

import asyncio
import tempfile
from pathlib import Path

import pytest

from helix_train.db import init_db, seed_exercises
from helix_train.models.duration import DurationUnit, DurationValue
from helix_train.models.load import LoadUnit, LoadValue
from helix_train.models.protocol import (
    BlockType,
    Protocol,
    WorkoutBlock,
    WorkoutBlockExercise,
)


@pytest.fixture
def temp_db_path():
    """Create an initialized, seeded temporary database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        asyncio.run(init_db(db_path))
        asyncio.run(seed_exercises(db_path))
        yield db_path


@pytest.fixture
def sample_protocol():
    """A protocol with two blocks of two and one exercises."""
    return Protocol(
        name="Full Body A",
        description="Strength and conditioning",
        objectives=["strength"],
        blocks=[
            WorkoutBlock(
                name="Main lifts",
                position=0,
                rest=DurationValue(2, DurationUnit.MINUTES),
                exercises=[
                    WorkoutBlockExercise(
                        exercise_id="back-squat",
                        exercise_name="Back Squat",
                        position=0,
                        sets=5,
                        reps=5,
                        load=LoadValue(100, LoadUnit.KILOGRAMS),
                        rest=DurationValue(3, DurationUnit.MINUTES),
                    ),
                    WorkoutBlockExercise(
                        exercise_id="bench-press",
                        exercise_name="Bench Press",
                        position=1,
                        sets=3,
                        reps=8,
                        load=LoadValue(135, LoadUnit.POUNDS),
                        rest=DurationValue(90, DurationUnit.SECONDS),
                    ),
                ],
            ),
            WorkoutBlock(
                name="Finisher",
                position=1,
                block_type=BlockType.ACCESSORY,
                circuit=True,
                exercises=[
                    WorkoutBlockExercise(
                        exercise_id="plank",
                        exercise_name="Plank",
                        position=0,
                        sets=1,
                        duration=DurationValue(45, DurationUnit.SECONDS),
                        rest=DurationValue(15, DurationUnit.SECONDS),
                    ),
                ],
            ),
        ],
    )


@pytest.fixture
def sample_protocol_dict(sample_protocol):
    """Wire form of the sample protocol without ids."""
    data = sample_protocol.to_dict()
    data.pop("id")
    for block in data["blocks"]:
        block.pop("id")
        for ex in block["exercises"]:
            ex.pop("id")
    return data
