"""Tests for protocol and instance models."""

import pytest

from helix_train.errors import InvalidUnit, ValidationError
from helix_train.models.duration import DurationUnit, DurationValue
from helix_train.models.exercises import COMMON_EXERCISES, Exercise, MovementPattern, MuscleGroup
from helix_train.models.instance import WorkoutInstance
from helix_train.models.load import LoadUnit, LoadValue
from helix_train.models.protocol import (
    BlockType,
    Protocol,
    WorkoutBlock,
    WorkoutBlockExercise,
)


class TestExercise:
    """Tests for Exercise model."""

    def test_exercise_round_trip(self):
        exercise = Exercise(
            id="goblet-squat",
            name="Goblet Squat",
            muscle_groups=[MuscleGroup.QUADS],
            movement_pattern=MovementPattern.SQUAT,
        )
        data = exercise.to_dict()

        assert data["movement_pattern"] == "squat"
        assert Exercise.from_dict(data) == exercise

    def test_common_exercises_have_unique_ids(self):
        ids = [e.id for e in COMMON_EXERCISES]
        assert len(ids) == len(set(ids))
        assert "back-squat" in ids


class TestProtocolValidation:
    """Tests for template validation."""

    def test_valid_protocol(self, sample_protocol):
        sample_protocol.validate()

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            Protocol(name="   ").validate()

    def test_duplicate_block_positions_rejected(self):
        protocol = Protocol(
            name="Dupes",
            blocks=[WorkoutBlock(name="A", position=0), WorkoutBlock(name="B", position=0)],
        )
        with pytest.raises(ValidationError):
            protocol.validate()

    def test_out_of_order_exercise_positions_rejected(self):
        block = WorkoutBlock(
            name="A",
            exercises=[
                WorkoutBlockExercise(exercise_id="plank", position=2),
                WorkoutBlockExercise(exercise_id="deadlift", position=1),
            ],
        )
        with pytest.raises(ValidationError):
            Protocol(name="Order", blocks=[block]).validate()

    def test_missing_exercise_reference_rejected(self):
        block = WorkoutBlock(name="A", exercises=[WorkoutBlockExercise(exercise_id="")])
        with pytest.raises(ValidationError):
            block.validate()

    def test_unknown_exercise_rejected_against_catalog(self, sample_protocol):
        with pytest.raises(ValidationError):
            sample_protocol.validate(known_exercise_ids={"back-squat"})

    def test_negative_sets_rejected(self):
        with pytest.raises(ValidationError):
            WorkoutBlockExercise(exercise_id="plank", sets=-1).validate()

    def test_add_block_assigns_next_position(self):
        protocol = Protocol(name="Builder")
        protocol.add_block(WorkoutBlock(name="A"))
        second = protocol.add_block(WorkoutBlock(name="B"))
        assert second.position == 1
        protocol.validate()


class TestProtocolSerialization:
    """Tests for Protocol dict conversion."""

    def test_from_dict_assigns_positions_and_ids(self):
        protocol = Protocol.from_dict({
            "name": "Simple",
            "blocks": [
                {"name": "One", "exercises": [{"exercise_id": "plank"}, {"exercise_id": "deadlift"}]},
                {"name": "Two", "exercises": []},
            ],
        })

        assert [b.position for b in protocol.blocks] == [0, 1]
        assert [e.position for e in protocol.blocks[0].exercises] == [0, 1]
        assert protocol.id
        assert protocol.blocks[0].id != protocol.blocks[1].id

    def test_from_dict_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            Protocol.from_dict({"name": "", "blocks": []})

    def test_from_dict_rejects_bad_unit(self):
        with pytest.raises(InvalidUnit):
            Protocol.from_dict({
                "name": "Bad",
                "blocks": [{
                    "name": "A",
                    "exercises": [{"exercise_id": "plank", "duration": {"value": 1, "unit": "day"}}],
                }],
            })

    def test_round_trip(self, sample_protocol):
        restored = Protocol.from_dict(sample_protocol.to_dict())

        assert restored.id == sample_protocol.id
        assert restored.blocks[1].block_type == BlockType.ACCESSORY
        assert restored.blocks[1].exercises[0].duration == DurationValue(45, DurationUnit.SECONDS)
        assert restored.blocks[0].exercises[1].reps == 8

    def test_load_round_trip(self, sample_protocol):
        restored = Protocol.from_dict(sample_protocol.to_dict())

        assert restored.blocks[0].exercises[0].load == LoadValue(100, LoadUnit.KILOGRAMS)
        assert restored.blocks[0].exercises[1].load == LoadValue(135, LoadUnit.POUNDS)
        assert restored.blocks[1].exercises[0].load is None

    @pytest.mark.parametrize("block_type", ["prep", "finisher", "other"])
    def test_extended_block_types(self, block_type):
        protocol = Protocol.from_dict({
            "name": "Typed",
            "blocks": [{"name": "A", "block_type": block_type, "exercises": []}],
        })
        assert protocol.blocks[0].block_type == BlockType(block_type)

    @pytest.mark.parametrize("exercise", [
        {"exercise_id": "plank", "duration": {"value": "abc", "unit": "s"}},
        {"exercise_id": "plank", "duration": 30},
        {"exercise_id": "plank", "duration": {"value": float("nan"), "unit": "s"}},
        {"exercise_id": "plank", "sets": "three"},
        {"exercise_id": "plank", "load": {"value": 20, "unit": "stone"}},
        "plank",
    ])
    def test_malformed_exercise_rejected(self, exercise):
        with pytest.raises(ValidationError):
            Protocol.from_dict({"name": "Bad", "blocks": [{"name": "A", "exercises": [exercise]}]})

    def test_unknown_block_type_rejected(self):
        with pytest.raises(ValidationError):
            Protocol.from_dict({"name": "Bad", "blocks": [{"name": "A", "block_type": "bogus"}]})

    def test_non_object_block_rejected(self):
        with pytest.raises(ValidationError):
            Protocol.from_dict({"name": "Bad", "blocks": ["A"]})

    def test_absent_duration_serialized_as_null(self, sample_protocol):
        data = sample_protocol.to_dict()
        assert data["blocks"][0]["exercises"][0]["duration"] is None

    def test_prescribed_seconds(self, sample_protocol):
        # squat 5 x 180 + bench 3 x 90 + block rest 120 + plank 1 x (45 + 15)
        assert sample_protocol.prescribed_seconds() == 900 + 270 + 120 + 60

    def test_summary_lists_exercises(self, sample_protocol):
        summary = sample_protocol.get_summary()
        assert "Back Squat: 5x5 @ 100kg" in summary
        assert "(circuit)" in summary


class TestWorkoutInstance:
    """Tests for WorkoutInstance model."""

    def test_freeform_defaults(self):
        instance = WorkoutInstance(user_id="u1")
        assert instance.template_protocol_id is None
        assert not instance.is_completed
        assert instance.leaves() == []

    def test_round_trip_keeps_template_ids(self, sample_protocol):
        from helix_train.services.instantiation import instantiate

        instance = instantiate(sample_protocol, "u1")
        restored = WorkoutInstance.from_dict(instance.to_dict())

        assert restored.template_protocol_id == sample_protocol.id
        assert restored.blocks[0].template_block_id == sample_protocol.blocks[0].id
        assert restored.started_at == instance.started_at


class TestLoadValue:
    """Tests for LoadValue."""

    def test_pounds_to_kilograms(self):
        assert LoadValue(100, LoadUnit.POUNDS).kilograms == pytest.approx(45.359237)

    def test_unit_string_coerced(self):
        assert LoadValue(20, "lbs").unit == LoadUnit.POUNDS

    @pytest.mark.parametrize("value", [-1, float("inf"), "heavy"])
    def test_bad_value_rejected(self, value):
        with pytest.raises(ValidationError):
            LoadValue(value)

    def test_bad_unit_rejected(self):
        with pytest.raises(ValidationError):
            LoadValue.from_dict({"value": 20, "unit": "stone"})
