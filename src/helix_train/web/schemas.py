"""Pydantic request bodies for the helix-train API."""

from pydantic import BaseModel, Field

from ..models.duration import DurationUnit, DurationValue
from ..models.load import LoadUnit, LoadValue
from ..models.protocol import BlockType


class DurationBody(BaseModel):
    """Wire shape of a duration."""

    value: float = Field(ge=0, allow_inf_nan=False)
    unit: DurationUnit = DurationUnit.SECONDS

    def to_value(self) -> DurationValue:
        return DurationValue(value=self.value, unit=self.unit)


class LoadBody(BaseModel):
    """Wire shape of a load."""

    value: float = Field(ge=0, allow_inf_nan=False)
    unit: LoadUnit = LoadUnit.KILOGRAMS

    def to_value(self) -> LoadValue:
        return LoadValue(value=self.value, unit=self.unit)


class BlockExerciseBody(BaseModel):
    """One prescribed exercise inside a block."""

    id: str | None = None
    exercise_id: str = Field(min_length=1)
    exercise_name: str = ""
    position: int | None = Field(default=None, ge=0)
    sets: int = Field(default=1, ge=0)
    reps: int | None = Field(default=None, ge=0)
    duration: DurationBody | None = None
    rest: DurationBody | None = None
    load: LoadBody | None = None
    rpe: float | None = Field(default=None, ge=0, le=10)
    tempo: str = ""
    notes: str = ""


class BlockBody(BaseModel):
    """A block with its exercises."""

    id: str | None = None
    name: str = Field(min_length=1)
    position: int | None = Field(default=None, ge=0)
    exercises: list[BlockExerciseBody] = []
    rest: DurationBody | None = None
    block_type: BlockType = BlockType.MAIN
    circuit: bool = False
    notes: str = ""

    def to_data(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class ProtocolBody(BaseModel):
    """A protocol with its blocks, as accepted by create and update."""

    id: str | None = None
    name: str = Field(min_length=1)
    description: str = ""
    objectives: list[str] = []
    days_per_week: int | None = Field(default=None, ge=1, le=7)
    blocks: list[BlockBody] = []

    def to_data(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


def to_duration(body: DurationBody | None) -> DurationValue | None:
    return body.to_value() if body else None


def to_load(body: LoadBody | None) -> LoadValue | None:
    return body.to_value() if body else None
