"""Load (weight lifted) values."""

from dataclasses import dataclass
from enum import Enum

from ..errors import ValidationError
from .duration import check_magnitude


class LoadUnit(str, Enum):
    """Weight units a load may be recorded in."""

    KILOGRAMS = "kg"
    POUNDS = "lbs"


KG_PER_UNIT: dict[str, float] = {
    LoadUnit.KILOGRAMS.value: 1.0,
    LoadUnit.POUNDS.value: 0.45359237,
}


@dataclass(frozen=True)
class LoadValue:
    """A non-negative weight tagged with its unit."""

    value: float
    unit: LoadUnit = LoadUnit.KILOGRAMS

    def __post_init__(self):
        if not isinstance(self.unit, LoadUnit):
            try:
                object.__setattr__(self, "unit", LoadUnit(self.unit))
            except ValueError:
                raise ValidationError(f"Invalid load unit: {self.unit!r}") from None
        check_magnitude(self.value, "Load")

    @property
    def kilograms(self) -> float:
        return self.value * KG_PER_UNIT[self.unit.value]

    def to_dict(self) -> dict:
        return {"value": self.value, "unit": self.unit.value}

    @classmethod
    def from_dict(cls, data: dict | None) -> "LoadValue | None":
        """Create from the wire shape. ``None`` stays ``None``."""
        if data is None:
            return None
        if not isinstance(data, dict) or "value" not in data:
            raise ValidationError(f"Load must be an object with value and unit, got {data!r}")
        return cls(value=data["value"], unit=data.get("unit", "kg"))


def to_kilograms(load: LoadValue | None) -> float:
    """Weight in kilograms; a missing load counts as 0."""
    return load.kilograms if load else 0.0
