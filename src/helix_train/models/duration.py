"""Duration values and normalization to seconds."""

import math
from dataclasses import dataclass
from enum import Enum

from ..errors import InvalidUnit, ValidationError


class DurationUnit(str, Enum):
    """Time units a duration may be authored in."""

    SECONDS = "s"
    MINUTES = "min"
    HOURS = "hr"


SECONDS_PER_UNIT: dict[str, int] = {
    DurationUnit.SECONDS.value: 1,
    DurationUnit.MINUTES.value: 60,
    DurationUnit.HOURS.value: 3600,
}


def check_magnitude(value, label: str) -> None:
    """Reject anything but a finite, non-negative number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{label} value must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise ValidationError(f"{label} must be finite and non-negative, got {value}")


@dataclass(frozen=True)
class DurationValue:
    """A non-negative magnitude tagged with a time unit.

    Immutable: edits replace the whole value.
    """

    value: float
    unit: DurationUnit = DurationUnit.SECONDS

    def __post_init__(self):
        if not isinstance(self.unit, DurationUnit):
            try:
                object.__setattr__(self, "unit", DurationUnit(self.unit))
            except ValueError:
                raise InvalidUnit(self.unit) from None
        check_magnitude(self.value, "Duration")

    @property
    def seconds(self) -> float:
        return self.value * SECONDS_PER_UNIT[self.unit.value]

    def to_dict(self) -> dict:
        """Convert to the wire shape."""
        return {"value": self.value, "unit": self.unit.value}

    @classmethod
    def from_dict(cls, data: dict | None) -> "DurationValue | None":
        """Create from the wire shape. ``None`` stays ``None``."""
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValidationError(f"Duration must be an object with value and unit, got {data!r}")
        if "value" not in data:
            raise ValidationError("Duration is missing 'value'")
        return cls(value=data["value"], unit=data.get("unit", "s"))


@dataclass(frozen=True)
class NormalizedDuration:
    """Tagged result of normalizing a duration.

    ``ok`` is False when the unit was not recognized; ``seconds`` is then 0.
    """

    seconds: float
    ok: bool = True
    unit: str | None = None


def _unit_and_value(duration) -> tuple[str | None, float]:
    if isinstance(duration, DurationValue):
        return duration.unit.value, duration.value
    unit = duration.get("unit")
    if isinstance(unit, DurationUnit):
        unit = unit.value
    value = duration.get("value")
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        value = 0
    return unit, value


def normalize(duration: "DurationValue | dict | None") -> NormalizedDuration:
    """Normalize a duration to seconds without raising."""
    if not duration:
        return NormalizedDuration(seconds=0)
    unit, value = _unit_and_value(duration)
    factor = SECONDS_PER_UNIT.get(unit)
    if factor is None:
        return NormalizedDuration(seconds=0, ok=False, unit=unit)
    return NormalizedDuration(seconds=value * factor, unit=unit)


def to_seconds(duration: "DurationValue | dict | None") -> float:
    """Convert a duration to seconds.

    Missing durations and unrecognized units count as 0 so that display
    code never fails. Use ``to_seconds_strict`` to surface bad units.
    """
    return normalize(duration).seconds


def to_seconds_strict(duration: "DurationValue | dict | None") -> float:
    """Convert a duration to seconds, raising InvalidUnit on unknown units."""
    result = normalize(duration)
    if not result.ok:
        raise InvalidUnit(result.unit)
    return result.seconds


def from_seconds(
    seconds: float, unit: DurationUnit = DurationUnit.SECONDS
) -> DurationValue:
    """Express a number of seconds in the given unit."""
    unit = DurationUnit(unit)
    return DurationValue(value=seconds / SECONDS_PER_UNIT[unit.value], unit=unit)


def format_clock(seconds: float) -> str:
    """Render seconds as MM:SS.

    Negative and non-finite input render as zero. Minutes do not roll
    over into hours, so 5400 seconds renders as "90:00".
    """
    if not math.isfinite(seconds):
        return "00:00"
    total = max(0, int(seconds))
    mins, secs = divmod(total, 60)
    return f"{mins:02d}:{secs:02d}"
