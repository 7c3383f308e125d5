"""Tests for duration normalization."""

import pytest

from helix_train.errors import InvalidUnit, ValidationError
from helix_train.models.duration import (
    DurationUnit,
    DurationValue,
    format_clock,
    from_seconds,
    normalize,
    to_seconds,
    to_seconds_strict,
)


class TestToSeconds:
    """Tests for to_seconds."""

    def test_zero_seconds(self):
        assert to_seconds(DurationValue(0, DurationUnit.SECONDS)) == 0

    def test_none_is_zero(self):
        """A missing duration means not specified, not an error."""
        assert to_seconds(None) == 0

    def test_minutes(self):
        assert to_seconds(DurationValue(2, DurationUnit.MINUTES)) == 120

    def test_hours(self):
        assert to_seconds(DurationValue(1, DurationUnit.HOURS)) == 3600

    def test_wire_dict(self):
        assert to_seconds({"value": 1.5, "unit": "min"}) == 90

    def test_unknown_unit_is_zero(self):
        """Tolerant conversion never raises."""
        assert to_seconds({"value": 10, "unit": "days"}) == 0

    def test_garbage_value_is_zero(self):
        assert to_seconds({"value": "abc", "unit": "min"}) == 0
        assert to_seconds({"value": float("nan"), "unit": "s"}) == 0

    def test_strict_rejects_unknown_unit(self):
        with pytest.raises(InvalidUnit):
            to_seconds_strict({"value": 10, "unit": "days"})

    def test_strict_accepts_known_unit(self):
        assert to_seconds_strict({"value": 3, "unit": "min"}) == 180


class TestNormalize:
    """Tests for the tagged normalization result."""

    def test_ok_result(self):
        result = normalize(DurationValue(2, DurationUnit.HOURS))
        assert result.ok
        assert result.seconds == 7200
        assert result.unit == "hr"

    def test_unrecognized_unit_flagged(self):
        result = normalize({"value": 5, "unit": "fortnight"})
        assert not result.ok
        assert result.seconds == 0
        assert result.unit == "fortnight"

    def test_absent_is_ok_zero(self):
        result = normalize(None)
        assert result.ok
        assert result.seconds == 0


class TestFormatClock:
    """Tests for format_clock."""

    def test_minutes_and_seconds(self):
        assert format_clock(125) == "02:05"

    def test_negative_clamps_to_zero(self):
        assert format_clock(-5) == "00:00"

    def test_no_hour_rollover(self):
        assert format_clock(5400) == "90:00"

    def test_truncates_fractions(self):
        assert format_clock(59.9) == "00:59"

    @pytest.mark.parametrize("seconds", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_renders_zero(self, seconds):
        assert format_clock(seconds) == "00:00"


class TestDurationValue:
    """Tests for DurationValue construction."""

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            DurationValue(-1, DurationUnit.SECONDS)

    def test_unit_string_coerced(self):
        assert DurationValue(3, "min").unit == DurationUnit.MINUTES

    def test_bad_unit_rejected(self):
        with pytest.raises(InvalidUnit):
            DurationValue.from_dict({"value": 3, "unit": "weeks"})

    def test_from_dict_none(self):
        assert DurationValue.from_dict(None) is None

    def test_wire_shape(self):
        assert DurationValue(45, DurationUnit.SECONDS).to_dict() == {"value": 45, "unit": "s"}

    def test_immutable(self):
        duration = DurationValue(1, DurationUnit.MINUTES)
        with pytest.raises(AttributeError):
            duration.value = 2

    def test_from_seconds(self):
        assert from_seconds(90, DurationUnit.MINUTES) == DurationValue(1.5, DurationUnit.MINUTES)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "abc", None, True])
    def test_non_finite_or_non_numeric_rejected(self, value):
        with pytest.raises(ValidationError):
            DurationValue(value, DurationUnit.SECONDS)

    def test_from_dict_rejects_bare_number(self):
        with pytest.raises(ValidationError):
            DurationValue.from_dict(30)
