"""Tests for policy/timecode.py."""

import pytest

from reencode.policy.timecode import TimecodeError, parse_timecode


class TestParseTimecode:
    """Tests for parse_timecode."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("45", 45.0),
            ("01:30", 90.0),
            ("01:00:00", 3600.0),
            ("00:01:02.5", 62.5),
            (" 10 ", 10.0),
        ],
    )
    def test_valid(self, value: str, expected: float) -> None:
        assert parse_timecode(value) == pytest.approx(expected)

    def test_too_many_components(self) -> None:
        with pytest.raises(TimecodeError, match="Invalid time format"):
            parse_timecode("1:2:3:4")

    def test_not_a_number(self) -> None:
        with pytest.raises(TimecodeError):
            parse_timecode("aa:bb")

    def test_negative_component(self) -> None:
        with pytest.raises(TimecodeError, match="Negative"):
            parse_timecode("-1:00")

    def test_is_value_error(self) -> None:
        """Callers catching ValueError also catch timecode errors."""
        with pytest.raises(ValueError):
            parse_timecode("x")
