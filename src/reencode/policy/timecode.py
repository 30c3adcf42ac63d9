"""Parsing of ``HH:MM:SS`` style time strings."""

from __future__ import annotations


class TimecodeError(ValueError):
    """Raised when a time string cannot be parsed."""


def parse_timecode(value: str) -> float:
    """Convert ``SS``, ``MM:SS`` or ``HH:MM:SS`` to seconds.

    Each component may carry a fractional part (``00:01:02.5``).

    Args:
        value: Time string.

    Returns:
        Number of seconds.

    Raises:
        TimecodeError: If the string has more than three components or a
            component is not a number.
    """
    parts = value.strip().split(":")
    if len(parts) > 3:
        raise TimecodeError(f"Invalid time format: {value!r}")

    seconds = 0.0
    for part in parts:
        try:
            number = float(part)
        except ValueError as e:
            raise TimecodeError(f"Invalid time format: {value!r}") from e
        if number < 0:
            raise TimecodeError(f"Negative time component in {value!r}")
        seconds = seconds * 60 + number
    return seconds
