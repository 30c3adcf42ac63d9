"""Pure parsing functions for ffprobe ``default`` writer output.

ffprobe prints one ``key=value`` pair per line with
``-of default=noprint_wrappers=1``. These functions have no I/O.
"""

import logging

from reencode.introspector.interface import ProbeResult

logger = logging.getLogger(__name__)


def parse_key_values(text: str, sep: str = "=") -> ProbeResult:
    """Parse ``key<sep>value`` lines into a mapping.

    Blank lines are skipped, keys and values are stripped, a line without a
    separator maps its key to an empty string and a repeated key keeps the
    last value.

    Args:
        text: Raw prober output.
        sep: Separator between key and value.

    Returns:
        Mapping of keys to values.
    """
    result: ProbeResult = {}
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        key, _, value = line.partition(sep)
        result[key.strip()] = value.strip()
    return result


def safe_int(value: str | None, field_name: str = "") -> int:
    """Parse an integer, returning 0 for missing or malformed values.

    ffprobe reports unknown numbers as ``N/A``; a fractional string such as
    ``"1080.0"`` is truncated.
    """
    if not value:
        return 0
    try:
        return int(value)
    except ValueError:
        try:
            return int(float(value))
        except ValueError:
            logger.debug("Could not parse %s as integer: %r", field_name, value)
            return 0


def safe_float(value: str | None, field_name: str = "") -> float:
    """Parse a float, returning 0.0 for missing or malformed values."""
    if not value:
        return 0.0
    try:
        return float(value)
    except ValueError:
        logger.debug("Could not parse %s as float: %r", field_name, value)
        return 0.0


def bitrate_kbps(value: str | None, field_name: str = "bit_rate") -> int:
    """Convert a bit rate in bits per second to whole kilobits per second."""
    return safe_int(value, field_name) // 1000
