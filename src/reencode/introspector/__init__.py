"""Media probing."""

from reencode.introspector.ffprobe import FFprobeIntrospector
from reencode.introspector.interface import (
    MediaIntrospectionError,
    MediaProber,
    ProbeResult,
)
from reencode.introspector.parsers import parse_key_values

__all__ = [
    "FFprobeIntrospector",
    "MediaIntrospectionError",
    "MediaProber",
    "ProbeResult",
    "parse_key_values",
]
