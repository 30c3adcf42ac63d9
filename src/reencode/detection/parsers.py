"""Parsers for ffmpeg crop and volume detection output.

Pure functions; the detectors in ``detector`` feed them captured text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

CROP_PATTERN = re.compile(r"crop=([0-9]+):([0-9]+):([0-9]+):([0-9]+)")
MAX_VOLUME_PATTERN = re.compile(r"max_volume:([^\n]+)")


@dataclass(frozen=True)
class CropSample:
    """One ``crop=W:H:X:Y`` suggestion printed by cropdetect."""

    width: int
    height: int
    x: int
    y: int


@dataclass(frozen=True)
class CropMeasurement:
    """Crop margins and detected content size.

    A measurement with ``width == height == 0`` means nothing was detected
    and the source must not be cropped.
    """

    top: int = 0
    bottom: int = 0
    left: int = 0
    right: int = 0
    width: int = 0
    height: int = 0

    @property
    def detected(self) -> bool:
        return self.width > 0 and self.height > 0

    @property
    def has_margins(self) -> bool:
        return any((self.top, self.bottom, self.left, self.right))


def parse_crop_samples(text: str) -> list[CropSample]:
    """Extract every crop suggestion from cropdetect output."""
    return [
        CropSample(int(w), int(h), int(x), int(y))
        for w, h, x, y in CROP_PATTERN.findall(text)
    ]


def consolidate_crop(
    samples: list[CropSample], source_width: int, source_height: int
) -> CropMeasurement:
    """Fold crop samples into the smallest crop containing all of them.

    The detected area starts at the smallest offsets seen and spans the
    largest width and height seen. Margins that would come out negative
    (a sample larger than the frame) are clamped to 0.

    Args:
        samples: Parsed cropdetect suggestions.
        source_width: Source frame width.
        source_height: Source frame height.

    Returns:
        The consolidated measurement; an empty measurement when there are
        no samples.
    """
    if not samples:
        return CropMeasurement()

    min_x = source_width
    min_y = source_height
    max_width = 0
    max_height = 0
    for sample in samples:
        min_x = min(min_x, sample.x)
        min_y = min(min_y, sample.y)
        max_width = max(max_width, sample.width)
        max_height = max(max_height, sample.height)

    return CropMeasurement(
        top=max(min_y, 0),
        bottom=max(source_height - (min_y + max_height), 0),
        left=max(min_x, 0),
        right=max(source_width - (min_x + max_width), 0),
        width=max_width,
        height=max_height,
    )


def parse_max_volume(text: str) -> str:
    """Return the ``max_volume`` value from volumedetect output.

    >>> parse_max_volume("[Parsed_volumedetect_0] max_volume: -5.2 dB")
    '-5.2 dB'
    """
    match = MAX_VOLUME_PATTERN.search(text)
    if match is None:
        return ""
    return match.group(1).strip()
