"""Media descriptor for the source and target of a transcode.

A ``Video`` is populated for the source from probe results and detection
passes. The target is derived with ``target_from_source``, which copies an
explicit list of inherited attributes; everything else on the target is
decided by the plan resolver.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING

from reencode.introspector.interface import ProbeResult
from reencode.introspector.parsers import bitrate_kbps, safe_float, safe_int
from reencode.policy.color import is_ten_bit
from reencode.policy.profile import UNSET_QUALITY
from reencode.policy.tables import (
    classify_size,
    is_hardware_decoder,
    is_hardware_encoder,
    resolve_decoder,
)

if TYPE_CHECKING:
    from reencode.detection.parsers import CropMeasurement

logger = logging.getLogger(__name__)

NO_AUDIO_STREAM = -1

# "Some.Movie.2019.1080p.BluRay" -> ("Some.Movie", "2019", "1080p.BluRay")
_TITLE_YEAR_PATTERN = re.compile(r"^(.*)[. ]([0-9]{4})[. ](.*)$")


@dataclass(frozen=True)
class CropRect:
    """Pixels removed from each edge of the frame. All values are >= 0."""

    top: int = 0
    bottom: int = 0
    left: int = 0
    right: int = 0

    @property
    def is_empty(self) -> bool:
        return not any((self.top, self.bottom, self.left, self.right))


@dataclass
class Video:
    """Attributes of one side (source or target) of a transcode."""

    file: Path
    base_name: str = ""
    extension: str = ""
    title: str = ""
    year: str = ""
    extra_info: str = ""

    # Geometry
    width: int = 0
    height: int = 0
    size: str = ""
    crop: CropRect = field(default_factory=CropRect)

    # Timing (seconds)
    seek: float = 0.0
    duration: float = 0.0

    # Video encoding
    stream: int = 0
    codec: str = ""
    rate: int = 0
    pixel_format: str = ""
    color_range: str = ""
    color_space: str = ""
    color_transfer: str = ""
    color_primaries: str = ""
    constant_quality: int = UNSET_QUALITY
    constant_rate_factor: int = UNSET_QUALITY
    tonemap: str = ""

    # Audio encoding
    audio_stream: int = 0
    audio_codec: str = ""
    audio_rate: int = 0
    audio_channels: int = 0
    channel_layout: str = ""
    audio_delay: float = 0.0
    audio_input: int = 0
    volume: str = ""

    @classmethod
    def from_file(cls, path: Path) -> Video:
        """Create a descriptor with identity fields taken from the file name."""
        title, year, extra_info = split_title(path.stem)
        return cls(
            file=path,
            base_name=path.stem,
            extension=path.suffix.lstrip("."),
            title=title,
            year=year,
            extra_info=extra_info,
        )

    @property
    def has_audio(self) -> bool:
        return self.audio_stream != NO_AUDIO_STREAM

    @property
    def has_crop(self) -> bool:
        return not self.crop.is_empty

    @property
    def is_hardware_decode(self) -> bool:
        return is_hardware_decoder(self.codec)

    @property
    def is_hardware_encode(self) -> bool:
        return is_hardware_encoder(self.codec)

    @property
    def is_ten_bit(self) -> bool:
        return is_ten_bit(self.pixel_format)

    def apply_video_probe(
        self, result: ProbeResult, decoder_override: str = ""
    ) -> None:
        """Fold a video probe result into this descriptor.

        Malformed numbers become 0. The codec is replaced by the decoder
        that will read it, and the size tier is classified from the full
        frame before any crop is applied.
        """
        self.width = safe_int(result.get("width"), "width")
        self.height = safe_int(result.get("height"), "height")
        self.duration = safe_float(result.get("duration"), "duration")
        self.rate = bitrate_kbps(result.get("bit_rate"))
        self.codec = resolve_decoder(result.get("codec_name", ""), decoder_override)
        self.pixel_format = result.get("pix_fmt", "")
        self.color_range = result.get("color_range", "")
        self.color_space = result.get("color_space", "")
        self.color_transfer = result.get("color_transfer", "")
        self.color_primaries = result.get("color_primaries", "")
        self.size = classify_size(self.width, self.height)
        logger.debug(
            "Probed video %s: %dx%d %s %s",
            self.file,
            self.width,
            self.height,
            self.codec,
            self.size or "untiered",
        )

    def apply_audio_probe(self, result: ProbeResult, stream_index: int = 0) -> None:
        """Fold an audio probe result into this descriptor.

        An empty result means the requested audio stream does not exist.
        """
        if not result:
            logger.debug("No audio stream %d in %s", stream_index, self.file)
            self.audio_stream = NO_AUDIO_STREAM
            return
        self.audio_stream = stream_index
        self.audio_codec = result.get("codec_name", "")
        self.audio_rate = bitrate_kbps(result.get("bit_rate"))
        self.audio_channels = safe_int(result.get("channels"), "channels")
        self.channel_layout = result.get("channel_layout", "")

    def apply_crop(self, measurement: CropMeasurement) -> None:
        """Shrink the working geometry to the detected content area.

        A measurement with nothing detected leaves the descriptor untouched.
        """
        if not measurement.detected:
            return
        self.crop = CropRect(
            top=measurement.top,
            bottom=measurement.bottom,
            left=measurement.left,
            right=measurement.right,
        )
        self.width = measurement.width
        self.height = measurement.height

    def apply_volume(self, value: str) -> None:
        """Record the detected peak volume; ignored without an audio stream."""
        if not self.has_audio:
            self.volume = ""
            return
        self.volume = value


def split_title(name: str) -> tuple[str, str, str]:
    """Split ``Title.YEAR.extra`` naming into its parts.

    Best effort only: names that do not follow the convention return
    ``("", "", "")``.
    """
    match = _TITLE_YEAR_PATTERN.match(name)
    if match is None:
        return "", "", ""
    return match.group(1), match.group(2), match.group(3)


# Attributes a target starts out with. Video bitrate, quality knobs, the
# encoder, tonemap, audio delay/input and output path are always derived.
INHERITED_FIELDS: tuple[str, ...] = (
    "base_name",
    "extension",
    "title",
    "year",
    "extra_info",
    "width",
    "height",
    "size",
    "crop",
    "seek",
    "duration",
    "stream",
    "pixel_format",
    "color_range",
    "color_space",
    "color_transfer",
    "color_primaries",
    "audio_stream",
    "audio_codec",
    "audio_rate",
    "audio_channels",
    "channel_layout",
    "volume",
)


def target_from_source(source: Video) -> Video:
    """Start a target descriptor from the inherited source attributes."""
    target = Video(file=source.file)
    return replace(
        target, **{name: getattr(source, name) for name in INHERITED_FIELDS}
    )
