"""Plan resolution: derive the target descriptor from source and profile.

``resolve_plan`` is pure with respect to its inputs. The target is started
from the inherited source attributes and then decided step by step in a
fixed order, since later steps read what earlier steps produced:

size -> codec -> timing -> color -> quality -> audio -> bitrate ->
extension -> tonemap -> audio delay -> macroblock alignment
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from reencode.policy.color import BT709, classify_transfer
from reencode.policy.profile import UNSET_QUALITY, EncodeProfile
from reencode.policy.tables import (
    COPY_CODEC,
    SIZE_TIERS,
    resolve_encoder,
    tier_height,
    tier_heights,
)
from reencode.policy.timecode import parse_timecode
from reencode.policy.video import Video, target_from_source

logger = logging.getLogger(__name__)

MACROBLOCK = 16

# Kilobits per megabyte used to turn a size budget into a bitrate.
KILOBITS_PER_MEGABYTE = 8192

DEFAULT_AUDIO_CODEC = "ac3"
STEREO_AUDIO_CODEC = "aac"
TWO_PASS_ENCODER = "libx265"


@dataclass(frozen=True)
class Padding:
    """Centered pad from the content size up to macroblock-aligned size."""

    width: int
    height: int
    x: int
    y: int


@dataclass(frozen=True)
class TranscodePlan:
    """Resolved source/target pair handed to the filter and command builders."""

    source: Video
    target: Video
    profile: EncodeProfile
    decoder: str
    """Input decoder; ``copy`` when the stream is passed through."""
    content_width: int
    """Frame width after scaling, before padding."""
    content_height: int
    padding: Padding | None = None

    @property
    def is_copy(self) -> bool:
        return self.target.codec == COPY_CODEC

    @property
    def two_pass(self) -> bool:
        return self.profile.two_pass and self.target.codec == TWO_PASS_ENCODER

    @property
    def uses_watermark(self) -> bool:
        return bool(self.profile.watermark_file) and not self.is_copy


def resolve_plan(source: Video, profile: EncodeProfile) -> TranscodePlan:
    """Resolve the target descriptor for a transcode.

    Args:
        source: Probed (and optionally crop/volume detected) source.
        profile: Merged encode profile.

    Returns:
        The resolved plan. Neither argument is modified.
    """
    target = target_from_source(source)

    _resolve_size(target, profile)

    target.codec = resolve_encoder(profile.codec)
    is_copy = target.codec == COPY_CODEC
    if is_copy:
        # Stream copy: no scaling, no quality or size targets.
        profile = replace(
            profile,
            constant_rate_factor=UNSET_QUALITY,
            constant_quality=UNSET_QUALITY,
            duration=0.0,
            rate=0,
            file_size=0,
        )
        target.width = source.width
        target.height = source.height
        target.size = source.size

    _resolve_timing(target, source, profile)
    if not is_copy:
        _resolve_color(target, source, profile)
    _resolve_quality(target, profile)
    _resolve_audio(target, source, profile)
    _resolve_bitrate(target, source, profile)

    target.extension = profile.extension or source.extension
    target.tonemap = profile.tonemap
    target.audio_delay = profile.audio_delay
    if profile.audio_delay and target.has_audio:
        # Slot 1 holds the watermark image when one is overlaid.
        uses_watermark = bool(profile.watermark_file) and not is_copy
        target.audio_input = 2 if uses_watermark else 1

    content_width, content_height = target.width, target.height
    padding = None if is_copy else _macroblock_padding(target)

    plan = TranscodePlan(
        source=source,
        target=target,
        profile=profile,
        decoder=COPY_CODEC if is_copy else source.codec,
        content_width=content_width,
        content_height=content_height,
        padding=padding,
    )
    logger.info(
        "Resolved plan for %s: %dx%d %s -> %dx%d %s",
        source.file,
        source.width,
        source.height,
        source.codec or "-",
        target.width,
        target.height,
        target.codec or "default",
        extra={"input_path": str(source.file), "two_pass": plan.two_pass},
    )
    return plan


def round_to_even(value: float) -> int:
    """Round to the nearest even integer.

    >>> round_to_even(533.33)
    534
    """
    return int(round(value / 2)) * 2


def _resolve_size(target: Video, profile: EncodeProfile) -> None:
    if not tier_height(profile.size):
        return
    tier_width = SIZE_TIERS[profile.size]
    height = tier_height(profile.size)
    target.size = profile.size
    if target.width <= 0 or target.height <= 0:
        return
    aspect = target.width / target.height
    if target.width > tier_width:
        target.width = tier_width
        target.height = round_to_even(tier_width / aspect)
    # Tall frames (4:3, portrait) are still too high after the width step.
    if target.height > height:
        target.height = height
        target.width = round_to_even(height * aspect)


def _resolve_timing(target: Video, source: Video, profile: EncodeProfile) -> None:
    seek = profile.seek
    if profile.start:
        seek = parse_timecode(profile.start)

    duration = 0.0
    if profile.duration > 0:
        duration = profile.duration
    elif profile.end:
        duration = parse_timecode(profile.end) - seek

    if seek > source.duration:
        logger.warning(
            "Seek %.3fs is past the end of %s (%.3fs), clamping",
            seek,
            source.file,
            source.duration,
        )
        seek = source.duration
    if seek + duration > source.duration:
        duration = source.duration - seek
    if duration < 0:
        logger.warning("Duration resolved negative (%.3fs), clamping to 0", duration)
        duration = 0.0

    target.seek = seek
    target.duration = duration


def _resolve_color(target: Video, source: Video, profile: EncodeProfile) -> None:
    if profile.pixel_format:
        target.pixel_format = profile.pixel_format
    if profile.color_transfer:
        target.color_transfer = profile.color_transfer

    if classify_transfer(source.color_transfer).is_hdr and (
        target.color_transfer == BT709
    ):
        target.color_primaries = BT709
        target.color_space = BT709


def _resolve_quality(target: Video, profile: EncodeProfile) -> None:
    target.constant_rate_factor = UNSET_QUALITY
    target.constant_quality = UNSET_QUALITY
    if profile.constant_rate_factor >= 0:
        target.constant_rate_factor = profile.constant_rate_factor
    elif profile.constant_quality >= 0:
        target.constant_quality = profile.constant_quality


def _resolve_volume(source: Video, profile: EncodeProfile) -> str:
    """Gain to apply, e.g. ``"5.2dB"`` for a detected peak of -5.2 dB."""
    if profile.volume:
        return profile.volume.replace(" ", "")
    if profile.detect_volume and source.volume:
        return source.volume.strip("-").replace(" ", "")
    return ""


def _default_audio_codec(channels: int) -> str:
    return STEREO_AUDIO_CODEC if channels == 2 else DEFAULT_AUDIO_CODEC


def _resolve_audio(target: Video, source: Video, profile: EncodeProfile) -> None:
    if not source.has_audio:
        target.audio_codec = COPY_CODEC
        target.audio_rate = 0
        target.audio_channels = 0
        target.volume = ""
        return

    codec = COPY_CODEC
    rate = source.audio_rate
    channels = source.audio_channels

    if profile.audio_rate > 0 and (
        source.audio_rate == 0 or profile.audio_rate <= source.audio_rate
    ):
        rate = profile.audio_rate
        codec = DEFAULT_AUDIO_CODEC
    if profile.audio_channels > 0 and (
        source.audio_channels == 0 or profile.audio_channels <= source.audio_channels
    ):
        channels = profile.audio_channels
        codec = DEFAULT_AUDIO_CODEC
    if codec != COPY_CODEC and channels == 2:
        codec = STEREO_AUDIO_CODEC
    if profile.audio_codec:
        codec = profile.audio_codec

    volume = _resolve_volume(source, profile)
    if volume:
        # The volume filter needs decoded audio.
        if codec == COPY_CODEC:
            codec = _default_audio_codec(channels)
    elif (
        rate == source.audio_rate
        and channels == source.audio_channels
        and codec == source.audio_codec
    ):
        codec = COPY_CODEC

    target.audio_codec = codec
    target.volume = volume
    if codec == COPY_CODEC:
        target.audio_rate = 0
        target.audio_channels = 0
    else:
        target.audio_rate = rate
        target.audio_channels = channels


def _resolve_bitrate(target: Video, source: Video, profile: EncodeProfile) -> None:
    target.rate = profile.rate
    if profile.file_size <= 0:
        return

    duration = target.duration or max(source.duration - target.seek, 0.0)
    if duration <= 0:
        logger.warning(
            "Cannot derive a bitrate from file size for %s: duration unknown",
            source.file,
        )
        return

    if target.audio_codec == COPY_CODEC:
        audio_share = source.audio_rate if source.has_audio else 0
    else:
        audio_share = target.audio_rate

    rate = int(profile.file_size * KILOBITS_PER_MEGABYTE / duration - audio_share)
    if rate < 0:
        logger.warning(
            "File size %d MB leaves no room for video (%d kbps), clamping to 0",
            profile.file_size,
            rate,
        )
        rate = 0
    target.rate = rate


def _align(value: int) -> int:
    return -(-value // MACROBLOCK) * MACROBLOCK


def _macroblock_padding(target: Video) -> Padding | None:
    """Pad non-tier sizes that are not a multiple of the macroblock size.

    Updates the target to the padded size and returns the pad placement.
    """
    width, height = target.width, target.height
    if height in tier_heights():
        return None
    if not (width % MACROBLOCK or height % MACROBLOCK):
        return None

    padded_width = _align(width)
    padded_height = _align(height)
    target.width = padded_width
    target.height = padded_height
    return Padding(
        width=padded_width,
        height=padded_height,
        x=(padded_width - width) // 2,
        y=(padded_height - height) // 2,
    )
