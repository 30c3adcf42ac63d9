"""Encode profile: the requested changes for one transcode.

The profile is assembled once (defaults, config file, preset, CLI flags)
and is immutable afterwards. Zero values mean "not requested": empty
strings, 0, False, and -1 for the two quality knobs.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

UNSET_QUALITY = -1


@dataclass(frozen=True)
class EncodeProfile:
    """Requested output properties for a transcode."""

    # Video
    size: str = ""
    codec: str = ""
    decoder: str = ""
    rate: int = 0
    """Video bitrate in kbps."""
    file_size: int = 0
    """Target output size in MB; derives the video bitrate."""
    video_stream: int = 0
    constant_quality: int = UNSET_QUALITY
    constant_rate_factor: int = UNSET_QUALITY
    pixel_format: str = ""
    color_transfer: str = ""
    tonemap: str = ""
    tune: str = ""
    level: str = ""
    denoise: bool = False
    two_pass: bool = False

    # Audio
    audio_codec: str = ""
    audio_rate: int = 0
    audio_channels: int = 0
    audio_stream: int = 0
    audio_delay: float = 0.0
    detect_volume: bool = False
    volume: str = ""

    # Timing
    seek: float = 0.0
    duration: float = 0.0
    start: str = ""
    end: str = ""

    # Cropping
    crop: bool = False
    crop_detect_duration: float = 0.0

    # Overlays
    draw_title: bool = False
    title: str = ""
    font_file: str = ""
    burn_subtitles: bool = False
    burn_image_subtitles: bool = False
    subtitle_stream: int = 0
    watermark_file: str = ""
    watermark_position: str = ""

    # Output
    extension: str = ""
    output_path: str = ""
    strip_metadata: bool = False

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    def overrides(self) -> dict[str, object]:
        """Return only the fields that differ from the defaults."""
        default = EncodeProfile()
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) != getattr(default, f.name)
        }
