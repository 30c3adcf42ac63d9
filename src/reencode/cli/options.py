"""Encode profile options shared by the encode and bulk commands.

Every profile field has one option whose parameter name is the field
name. Only options given on the command line become overrides, so a flag
left at its default never masks a preset or config file value.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click
from click.core import ParameterSource

from reencode.policy.profile import EncodeProfile
from reencode.policy.tables import SIZE_TIERS

_PROFILE_OPTIONS: list[tuple[tuple[str, ...], dict[str, Any]]] = [
    # Video
    (
        ("--size", "size"),
        {
            "type": click.Choice(list(SIZE_TIERS), case_sensitive=False),
            "help": "Scale down to this size tier.",
        },
    ),
    (("--codec", "codec"), {"help": "Video encoder (h264_nvenc, libx265, copy)."}),
    (("--decoder", "decoder"), {"help": "Force the input decoder (ffmpeg = software)"}),
    (("--rate", "rate"), {"type": int, "help": "Video bitrate in kbps."}),
    (
        ("--file-size", "file_size"),
        {"type": int, "help": "Target output size in MB; derives the bitrate."},
    ),
    (("--video-stream", "video_stream"), {"type": int, "help": "Video stream index."}),
    (("--cq", "constant_quality"), {"type": int, "help": "Constant quality (nvenc)."}),
    (
        ("--crf", "constant_rate_factor"),
        {"type": int, "help": "Constant rate factor (x264/x265)."},
    ),
    (("--pixel-format", "pixel_format"), {"help": "Output pixel format."}),
    (
        ("--color-transfer", "color_transfer"),
        {"help": "Output transfer characteristic (bt709, smpte2084)."},
    ),
    (("--tonemap", "tonemap"), {"help": "HDR tonemap algorithm (default mobius)."}),
    (("--tune", "tune"), {"help": "Encoder tune setting."}),
    (("--level", "level"), {"help": "Encoder level."}),
    (("--denoise/--no-denoise", "denoise"), {"help": "Apply a denoise filter."}),
    (
        ("--two-pass/--no-two-pass", "two_pass"),
        {"help": "Two-pass encoding (libx265 only)."},
    ),
    # Audio
    (("--audio-codec", "audio_codec"), {"help": "Audio encoder (aac, ac3, copy)."}),
    (("--audio-rate", "audio_rate"), {"type": int, "help": "Audio bitrate in kbps."}),
    (("--audio-channels", "audio_channels"), {"type": int, "help": "Audio channels."}),
    (("--audio-stream", "audio_stream"), {"type": int, "help": "Audio stream index."}),
    (
        ("--audio-delay", "audio_delay"),
        {"type": float, "help": "Shift audio by this many seconds."},
    ),
    (
        ("--detect-volume/--no-detect-volume", "detect_volume"),
        {"help": "Raise the volume so the peak reaches 0 dB."},
    ),
    (("--volume", "volume"), {"help": "Explicit volume change, e.g. 3dB."}),
    # Timing
    (("--seek", "seek"), {"type": float, "help": "Start offset in seconds."}),
    (
        ("--duration", "duration"),
        {"type": float, "help": "Output duration in seconds."},
    ),
    (("--start", "start"), {"help": "Start time as [[HH:]MM:]SS."}),
    (("--end", "end"), {"help": "End time as [[HH:]MM:]SS."}),
    # Cropping
    (("--crop/--no-crop", "crop"), {"help": "Detect and remove black borders."}),
    (
        ("--crop-detect-duration", "crop_detect_duration"),
        {"type": float, "help": "Seconds of video sampled for crop detection."},
    ),
    # Overlays
    (
        ("--draw-title/--no-draw-title", "draw_title"),
        {"help": "Fade the title in at the start of the video."},
    ),
    (("--title", "title"), {"help": "Title text (default: from file name)."}),
    (("--font-file", "font_file"), {"help": "Font for the title overlay."}),
    (
        ("--burn-subtitles/--no-burn-subtitles", "burn_subtitles"),
        {"help": "Burn text subtitles (sidecar .srt or embedded)."},
    ),
    (
        ("--burn-image-subtitles/--no-burn-image-subtitles", "burn_image_subtitles"),
        {"help": "Burn image-based subtitles."},
    ),
    (
        ("--subtitle-stream", "subtitle_stream"),
        {"type": int, "help": "Subtitle stream index."},
    ),
    (("--watermark", "watermark_file"), {"help": "Image overlaid on the video."}),
    (
        ("--watermark-position", "watermark_position"),
        {"help": "Overlay position expression (default W-w-48:48)."},
    ),
    # Output
    (("--extension", "extension"), {"help": "Output container extension."}),
    (("--output", "-o", "output_path"), {"help": "Output directory."}),
    (
        ("--strip-metadata/--keep-metadata", "strip_metadata"),
        {"help": "Drop container metadata."},
    ),
]


def profile_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorate a command with one option per profile field."""
    for decls, attrs in reversed(_PROFILE_OPTIONS):
        func = click.option(*decls, **attrs)(func)
    return func


def collect_overrides(ctx: click.Context) -> dict[str, Any]:
    """Return the profile fields set explicitly on the command line."""
    overrides: dict[str, Any] = {}
    for name in sorted(EncodeProfile.field_names()):
        if ctx.get_parameter_source(name) is ParameterSource.COMMANDLINE:
            overrides[name] = ctx.params[name]
    return overrides
