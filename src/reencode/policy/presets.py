"""Named encode presets and profile assembly.

A preset is a partial set of profile overrides. ``build_profile`` merges
override layers over the defaults in order, later layers winning, and
validates each layer with ``EncodeSettingsModel``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from pydantic import ValidationError

from reencode.policy.profile import EncodeProfile
from reencode.policy.pydantic_models import EncodeSettingsModel

logger = logging.getLogger(__name__)


class ProfileError(Exception):
    """Error building or validating an encode profile."""

    pass


class UnknownPresetError(ProfileError):
    """Preset name is not defined."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Unknown preset '{name}'. Available presets: {', '.join(PRESETS)}"
        )


_TELEGRAM_BASE: dict[str, Any] = {
    "audio_rate": 144,
    "audio_channels": 2,
    "audio_codec": "aac",
    "audio_stream": 0,
    "extension": "mp4",
    "pixel_format": "yuv420p",
    "color_transfer": "bt709",
}

PRESETS: dict[str, dict[str, Any]] = {
    "telegram-small": {
        **_TELEGRAM_BASE,
        "codec": "libx264",
        "constant_rate_factor": 26,
    },
    "telegram-fair": {
        **_TELEGRAM_BASE,
        "codec": "libx264",
        "size": "1080p",
        "constant_rate_factor": 23,
    },
    "telegram": {
        **_TELEGRAM_BASE,
        "codec": "h264_nvenc",
        "size": "1080p",
        "file_size": 2016,
        "draw_title": True,
        "constant_quality": 19,
        "strip_metadata": True,
    },
    "telegram-hevc": {
        **_TELEGRAM_BASE,
        "codec": "hevc_nvenc",
        "size": "1080p",
        "file_size": 2016,
        "draw_title": True,
        "constant_quality": 22,
        "strip_metadata": True,
    },
    "telegram-x265": {
        **_TELEGRAM_BASE,
        "codec": "libx265",
        "size": "1080p",
        "file_size": 2016,
        "draw_title": True,
        "strip_metadata": True,
    },
    "phone": {
        "audio_rate": 196,
        "audio_channels": 2,
        "audio_codec": "aac",
        "extension": "mp4",
    },
    "homevideo": {
        "codec": "libx265",
        "audio_channels": 2,
        "audio_codec": "aac",
        "constant_rate_factor": 21,
        "extension": "mp4",
    },
    "homevideo2": {
        "codec": "hevc_nvenc",
        "audio_channels": 2,
        "audio_codec": "aac",
        "constant_quality": 22,
        "extension": "mp4",
    },
    "teams": {
        **_TELEGRAM_BASE,
        "codec": "h264_nvenc",
        "size": "1080p",
        "constant_quality": 27,
        "strip_metadata": True,
    },
}


def get_preset(name: str) -> dict[str, Any]:
    """Return a copy of a preset's overrides.

    Raises:
        UnknownPresetError: If no preset has this name.
    """
    try:
        return dict(PRESETS[name])
    except KeyError:
        raise UnknownPresetError(name) from None


def validate_layer(layer: Mapping[str, Any], source: str) -> dict[str, Any]:
    """Validate one override layer and return the fields it sets.

    Args:
        layer: Partial mapping of profile fields.
        source: Layer name used in error messages ("config", "preset", ...).

    Raises:
        ProfileError: If the layer has unknown keys or invalid values.
    """
    try:
        model = EncodeSettingsModel.model_validate(dict(layer))
    except ValidationError as e:
        raise ProfileError(f"Invalid {source} settings: {e}") from e
    return model.to_overrides()


def build_profile(
    *layers: tuple[str, Mapping[str, Any] | None],
) -> EncodeProfile:
    """Merge named override layers over the default profile.

    Args:
        layers: ``(source_name, overrides)`` pairs in increasing priority.
            ``None`` layers are skipped.

    Returns:
        The merged, immutable profile.

    Raises:
        ProfileError: If any layer fails validation.

    Example:
        profile = build_profile(
            ("config", file_settings),
            ("preset", get_preset("telegram")),
            ("cli", cli_flags),
        )
    """
    profile = EncodeProfile()
    for source, layer in layers:
        if not layer:
            continue
        overrides = validate_layer(layer, source)
        logger.debug("Applying %s settings: %s", source, sorted(overrides))
        profile = replace(profile, **overrides)
    return profile
