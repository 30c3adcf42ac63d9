"""Encode profiles and transcode plan resolution."""

from reencode.policy.presets import (
    PRESETS,
    ProfileError,
    UnknownPresetError,
    build_profile,
    get_preset,
)
from reencode.policy.profile import EncodeProfile
from reencode.policy.resolver import Padding, TranscodePlan, resolve_plan
from reencode.policy.video import CropRect, Video, target_from_source

__all__ = [
    "PRESETS",
    "CropRect",
    "EncodeProfile",
    "Padding",
    "ProfileError",
    "TranscodePlan",
    "UnknownPresetError",
    "Video",
    "build_profile",
    "get_preset",
    "resolve_plan",
    "target_from_source",
]
