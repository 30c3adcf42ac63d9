"""Pydantic models validating encode profile override layers.

Every layer (config file ``encode:`` section, preset, CLI flags) is a
partial mapping of profile fields. Unset fields stay ``None`` and are
dropped when the layer is applied.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from reencode.policy.tables import SIZE_TIERS
from reencode.policy.timecode import TimecodeError, parse_timecode


class EncodeSettingsModel(BaseModel):
    """One partial layer of encode settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    size: str | None = None
    codec: str | None = None
    decoder: str | None = None
    rate: int | None = Field(default=None, ge=0)
    file_size: int | None = Field(default=None, ge=0)
    video_stream: int | None = Field(default=None, ge=0)
    constant_quality: int | None = Field(default=None, ge=-1, le=63)
    constant_rate_factor: int | None = Field(default=None, ge=-1, le=51)
    pixel_format: str | None = None
    color_transfer: str | None = None
    tonemap: str | None = None
    tune: str | None = None
    level: str | None = None
    denoise: bool | None = None
    two_pass: bool | None = None

    audio_codec: str | None = None
    audio_rate: int | None = Field(default=None, ge=0)
    audio_channels: int | None = Field(default=None, ge=0)
    audio_stream: int | None = Field(default=None, ge=0)
    audio_delay: float | None = None
    detect_volume: bool | None = None
    volume: str | None = None

    seek: float | None = Field(default=None, ge=0)
    duration: float | None = Field(default=None, ge=0)
    start: str | None = None
    end: str | None = None

    crop: bool | None = None
    crop_detect_duration: float | None = Field(default=None, ge=0)

    draw_title: bool | None = None
    title: str | None = None
    font_file: str | None = None
    burn_subtitles: bool | None = None
    burn_image_subtitles: bool | None = None
    subtitle_stream: int | None = Field(default=None, ge=0)
    watermark_file: str | None = None
    watermark_position: str | None = None

    extension: str | None = None
    output_path: str | None = None
    strip_metadata: bool | None = None

    @field_validator("size")
    @classmethod
    def validate_size(cls, v: str | None) -> str | None:
        """Size must be one of the known tiers."""
        if v is None or v == "":
            return v
        label = v.strip().casefold()
        if label not in SIZE_TIERS:
            raise ValueError(
                f"Invalid size '{v}'. Must be one of: {', '.join(SIZE_TIERS)}"
            )
        return label

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v: str | None) -> str | None:
        """Start and end must parse as HH:MM:SS."""
        if v:
            try:
                parse_timecode(v)
            except TimecodeError as e:
                raise ValueError(str(e)) from e
        return v

    @field_validator("extension")
    @classmethod
    def strip_extension_dot(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.lstrip(".")

    @model_validator(mode="after")
    def validate_subtitle_modes(self) -> EncodeSettingsModel:
        """Text and image subtitle burn-in are mutually exclusive."""
        if self.burn_subtitles and self.burn_image_subtitles:
            raise ValueError(
                "burn_subtitles and burn_image_subtitles cannot both be enabled"
            )
        return self

    def to_overrides(self) -> dict[str, object]:
        """Return the fields this layer actually sets."""
        return self.model_dump(exclude_none=True)
