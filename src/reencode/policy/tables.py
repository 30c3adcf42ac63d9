"""Static size and codec tables.

Size tiers map a tier label (``"1080p"``) to the canonical width for that
height. Codec names are resolved through a closed ``CodecFamily`` enum so
lookups are total: any name the tables do not know resolves to
``CodecFamily.PASSTHROUGH`` and is used unchanged.
"""

from __future__ import annotations

from enum import Enum

# Tier label -> canonical width. The tier height is the label's number.
SIZE_TIERS: dict[str, int] = {
    "480p": 720,
    "576p": 720,
    "720p": 1280,
    "1080p": 1920,
    "1440p": 2560,
    "2160p": 3840,
}

COPY_CODEC = "copy"

# Decoder override meaning "no explicit input decoder".
SOFTWARE_DECODER = "ffmpeg"


class CodecFamily(Enum):
    """Codec families known to the decoder and encoder tables."""

    H264 = "h264"
    HEVC = "hevc"
    H263 = "h263"
    MPEG4 = "mpeg4"
    MPEG2 = "mpeg2"
    MPEG1 = "mpeg1"
    VC1 = "vc1"
    VP9 = "vp9"
    COPY = "copy"
    PASSTHROUGH = "passthrough"

    @classmethod
    def from_name(cls, name: str) -> CodecFamily:
        """Resolve a codec or encoder name to its family.

        Concrete software encoder names (``libx264``, ``libx265``) are not
        aliased and resolve to PASSTHROUGH so they keep their exact name.
        """
        return _FAMILY_ALIASES.get(name.strip().casefold(), cls.PASSTHROUGH)


_FAMILY_ALIASES: dict[str, CodecFamily] = {
    "h264": CodecFamily.H264,
    "h264_nvenc": CodecFamily.H264,
    "hevc": CodecFamily.HEVC,
    "h265": CodecFamily.HEVC,
    "hevc_nvenc": CodecFamily.HEVC,
    "h263": CodecFamily.H263,
    "mpeg4": CodecFamily.MPEG4,
    "mpeg2": CodecFamily.MPEG2,
    "mpeg2video": CodecFamily.MPEG2,
    "mpeg1": CodecFamily.MPEG1,
    "mpeg1video": CodecFamily.MPEG1,
    "vc1": CodecFamily.VC1,
    "vp9": CodecFamily.VP9,
    "copy": CodecFamily.COPY,
}

# Hardware (NVIDIA CUVID) decoders per family.
DECODERS: dict[CodecFamily, str] = {
    CodecFamily.HEVC: "hevc_cuvid",
    CodecFamily.H264: "h264_cuvid",
    CodecFamily.H263: "h263_cuvid",
    CodecFamily.MPEG4: "mpeg4_cuvid",
    CodecFamily.MPEG2: "mpeg2_cuvid",
    CodecFamily.MPEG1: "mpeg1_cuvid",
    CodecFamily.VC1: "vc1_cuvid",
    CodecFamily.VP9: "vp9_cuvid",
    CodecFamily.COPY: COPY_CODEC,
}

# Encoders per family; only families with a hardware encoder are listed.
ENCODERS: dict[CodecFamily, str] = {
    CodecFamily.HEVC: "hevc_nvenc",
    CodecFamily.H264: "h264_nvenc",
    CodecFamily.COPY: COPY_CODEC,
}


def tier_height(label: str) -> int:
    """Return the height encoded in a tier label, or 0 if it is not one.

    >>> tier_height("1080p")
    1080
    """
    if label not in SIZE_TIERS:
        return 0
    return int(label.rstrip("p"))


def tier_heights() -> frozenset[int]:
    """Heights of every known size tier."""
    return frozenset(tier_height(label) for label in SIZE_TIERS)


def classify_size(width: int, height: int) -> str:
    """Return the tier label matching a frame size, or an empty string.

    An exact height match wins over a width match so that cropped
    widescreen content (1920x800) still classifies by its width.
    """
    for label in SIZE_TIERS:
        if tier_height(label) == height:
            return label
    for label, tier_width in SIZE_TIERS.items():
        if tier_width == width:
            return label
    return ""


def resolve_decoder(codec_name: str, override: str = "") -> str:
    """Pick the input decoder for a probed codec name.

    Args:
        codec_name: Codec name reported by the prober.
        override: Explicit decoder from the profile; wins when set.

    Returns:
        The decoder name. Unknown codecs are returned unchanged.
    """
    if override:
        return override
    family = CodecFamily.from_name(codec_name)
    return DECODERS.get(family, codec_name)


def resolve_encoder(codec_name: str) -> str:
    """Pick the output encoder for a requested codec name.

    Unknown names (including ``libx264``/``libx265`` and the empty string)
    pass through unchanged.
    """
    family = CodecFamily.from_name(codec_name) if codec_name else None
    if family is None:
        return codec_name
    return ENCODERS.get(family, codec_name)


def is_hardware_decoder(name: str) -> bool:
    """True when decoding runs on the GPU."""
    return "cuvid" in name or "nvenc" in name


def is_hardware_encoder(name: str) -> bool:
    """True when encoding runs on the GPU."""
    return "nvenc" in name
