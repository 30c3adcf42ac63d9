"""Transfer characteristic classification.

Decides which color correction the filter graph applies when a source is
converted to a bt709 target.
"""

from __future__ import annotations

from enum import Enum

BT709 = "bt709"
PQ_TRANSFER = "smpte2084"
HLG_TRANSFER = "arib-std-b67"

TEN_BIT_PIXEL_FORMATS = frozenset({"yuv420p10le", "yuv422p10le", "yuv444p10le"})

_LEGACY_TRANSFERS = frozenset({"unknown", "bt601", "bt470m", "bt470bg", "smpte170m"})
_SDR_TRANSFERS = frozenset(
    {
        BT709,
        "iec61966-2-1",
        "gamma22",
        "gamma28",
        "linear",
        "bt2020-10",
        "bt2020-12",
        "smpte240m",
    }
)


class TransferClass(Enum):
    """Broad class of a color transfer characteristic."""

    SDR = "sdr"
    PQ = "pq"
    HLG = "hlg"
    LEGACY = "legacy"
    UNTAGGED = "untagged"

    @property
    def is_hdr(self) -> bool:
        return self in (TransferClass.PQ, TransferClass.HLG)


def classify_transfer(transfer: str) -> TransferClass:
    """Classify a transfer name as reported by ffprobe."""
    name = transfer.strip().casefold()
    if not name:
        return TransferClass.UNTAGGED
    if name == PQ_TRANSFER:
        return TransferClass.PQ
    if name == HLG_TRANSFER:
        return TransferClass.HLG
    if name in _SDR_TRANSFERS:
        return TransferClass.SDR
    if name in _LEGACY_TRANSFERS:
        return TransferClass.LEGACY
    # Anything else ffprobe reports is treated like an untrusted legacy tag.
    return TransferClass.LEGACY


def is_ten_bit(pixel_format: str) -> bool:
    return pixel_format in TEN_BIT_PIXEL_FORMATS
