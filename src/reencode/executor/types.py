"""Encode command and result types."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class TwoPassContext:
    """Context for two-pass encoding.

    Two-pass encoding runs the encoder twice:
    - Pass 1: Analyze video, output to the null device, write a stats file
    - Pass 2: Encode video using the stats file for accurate bitrate targeting
    """

    stats_file: Path
    """Path of the x265 stats file shared by both passes."""

    def cleanup(self) -> None:
        """Remove the stats files written by pass 1.

        x265 creates: <stats>, <stats>.cutree (and .temp variants while running)
        """
        suffixes = ["", ".cutree", ".temp", ".cutree.temp"]
        for suffix in suffixes:
            stats_file = Path(str(self.stats_file) + suffix)
            if stats_file.exists():
                try:
                    stats_file.unlink()
                    logger.debug("Cleaned up stats file: %s", stats_file)
                except OSError as e:
                    logger.warning(
                        "Could not clean up stats file %s: %s", stats_file, e
                    )


@dataclass
class EncodeCommand:
    """Encoder invocations for one transcode, run in order."""

    passes: list[list[str]]
    output_path: Path
    two_pass: TwoPassContext | None = None

    @property
    def final(self) -> list[str]:
        return self.passes[-1]


@dataclass
class EncodeResult:
    """Result of an encode."""

    success: bool
    output_path: Path | None = None
    passes_run: int = 0
    elapsed_seconds: float = 0.0
    commands: list[list[str]] = field(default_factory=list)
