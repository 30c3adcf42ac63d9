"""Crop and volume detection using ffmpeg in analysis mode.

Both detectors run ffmpeg with a null output and scrape its diagnostic
text. Detection is best effort: a detector that cannot run reports
nothing found instead of failing the encode.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for ffmpeg invocation
from pathlib import Path

from reencode.detection.parsers import (
    CropMeasurement,
    consolidate_crop,
    parse_crop_samples,
    parse_max_volume,
)
from reencode.detection.window import crop_detect_filter
from reencode.executor.interface import get_null_device
from reencode.policy.tables import COPY_CODEC, SOFTWARE_DECODER
from reencode.policy.video import Video

logger = logging.getLogger(__name__)


def _run_analysis(cmd: list[str], timeout: float | None) -> str:
    """Run ffmpeg and return its combined stdout and stderr.

    Returns an empty string when ffmpeg cannot be run.
    """
    logger.debug("Running analysis: %s", " ".join(cmd))
    try:
        result = subprocess.run(  # nosec B603 - ffmpeg path is validated
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            check=False,
            timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Analysis run failed, ignoring: %s", e)
        return ""
    if result.returncode != 0:
        logger.debug("Analysis exited with code %d", result.returncode)
    return result.stdout or ""


class CropDetector:
    """Detect black borders with ffmpeg's cropdetect filter."""

    def __init__(
        self,
        ffmpeg_path: Path,
        null_device: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._ffmpeg_path = ffmpeg_path
        self._null_device = null_device or get_null_device()
        self._timeout = timeout

    def build_command(self, source: Video, window: float) -> list[str]:
        """Build the cropdetect command sampling ``window`` seconds."""
        cmd = [str(self._ffmpeg_path), "-y", "-hide_banner"]
        if source.is_hardware_decode:
            # Frames come back to system memory for the software filter.
            cmd.extend(["-hwaccel", "cuda"])
        if source.codec not in ("", SOFTWARE_DECODER, COPY_CODEC):
            cmd.extend(["-c:v", source.codec])
        cmd.extend(
            [
                "-i",
                str(source.file),
                "-map",
                f"0:v:{source.stream}",
                "-vf",
                crop_detect_filter(window),
                "-to",
                str(int(window)),
                "-an",
                "-f",
                "null",
                self._null_device,
            ]
        )
        return cmd

    def detect(self, source: Video, window: float) -> CropMeasurement:
        """Measure the content area of ``source``.

        Returns:
            The consolidated measurement; empty when nothing was detected.
        """
        output = _run_analysis(self.build_command(source, window), self._timeout)
        samples = parse_crop_samples(output)
        measurement = consolidate_crop(samples, source.width, source.height)
        if not measurement.detected:
            logger.info("No crop detected for %s", source.file)
        elif not measurement.has_margins:
            logger.info("No black borders in %s", source.file)
        else:
            logger.info(
                "Detected crop for %s: %dx%d (top=%d bottom=%d left=%d right=%d)",
                source.file,
                measurement.width,
                measurement.height,
                measurement.top,
                measurement.bottom,
                measurement.left,
                measurement.right,
            )
        return measurement


class VolumeDetector:
    """Measure peak audio volume with ffmpeg's volumedetect filter."""

    def __init__(
        self,
        ffmpeg_path: Path,
        null_device: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._ffmpeg_path = ffmpeg_path
        self._null_device = null_device or get_null_device()
        self._timeout = timeout

    def build_command(self, source: Video) -> list[str]:
        return [
            str(self._ffmpeg_path),
            "-hide_banner",
            "-i",
            str(source.file),
            "-vn",
            "-map",
            f"0:a:{source.audio_stream}",
            "-filter:a",
            "volumedetect",
            "-f",
            "null",
            self._null_device,
        ]

    def detect(self, source: Video) -> str:
        """Return the peak volume such as ``"-5.2 dB"``, or ``""``.

        Sources without an audio stream are not analysed.
        """
        if not source.has_audio:
            logger.info("No audio stream in %s, skipping volume detection", source.file)
            return ""
        volume = parse_max_volume(
            _run_analysis(self.build_command(source), self._timeout)
        )
        logger.info("Detected max volume for %s: %s", source.file, volume or "none")
        return volume
