"""Tests for detection/detector.py ffmpeg-backed detectors."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from reencode.detection.detector import CropDetector, VolumeDetector
from reencode.detection.parsers import CropMeasurement
from reencode.policy.video import NO_AUDIO_STREAM

FFMPEG = Path("/usr/bin/ffmpeg")


def _completed(stdout: str, returncode: int = 0) -> MagicMock:
    result = MagicMock()
    result.stdout = stdout
    result.returncode = returncode
    return result


class TestCropDetector:
    """Tests for CropDetector."""

    def test_build_command_software(self, make_source) -> None:
        detector = CropDetector(FFMPEG, null_device="/dev/null")
        cmd = detector.build_command(make_source(codec="ffmpeg"), 600)
        assert cmd[:3] == ["/usr/bin/ffmpeg", "-y", "-hide_banner"]
        assert "-hwaccel" not in cmd
        assert "-c:v" not in cmd
        assert cmd[cmd.index("-vf") + 1] == (
            "fps=fps=10/600.000000,cropdetect=0.1:16:0"
        )
        assert cmd[cmd.index("-to") + 1] == "600"
        assert cmd[-4:] == ["-an", "-f", "null", "/dev/null"]

    def test_build_command_hardware(self, make_source) -> None:
        """GPU decoded frames are returned to system memory for cropdetect."""
        detector = CropDetector(FFMPEG, null_device="/dev/null")
        cmd = detector.build_command(make_source(codec="h264_cuvid"), 98.5)
        assert cmd[cmd.index("-hwaccel") + 1] == "cuda"
        assert "-hwaccel_output_format" not in cmd
        assert cmd[cmd.index("-c:v") + 1] == "h264_cuvid"
        assert cmd[cmd.index("-to") + 1] == "98"

    def test_detect(self, make_source) -> None:
        output = (
            "[Parsed_cropdetect_1 @ 0x1] crop=1920:800:0:140\n"
            "[Parsed_cropdetect_1 @ 0x1] crop=1920:800:0:140\n"
        )
        detector = CropDetector(FFMPEG, null_device="/dev/null")
        with patch(
            "reencode.detection.detector.subprocess.run",
            return_value=_completed(output),
        ) as mock_run:
            measurement = detector.detect(make_source(), 600)

        assert measurement == CropMeasurement(
            top=140, bottom=140, left=0, right=0, width=1920, height=800
        )
        kwargs = mock_run.call_args.kwargs
        assert kwargs["stderr"] == subprocess.STDOUT
        assert kwargs["check"] is False

    def test_detect_failure_is_not_fatal(self, make_source) -> None:
        detector = CropDetector(FFMPEG, null_device="/dev/null")
        with patch(
            "reencode.detection.detector.subprocess.run",
            side_effect=FileNotFoundError("ffmpeg"),
        ):
            measurement = detector.detect(make_source(), 600)
        assert not measurement.detected

    def test_detect_timeout_is_not_fatal(self, make_source) -> None:
        detector = CropDetector(FFMPEG, null_device="/dev/null", timeout=5)
        with patch(
            "reencode.detection.detector.subprocess.run",
            side_effect=subprocess.TimeoutExpired(["ffmpeg"], 5),
        ):
            measurement = detector.detect(make_source(), 600)
        assert measurement == CropMeasurement()


class TestVolumeDetector:
    """Tests for VolumeDetector."""

    def test_build_command(self, make_source) -> None:
        detector = VolumeDetector(FFMPEG, null_device="NUL")
        cmd = detector.build_command(make_source(audio_stream=1))
        assert cmd == [
            "/usr/bin/ffmpeg",
            "-hide_banner",
            "-i",
            "/videos/Some.Movie.2019.1080p.mkv",
            "-vn",
            "-map",
            "0:a:1",
            "-filter:a",
            "volumedetect",
            "-f",
            "null",
            "NUL",
        ]

    def test_detect(self, make_source) -> None:
        detector = VolumeDetector(FFMPEG, null_device="/dev/null")
        with patch(
            "reencode.detection.detector.subprocess.run",
            return_value=_completed("[Parsed_volumedetect_0] max_volume: -3.5 dB\n"),
        ):
            assert detector.detect(make_source()) == "-3.5 dB"

    def test_no_audio_skips_run(self, make_source) -> None:
        detector = VolumeDetector(FFMPEG, null_device="/dev/null")
        with patch("reencode.detection.detector.subprocess.run") as mock_run:
            assert detector.detect(make_source(audio_stream=NO_AUDIO_STREAM)) == ""
        mock_run.assert_not_called()
