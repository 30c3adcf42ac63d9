"""Tests for workflow/processor.py."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from reencode.detection.parsers import CropMeasurement
from reencode.executor.types import EncodeResult
from reencode.introspector import MediaIntrospectionError
from reencode.policy.profile import EncodeProfile
from reencode.policy.resolver import resolve_plan
from reencode.workflow import EncodeWorkflow, find_media_files

FFMPEG = Path("/usr/bin/ffmpeg")

LETTERBOX = CropMeasurement(top=140, bottom=140, width=1920, height=800)


@pytest.fixture
def workflow(fake_prober) -> EncodeWorkflow:
    return EncodeWorkflow(fake_prober, FFMPEG, executor=MagicMock())


class TestFindMediaFiles:
    def test_recursive_and_sorted(self, tmp_path: Path) -> None:
        (tmp_path / "b").mkdir()
        for name in ("z.mkv", "b/a.mp4", "notes.txt", "clip.MKV", "c.avi"):
            (tmp_path / name).touch()
        assert find_media_files(tmp_path) == [
            tmp_path / "b" / "a.mp4",
            tmp_path / "clip.MKV",
            tmp_path / "z.mkv",
        ]

    def test_empty(self, tmp_path: Path) -> None:
        assert find_media_files(tmp_path) == []


# =============================================================================
# Source description
# =============================================================================


class TestDescribeSource:
    """Tests for EncodeWorkflow.describe_source."""

    def test_missing_file(self, workflow, tmp_path: Path) -> None:
        with pytest.raises(MediaIntrospectionError, match="File not found"):
            workflow.describe_source(tmp_path / "missing.mkv", EncodeProfile())

    def test_probes_requested_streams(self, workflow, fake_prober, video_file) -> None:
        source = workflow.describe_source(
            video_file, EncodeProfile(video_stream=1, audio_stream=2)
        )
        assert fake_prober.calls == [("video", video_file, 1), ("audio", video_file, 2)]
        assert source.stream == 1
        assert source.audio_stream == 2
        assert source.codec == "h264_cuvid"
        assert source.size == "1080p"
        assert source.title == "Some.Movie"

    def test_decoder_override(self, workflow, video_file) -> None:
        source = workflow.describe_source(video_file, EncodeProfile(decoder="ffmpeg"))
        assert source.codec == "ffmpeg"

    def test_no_audio_stream(self, fake_prober, video_file) -> None:
        fake_prober.audio = {}
        workflow = EncodeWorkflow(fake_prober, FFMPEG)
        source = workflow.describe_source(video_file, EncodeProfile())
        assert not source.has_audio

    def test_crop_detection(self, workflow, video_file) -> None:
        with patch.object(
            workflow.crop_detector, "detect", return_value=LETTERBOX
        ) as mock_detect:
            source = workflow.describe_source(
                video_file, EncodeProfile(crop=True, end="1:00")
            )
        assert mock_detect.call_args.args[1] == 58.0
        assert (source.width, source.height) == (1920, 800)
        assert source.crop.top == 140
        # The tier comes from the uncropped frame.
        assert source.size == "1080p"

    def test_crop_not_requested(self, workflow, video_file) -> None:
        with patch.object(workflow.crop_detector, "detect") as mock_detect:
            workflow.describe_source(video_file, EncodeProfile())
        mock_detect.assert_not_called()

    def test_volume_detection(self, workflow, video_file) -> None:
        with patch.object(
            workflow.volume_detector, "detect", return_value="-5.2 dB"
        ) as mock_detect:
            source = workflow.describe_source(
                video_file, EncodeProfile(detect_volume=True)
            )
        mock_detect.assert_called_once()
        assert source.volume == "-5.2 dB"

    def test_explicit_volume_skips_detection(self, workflow, video_file) -> None:
        with patch.object(workflow.volume_detector, "detect") as mock_detect:
            workflow.describe_source(
                video_file, EncodeProfile(detect_volume=True, volume="2dB")
            )
        mock_detect.assert_not_called()


# =============================================================================
# Planning and running
# =============================================================================


class TestPlanAndRun:
    """Tests for EncodeWorkflow.plan and run."""

    def test_output_beside_source(self, workflow, video_file) -> None:
        _, command = workflow.plan(video_file, EncodeProfile(size="720p"))
        expected = video_file.with_name("Some.Movie.2019.1080p.720p.mkv")
        assert command.output_path == expected
        assert command.final[-1] == str(expected)

    def test_plan_not_modified_by_command_building(
        self, workflow, video_file
    ) -> None:
        profile = EncodeProfile(size="720p")
        plan, _ = workflow.plan(video_file, profile)
        source = workflow.describe_source(video_file, profile)
        assert plan == resolve_plan(source, profile)

    def test_output_directory(self, workflow, video_file, tmp_path: Path) -> None:
        out_dir = tmp_path / "encoded"
        _plan, command = workflow.plan(
            video_file, EncodeProfile(output_path=str(out_dir), extension="mp4")
        )
        assert command.output_path == out_dir / "Some.Movie.2019.1080p.1080p.mp4"

    def test_existing_output_is_not_overwritten(self, workflow, video_file) -> None:
        taken = video_file.with_name("Some.Movie.2019.1080p.720p.mkv")
        taken.touch()
        _plan, command = workflow.plan(video_file, EncodeProfile(size="720p"))
        assert command.output_path == video_file.with_name(
            "Some.Movie.2019.1080p.720p.1.mkv"
        )

    def test_detected_volume_reaches_command(self, workflow, video_file) -> None:
        with patch.object(workflow.volume_detector, "detect", return_value="-5.2 dB"):
            _plan, command = workflow.plan(
                video_file, EncodeProfile(detect_volume=True)
            )
        assert "volume=5.2dB" in command.final

    def test_dry_run(self, workflow, video_file) -> None:
        on_plan = MagicMock()
        outcome = workflow.run(
            video_file, EncodeProfile(), dry_run=True, on_plan=on_plan
        )
        assert outcome.result is None
        on_plan.assert_called_once_with(outcome.plan, outcome.command)
        workflow.executor.run.assert_not_called()

    def test_run(self, workflow, video_file) -> None:
        result = EncodeResult(success=True, output_path=video_file)
        workflow.executor.run.return_value = result
        outcome = workflow.run(video_file, EncodeProfile(codec="copy"))
        workflow.executor.run.assert_called_once_with(outcome.command)
        assert outcome.result is result
        assert "copy" in outcome.command.final
