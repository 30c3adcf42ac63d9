"""Tests for executor/command.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from reencode.executor.command import (
    HWACCEL_ARGS,
    build_encode_command,
    build_encode_commands,
    encoder_args,
    format_seconds,
)
from reencode.executor.filters import build_filter_graph
from reencode.policy.profile import EncodeProfile
from reencode.policy.resolver import resolve_plan

FFMPEG = Path("/usr/bin/ffmpeg")
OUTPUT = Path("/out/movie.mkv")
SOURCE_FILE = "/videos/Some.Movie.2019.1080p.mkv"


def _command(source, profile: EncodeProfile) -> list[str]:
    plan = resolve_plan(source, profile)
    return build_encode_command(plan, build_filter_graph(plan), FFMPEG, OUTPUT)


class TestFormatSeconds:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(30.0, "30"), (1.5, "1.5"), (0, "0"), (90.25, "90.25")],
    )
    def test_format(self, value: float, expected: str) -> None:
        assert format_seconds(value) == expected


class TestEncoderArgs:
    def test_hevc_nvenc_level(self) -> None:
        args = encoder_args("hevc_nvenc")
        assert args[args.index("-level:v") + 1] == "4.1"

    def test_unknown_encoder(self) -> None:
        assert encoder_args("mpeg4") == []


# =============================================================================
# Single pass commands
# =============================================================================


class TestBuildEncodeCommand:
    """Tests for build_encode_command."""

    def test_software_encode(self, make_source) -> None:
        cmd = _command(
            make_source(codec="ffmpeg"),
            EncodeProfile(
                codec="libx264", constant_rate_factor=23, seek=10, duration=30
            ),
        )
        assert cmd == [
            "/usr/bin/ffmpeg",
            "-y",
            "-hide_banner",
            "-i",
            SOURCE_FILE,
            "-ss",
            "10",
            "-t",
            "30",
            "-filter_complex",
            "[0:v:0]format=nv12[v]",
            "-map",
            "[v]",
            "-c:v",
            "libx264",
            "-preset:v",
            "slow",
            "-crf:v",
            "23",
            "-map",
            "0:a:0",
            "-c:a",
            "copy",
            "/out/movie.mkv",
        ]

    def test_seek_applies_to_output(self, make_source) -> None:
        cmd = _command(make_source(codec="ffmpeg"), EncodeProfile(start="1:00"))
        assert cmd.index("-ss") > cmd.index("-i")
        assert cmd[cmd.index("-ss") + 1] == "60"
        assert "-t" not in cmd

    def test_hardware_decode_and_encode(self, make_source) -> None:
        cmd = _command(
            make_source(codec="h264_cuvid"),
            EncodeProfile(codec="h264", constant_quality=19, rate=3000),
        )
        assert cmd[3:7] == HWACCEL_ARGS
        assert cmd[cmd.index("-i") - 2 : cmd.index("-i")] == ["-c:v", "h264_cuvid"]
        assert cmd[cmd.index("-cq:v") + 1] == "19"
        assert cmd[cmd.index("-b:v") + 1] == "3000k"
        assert cmd[cmd.index("-maxrate:v") + 1] == "3000k"
        assert "h264_nvenc" in cmd

    def test_stream_copy(self, make_source) -> None:
        cmd = _command(make_source(), EncodeProfile(codec="copy", crop=True))
        assert "-filter_complex" not in cmd
        assert cmd[cmd.index("-map") : cmd.index("-map") + 4] == [
            "-map",
            "0:v:0",
            "-c:v",
            "copy",
        ]
        # No input decoder for a copy.
        assert cmd.index("-c:v") > cmd.index("-i")

    def test_video_stream_index(self, make_source) -> None:
        cmd = _command(make_source(codec="ffmpeg", stream=2), EncodeProfile())
        assert "[0:v:2]format=nv12[v]" in cmd

    def test_no_codec_leaves_encoder_to_ffmpeg(self, make_source) -> None:
        cmd = _command(make_source(codec="ffmpeg"), EncodeProfile())
        assert "-c:v" not in cmd

    def test_audio_reencode(self, make_source) -> None:
        cmd = _command(
            make_source(codec="ffmpeg"), EncodeProfile(audio_rate=128, volume="3dB")
        )
        audio = cmd[cmd.index("-c:a") :]
        assert audio[:2] == ["-c:a", "aac"]
        assert audio[audio.index("-b:a") + 1] == "128k"
        assert audio[audio.index("-ac") + 1] == "2"
        assert audio[audio.index("-filter:a") + 1] == "volume=3dB"

    def test_no_audio(self, make_source) -> None:
        cmd = _command(make_source(codec="ffmpeg", audio_stream=-1), EncodeProfile())
        assert "-c:a" not in cmd

    def test_audio_delay_adds_input(self, make_source) -> None:
        cmd = _command(make_source(codec="ffmpeg"), EncodeProfile(audio_delay=0.5))
        offset = cmd.index("-itsoffset")
        assert cmd[offset : offset + 4] == ["-itsoffset", "0.5", "-i", SOURCE_FILE]
        assert cmd[cmd.index("-c:a") - 1] == "1:a:0"

    def test_watermark_input_before_delayed_audio(self, make_source) -> None:
        cmd = _command(
            make_source(codec="ffmpeg"),
            EncodeProfile(audio_delay=-1, watermark_file="/logo.png"),
        )
        inputs = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-i"]
        assert inputs == [SOURCE_FILE, "/logo.png", SOURCE_FILE]
        assert cmd[cmd.index("-c:a") - 1] == "2:a:0"

    def test_strip_metadata(self, make_source) -> None:
        cmd = _command(make_source(codec="ffmpeg"), EncodeProfile(strip_metadata=True))
        assert cmd[cmd.index("-map_metadata") + 1] == "-1"

    def test_tune_and_level(self, make_source) -> None:
        cmd = _command(
            make_source(codec="ffmpeg"),
            EncodeProfile(codec="libx264", tune="film", level="4.0"),
        )
        assert cmd[cmd.index("-tune") + 1] == "film"
        assert cmd[cmd.index("-level:v") + 1] == "4.0"

    def test_opencl_device_args_lead(self, make_source) -> None:
        cmd = _command(
            make_source(codec="ffmpeg", color_transfer="smpte2084"),
            EncodeProfile(color_transfer="bt709"),
        )
        assert cmd[3:5] == ["-init_hw_device", "opencl=gpu:0.0"]

    def test_pq_x265_params(self, make_source) -> None:
        cmd = _command(
            make_source(codec="ffmpeg"),
            EncodeProfile(codec="libx265", color_transfer="smpte2084"),
        )
        params = cmd[cmd.index("-x265-params") + 1]
        assert params.startswith("hdr-opt=1:")
        assert "transfer=smpte2084" in params
        assert cmd[cmd.index("-pix_fmt") + 1] == "yuv420p10le"


# =============================================================================
# Two-pass
# =============================================================================


class TestBuildEncodeCommands:
    """Tests for build_encode_commands."""

    def test_single_pass(self, make_source) -> None:
        plan = resolve_plan(make_source(codec="ffmpeg"), EncodeProfile(two_pass=True))
        command = build_encode_commands(plan, build_filter_graph(plan), FFMPEG, OUTPUT)
        assert len(command.passes) == 1
        assert command.two_pass is None
        assert command.final[-1] == str(OUTPUT)

    def test_two_pass_libx265(self, make_source, tmp_path: Path) -> None:
        output = tmp_path / "movie.mkv"
        plan = resolve_plan(
            make_source(codec="ffmpeg"),
            EncodeProfile(codec="libx265", two_pass=True, rate=2000),
        )
        command = build_encode_commands(plan, build_filter_graph(plan), FFMPEG, output)
        stats = tmp_path / "movie.mkv.x265.log"

        assert len(command.passes) == 2
        assert command.two_pass is not None
        assert command.two_pass.stats_file == stats

        pass1, pass2 = command.passes
        assert pass1[pass1.index("-x265-params") + 1] == (
            f"pass=1:no-slow-firstpass=1:stats={stats}"
        )
        assert pass1[-4:-1] == ["-an", "-f", "null"]
        assert "-c:a" not in pass1

        assert pass2[pass2.index("-x265-params") + 1] == f"pass=2:stats={stats}"
        assert pass2[-1] == str(output)
        assert "-c:a" in pass2
        # A two-pass target bitrate is an average, not a ceiling.
        assert "-maxrate:v" not in pass2

    def test_explicit_stats_file(self, make_source, tmp_path: Path) -> None:
        plan = resolve_plan(
            make_source(codec="ffmpeg"), EncodeProfile(codec="libx265", two_pass=True)
        )
        stats = tmp_path / "stats.log"
        command = build_encode_commands(
            plan, build_filter_graph(plan), FFMPEG, OUTPUT, stats_file=stats
        )
        assert command.two_pass is not None
        assert command.two_pass.stats_file == stats
