"""Shared test fixtures for reencode."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from reencode.config import clear_config_cache
from reencode.introspector.interface import ProbeResult
from reencode.policy.video import Video

HD_VIDEO_PROBE: ProbeResult = {
    "codec_name": "h264",
    "width": "1920",
    "height": "1080",
    "pix_fmt": "yuv420p",
    "color_range": "tv",
    "color_space": "bt709",
    "color_transfer": "bt709",
    "color_primaries": "bt709",
    "duration": "3600.000000",
    "bit_rate": "8000000",
}

STEREO_AUDIO_PROBE: ProbeResult = {
    "codec_name": "aac",
    "bit_rate": "192000",
    "channels": "2",
    "channel_layout": "stereo",
}


class FakeProber:
    """MediaProber returning canned results and recording calls."""

    def __init__(
        self,
        video: ProbeResult | None = None,
        audio: ProbeResult | None = None,
    ) -> None:
        self.video = dict(HD_VIDEO_PROBE if video is None else video)
        self.audio = dict(STEREO_AUDIO_PROBE if audio is None else audio)
        self.calls: list[tuple[str, Path, int]] = []

    def probe_video(self, path: Path, stream_index: int = 0) -> ProbeResult:
        self.calls.append(("video", path, stream_index))
        return dict(self.video)

    def probe_audio(self, path: Path, stream_index: int = 0) -> ProbeResult:
        self.calls.append(("audio", path, stream_index))
        return dict(self.audio)


@pytest.fixture(autouse=True)
def reset_config_cache():
    """Keep the module-level config cache from leaking between tests."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def make_source() -> Callable[..., Video]:
    """Factory for probed source descriptors.

    Defaults describe a one hour 1080p h264 file with stereo aac audio,
    decoded in software.
    """

    def _make(**overrides: Any) -> Video:
        values: dict[str, Any] = {
            "file": Path("/videos/Some.Movie.2019.1080p.mkv"),
            "base_name": "Some.Movie.2019.1080p",
            "extension": "mkv",
            "title": "Some.Movie",
            "year": "2019",
            "extra_info": "1080p",
            "width": 1920,
            "height": 1080,
            "size": "1080p",
            "duration": 3600.0,
            "codec": "h264",
            "rate": 8000,
            "pixel_format": "yuv420p",
            "color_range": "tv",
            "color_space": "bt709",
            "color_transfer": "bt709",
            "color_primaries": "bt709",
            "audio_stream": 0,
            "audio_codec": "aac",
            "audio_rate": 192,
            "audio_channels": 2,
            "channel_layout": "stereo",
        }
        values.update(overrides)
        return Video(**values)

    return _make


@pytest.fixture
def fake_prober() -> FakeProber:
    return FakeProber()


@pytest.fixture
def video_file(tmp_path: Path) -> Path:
    """An empty file standing in for a source video."""
    path = tmp_path / "Some.Movie.2019.1080p.mkv"
    path.write_bytes(b"")
    return path
