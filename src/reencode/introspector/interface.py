"""Media prober interface."""

from pathlib import Path
from typing import Protocol

# Flat key/value view of one prober run. Later duplicate keys win.
ProbeResult = dict[str, str]


class MediaIntrospectionError(Exception):
    """Raised when a media file cannot be probed."""

    pass


class MediaProber(Protocol):
    """Protocol for probing a single video or audio stream of a file."""

    def probe_video(self, path: Path, stream_index: int = 0) -> ProbeResult:
        """Probe one video stream plus the container format.

        Raises:
            MediaIntrospectionError: If the prober cannot be run or fails.
        """
        ...

    def probe_audio(self, path: Path, stream_index: int = 0) -> ProbeResult:
        """Probe one audio stream.

        An empty result means the file has no such audio stream.

        Raises:
            MediaIntrospectionError: If the prober cannot be run or fails.
        """
        ...
