"""ffprobe-based implementation of the MediaProber protocol."""

import logging
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path

from reencode.introspector.interface import MediaIntrospectionError, ProbeResult
from reencode.introspector.parsers import parse_key_values

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 60


class FFprobeIntrospector:
    """Probe individual streams of a media file with ffprobe."""

    def __init__(
        self, ffprobe_path: Path | None = None, timeout: int = DEFAULT_PROBE_TIMEOUT
    ) -> None:
        """Initialize the introspector.

        Args:
            ffprobe_path: Explicit path to ffprobe. When omitted the configured
                path or system PATH is used.
            timeout: Seconds before a probe is abandoned.

        Raises:
            MediaIntrospectionError: If ffprobe is not available.
        """
        self._ffprobe_path = ffprobe_path or self._get_configured_path()
        self._timeout = timeout

        if self._ffprobe_path is None:
            raise MediaIntrospectionError(
                "ffprobe is not installed or not in PATH. "
                "Install ffmpeg or set REENCODE_FFPROBE_PATH / REENCODE_FFMPEG_DIR."
            )

    @staticmethod
    def _get_configured_path() -> Path | None:
        from reencode.executor.interface import get_tool_path

        return get_tool_path("ffprobe")

    def build_video_command(self, path: Path, stream_index: int = 0) -> list[str]:
        return [
            str(self._ffprobe_path),
            "-v",
            "error",
            "-select_streams",
            f"v:{stream_index}",
            "-show_format",
            "-show_streams",
            "-of",
            "default=noprint_wrappers=1",
            "-i",
            str(path),
        ]

    def build_audio_command(self, path: Path, stream_index: int = 0) -> list[str]:
        return [
            str(self._ffprobe_path),
            "-v",
            "error",
            "-select_streams",
            f"a:{stream_index}",
            "-show_streams",
            "-of",
            "default=noprint_wrappers=1",
            "-i",
            str(path),
        ]

    def probe_video(self, path: Path, stream_index: int = 0) -> ProbeResult:
        """Probe a video stream and the container format.

        Args:
            path: Media file.
            stream_index: Index among the file's video streams.

        Returns:
            Flat key/value result.

        Raises:
            MediaIntrospectionError: If the file is missing or ffprobe fails.
        """
        return self._probe(path, self.build_video_command(path, stream_index))

    def probe_audio(self, path: Path, stream_index: int = 0) -> ProbeResult:
        """Probe an audio stream. An empty result means no such stream."""
        return self._probe(path, self.build_audio_command(path, stream_index))

    def _probe(self, path: Path, cmd: list[str]) -> ProbeResult:
        if not path.exists():
            raise MediaIntrospectionError(f"File not found: {path}")

        logger.debug("Running ffprobe: %s", " ".join(cmd))
        try:
            result = subprocess.run(  # nosec B603 - ffprobe path is validated
                cmd,
                capture_output=True,
                text=True,
                errors="replace",  # Handle non-UTF8 characters by replacing them
                check=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as e:
            raise MediaIntrospectionError(
                f"ffprobe could not be started: {self._ffprobe_path}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise MediaIntrospectionError(
                f"ffprobe timed out for {path} after {e.timeout}s"
            ) from e
        except subprocess.CalledProcessError as e:
            raise MediaIntrospectionError(
                f"ffprobe failed for {path}: {(e.stderr or '').strip() or e}"
            ) from e
        except OSError as e:
            raise MediaIntrospectionError(f"ffprobe failed for {path}: {e}") from e

        return parse_key_values(result.stdout)
