"""Sequential encode pipeline for a single file.

probe video -> probe audio -> crop detection -> volume detection ->
resolve plan -> filter graph -> command -> execute
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from reencode.detection.detector import CropDetector, VolumeDetector
from reencode.detection.window import crop_detect_window
from reencode.executor.command import build_encode_commands
from reencode.executor.encoder import EncodeExecutor
from reencode.executor.filters import build_filter_graph
from reencode.executor.paths import build_output_path, get_safe_path
from reencode.executor.types import EncodeCommand, EncodeResult
from reencode.introspector.interface import MediaIntrospectionError, MediaProber
from reencode.policy.profile import EncodeProfile
from reencode.policy.resolver import TranscodePlan, resolve_plan
from reencode.policy.timecode import parse_timecode
from reencode.policy.video import Video

logger = logging.getLogger(__name__)

MEDIA_EXTENSIONS = frozenset({".mp4", ".mkv"})


@dataclass
class EncodeOutcome:
    """What the workflow decided and, unless dry run, what it produced."""

    plan: TranscodePlan
    command: EncodeCommand
    result: EncodeResult | None = None
    """None for a dry run."""


def find_media_files(directory: Path) -> list[Path]:
    """Return every ``.mp4``/``.mkv`` file below ``directory``, sorted."""
    return sorted(
        path
        for path in directory.rglob("*")
        if path.is_file() and path.suffix.lower() in MEDIA_EXTENSIONS
    )


class EncodeWorkflow:
    """Run the encode pipeline for one source file at a time.

    Args:
        prober: Media prober for stream attributes.
        ffmpeg_path: ffmpeg executable used for detection and encoding.
        executor: Runs the encode; a default executor is created if None.
        detection_timeout: Seconds before a detection run is abandoned.
    """

    def __init__(
        self,
        prober: MediaProber,
        ffmpeg_path: Path,
        executor: EncodeExecutor | None = None,
        detection_timeout: float | None = None,
    ) -> None:
        self.prober = prober
        self.ffmpeg_path = ffmpeg_path
        self.executor = executor or EncodeExecutor()
        self.crop_detector = CropDetector(ffmpeg_path, timeout=detection_timeout)
        self.volume_detector = VolumeDetector(ffmpeg_path, timeout=detection_timeout)

    def describe_source(self, path: Path, profile: EncodeProfile) -> Video:
        """Probe ``path`` and run the detection passes the profile asks for.

        Raises:
            MediaIntrospectionError: If the video probe fails.
        """
        if not path.is_file():
            raise MediaIntrospectionError(f"File not found: {path}")

        source = Video.from_file(path)
        source.stream = profile.video_stream
        source.apply_video_probe(
            self.prober.probe_video(path, profile.video_stream),
            decoder_override=profile.decoder,
        )
        source.apply_audio_probe(
            self.prober.probe_audio(path, profile.audio_stream),
            stream_index=profile.audio_stream,
        )

        if profile.crop:
            end = parse_timecode(profile.end) if profile.end else 0.0
            window = crop_detect_window(
                profile.crop_detect_duration, profile.duration, end
            )
            source.apply_crop(self.crop_detector.detect(source, window))

        if profile.detect_volume and not profile.volume:
            source.apply_volume(self.volume_detector.detect(source))

        return source

    def plan(
        self, path: Path, profile: EncodeProfile
    ) -> tuple[TranscodePlan, EncodeCommand]:
        """Resolve the plan and build the encoder command for ``path``."""
        source = self.describe_source(path, profile)
        plan = resolve_plan(source, profile)
        graph = build_filter_graph(plan)

        output_dir = Path(profile.output_path) if profile.output_path else path.parent
        output_path = get_safe_path(
            build_output_path(
                output_dir,
                plan.target.base_name,
                plan.target.size,
                plan.target.extension,
            )
        )
        command = build_encode_commands(plan, graph, self.ffmpeg_path, output_path)
        for number, cmd in enumerate(command.passes, start=1):
            logger.debug("Pass %d command: %s", number, " ".join(cmd))
        return plan, command

    def run(
        self,
        path: Path,
        profile: EncodeProfile,
        dry_run: bool = False,
        on_plan: Callable[[TranscodePlan, EncodeCommand], None] | None = None,
    ) -> EncodeOutcome:
        """Encode one file.

        Args:
            path: Source file.
            profile: Merged encode profile.
            dry_run: Resolve and build the command without running it.
            on_plan: Called with the plan and command before encoding starts.

        Raises:
            MediaIntrospectionError: If probing fails.
            EncodeError: If the encoder fails.
        """
        plan, command = self.plan(path, profile)
        if on_plan is not None:
            on_plan(plan, command)
        if dry_run:
            logger.info("Dry run, not encoding %s", path)
            return EncodeOutcome(plan=plan, command=command)

        result = self.executor.run(command)
        return EncodeOutcome(plan=plan, command=command, result=result)
