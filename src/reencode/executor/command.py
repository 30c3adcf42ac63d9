"""Encoder command construction.

Serializes a resolved plan and its filter graph into ffmpeg arguments.
Argument order matters: input options precede their ``-i``, and
``-ss``/``-t`` follow the inputs so they apply to the output.
"""

from __future__ import annotations

from pathlib import Path

from reencode.executor.filters import OUTPUT_LABEL, FilterGraph
from reencode.executor.interface import get_null_device
from reencode.executor.types import EncodeCommand, TwoPassContext
from reencode.policy.resolver import TranscodePlan
from reencode.policy.tables import COPY_CODEC, SOFTWARE_DECODER, is_hardware_decoder

HWACCEL_ARGS = ["-hwaccel", "cuda", "-hwaccel_output_format", "cuda"]

# Fixed tuning per encoder.
ENCODER_OPTIONS: dict[str, list[tuple[str, str]]] = {
    "h264_nvenc": [
        ("-preset:v", "p7"),
        ("-rc:v", "vbr"),
        ("-bf:v", "4"),
        ("-b_ref_mode:v", "middle"),
        ("-rc-lookahead:v", "32"),
        ("-bufsize:v", "16M"),
        ("-max_muxing_queue_size", "800"),
    ],
    "hevc_nvenc": [
        ("-preset:v", "p7"),
        ("-level:v", "4.1"),
        ("-rc:v", "vbr"),
        ("-rc-lookahead:v", "32"),
        ("-bf:v", "4"),
        ("-bufsize:v", "16M"),
        ("-max_muxing_queue_size", "800"),
    ],
    "libx264": [("-preset:v", "slow")],
    "libx265": [("-preset:v", "slow")],
}


def encoder_args(encoder: str) -> list[str]:
    """Flattened tuning options for an encoder; unknown encoders get none."""
    return [part for option in ENCODER_OPTIONS.get(encoder, []) for part in option]


def format_seconds(value: float) -> str:
    """Shortest decimal form of a time value: 30.0 -> "30", 1.5 -> "1.5"."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _input_args(plan: TranscodePlan, graph: FilterGraph) -> list[str]:
    source = plan.source
    target = plan.target
    args: list[str] = []

    if is_hardware_decoder(plan.decoder):
        args.extend(HWACCEL_ARGS)
    if plan.decoder not in ("", SOFTWARE_DECODER, COPY_CODEC):
        args.extend(["-c:v", plan.decoder])
    args.extend(graph.decoder_args)
    args.extend(["-i", str(source.file)])

    if plan.uses_watermark:
        args.extend(["-i", plan.profile.watermark_file])
    if target.audio_input:
        args.extend(
            ["-itsoffset", format_seconds(target.audio_delay), "-i", str(source.file)]
        )

    if plan.profile.strip_metadata:
        args.extend(["-map_metadata", "-1"])
    if target.seek > 0:
        args.extend(["-ss", format_seconds(target.seek)])
    if target.duration > 0:
        args.extend(["-t", format_seconds(target.duration)])
    return args


def _video_args(plan: TranscodePlan, graph: FilterGraph) -> list[str]:
    target = plan.target
    video_map = f"0:v:{plan.source.stream}"

    if plan.is_copy:
        return ["-map", video_map, "-c:v", COPY_CODEC]

    args: list[str] = []
    if graph.is_empty:
        args.extend(["-map", video_map])
    else:
        args.extend(
            ["-filter_complex", graph.serialize(), "-map", f"[{OUTPUT_LABEL}]"]
        )

    if target.codec:
        args.extend(["-c:v", target.codec])
        args.extend(encoder_args(target.codec))

    if target.constant_rate_factor >= 0:
        args.extend(["-crf:v", str(target.constant_rate_factor)])
    elif target.constant_quality >= 0:
        args.extend(["-cq:v", str(target.constant_quality)])

    if target.rate > 0:
        args.extend(["-b:v", f"{target.rate}k"])
        if not plan.two_pass:
            args.extend(["-maxrate:v", f"{target.rate}k"])

    args.extend(graph.output_args)
    return args


def _audio_args(plan: TranscodePlan) -> list[str]:
    source = plan.source
    target = plan.target
    if not source.has_audio:
        return []

    args = [
        "-map",
        f"{target.audio_input}:a:{source.audio_stream}",
        "-c:a",
        target.audio_codec,
    ]
    if target.audio_codec != COPY_CODEC:
        if target.audio_rate > 0:
            args.extend(["-b:a", f"{target.audio_rate}k"])
        if target.audio_channels > 0:
            args.extend(["-ac", str(target.audio_channels)])
        if target.volume:
            args.extend(["-filter:a", f"volume={target.volume}"])
    return args


def _tuning_args(plan: TranscodePlan) -> list[str]:
    if plan.is_copy:
        return []
    args: list[str] = []
    if plan.profile.tune:
        args.extend(["-tune", plan.profile.tune])
    if plan.profile.level:
        args.extend(["-level:v", plan.profile.level])
    return args


def _x265_args(graph: FilterGraph, extra: list[str]) -> list[str]:
    params = [*graph.x265_params, *extra]
    if not params:
        return []
    return ["-x265-params", ":".join(params)]


def build_encode_command(
    plan: TranscodePlan,
    graph: FilterGraph,
    ffmpeg_path: Path,
    output_path: Path,
    two_pass_ctx: TwoPassContext | None = None,
) -> list[str]:
    """Build the encode (or second pass) command.

    Args:
        plan: Resolved transcode plan.
        graph: Filter graph built for the plan.
        ffmpeg_path: ffmpeg executable.
        output_path: File to write.
        two_pass_ctx: Context when this is pass 2 of a two-pass encode.

    Returns:
        List of command arguments.
    """
    cmd = [str(ffmpeg_path), "-y", "-hide_banner"]
    cmd.extend(graph.global_args)
    cmd.extend(_input_args(plan, graph))
    cmd.extend(_video_args(plan, graph))
    cmd.extend(_audio_args(plan))
    cmd.extend(_tuning_args(plan))

    pass_params: list[str] = []
    if two_pass_ctx is not None:
        pass_params = ["pass=2", f"stats={two_pass_ctx.stats_file}"]
    if not plan.is_copy:
        cmd.extend(_x265_args(graph, pass_params))

    cmd.append(str(output_path))
    return cmd


def build_pass1_command(
    plan: TranscodePlan,
    graph: FilterGraph,
    ffmpeg_path: Path,
    two_pass_ctx: TwoPassContext,
    null_device: str | None = None,
) -> list[str]:
    """Build the first pass of a two-pass encode.

    The first pass writes only the stats file; audio is disabled and the
    output is discarded to the null device.
    """
    cmd = [str(ffmpeg_path), "-y", "-hide_banner"]
    cmd.extend(graph.global_args)
    cmd.extend(_input_args(plan, graph))
    cmd.extend(_video_args(plan, graph))
    cmd.extend(_tuning_args(plan))
    cmd.extend(
        _x265_args(
            graph,
            ["pass=1", "no-slow-firstpass=1", f"stats={two_pass_ctx.stats_file}"],
        )
    )
    cmd.extend(["-an", "-f", "null", null_device or get_null_device()])
    return cmd


def build_encode_commands(
    plan: TranscodePlan,
    graph: FilterGraph,
    ffmpeg_path: Path,
    output_path: Path,
    stats_file: Path | None = None,
) -> EncodeCommand:
    """Build every pass needed for a plan.

    Two passes are produced only when the plan asks for two-pass encoding
    with libx265; ``stats_file`` defaults to a file beside the output.
    """
    if not plan.two_pass:
        return EncodeCommand(
            passes=[build_encode_command(plan, graph, ffmpeg_path, output_path)],
            output_path=output_path,
        )

    ctx = TwoPassContext(
        stats_file=stats_file or output_path.with_name(f"{output_path.name}.x265.log")
    )
    pass1 = build_pass1_command(plan, graph, ffmpeg_path, ctx)
    pass2 = build_encode_command(plan, graph, ffmpeg_path, output_path, ctx)
    return EncodeCommand(passes=[pass1, pass2], output_path=output_path, two_pass=ctx)
