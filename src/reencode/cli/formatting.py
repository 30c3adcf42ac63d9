"""Plan display utilities for the encode and bulk commands."""

from __future__ import annotations

import shlex
from typing import Any

from reencode.executor.types import EncodeCommand
from reencode.policy.profile import UNSET_QUALITY
from reencode.policy.resolver import TranscodePlan
from reencode.policy.video import Video


def _resolution(video: Video) -> str:
    return f"{video.width}x{video.height}"


def _quality(video: Video) -> str:
    if video.constant_rate_factor != UNSET_QUALITY:
        return f"crf {video.constant_rate_factor}"
    if video.constant_quality != UNSET_QUALITY:
        return f"cq {video.constant_quality}"
    return ""


def _kbps(value: int) -> str:
    return f"{value}k" if value > 0 else ""


def _seconds(value: float) -> str:
    return f"{value:g}s" if value > 0 else ""


def plan_rows(plan: TranscodePlan) -> list[tuple[str, str, str]]:
    """Return ``(label, source value, target value)`` rows for a plan."""
    source, target = plan.source, plan.target
    rows = [
        ("size", source.size, target.size),
        ("resolution", _resolution(source), _resolution(target)),
        ("codec", source.codec, target.codec),
        ("bitrate", _kbps(source.rate), _kbps(target.rate)),
        ("quality", "", _quality(target)),
        ("pixel format", source.pixel_format, target.pixel_format),
        ("transfer", source.color_transfer, target.color_transfer),
        ("seek", "", _seconds(target.seek)),
        ("duration", _seconds(source.duration), _seconds(target.duration)),
    ]
    if source.has_audio:
        rows.extend(
            [
                ("audio codec", source.audio_codec, target.audio_codec),
                ("audio bitrate", _kbps(source.audio_rate), _kbps(target.audio_rate)),
                (
                    "audio channels",
                    str(source.audio_channels or ""),
                    str(target.audio_channels or ""),
                ),
                ("volume", source.volume, target.volume),
            ]
        )
    return rows


def format_plan_summary(plan: TranscodePlan) -> list[str]:
    """Human-readable ``label: source -> target`` lines.

    Rows where neither side has a value are left out.
    """
    lines = [f"{plan.source.file}"]
    for label, before, after in plan_rows(plan):
        if not before and not after:
            continue
        if before == after or not after:
            lines.append(f"  {label:<15} {before or '-'}")
        else:
            lines.append(f"  {label:<15} {before or '-'} -> {after}")
    return lines


def format_command(cmd: list[str]) -> str:
    """Quote a command for copy and paste into a shell."""
    return shlex.join(cmd)


def plan_to_dict(plan: TranscodePlan, command: EncodeCommand) -> dict[str, Any]:
    """JSON-serializable view of a plan and its command."""
    return {
        "input": str(plan.source.file),
        "output": str(command.output_path),
        "two_pass": plan.two_pass,
        "changes": {
            label: {"source": before, "target": after}
            for label, before, after in plan_rows(plan)
            if before or after
        },
        "commands": [list(cmd) for cmd in command.passes],
    }
