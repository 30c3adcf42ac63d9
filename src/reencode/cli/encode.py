"""CLI command for encoding a single file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click

from reencode.cli.exit_codes import ExitCode
from reencode.cli.formatting import format_command, format_plan_summary, plan_to_dict
from reencode.cli.options import collect_overrides, profile_options
from reencode.cli.output import CLIResult, error_exit, success_output, warning_output
from reencode.config.models import ReencodeConfig
from reencode.executor.encoder import EncodeError, EncodeExecutor
from reencode.executor.interface import ToolNotFoundError, require_tool
from reencode.executor.types import EncodeCommand
from reencode.introspector import FFprobeIntrospector, MediaIntrospectionError
from reencode.policy.presets import (
    ProfileError,
    UnknownPresetError,
    build_profile,
    get_preset,
)
from reencode.policy.profile import EncodeProfile
from reencode.policy.resolver import TWO_PASS_ENCODER, TranscodePlan
from reencode.policy.tables import resolve_encoder
from reencode.workflow import EncodeWorkflow

logger = logging.getLogger(__name__)


def build_workflow(config: ReencodeConfig) -> EncodeWorkflow:
    """Create a workflow using the configured tools.

    Raises:
        ToolNotFoundError: If ffmpeg or ffprobe cannot be found.
    """
    ffmpeg = require_tool("ffmpeg", config.tools)
    ffprobe = require_tool("ffprobe", config.tools)

    prober = FFprobeIntrospector(
        ffprobe, timeout=config.execution.probe_timeout_seconds
    )
    executor = EncodeExecutor(timeout=config.execution.timeout_seconds)
    return EncodeWorkflow(prober, ffmpeg, executor)


def build_encode_profile(
    config: ReencodeConfig, preset: str | None, overrides: dict[str, Any]
) -> EncodeProfile:
    """Merge config defaults, the preset and command line flags."""
    return build_profile(
        ("config", config.encode),
        ("preset", get_preset(preset) if preset else None),
        ("command line", overrides),
    )


def prepare(
    ctx: click.Context, preset: str | None, json_output: bool
) -> tuple[EncodeProfile, EncodeWorkflow]:
    """Build the profile and workflow, exiting with the matching code on error."""
    config: ReencodeConfig = ctx.obj["config"]
    try:
        profile = build_encode_profile(config, preset, collect_overrides(ctx))
    except UnknownPresetError as e:
        error_exit(str(e), ExitCode.PROFILE_NOT_FOUND, json_output)
    except ProfileError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR, json_output)
    logger.debug("Encode profile overrides: %s", profile.overrides())

    if profile.two_pass and resolve_encoder(profile.codec) != TWO_PASS_ENCODER:
        warning_output(
            f"Two-pass encoding needs {TWO_PASS_ENCODER}; encoding in one pass",
            json_output,
        )

    try:
        workflow = build_workflow(config)
    except (ToolNotFoundError, MediaIntrospectionError) as e:
        error_exit(str(e), ExitCode.TOOL_NOT_AVAILABLE, json_output)
    return profile, workflow


def echo_plan(plan: TranscodePlan, command: EncodeCommand) -> None:
    """Print the source -> target summary followed by the command(s)."""
    for line in format_plan_summary(plan):
        click.echo(line)
    click.echo(f"  {'output':<15} {command.output_path}")
    for number, cmd in enumerate(command.passes, start=1):
        prefix = f"pass {number}: " if len(command.passes) > 1 else ""
        click.echo(f"{prefix}{format_command(cmd)}")


def preset_option(func: Any) -> Any:
    return click.option(
        "--preset",
        "-p",
        default=None,
        help="Start from a named preset (see 'reencode presets').",
    )(func)


@click.command("encode")
@click.argument("file", type=click.Path(path_type=Path))
@profile_options
@preset_option
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print the plan and command without encoding.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output in JSON format.",
)
@click.pass_context
def encode_command(
    ctx: click.Context,
    file: Path,
    preset: str | None,
    dry_run: bool,
    json_output: bool,
    **_profile_fields: Any,
) -> None:
    """Re-encode FILE according to a preset and flags.

    Flags given on the command line override the preset, which overrides
    the 'encode' section of the config file.

    Examples:

        # Shrink for Telegram, see what would run
        reencode encode movie.mkv --preset telegram --dry-run

        # 720p HEVC with a detected crop
        reencode encode movie.mkv --size 720p --codec libx265 --crf 24 --crop
    """
    if not file.is_file():
        error_exit(f"File not found: {file}", ExitCode.TARGET_NOT_FOUND, json_output)

    profile, workflow = prepare(ctx, preset, json_output)

    try:
        outcome = workflow.run(
            file,
            profile,
            dry_run=dry_run,
            on_plan=None if json_output else echo_plan,
        )
    except MediaIntrospectionError as e:
        error_exit(str(e), ExitCode.PROBE_FAILED, json_output)
    except EncodeError as e:
        error_exit(str(e), ExitCode.ENCODE_FAILED, json_output)
    except KeyboardInterrupt:
        error_exit("Interrupted", ExitCode.INTERRUPTED, json_output)

    if dry_run:
        message = f"Dry run: {file}"
    else:
        message = f"Encoded {file} -> {outcome.command.output_path}"
    success_output(
        CLIResult(
            success=True,
            message=message,
            data=plan_to_dict(outcome.plan, outcome.command),
        ),
        json_output,
    )
