"""CLI command for encoding every media file in a directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click

from reencode.cli.encode import echo_plan, prepare, preset_option
from reencode.cli.exit_codes import ExitCode
from reencode.cli.formatting import plan_to_dict
from reencode.cli.options import profile_options
from reencode.cli.output import CLIResult, error_exit, failure_exit, success_output
from reencode.executor.encoder import EncodeError
from reencode.introspector import MediaIntrospectionError
from reencode.logging import file_context
from reencode.workflow import find_media_files

logger = logging.getLogger(__name__)


@click.command("bulk")
@click.argument(
    "directory",
    type=click.Path(file_okay=False, path_type=Path),
)
@profile_options
@preset_option
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print the plans and commands without encoding.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output in JSON format.",
)
@click.pass_context
def bulk_command(
    ctx: click.Context,
    directory: Path,
    preset: str | None,
    dry_run: bool,
    json_output: bool,
    **_profile_fields: Any,
) -> None:
    """Re-encode every .mp4 and .mkv file below DIRECTORY.

    Files are processed one at a time with the same settings. A file that
    fails to probe or encode is reported and the rest are still processed.

    Examples:

        reencode bulk ~/Videos/holiday --preset homevideo
    """
    if not directory.is_dir():
        error_exit(
            f"Directory not found: {directory}",
            ExitCode.TARGET_NOT_FOUND,
            json_output,
        )

    files = find_media_files(directory)
    if not files:
        error_exit(
            f"No .mp4 or .mkv files found in {directory}",
            ExitCode.TARGET_NOT_FOUND,
            json_output,
        )

    profile, workflow = prepare(ctx, preset, json_output)

    processed: list[dict[str, Any]] = []
    failed: list[dict[str, str]] = []
    for index, path in enumerate(files, start=1):
        with file_context(f"F{index:03d}", path):
            logger.info("Processing %d/%d: %s", index, len(files), path)
            try:
                outcome = workflow.run(
                    path,
                    profile,
                    dry_run=dry_run,
                    on_plan=None if json_output else echo_plan,
                )
            except (MediaIntrospectionError, EncodeError) as e:
                logger.error("Failed to encode %s: %s", path, e)
                failed.append({"input": str(path), "error": str(e)})
                continue
            except KeyboardInterrupt:
                error_exit("Interrupted", ExitCode.INTERRUPTED, json_output)
            processed.append(plan_to_dict(outcome.plan, outcome.command))

    data = {"processed": processed, "failed": failed}
    if failed:
        if not json_output:
            for item in failed:
                click.echo(f"Failed: {item['input']}: {item['error']}", err=True)
        failure_exit(
            CLIResult(
                success=False,
                message=f"{len(failed)} of {len(files)} files failed",
                data=data,
                exit_code=ExitCode.ENCODE_FAILED,
            ),
            json_output,
        )

    verb = "Planned" if dry_run else "Encoded"
    success_output(
        CLIResult(success=True, message=f"{verb} {len(files)} files", data=data),
        json_output,
    )
