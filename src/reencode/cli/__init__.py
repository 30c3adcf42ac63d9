"""CLI module for reencode."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from reencode.cli.exit_codes import ExitCode
from reencode.cli.output import error_exit
from reencode.config import ConfigError, configure_logging_from_cli, get_config

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="reencode")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.reencode.yaml or ./.reencode.yaml).",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
    config_path: Path | None,
) -> None:
    """reencode - Re-encode videos with presets for sharing and archiving."""
    ctx.ensure_object(dict)

    # Tests may inject a config object
    if "config" not in ctx.obj:
        try:
            ctx.obj["config"] = get_config(config_path)
        except ConfigError as e:
            error_exit(str(e), ExitCode.CONFIG_ERROR)

    config = ctx.obj["config"]
    try:
        configure_logging_from_cli(
            base=config.logging,
            level=log_level,
            file=log_file,
            format="json" if log_json else None,
        )
    except ValueError as e:
        error_exit(f"Invalid logging settings: {e}", ExitCode.CONFIG_ERROR)

    if config.source_path is not None:
        logger.debug("Using config file: %s", config.source_path)


# Defer import to avoid circular dependency
def _register_commands() -> None:
    from reencode.cli.bulk import bulk_command
    from reencode.cli.encode import encode_command
    from reencode.cli.presets import presets_command

    main.add_command(encode_command)
    main.add_command(bulk_command)
    main.add_command(presets_command)


_register_commands()
