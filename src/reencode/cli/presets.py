"""CLI command listing the built-in presets."""

from __future__ import annotations

import json

import click

from reencode.policy.presets import PRESETS


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


@click.command("presets")
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output in JSON format.",
)
def presets_command(json_output: bool) -> None:
    """List available presets and the settings each one applies.

    Examples:

        reencode presets
        reencode presets --json
    """
    if json_output:
        click.echo(json.dumps(PRESETS, indent=2, sort_keys=True))
        return

    for name, overrides in PRESETS.items():
        click.echo(click.style(name, bold=True))
        for key in sorted(overrides):
            click.echo(f"  {key:<22} {_format_value(overrides[key])}")
        click.echo("")
