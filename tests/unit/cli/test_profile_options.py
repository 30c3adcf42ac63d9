"""Tests for cli/options.py."""

from __future__ import annotations

import click
from click.testing import CliRunner

from reencode.cli.options import _PROFILE_OPTIONS, collect_overrides, profile_options
from reencode.policy.profile import EncodeProfile


@click.command()
@profile_options
@click.pass_context
def probe_command(ctx: click.Context, **_fields) -> None:
    click.echo(repr(sorted(collect_overrides(ctx).items())))


class TestProfileOptions:
    def test_one_option_per_field(self) -> None:
        names = [decls[-1] for decls, _attrs in _PROFILE_OPTIONS]
        assert sorted(names) == sorted(EncodeProfile.field_names())

    def test_only_given_flags_collected(self) -> None:
        result = CliRunner().invoke(probe_command, ["--size", "720p", "--crf", "24"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == (
            "[('constant_rate_factor', 24), ('size', '720p')]"
        )

    def test_negative_boolean_collected(self) -> None:
        result = CliRunner().invoke(probe_command, ["--no-crop", "--keep-metadata"])
        assert result.output.strip() == "[('crop', False), ('strip_metadata', False)]"

    def test_nothing_given(self) -> None:
        result = CliRunner().invoke(probe_command, [])
        assert result.output.strip() == "[]"
