"""Result and error output shared by the encode, bulk and presets commands.

Human output goes to stdout (results) and stderr (errors, warnings). With
``--json`` a result is one indented JSON document on stdout and an error
is a single-line JSON document on stderr, both keyed by ``status``.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from typing import Any, NoReturn

import click

from reencode.cli.exit_codes import ExitCode


def _code_name(code: ExitCode | int) -> str:
    return code.name if isinstance(code, ExitCode) else "UNKNOWN_ERROR"


def _failure(message: str, code: ExitCode | int) -> dict[str, Any]:
    return {"status": "failed", "error": {"code": _code_name(code), "message": message}}


@dataclass
class CLIResult:
    """Outcome of an encode, bulk run or preset listing.

    ``data`` is merged into the top level of the JSON document, e.g. the
    plan of an encode or the processed/failed lists of a bulk run.
    """

    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    exit_code: ExitCode | int = ExitCode.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            document = {"status": "completed", "message": self.message}
        else:
            document = _failure(self.message, self.exit_code)
        document.update(self.data)
        return document

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def error_exit(
    message: str,
    code: ExitCode | int,
    json_output: bool = False,
) -> NoReturn:
    """Report ``message`` on stderr and exit with ``code``."""
    if json_output:
        click.echo(json.dumps(_failure(message, code)), err=True)
    else:
        click.echo(f"Error: {message}", err=True)
    sys.exit(int(code))


def failure_exit(result: CLIResult, json_output: bool = False) -> NoReturn:
    """Exit with a failed result.

    JSON mode prints the whole result, data included, on stdout so a bulk
    run still reports the files that did encode.
    """
    if not json_output:
        error_exit(result.message, result.exit_code)
    click.echo(result.to_json())
    sys.exit(int(result.exit_code))


def success_output(result: CLIResult, json_output: bool = False) -> None:
    click.echo(result.to_json() if json_output else result.message)


def warning_output(message: str, json_output: bool = False) -> None:
    """Print a warning on stderr. JSON mode stays machine readable."""
    if not json_output:
        click.echo(f"Warning: {message}", err=True)
