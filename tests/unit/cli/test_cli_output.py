"""Tests for cli/output.py and cli/exit_codes.py."""

from __future__ import annotations

import json

import pytest

from reencode.cli.exit_codes import ExitCode
from reencode.cli.output import (
    CLIResult,
    error_exit,
    failure_exit,
    success_output,
    warning_output,
)


class TestExitCode:
    def test_values_are_stable(self) -> None:
        assert ExitCode.SUCCESS == 0
        assert ExitCode.INTERRUPTED == 2
        assert ExitCode.CONFIG_ERROR == 11
        assert ExitCode.PROFILE_NOT_FOUND == 12
        assert ExitCode.TARGET_NOT_FOUND == 20
        assert ExitCode.TOOL_NOT_AVAILABLE == 30
        assert ExitCode.PROBE_FAILED == 32
        assert ExitCode.ENCODE_FAILED == 40

    def test_unique(self) -> None:
        values = [code.value for code in ExitCode]
        assert len(values) == len(set(values))


class TestCLIResult:
    def test_success_json(self) -> None:
        result = CLIResult(success=True, message="done", data={"output": "/a.mkv"})
        assert json.loads(result.to_json()) == {
            "status": "completed",
            "message": "done",
            "output": "/a.mkv",
        }

    def test_failure_json(self) -> None:
        result = CLIResult(
            success=False,
            message="1 of 2 files failed",
            data={"failed": []},
            exit_code=ExitCode.ENCODE_FAILED,
        )
        assert json.loads(result.to_json()) == {
            "status": "failed",
            "error": {"code": "ENCODE_FAILED", "message": "1 of 2 files failed"},
            "failed": [],
        }

    def test_failure_plain_int_code(self) -> None:
        result = CLIResult(success=False, message="x", exit_code=99)
        assert json.loads(result.to_json())["error"]["code"] == "UNKNOWN_ERROR"


class TestErrorExit:
    def test_text(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            error_exit("bad thing", ExitCode.PROBE_FAILED)
        assert exc_info.value.code == 32
        assert capsys.readouterr().err == "Error: bad thing\n"

    def test_json(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            error_exit("bad thing", ExitCode.TARGET_NOT_FOUND, json_output=True)
        assert exc_info.value.code == 20
        payload = json.loads(capsys.readouterr().err)
        assert payload["error"] == {"code": "TARGET_NOT_FOUND", "message": "bad thing"}


class TestFailureExit:
    def test_json_keeps_data_on_stdout(self, capsys) -> None:
        result = CLIResult(
            success=False,
            message="1 of 2 files failed",
            data={"processed": [{"input": "/a.mkv"}]},
            exit_code=ExitCode.ENCODE_FAILED,
        )
        with pytest.raises(SystemExit) as exc_info:
            failure_exit(result, json_output=True)
        assert exc_info.value.code == 40
        payload = json.loads(capsys.readouterr().out)
        assert payload["status"] == "failed"
        assert payload["processed"] == [{"input": "/a.mkv"}]

    def test_text_reports_message(self, capsys) -> None:
        result = CLIResult(
            success=False, message="nothing encoded", exit_code=ExitCode.ENCODE_FAILED
        )
        with pytest.raises(SystemExit):
            failure_exit(result)
        assert capsys.readouterr().err == "Error: nothing encoded\n"


class TestOutputHelpers:
    def test_success_text(self, capsys) -> None:
        success_output(CLIResult(success=True, message="Encoded"))
        assert capsys.readouterr().out == "Encoded\n"

    def test_warning_suppressed_in_json(self, capsys) -> None:
        warning_output("careful", json_output=True)
        warning_output("careful")
        assert capsys.readouterr().err == "Warning: careful\n"
