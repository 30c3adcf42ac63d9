"""Fixtures for CLI command tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from reencode.config.models import ReencodeConfig
from reencode.workflow import EncodeWorkflow


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging():
    """Leave the root logger alone while commands run."""
    with patch("reencode.cli.configure_logging_from_cli") as mock_configure:
        yield mock_configure


@pytest.fixture
def cli_obj() -> dict:
    return {"config": ReencodeConfig()}


@pytest.fixture
def executor() -> MagicMock:
    return MagicMock()


@pytest.fixture
def workflow(fake_prober, executor) -> EncodeWorkflow:
    return EncodeWorkflow(fake_prober, Path("/usr/bin/ffmpeg"), executor=executor)


@pytest.fixture
def patched_workflow(workflow):
    """Make the commands use the fake prober and a mock executor."""
    with patch("reencode.cli.encode.build_workflow", return_value=workflow):
        yield workflow
