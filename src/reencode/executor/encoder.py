"""Encoder execution.

Runs the passes of an EncodeCommand in order with ffmpeg's own progress
output forwarded to the terminal.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for ffmpeg invocation
import time
from pathlib import Path

from reencode.executor.types import EncodeCommand, EncodeResult

logger = logging.getLogger(__name__)


class EncodeError(Exception):
    """An encoder pass failed or timed out."""

    def __init__(
        self, message: str, returncode: int | None = None, pass_number: int = 1
    ) -> None:
        self.returncode = returncode
        self.pass_number = pass_number
        super().__init__(message)


class EncodeExecutor:
    """Run encoder commands.

    Args:
        timeout: Seconds before a single pass is killed; None waits forever.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def run(self, command: EncodeCommand) -> EncodeResult:
        """Run every pass of ``command``.

        Two-pass stats files are removed afterwards whether or not the
        encode succeeded. A failed encode also removes its partial output.

        Raises:
            EncodeError: If a pass exits non-zero, times out or cannot start.
        """
        start_time = time.monotonic()
        try:
            for number, cmd in enumerate(command.passes, start=1):
                self._run_pass(cmd, number, len(command.passes))
        except EncodeError:
            self._cleanup_partial(command.output_path)
            raise
        finally:
            if command.two_pass is not None:
                command.two_pass.cleanup()

        elapsed = time.monotonic() - start_time
        logger.info(
            "Encode complete (%.1fs): %s",
            elapsed,
            command.output_path,
            extra={
                "output_path": str(command.output_path),
                "elapsed_seconds": round(elapsed, 3),
            },
        )
        return EncodeResult(
            success=True,
            output_path=command.output_path,
            passes_run=len(command.passes),
            elapsed_seconds=elapsed,
            commands=list(command.passes),
        )

    def _run_pass(self, cmd: list[str], number: int, total: int) -> None:
        label = f"Pass {number}/{total}" if total > 1 else "Encode"
        logger.info(
            "Starting %s",
            label,
            extra={"command": " ".join(cmd), "pass": number},
        )
        pass_start = time.monotonic()
        try:
            result = subprocess.run(  # nosec B603 - ffmpeg path is validated
                cmd,
                check=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            logger.error("%s timed out after %s seconds", label, self.timeout)
            raise EncodeError(
                f"{label} timed out after {self.timeout} seconds",
                pass_number=number,
            ) from e
        except OSError as e:
            raise EncodeError(
                f"{label} could not start: {e}", pass_number=number
            ) from e

        if result.returncode != 0:
            logger.error("%s failed with exit code %d", label, result.returncode)
            raise EncodeError(
                f"{label} failed with exit code {result.returncode}",
                returncode=result.returncode,
                pass_number=number,
            )

        elapsed = time.monotonic() - pass_start
        logger.info(
            "%s complete (%.1fs)",
            label,
            elapsed,
            extra={"pass": number, "elapsed_seconds": round(elapsed, 3)},
        )

    def _cleanup_partial(self, path: Path) -> None:
        if path.exists():
            try:
                path.unlink()
                logger.debug("Removed partial output: %s", path)
            except OSError as e:
                logger.warning("Could not remove partial output %s: %s", path, e)
