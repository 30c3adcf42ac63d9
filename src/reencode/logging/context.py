"""File context for structured logging.

Bulk runs encode many files one after another; the current file is kept in
contextvars and injected into every log record by ``FileContextFilter``.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_file_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_id", default=None
)
_file_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_path", default=None
)


def get_file_context() -> tuple[str | None, str | None]:
    """Return ``(file_id, file_path)`` for the file being processed."""
    return _file_id.get(), _file_path.get()


@contextmanager
def file_context(
    file_id: str, file_path: Path | str | None = None
) -> Generator[None, None, None]:
    """Tag log records emitted inside the block with a file.

    Args:
        file_id: Short identifier such as "F001".
        file_path: Full path of the file being processed.

    Example:
        with file_context("F001", "/videos/movie.mkv"):
            logger.info("Encoding")  # Text format: "[F001] ... Encoding"
    """
    id_token = _file_id.set(file_id)
    path_token = _file_path.set(str(file_path) if file_path is not None else None)
    try:
        yield
    finally:
        _file_id.reset(id_token)
        _file_path.reset(path_token)


class FileContextFilter(logging.Filter):
    """Logging filter that injects the file context into log records.

    Adds ``file_id`` and ``file_path`` for the JSON format and a compact
    ``file_tag`` ("[F001] " or "") for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        file_id, file_path = get_file_context()
        record.file_id = file_id
        record.file_path = file_path
        record.file_tag = f"[{file_id}] " if file_id else ""
        return True  # Never filter out records
