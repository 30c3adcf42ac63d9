"""Structured logging for reencode.

Provides configurable logging with JSON format support, file rotation and
a per-file context for bulk runs.
"""

from reencode.logging.config import configure_logging
from reencode.logging.context import FileContextFilter, file_context, get_file_context
from reencode.logging.handlers import JSONFormatter

__all__ = [
    "FileContextFilter",
    "JSONFormatter",
    "configure_logging",
    "file_context",
    "get_file_context",
]
