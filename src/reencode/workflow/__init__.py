"""Encode pipeline orchestration."""

from reencode.workflow.processor import (
    MEDIA_EXTENSIONS,
    EncodeOutcome,
    EncodeWorkflow,
    find_media_files,
)

__all__ = [
    "MEDIA_EXTENSIONS",
    "EncodeOutcome",
    "EncodeWorkflow",
    "find_media_files",
]
