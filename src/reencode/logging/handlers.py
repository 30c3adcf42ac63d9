"""JSON log formatting for ``--log-json`` and the log file."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries, plus the ones formatting and
# FileContextFilter add. Anything else came in through ``extra=``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName", "file_id", "file_path", "file_tag"}

_FILE_FIELDS = ("file_id", "file_path")


def _file_fields(record: logging.LogRecord) -> dict[str, Any]:
    fields = {}
    for name in _FILE_FIELDS:
        value = getattr(record, name, None)
        if value:
            fields[name] = value
    return fields


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: ``timestamp`` (UTC, millisecond precision), ``level``, ``message``,
    ``logger`` (left out for the root logger), ``context`` (the file being
    encoded and any ``extra=`` values such as ``pass`` or
    ``elapsed_seconds``) and ``exception``.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if record.name != "root":
            entry["logger"] = record.name

        context = {**_file_fields(record), **_extra_fields(record)}
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Paths and other non-JSON values in extra are written as strings.
        return json.dumps(entry, default=str)
