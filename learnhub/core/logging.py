"""Logging setup for learnhub.

LOG_JSON picks the output shape:

  _ConsoleFormatter: one readable line per record, prefixed with the
    request id when the record was made inside a request.  WARNING and
    above end with [file:line].

  _JsonLinesFormatter: one JSON object per line.  Request context set by
    RequestContextMiddleware (request_id, method, path, status_code, ...)
    is lifted to top-level keys so a log query can select one request.

Metric definitions are in learnhub/core/metrics.py.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime

# Lifted to top-level JSON keys when present on the record
CONTEXT_FIELDS = (
    "request_id",
    "method",
    "path",
    "user_id",
    "status_code",
    "duration_ms",
)

_NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpcore",
    "httpx",
    "sqlalchemy.engine",
)


def _timestamp(record: logging.LogRecord) -> str:
    created = datetime.fromtimestamp(record.created).astimezone()
    return created.isoformat(timespec="milliseconds")


def _request_id(record: logging.LogRecord) -> str | None:
    value = getattr(record, "request_id", None)
    return None if value in (None, "-") else str(value)


class _ConsoleFormatter(logging.Formatter):
    """Human-readable single line for terminals and container stdout."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [_timestamp(record), f"{record.levelname:<8}", record.name]
        req_id = _request_id(record)
        if req_id:
            parts.append(f"req={req_id}")
        line = " ".join(parts) + "  " + record.getMessage()

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        if record.levelno >= logging.WARNING:
            line += f"  [{record.filename}:{record.lineno}]"
        return line


class _JsonLinesFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (field, getattr(record, field))
            for field in CONTEXT_FIELDS
            if getattr(record, field, None) is not None
        )
        if _request_id(record) is None:
            entry.pop("request_id", None)
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Install a single stdout handler on the root logger.

    Calling it again replaces the handler instead of stacking a second one.
    Unknown level names fall back to INFO.
    """
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        _JsonLinesFormatter() if json_format else _ConsoleFormatter()
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    # Library chatter stays at WARNING even when the app runs at DEBUG
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
