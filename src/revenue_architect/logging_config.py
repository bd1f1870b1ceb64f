"""Logging setup for scripts and the tool server.

Library modules only call ``logging.getLogger(__name__)``; the entry
points call :func:`configure_logging` once to attach a handler to the
root logger.

Formats:
- ``text``: ``[HH:MM:SS] LEVEL logger: message [key=value ...]``
- ``json``: one JSON object per line, including ``extra`` fields
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from revenue_architect.config import settings

# Attributes every LogRecord has; anything else came in through ``extra``.
_STANDARD_FIELDS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "message",
    "taskName",
})


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_FIELDS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """Single-line JSON output with timestamp, level, logger and message."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in _extra_fields(record).items():
            try:
                json.dumps(value)
                entry[key] = value
            except (TypeError, ValueError):
                entry[key] = str(value)

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable output for local runs."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, "%H:%M:%S")
        extras = " ".join(f"{k}={v}" for k, v in _extra_fields(record).items())
        extra_str = f" [{extras}]" if extras else ""

        formatted = (
            f"[{timestamp}] {record.levelname:<8} "
            f"{record.name}: {record.getMessage()}{extra_str}"
        )
        if record.exc_info and record.exc_info[1]:
            formatted += f"\n{self.formatException(record.exc_info)}"
        return formatted


def configure_logging(
    fmt: Optional[str] = None,
    level: Optional[str] = None,
) -> None:
    """Configure the root logger.

    Args:
        fmt: ``"json"`` or ``"text"``; defaults to ``settings.log_format``.
        level: level name; defaults to ``settings.log_level``.
    """
    fmt = (fmt or settings.log_format).lower().strip()
    level = (level or settings.log_level).upper().strip()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    # Replace existing handlers so repeated calls don't duplicate output
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stdout belongs to the MCP stdio transport
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    root_logger.addHandler(handler)

    # httpx (used by the ollama client) logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
