"""Logging configuration with text and JSON output formats."""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import UTC, datetime
from typing import Any

from tracker.core.config import settings

_ROOT_LOGGER_NAME = "tracker"
_HANDLER_MARKER = "_tracker_handler"

# Attributes present on every LogRecord; anything else arrived through `extra=`.
_RESERVED_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects including `extra` fields."""

    def __init__(self, *, use_utc: bool = False) -> None:
        super().__init__()
        self.use_utc = use_utc

    def format(self, record: logging.LogRecord) -> str:
        tz = UTC if self.use_utc else None
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=tz).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(_record_extras(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Human-readable formatter that appends `extra` fields as key=value pairs."""

    def __init__(self, *, use_utc: bool = False) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s %(message)s")
        if use_utc:
            self.converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = _record_extras(record)
        if not extras:
            return base
        pairs = " ".join(f"{key}={value}" for key, value in sorted(extras.items()))
        return f"{base} {pairs}"


def configure_logging(
    *,
    level: str | None = None,
    log_format: str | None = None,
    use_utc: bool | None = None,
) -> None:
    """Install a single stream handler on the package logger.

    Calling this more than once replaces the previously installed handler.
    """
    resolved_level = (level or settings.log_level).upper()
    resolved_format = log_format or settings.log_format
    resolved_utc = settings.log_use_utc if use_utc is None else use_utc

    formatter: logging.Formatter
    if resolved_format == "json":
        formatter = JsonFormatter(use_utc=resolved_utc)
    else:
        formatter = TextFormatter(use_utc=resolved_utc)

    root = logging.getLogger(_ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    setattr(handler, _HANDLER_MARKER, True)
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(resolved_level)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the package logger hierarchy."""
    return logging.getLogger(name)
