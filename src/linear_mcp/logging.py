"""Structured JSON logging for linear-mcp.

Writes JSONL to stderr, or to a rotating file (5MB, 3 backups) when a path
is configured. Stdout is never used: the stdio transport owns it.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOGGER_NAME = "linear_mcp"
_setup_lock = threading.Lock()
_MAX_BYTES = 5 * 1024 * 1024  # 5MB
_BACKUP_COUNT = 3


class _JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "msg": record.getMessage(),
        }
        if hasattr(record, "tool"):
            entry["tool"] = record.tool
        if hasattr(record, "args_data"):
            entry["args"] = record.args_data
        if hasattr(record, "uri"):
            entry["uri"] = record.uri
        if hasattr(record, "duration_ms"):
            entry["duration_ms"] = record.duration_ms
        if hasattr(record, "error"):
            entry["error"] = record.error
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return json.dumps(entry, default=str)


def _is_ours(handler: logging.Handler) -> bool:
    return isinstance(handler.formatter, _JsonFormatter)


def setup_logging(level: str = "info", log_file: str | Path | None = None) -> logging.Logger:
    """Attach a JSON handler to the ``linear_mcp`` logger.

    Calling again with the same target only updates the level; a different
    target replaces the previous handler. Returns the package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    target = os.path.abspath(str(log_file)) if log_file else None

    with _setup_lock:
        logger.setLevel(numeric_level)
        for h in logger.handlers[:]:
            if not _is_ours(h):
                continue
            if target is not None and isinstance(h, RotatingFileHandler) and h.baseFilename == target:
                return logger
            if target is None and not isinstance(h, RotatingFileHandler):
                return logger
            # Different target: drop the stale handler to avoid duplicates.
            logger.removeHandler(h)
            h.close()

        handler: logging.Handler
        if target is not None:
            Path(target).parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(target, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT)
        else:
            handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(_JsonFormatter())
        logger.addHandler(handler)
    return logger
