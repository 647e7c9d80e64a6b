# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Structured JSON output for processes whose levels are controlled remotely."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Optional

from .engine import LogLevel


class JsonLogFormatter(logging.Formatter):
    """Formats records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = getattr(record, "extra", None)
        if extra:
            log_entry["extra"] = extra
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        try:
            return json.dumps(log_entry, default=str)
        except Exception as e:
            # Fallback to plain text if JSON serialization fails
            return f"{record.levelname}: {record.getMessage()} (JSON serialization failed: {e})"


def configure_logging(level: str = "INFO", stream: Optional[IO[str]] = None) -> logging.Handler:
    """Install a JSON handler on the root logger and set the initial default level.

    Args:
        level: Initial default level (DEBUG, INFO, WARN, ERROR, FATAL)
        stream: Output stream (stdout if None)

    Returns:
        The installed handler

    Raises:
        UnknownLevelError: If the level is not recognized
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonLogFormatter())

    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(int(LogLevel.parse(level)))
    return handler
