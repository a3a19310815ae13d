"""Logging configuration for the poll_flow package."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .settings import Settings

PACKAGE_LOGGER = "poll_flow"

_RESERVED = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "message", "taskName",
}


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # fields passed through logging's extra=...
        for key, value in record.__dict__.items():
            if key not in _RESERVED and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(settings: Settings) -> logging.Logger:
    """Attach a stdout handler to the package logger.

    Debug mode forces DEBUG regardless of the configured level.
    """
    handler = logging.StreamHandler(sys.stdout)
    if settings.logging.json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )

    logger = logging.getLogger(PACKAGE_LOGGER)
    level = "DEBUG" if settings.engine.debug_mode else settings.logging.level.upper()
    logger.setLevel(level)
    logger.handlers = [handler]
    return logger
