"""JSON logging for the gallery and the uvicorn server."""
from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from drive_gallery.core.config import Settings

REDACTED = "[redacted]"
SENSITIVE_KEYS = frozenset({"access_token", "refresh_token", "client_secret", "authorization"})

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

# httpx logs each request URL at INFO, which includes Drive queries.
_NOISY_LOGGERS = ("httpx", "httpcore")


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return the ``extra=`` fields of a record with credentials masked."""

    return {
        key: REDACTED if key.lower() in SENSITIVE_KEYS else value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS
    }


class JSONLogFormatter(logging.Formatter):
    """One JSON object per line, tagged with the deployment environment."""

    def __init__(self, app_env: str) -> None:
        super().__init__()
        self.app_env = app_env

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "environment": self.app_env,
            **extra_fields(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(settings: Settings) -> None:
    """Route application and uvicorn logs through the JSON formatter."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler()
    handler.setFormatter(JSONLogFormatter(settings.app_env))
    logging.basicConfig(level=level, handlers=[handler], force=True)

    for logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        server_logger = logging.getLogger(logger_name)
        server_logger.handlers = [handler]
        server_logger.propagate = False
        server_logger.setLevel(level)

    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(max(level, logging.WARNING))
