"""Logging setup driven by ``log_level`` and ``log_format`` settings."""

import json
import logging
import logging.config
from datetime import UTC, datetime

from app.core.config import LogFormatEnum, settings


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            payload["request_id"] = request_id
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(level: str | None = None, fmt: LogFormatEnum | None = None) -> None:
    """Configure the root logger once at application startup."""
    level = level or settings.log_level.value
    fmt = fmt or settings.log_format

    formatter = (
        {"()": JsonFormatter}
        if fmt == LogFormatEnum.json
        else {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"}
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": formatter},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                }
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                # httpx logs every request at INFO, including the API key header name
                "httpx": {"level": "WARNING"},
                "sqlalchemy.engine": {"level": "DEBUG" if settings.debug else "WARNING"},
            },
        }
    )
