"""JSON structured logging configuration."""
import json
import logging
import os
import sys
from datetime import datetime, timezone

# `extra={...}` keys copied into the JSON entry when present on a record.
EXTRA_FIELDS: tuple[str, ...] = (
    "session_id",
    "model",
    "endpoint",
    "credential_kind",
    "image_count",
    "status_code",
    "error_type",
)


class JSONFormatter(logging.Formatter):
    """Format log records as JSON with required fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": record.name,
            "message": record.getMessage(),
        }
        for field in EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["error_type"] = record.exc_info[0].__name__
            log_entry["error_detail"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(service_name: str = "thumbnail-studio") -> logging.Logger:
    """Configure and return a JSON structured logger.

    The level comes from the ``LOG_LEVEL`` environment variable (default INFO).
    Calling it twice for the same name does not stack handlers.
    """
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(service_name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)

    return logger
