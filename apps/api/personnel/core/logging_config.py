"""
Logging configuration for the personnel API.

JSON lines in production, a plain readable format everywhere else.
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Optional

from personnel.core.config import settings


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log aggregators."""

    def __init__(self, service_name: str = "personnel-api"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": settings.environment,
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_data, default=str)


def setup_logging(log_level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """
    Configure the root logger.

    Args:
        log_level: Override the configured level (DEBUG, INFO, WARNING, ...)
        json_logs: Override JSON output (defaults to on in production)
    """
    level = (log_level or settings.log_level).upper()
    use_json = json_logs if json_logs is not None else settings.environment.lower() == "production"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level, logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if use_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)

    logging.getLogger("personnel.logging").info(
        "Logging configured: level=%s, format=%s, environment=%s",
        level,
        "JSON" if use_json else "text",
        settings.environment,
    )
