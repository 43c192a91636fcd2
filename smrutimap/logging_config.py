"""Application logging configuration."""

from __future__ import annotations

import logging
import os
from logging.config import dictConfig
from pathlib import Path

from flask import Flask

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(parent_file)s:%(lineno)-3d | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


class ShortPathFilter(logging.Filter):
    """Attach ``parent_file`` = ``<parent>/<filename>`` to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        parent = os.path.basename(os.path.dirname(record.pathname))
        filename = os.path.basename(record.pathname)
        record.parent_file = f"{parent}/{filename}"  # type: ignore[attr-defined]
        return True


def init_logging(app: Flask) -> None:
    """Configure console + rotating-file logging for *app*."""
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    log_file = Path(app.config.get("LOG_FILE", "logs/app.log")).with_suffix(".log")
    max_bytes = int(app.config.get("LOG_MAX_BYTES", 10 * 1024 * 1024))
    backup_count = int(app.config.get("LOG_BACKUP_COUNT", 5))

    os.makedirs(log_file.parent, exist_ok=True)

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"short_path": {"()": ShortPathFilter}},
            "formatters": {
                "default": {"format": LOG_FORMAT, "datefmt": LOG_DATEFMT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": level,
                    "filters": ["short_path"],
                },
                "file": {
                    "class": "logging.handlers.RotatingFileHandler",
                    "formatter": "default",
                    "level": level,
                    "filename": str(log_file),
                    "maxBytes": max_bytes,
                    "backupCount": backup_count,
                    "encoding": "utf-8",
                    "filters": ["short_path"],
                },
            },
            "loggers": {
                "werkzeug": {"level": app.config.get("WERKZEUG_LOG_LEVEL", "INFO")},
                "urllib3": {"level": "WARNING"},
            },
            "root": {
                "handlers": ["console", "file"],
                "level": level,
            },
        }
    )

    app.logger.setLevel(level)
    app.logger.debug("Logging configured - level %s", level_name)
