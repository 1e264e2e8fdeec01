"""Structured logging configuration for the booking form."""

import logging
import logging.config
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

from pythonjsonlogger.json import JsonFormatter


def setup_logging(level: str = "INFO", json_file: Path | str | None = None) -> None:
    """
    Configure structured logging for travel_booking.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_file: Optional path of a rotating JSON log file
    """
    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "level": level,
            },
        },
        "loggers": {
            "travel_booking": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    }

    if json_file is not None:
        config["formatters"]["json"] = {
            "()": JsonFormatter,
            "fmt": "%(asctime)s %(name)s %(levelname)s %(message)s",
        }
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(json_file),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "formatter": "json",
            "level": level,
        }
        config["loggers"]["travel_booking"]["handlers"].append("file")

    logging.config.dictConfig(config)


class _ContextAdapter(logging.LoggerAdapter):
    """Adapter whose bound context is merged with the call's own ``extra``."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


class ContextLogger:
    """Logger that stamps every record with fixed context, such as a form session."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def with_context(self, **context: Any) -> logging.LoggerAdapter:
        """
        Bind context to every message logged through the returned adapter.

        Keys passed in a call's ``extra`` are kept alongside the bound ones
        and win on conflict.
        """
        return _ContextAdapter(self.logger, context)
