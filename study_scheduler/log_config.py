"""Centralized logging configuration."""
from __future__ import annotations

import logging
from logging.config import dictConfig


def configure_logging(*, log_level: str = "INFO") -> None:
    """Configure console logging once per process."""
    if getattr(configure_logging, "_configured", False):
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": log_level,
                }
            },
            "loggers": {
                "study_scheduler": {
                    "handlers": ["console"],
                    "level": log_level,
                    "propagate": False,
                }
            },
        }
    )

    logging.getLogger(__name__).debug("Logging configured at %s", log_level)
    setattr(configure_logging, "_configured", True)
