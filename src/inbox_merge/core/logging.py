"""Logging configuration helpers."""

from __future__ import annotations

import logging
import logging.config
from typing import Any

from .config import LoggingSettings

_PLAIN_FORMAT = {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"}
_STRUCTURED_FORMAT = {
    "format": "{asctime} {levelname} {name} {threadName} {message}",
    "style": "{",
}


def build_logging_config(settings: LoggingSettings) -> dict[str, Any]:
    """Return the ``dictConfig`` mapping for ``settings``."""
    level = settings.level.upper()
    formatter = _STRUCTURED_FORMAT if settings.structured else _PLAIN_FORMAT
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": dict(formatter)},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": level,
            },
        },
        "loggers": {
            "inbox_merge": {"level": level, "propagate": True},
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
    }


def configure_logging(settings: LoggingSettings) -> None:
    """Configure application logging according to provided settings."""
    logging.config.dictConfig(build_logging_config(settings))


__all__ = ["build_logging_config", "configure_logging"]
