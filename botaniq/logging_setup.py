"""Process-wide logging for the session and survey service.

One stdout handler on the root logger; module loggers propagate to it. The
level comes from `LOG_LEVEL` (default INFO). uvicorn keeps its own loggers on
the same handler, and SQLAlchemy's engine logger is held at WARNING so
statements are not echoed.
"""
from __future__ import annotations

import logging
import os
from logging.config import dictConfig

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"
DEFAULT_LEVEL = "INFO"
_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def resolve_level(value: str | None) -> str:
    """Normalise a level name; unknown or empty values fall back to INFO."""
    level = (value or "").strip().upper()
    return level if level in _LEVELS else DEFAULT_LEVEL


def build_logging_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "uvicorn": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": level, "handlers": ["console"], "propagate": False},
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    }


def configure_logging() -> None:
    """Install the stdout handler once.

    Returns early when the root logger already has handlers (uvicorn reloads,
    pytest's capture).
    """
    if logging.getLogger().handlers:
        return
    dictConfig(build_logging_config(resolve_level(os.environ.get("LOG_LEVEL"))))
