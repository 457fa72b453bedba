"""Logging configuration helpers."""

from __future__ import annotations

import logging
import logging.config
from typing import Any

from fly_poll.config import get_settings


def get_logging_config() -> dict[str, Any]:
    """
    Get logging configuration based on settings.

    Returns:
        Logging configuration dictionary
    """
    settings = get_settings()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": (
                    "%(asctime)s | %(levelname)s | %(name)s | "
                    "search=%(search_id)s | %(message)s"
                ),
            },
        },
        "filters": {
            "search_id": {
                "()": "fly_poll.logging_config.SearchIdFilter",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "filters": ["search_id"],
            },
        },
        "root": {
            "level": settings.log_level,
            "handlers": ["console"],
        },
    }


class SearchIdFilter(logging.Filter):
    """Ensure `search_id` key is always available in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "search_id", None) is None:
            record.search_id = "-"
        return True


def configure_logging(config: dict[str, Any] | None = None) -> None:
    """
    Apply logging configuration once.

    Args:
        config: Optional logging configuration dict. If None, uses config from settings.
    """
    if config is None:
        config = get_logging_config()
    logging.config.dictConfig(config)
