"""Logging configuration for the compiler CLI."""

import copy
import logging
from logging.config import dictConfig

from .settings import get_settings

LOGGING_CONFIG = {
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
            "stream": "ext://sys.stderr",
        }
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"],
    },
}


def configure_logging(level: str | None = None) -> None:
    """Configure logging based on settings, or on an explicit level."""

    settings = get_settings()
    config = copy.deepcopy(LOGGING_CONFIG)
    config["root"]["level"] = (level or settings.log_level).upper()
    dictConfig(config)
    logging.getLogger(__name__).debug(
        "Logging configured at %s, output to %s",
        config["root"]["level"],
        settings.output_dir,
    )
