"""Logging setup."""

import logging.config

from community_rewards.core.config import Settings


def configure_logging(settings: Settings) -> None:
    """Apply the process-wide logging configuration.

    @param settings - Application settings (log_level, log_format)
    """
    formatter = "json" if settings.log_format == "json" else "console"
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "[{levelname}] {asctime} {name} - {message}",
                    "style": "{",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "json": {
                    "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                    "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": formatter,
                },
            },
            "root": {
                "handlers": ["default"],
                "level": settings.log_level.upper(),
            },
            "loggers": {
                "sqlalchemy.engine": {
                    "level": "INFO" if settings.debug else "WARNING",
                },
            },
        }
    )
