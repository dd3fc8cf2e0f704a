"""Logging setup shared by the API process and the test suite."""
from __future__ import annotations
import logging.config

from pythonjsonlogger.json import JsonFormatter


def build_logging_config(level: str = "INFO", fmt: str = "text") -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            },
            "json": {
                "()": JsonFormatter,
                "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "json" if fmt == "json" else "standard",
            },
        },
        "loggers": {
            "": {"handlers": ["console"], "level": level},
            # SQL echo is controlled by DB_ECHO, keep the engine logger quiet otherwise
            "sqlalchemy.engine": {"level": "WARNING", "propagate": True},
            "uvicorn.access": {"level": "INFO"},
        },
    }


def setup_logging(level: str = "INFO", fmt: str = "text") -> None:
    logging.config.dictConfig(build_logging_config(level.upper(), fmt.lower()))
