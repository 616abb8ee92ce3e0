"""Application-wide logging initialization.

Call `initialize_logging()` once at startup, before the app logs anything.

Logging format:
    2025-12-26 12:00:00,000 INFO shortener: storage backend: memory
"""

import logging
import logging.config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def initialize_logging(level: str = "info") -> None:
    log_level = level.upper()
    if not isinstance(logging.getLevelName(log_level), int):
        log_level = "INFO"
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {
                    "format": LOG_FORMAT,
                }
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {
                "level": log_level,
                "handlers": ["stdout"],
            },
        }
    )
