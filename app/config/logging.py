"""
Logging setup.

Configures loguru sinks for the API, the scheduler and scripts.
"""

import sys

from loguru import logger


def setup_logging(level: str = "INFO", log_file: str | None = "logs/app.log") -> None:
    """Console sink plus a rotated file sink."""
    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            level=level,
            encoding="utf-8",
        )
