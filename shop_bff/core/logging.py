"""
Logging configuration for Shop BFF.
"""

import logging
import sys

from loguru import logger

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGURU_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> - <cyan>{name}</cyan> - "
    "<level>{level}</level> - <level>{message}</level>"
)


def setup_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure application logging.

    Application modules log through loguru; third-party libraries
    (uvicorn, SQLAlchemy) keep using the standard logging module with the
    same level and a matching format.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Emit loguru records as JSON lines
    """
    log_level = level.upper()

    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level,
        format=LOGURU_FORMAT,
        serialize=json_logs,
        backtrace=False,
        diagnose=False,
    )

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format=LOG_FORMAT,
        force=True,
    )
