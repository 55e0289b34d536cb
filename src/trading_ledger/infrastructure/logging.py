"""
Logging configuration with loguru.
"""

import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO", serialize: bool = False) -> None:
    """Install a single stderr sink.

    Args:
        level: The log level string (DEBUG, INFO, WARNING, ERROR)
        serialize: Emit JSON records (bound context included) instead of text
    """
    logger.remove()
    if serialize:
        logger.add(sys.stderr, level=level.upper(), serialize=True)
    else:
        logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
