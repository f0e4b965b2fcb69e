"""Logging setup for drbdflex."""

import logging
import sys

LOG_FORMAT = "[%(asctime)s] [%(name)s] %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str | int = logging.INFO) -> logging.Logger:
    """
    Configure the root logger to write to stdout.

    Args:
        level: Logging level name or number (DEBUG, INFO, ...)

    Returns:
        The ``drbdflex`` package logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logger = logging.getLogger("drbdflex")
    logger.info("logging initialized (level=%s)", logging.getLevelName(level))
    return logger
