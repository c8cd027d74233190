"""Centralized loguru configuration."""

import sys

from loguru import logger

from app.core.app_config import LOG_LEVEL

log_format = " | ".join(
    (
        "<lk>{time:YYYY-MM-DD HH:mm:ss.SSS}</>",
        "<lvl>{level:<8}</>",
        "<c>{name}:{function}:{line}</>",
        "{message}",
    )
)


def setup_logging(level: str = LOG_LEVEL) -> None:
    # Drop the default handler so messages are not emitted twice
    logger.remove()
    logger.add(sys.stdout, format=log_format, level=level)
