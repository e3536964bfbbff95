"""Centralized logging configuration."""

import sys

from loguru import logger

from src.config import settings


log_format = ' | '.join(
    (
        '<lk>{time:YYYY-MM-DD HH:mm:ss.SSS}</>',
        '<lvl>{level:<8}</>',
        '<c>{name}:{function}:{line}</>',
        '{message}',
    )
)

_configured = False


def setup_logging() -> None:
    """Install the console (and optional file) sinks once per process"""
    global _configured
    if _configured:
        return

    logger.remove()  # Drop loguru's default handler so records are not printed twice
    logger.add(sys.stdout, format=log_format, level=settings.LOG_LEVEL)

    if settings.LOG_DIR:
        logger.add(
            f'{settings.LOG_DIR}/{{time:YYYY-MM-DD}}.log',
            format=log_format,
            level=settings.LOG_LEVEL,
            rotation='1 day',
            retention='30 days',
            enqueue=True,
        )

    _configured = True
