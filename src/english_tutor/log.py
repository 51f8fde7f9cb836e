"""Loguru sink configuration."""
import sys

from loguru import logger


def configure_logging(level: str = "WARNING", log_file: str | None = None) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if log_file:
        logger.add(log_file, level="DEBUG", rotation="5 MB", retention=3)
