"""
Logging configuration

One console sink plus two daily files under log_dir: the report log and an
error-only log. Levels and retention come from settings.
"""
from loguru import logger
import sys
from pathlib import Path
from typing import Optional

from taxonomy_reports.config import Settings, get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logger(settings: Optional[Settings] = None):
    """Replace loguru's default handler with the report service sinks"""
    settings = settings or get_settings()
    log_dir = Path(settings.log_dir)
    logger.remove()

    logger.add(
        sys.stdout,
        colorize=settings.log_console_colorize,
        format=CONSOLE_FORMAT,
        level=settings.log_level.upper()
    )

    logger.add(
        log_dir / "taxonomy_reports_{time:YYYY-MM-DD}.log",
        rotation="00:00",
        retention=f"{settings.log_retention_days} days",
        compression="zip",
        level=settings.log_file_level.upper()
    )

    logger.add(
        log_dir / "errors_{time:YYYY-MM-DD}.log",
        rotation="00:00",
        retention=f"{settings.error_log_retention_days} days",
        level="ERROR"
    )

    return logger


log = setup_logger()
