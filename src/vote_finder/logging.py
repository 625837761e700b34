"""Logging configuration for Vote Finder using loguru.

Records logged during a search carry the jurisdiction key in
``extra["jurisdiction"]`` (see ``VotingPlaceFinder.search``); everything
else shows ``-``.
"""

import sys
from pathlib import Path

from loguru import logger

from vote_finder.config import Settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[jurisdiction]: <8}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[jurisdiction]: <8} | "
    "{name}:{function}:{line} - {message}"
)


def setup_logging(settings: Settings) -> None:
    """
    Configure loguru logging based on settings.

    Args:
        settings: Application settings with the log level, file path,
            rotation/retention and whether the file sink writes JSON lines.
    """
    logger.remove()
    logger.configure(extra={"jurisdiction": "-"})

    # stdout is reserved for command output (search --json, region)
    logger.add(sys.stderr, level=settings.log_level, format=CONSOLE_FORMAT)

    log_path = Path(settings.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        settings.log_file,
        level=settings.log_level,
        format=FILE_FORMAT,
        serialize=settings.log_serialize,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        compression="zip",
    )

    logger.debug(
        "Logging configured: level={}, file={}, serialize={}",
        settings.log_level,
        settings.log_file,
        settings.log_serialize,
    )
