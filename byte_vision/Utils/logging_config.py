"""
Logging configuration for byte_vision.

Sinks are set up once at startup from the ``[logging]`` config table.
"""

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

DEFAULT_LEVEL = "INFO"
DEFAULT_ROTATION = "10 MB"
DEFAULT_RETENTION = "7 days"
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def configure_logging(
    level: str = DEFAULT_LEVEL,
    log_file: Optional[Union[str, Path]] = None,
    console: bool = False,
    rotation: str = DEFAULT_ROTATION,
    retention: str = DEFAULT_RETENTION,
) -> None:
    """
    Configure loguru sinks.

    The terminal belongs to the TUI while it runs, so the console sink is off
    unless asked for.

    Args:
        level: Minimum level for every sink
        log_file: Rotating file sink; skipped when None
        console: Also log to stderr
        rotation: loguru rotation for the file sink
        retention: loguru retention for the file sink
    """
    level = (level or DEFAULT_LEVEL).upper()
    logger.remove()  # Remove default handler

    if log_file is not None:
        logger.add(
            sink=str(log_file),
            level=level,
            format=LOG_FORMAT,
            rotation=rotation,
            retention=retention,
            enqueue=True,
        )

    if console:
        logger.add(
            sink=sys.stderr,
            level=level,
            colorize=True,
        )

    logger.info(f"Logging configured: level={level}, file={log_file}, console={console}")
