from __future__ import annotations

import os
import sys
from pathlib import Path

from loguru import logger

from finch.utils.env_cfg import load_path_env

CONSOLE_FORMAT = "{time:HH:mm:ss.SSS} | {level:<8} | {name} | {message}"
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{line} | {message}"
)


def setup_logging(
    log_path: Path | None = None,
    console_level: str | None = None,
    to_file: bool = True,
    rotation: str = "5 MB",
    retention: int = 3,
) -> Path:
    """
    Route loguru output to stderr and, optionally, a rotating log file.

    Args:
        log_path (Path | None, optional): Log file location. Defaults to ``LOG_PATH``.
        console_level (str | None, optional): Stderr threshold. Defaults to ``LOG_LEVEL`` or INFO.
        to_file (bool, optional): Whether to add the file sink. Defaults to True.
        rotation (str, optional): The log file rotation policy. Defaults to "5 MB".
        retention (int, optional): The number of log files to retain. Defaults to 3.

    Returns:
        Path: The path to the log file.
    """
    path = log_path or load_path_env().logs
    level = (console_level or os.getenv("LOG_LEVEL", "INFO")).upper()

    logger.remove()
    logger.add(sink=sys.stderr, level=level, format=CONSOLE_FORMAT)

    if to_file:
        path.parent.mkdir(parents=True, exist_ok=True)
        # DEBUG keeps per-dispatch sequence numbers and context attachment in the file.
        logger.add(
            sink=path,
            level="DEBUG",
            rotation=rotation,
            retention=retention,
            encoding="utf-8",
            enqueue=True,
            format=FILE_FORMAT,
        )
    logger.debug("Logging to {} (console level {})", path, level)
    return path
