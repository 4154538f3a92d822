"""
Logging configuration for the calibration toolkit.

Command-line runs report progress and failures through the ``charuco_calib``
logger; library classes only ever call ``logging.getLogger(__name__)``.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Logging level, as a number or a name such as ``"DEBUG"``.
        log_file: Optional path to a log file.
        format_string: Optional custom format string.

    Returns:
        Configured logger instance.
    """
    if isinstance(level, str):
        level_name = level.upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown logging level: {level_name}")

    logger = logging.getLogger("charuco_calib")
    logger.setLevel(level)
    logger.handlers.clear()

    if format_string is None:
        format_string = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"

    formatter = logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")

    # Errors and progress go to stderr, leaving stdout free
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
