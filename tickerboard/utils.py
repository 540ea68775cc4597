"""
Utility functions for tickerboard.
"""

import logging
from pathlib import Path
from typing import Optional


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Set up logging for the tickerboard package.

    The live table owns the terminal, so records go to a file. Without a
    log file, records are discarded rather than written over the display.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path; parent directories are created

    Returns:
        The package logger
    """
    logger = logging.getLogger("tickerboard")
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        print(f"[warning] Invalid log level '{log_level}', using INFO")
        level = logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", "%Y-%m-%d %H:%M:%S"))
    else:
        handler = logging.NullHandler()

    # Replace handlers from an earlier call instead of stacking them
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.addHandler(handler)
    return logger
