"""
This module sets up logging for the application.
"""
import logging
from typing import Optional

from waste_schedule.config import LOG_FILE_PATH, LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = LOG_LEVEL, file_path: Optional[str] = LOG_FILE_PATH) -> None:
    """
    Configures the root logger with a console handler and, if a path is given, a file handler.
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if file_path:
        file_handler = logging.FileHandler(file_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # urllib3 logs every request at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))

    logging.info(f"Logging configured at level {logging.getLevelName(level)}.")
