import logging
import os
from logging.handlers import RotatingFileHandler

from app.platform.config import get_settings

LOG_FILE_NAME = "purebreed.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _log_file_path() -> str:
    log_dir = get_settings().LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    return os.path.join(log_dir, LOG_FILE_NAME)


def get_logger(name: str):
    """
    Creates a logger instance that writes to console AND a rotating file
    under LOG_DIR, at the level named by LOG_LEVEL.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    level = logging.getLevelName(get_settings().LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = RotatingFileHandler(_log_file_path(), maxBytes=10_000_000, backupCount=5)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)
    # basicConfig in app.main already writes to the root logger
    logger.propagate = False

    return logger
