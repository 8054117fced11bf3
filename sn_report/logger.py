import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from . import settings

# Transport logs from requests; one line per HTTP call is noise at INFO.
QUIET_LOGGERS = ["urllib3", "requests"]


def setup_logger(name: Optional[str] = None, log_level: Optional[int] = None) -> logging.Logger:
    """
    Console output stays minimal (message only); the rotating file keeps timestamps
    and levels so every batch attempt and ingestion warning of a long upload can be
    traced afterwards.
    """
    level = log_level if log_level is not None else logging.getLevelName(settings.LOG_LEVEL)
    if not isinstance(level, int):
        # getLevelName answers "Level X" for a name it does not know
        level = logging.INFO
    logger = logging.getLogger(name)
    logger.setLevel(level)

    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

    # Already configured (a second CLI call in the same process, or a test runner)
    if logger.hasHandlers():
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        settings.LOG_DIR / settings.LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"  # 5 MB
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logger.addHandler(file_handler)

    return logger
