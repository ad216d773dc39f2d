"""
Logging setup for the monitor, the backend and the predictor client.

Each application logger gets a console handler on stderr and its own rotating
log file under ``config.logs_dir``. Library modules only call
``logging.getLogger(__name__)``; handlers are attached once by the entry point.
"""

import logging
import logging.handlers
import sys
from typing import Optional

from .config import config

APP_LOGGERS = ("pingwatch", "backend", "llm")

# Per-request INFO lines from the HTTP client would drown out probe results
QUIET_LOGGERS = ("httpx", "httpcore")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(logger_name: str = "pingwatch", level: Optional[str] = None) -> logging.Logger:
    """
    Attach console and rotating-file handlers to a named logger.

    Child loggers (``pingwatch.anomaly.engine`` and friends) propagate to the
    logger configured here, so one call per top-level package is enough.
    Calling it again for the same name is a no-op.

    Args:
        logger_name: Top-level logger name; also names the log file
        level: Level override (default: config.log_level)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    if logger.handlers:
        return logger

    level = (level or config.log_level).upper()
    logger.setLevel(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    config.logs_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        config.logs_dir / f"{logger_name}.log",
        maxBytes=config.log_max_bytes,
        backupCount=config.log_backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


def setup_app_logging(level: Optional[str] = None) -> None:
    """Configure every application logger and quiet the HTTP client."""
    for name in APP_LOGGERS:
        setup_logging(name, level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
