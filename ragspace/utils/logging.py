"""Unified logging configuration for ragspace.

Provides consistent logging with console output and optional rotating file
output. All package loggers live under the ``ragspace`` parent logger.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from ragspace.settings import settings

ROOT_LOGGER_NAME = "ragspace"

# Default log format
LOG_FORMAT = "[%(asctime)s.%(msecs)03d][%(levelname)s][%(filename)s:%(lineno)d]: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _ensure_root_logger_configured() -> None:
    """
    Ensure the ragspace parent logger has a formatted console handler.
    This is called automatically on module import.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)

    has_formatted_handler = any(
        isinstance(h, logging.StreamHandler)
        and h.formatter
        and "%(asctime)s" in (h.formatter._fmt if hasattr(h.formatter, "_fmt") else "")
        for h in root_logger.handlers
    )

    if not has_formatted_handler:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        root_logger.addHandler(console_handler)

        root_logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

        # Keep library output out of the host application's root handlers
        root_logger.propagate = False


def setup_logging(log_name: str = "ragspace") -> logging.Logger:
    """
    Setup logging with console and (optionally) file output.

    The file handler is attached only when ``settings.log_to_file`` is set.
    Log file path pattern: {settings.logs_dir}/{log_name}.log

    Args:
        log_name: The name of the log file (without .log extension).

    Returns:
        Configured logger instance
    """
    _ensure_root_logger_configured()

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{log_name}")

    if settings.log_to_file:
        log_dir = settings.get_logs_root()
        os.makedirs(log_dir, exist_ok=True)
        log_file_path = os.path.join(log_dir, f"{log_name}.log")

        if not any(
            isinstance(h, RotatingFileHandler) and h.baseFilename == log_file_path
            for h in root_logger.handlers
        ):
            file_handler = RotatingFileHandler(
                log_file_path,
                maxBytes=settings.log_max_bytes,
                backupCount=settings.log_backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
            root_logger.addHandler(file_handler)
            root_logger.info(f"File logging enabled: {log_file_path}")

    logger.propagate = True
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        Logger instance under the ragspace namespace
    """
    _ensure_root_logger_configured()

    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)


_ensure_root_logger_configured()
