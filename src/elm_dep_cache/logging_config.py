import logging
import sys
from typing import Optional

# Prefix used by the command-line tool so its lines stand out in CI logs
CLI_FORMAT = "[elm-dep-cache] %(levelname)s: %(message)s"


class _BelowLevel(logging.Filter):
    """Pass only records strictly below a level."""

    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    force: bool = False,
) -> logging.Logger:
    """
    Set up logging configuration for elm-dep-cache.

    Progress lines go to stdout; warnings and errors go to stderr so CI
    logs can tell them apart.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path that receives every record
        format_string: Optional custom format string for log messages
        force: If True, reconfigure even if handlers exist

    Returns:
        Configured logger instance
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger("elm_dep_cache")
    logger.setLevel(numeric_level)

    if force or not logger.handlers:
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        formatter = logging.Formatter(format_string)

        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setLevel(numeric_level)
        stdout_handler.addFilter(_BelowLevel(logging.WARNING))
        stdout_handler.setFormatter(formatter)
        logger.addHandler(stdout_handler)

        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(max(numeric_level, logging.WARNING))
        stderr_handler.setFormatter(formatter)
        logger.addHandler(stderr_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    # Prevent propagation to root logger to avoid duplicate logs
    logger.propagate = False

    return logger
