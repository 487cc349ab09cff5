"""Logging setup for HNScribe with optional query-string masking."""

import logging
import logging.handlers
import re
from pathlib import Path
from typing import Optional

LOGGER_NAME = "hnscribe"


class QueryStringFilter(logging.Filter):
    """Mask URL query strings (item and user ids) in log messages."""

    QUERY_PATTERN = re.compile(r'(https?://[^\s?]+)\?[^\s]*')

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.QUERY_PATTERN.sub(r'\1?[MASKED]', record.msg)
        return True


def setup_logger(
    log_level: str = "INFO",
    log_dir: Optional[Path] = None,
    mask_logs: bool = False,
) -> logging.Logger:
    """Set up the application logger. Call once at startup.

    Always adds a console handler. Adds a rotating file handler when
    log_dir is given (created if needed). If already set up, returns the
    existing logger.
    """
    logger = logging.getLogger(LOGGER_NAME)

    if logger.handlers:
        return logger

    logger.setLevel(log_level)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
    )

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / "hnscribe.log",
            maxBytes=2 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    for handler in handlers:
        if mask_logs:
            handler.addFilter(QueryStringFilter())
        logger.addHandler(handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the application logger."""
    return logging.getLogger(LOGGER_NAME)
