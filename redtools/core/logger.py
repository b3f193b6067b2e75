"""Logging setup for redtools with sensitive data masking."""

import logging
import logging.handlers
import re
from pathlib import Path
from typing import Optional

from redtools.core.config_manager import app_home

LOGGER_NAME = "redtools"


class SensitiveDataFilter(logging.Filter):
    """Filter to mask API keys, bearer tokens and URLs in log messages."""

    KEY_PATTERN = re.compile(r'([?&]key=)[^&\s]+')
    BEARER_PATTERN = re.compile(r'(?i)(bearer\s+)[^\s]+')
    URL_PATTERN = re.compile(r'https?://[^\s]+')

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.mask(record.msg)
        return True

    @classmethod
    def mask(cls, text: str) -> str:
        text = cls.KEY_PATTERN.sub(r'\1[KEY_MASKED]', text)
        text = cls.BEARER_PATTERN.sub(r'\1[TOKEN_MASKED]', text)
        return cls.URL_PATTERN.sub('[URL_MASKED]', text)


def setup_logger(log_level: str = "INFO", mask_logs: bool = True,
                 log_dir: Optional[Path] = None) -> logging.Logger:
    """Set up the application logger. Call once at startup.

    Creates log_dir (default: <app home>/logs) if needed. Adds console +
    rotating file handlers.
    If already set up (has handlers), returns existing logger.
    """
    logger = logging.getLogger(LOGGER_NAME)

    if logger.handlers:
        return logger

    if log_dir is None:
        log_dir = app_home() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.setLevel(log_level)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / "redtools.log",
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if mask_logs:
        sensitive_filter = SensitiveDataFilter()
        console_handler.addFilter(sensitive_filter)
        file_handler.addFilter(sensitive_filter)

    return logger
