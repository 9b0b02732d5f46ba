"""Logging setup shared by every tweetboard component.

All module loggers live under the ``tweetboard`` logger, which writes to a
rotating file and optionally to the console. Records pass a redaction filter
first, so API tokens echoed back in HTTP errors never reach the log files.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "tweetboard.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER = "tweetboard"

_REDACTIONS = [
    (re.compile(r"gh[po]_[A-Za-z0-9]{36}"), "[GITHUB_TOKEN]"),
    (re.compile(r"github_pat_[A-Za-z0-9_]{82}"), "[GITHUB_TOKEN]"),
    (re.compile(r"Bearer [A-Za-z0-9._%-]+"), "Bearer [REDACTED]"),
    (re.compile(r"token=[A-Za-z0-9._-]+"), "token=[REDACTED]"),
]


def sanitize_for_log(text: str) -> str:
    """Replace GitHub tokens, bearer tokens and token query parameters."""
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


class RedactingFilter(logging.Filter):
    """Renders the record message once and strips secrets from it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = sanitize_for_log(record.getMessage())
        record.args = None
        return True


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Configure the ``tweetboard`` logger.

    Calling it again replaces the handlers of the previous call.

    Args:
        log_dir: Directory for log files, created if missing. Defaults to
                 TWEETBOARD_LOG_DIR, then 'logs'.
        log_file: Log file name inside log_dir.
        max_bytes: Size at which the file is rotated.
        backup_count: Rotated files to keep.
        level: Level name. Defaults to TWEETBOARD_LOG_LEVEL, then INFO.
        console: Also log to stderr.

    Returns:
        The configured logger.
    """
    log_dir = Path(log_dir or os.environ.get("TWEETBOARD_LOG_DIR", DEFAULT_LOG_DIR))
    log_dir.mkdir(parents=True, exist_ok=True)
    level = level or os.environ.get("TWEETBOARD_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    log_path = log_dir / log_file
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    redact = RedactingFilter()
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        handler.addFilter(redact)
        logger.addHandler(handler)

    logger.info("tweetboard logging initialized (level=%s, file=%s)", level, log_path)
    return logger
