"""
Logging configuration for the recorder.

- Console handler on stdout
- Size-based rotating file log
- Level override through the BR_RECORDER_LOG environment variable
  (e.g. BR_RECORDER_LOG=DEBUG), defaulting to INFO
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

LOG_DIR: str = "logs"
LOG_FILE_NAME: str = "br_recorder.log"
LOG_MAX_BYTES: int = 5 * 1024 * 1024
LOG_BACKUP_COUNT: int = 3
LOG_LEVEL_ENV: str = "BR_RECORDER_LOG"

_DETAILED_FMT = "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
_CONSOLE_FMT = "%(asctime)s | %(levelname)-8s | %(message)s"
_DETAILED_DATEFMT = "%Y-%m-%d %H:%M:%S"
_CONSOLE_DATEFMT = "%H:%M:%S"


def level_from_env(default: int = logging.INFO) -> int:
    """Resolve the log level from the environment, ignoring bad values."""
    name = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def setup_logging(log_dir: Optional[str] = LOG_DIR,
                  log_max_bytes: int = LOG_MAX_BYTES,
                  log_backup_count: int = LOG_BACKUP_COUNT,
                  console_level: Optional[int] = None) -> logging.Logger:
    """
    Configure the ``br_recorder`` logger.

    Args:
        log_dir: Directory for the rotating log file, None for console only.
        log_max_bytes: Max bytes per log file before rotation.
        log_backup_count: Number of rotated backups to keep.
        console_level: Minimum console level; defaults to the env override.

    Returns:
        The configured package logger.
    """
    if console_level is None:
        console_level = level_from_env()

    app_logger = logging.getLogger("br_recorder")
    app_logger.setLevel(logging.DEBUG)
    # Re-running setup must not stack handlers
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(_CONSOLE_FMT, datefmt=_CONSOLE_DATEFMT))
    app_logger.addHandler(console)

    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, LOG_FILE_NAME),
            maxBytes=log_max_bytes,
            backupCount=log_backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_DETAILED_FMT, datefmt=_DETAILED_DATEFMT))
        app_logger.addHandler(file_handler)

    app_logger.propagate = False
    return app_logger
