"""
Unified output system using Loguru.
User-facing messages go to the log file and to stdout.
"""

import sys
import threading
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import LoggingConfig, get_data_dir

_quiet_mode = False
_quiet_lock = threading.Lock()


def get_log_file_path() -> Path:
    """Get the path to the default log file."""
    return get_data_dir() / "mp3-player.log"


def setup_loguru(
    log_file: Optional[Path] = None,
    level: str = "INFO",
    rotation_mb: int = 10,
    retention: int = 5,
    console_output: bool = False,
) -> None:
    """
    Configure loguru for file logging, optionally mirrored to stderr.

    Args:
        log_file: Path to log file (default: <data dir>/mp3-player.log)
        level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR)
        rotation_mb: Rotate the log file when it reaches this size
        retention: Number of rotated files to keep
        console_output: Also write log records to stderr
    """
    log_file = log_file if log_file else get_log_file_path()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Remove default handler
    logger.remove()

    logger.add(
        log_file,
        rotation=f"{rotation_mb} MB",
        retention=retention,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        enqueue=False,  # Synchronous writes
    )

    if console_output:
        logger.add(sys.stderr, level=level, format="{level}: {message}")

    logger.info(f"Loguru initialized: {log_file} (level={level})")


def setup_from_config(cfg: LoggingConfig) -> None:
    """Configure loguru from the [logging] config section."""
    setup_loguru(
        log_file=Path(cfg.log_file) if cfg.log_file else None,
        level=cfg.level,
        rotation_mb=cfg.max_file_size_mb,
        retention=cfg.backup_count,
        console_output=cfg.console_output,
    )


def set_quiet_mode(enabled: bool) -> None:
    """Suppress stdout echo of log() messages (file logging continues)."""
    global _quiet_mode
    with _quiet_lock:
        _quiet_mode = enabled


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to file AND prints for the user.

    Use this instead of print() for user-facing messages that should also be logged.

    Args:
        message: User-facing message
        level: Log level (debug, info, warning, error)
    """
    log_func = getattr(logger, level)
    log_func(message)

    with _quiet_lock:
        if not _quiet_mode:
            print(message)
