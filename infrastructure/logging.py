"""Logging initialization utilities using loguru."""

from __future__ import annotations

from pathlib import Path
import sys

from loguru import logger

APP_DIR_NAME = "PhotoReview"


def get_log_directory() -> str:
    """Get the main log directory path."""
    return str(Path.home() / ".local" / "state" / APP_DIR_NAME / "logs")


def get_delete_log_directory() -> str:
    """Get the delete audit log directory path."""
    return str(Path.home() / ".local" / "state" / APP_DIR_NAME / "delete_logs")


def init_logging(log_dir: str | None = None, level: str = "INFO", console: bool = False) -> Path:
    """Initialize rotating file logging under the given directory.

    Returns:
        The directory the log files are written to.
    """
    log_path = Path(log_dir or get_log_directory())
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        str(log_path / "app_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        level=level,
    )
    if console:
        logger.add(sys.stderr, level=level)
    return log_path


def find_latest_file(directory: str, pattern: str) -> Path | None:
    """Return the most recently modified file matching `pattern`, if any."""
    try:
        base = Path(directory)
        if not base.exists():
            return None
        candidates = list(base.glob(pattern))
        if not candidates:
            return None
        return max(candidates, key=lambda p: p.stat().st_mtime)
    except (OSError, ValueError):
        return None


def find_latest_log_file(log_dir: str | None = None) -> Path | None:
    """Find the latest app log file in the specified directory."""
    return find_latest_file(log_dir or get_log_directory(), "app_*.log")


def find_latest_delete_log_file(log_dir: str | None = None) -> Path | None:
    """Find the latest delete audit log."""
    return find_latest_file(log_dir or get_delete_log_directory(), "delete_*.csv")
