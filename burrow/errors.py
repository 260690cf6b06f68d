"""
Error types and error logging for burrow.

Database failures are raised as BurrowError subclasses so callers can
distinguish a missing disk from a corrupted file or a newer schema.
The CLI logs full stack traces to a file while showing clean messages.
"""

import os
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class BurrowError(Exception):
    """Base class for all database errors."""


class IoUnavailable(BurrowError):
    """A create/read/write/rename on the database failed."""

    def __init__(self, message: str, path: Path):
        super().__init__(f"{message}: {path}")
        self.path = path


class DatabaseCorrupted(BurrowError):
    """The database file is truncated, oversized, or otherwise unparsable."""

    def __init__(self, message: str = "database is corrupted", path: Optional[Path] = None):
        super().__init__(f"{message}: {path}" if path else message)
        self.path = path


class UnsupportedSchema(BurrowError):
    """The database was written with a schema version this release cannot read."""

    def __init__(self, version: int, path: Optional[Path] = None):
        message = f"burrow does not support schema v{version}"
        super().__init__(f"{message}: {path}" if path else message)
        self.version = version
        self.path = path


class SerializationFailure(BurrowError):
    """The in-memory entries could not be encoded."""


def _error_log_path(data_dir: Optional[Path] = None) -> Path:
    """Resolve error log path, respecting BURROW_DATA_DIR."""
    if data_dir is not None:
        return Path(data_dir) / "burrow-errors.log"
    from .config import get_data_dir
    return get_data_dir() / "burrow-errors.log"


def log_exception(exc: Exception, context: str = "", data_dir: Optional[Path] = None) -> Path:
    """
    Log exception with full traceback to file.

    Args:
        exc: The exception that occurred
        context: Optional context string (e.g., command name)
        data_dir: Directory holding the log (default: the data directory)

    Returns:
        Path to the error log file
    """
    log_path = _error_log_path(data_dir)
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a") as f:
            f.write(f"\n{'='*60}\n")
            f.write(f"[{timestamp}]")
            if context:
                f.write(f" {context}")
            f.write("\n")
            f.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    except OSError:
        pass  # can't write the error log, don't crash over it
    return log_path
