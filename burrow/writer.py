"""
Crash-safe replacement of the database file.

The new contents go to a uniquely named temp file beside the target,
which is then renamed over it. Readers see either the old file or the
new one, never a partial write. A crash before the rename leaves an
orphaned db-*.zo.tmp file behind; nothing here sweeps those up.
"""

import logging
import os
import uuid
from pathlib import Path

from .errors import IoUnavailable

logger = logging.getLogger(__name__)

DB_FILENAME = "db.zo"


def get_path(data_dir: Path) -> Path:
    """Path of the database file inside a data directory."""
    return Path(data_dir) / DB_FILENAME


def get_path_tmp(data_dir: Path) -> Path:
    """A fresh temp file path in the same directory as the database.

    Same directory means same filesystem, which os.replace needs to be atomic.
    """
    return Path(data_dir) / f"db-{uuid.uuid4()}.zo.tmp"


def atomic_write(data_dir: Path, buffer: bytes) -> Path:
    """
    Replace the database in `data_dir` with `buffer`.

    If writing or renaming fails, the temp file is removed and the
    original error is raised. If the removal fails too, that failure is
    raised instead and the temp file is left behind.

    Returns:
        Path to the database file

    Raises:
        IoUnavailable: If the temp file can't be created, written,
            renamed into place, or cleaned up
    """
    db_path = get_path(data_dir)
    db_path_tmp = get_path_tmp(data_dir)

    try:
        f = open(db_path_tmp, "xb")
    except OSError as e:
        raise IoUnavailable("could not create temporary database", db_path_tmp) from e

    try:
        try:
            with f:
                # Not every filesystem supports preallocation; carry on without it.
                try:
                    f.truncate(len(buffer))
                except OSError as e:
                    logger.debug("Could not pre-size %s: %s", db_path_tmp, e)
                f.write(buffer)
                f.flush()
                # Contents must be on disk before the rename makes them visible.
                os.fsync(f.fileno())
        except OSError as e:
            raise IoUnavailable("could not write to temporary database", db_path_tmp) from e

        try:
            os.replace(db_path_tmp, db_path)
        except OSError as e:
            raise IoUnavailable("could not create database", db_path) from e
    except IoUnavailable:
        try:
            os.remove(db_path_tmp)
        except OSError as e:
            raise IoUnavailable("could not remove temporary database", db_path_tmp) from e
        raise

    logger.debug("Wrote %d bytes to %s", len(buffer), db_path)
    return db_path
