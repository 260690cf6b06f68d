"""
The directory database.

Holds every tracked directory in memory, loads them from and saves
them to `db.zo` in the data directory, and answers ranked queries.

Usage:
    with Database.open(data_dir) as db:
        db.add("/home/me/src", now)
        best = next(db.matches(now, ["src"]), None)

Leaving the `with` block saves pending changes. Errors from that save
are logged, not raised; call save() directly to see them.
"""

import logging
import math
from pathlib import Path
from typing import Iterator, Optional, Sequence

from . import codec
from .errors import BurrowError, DatabaseCorrupted, IoUnavailable, UnsupportedSchema
from .scoring import Epoch, Rank
from .types import Entry
from .writer import atomic_write, get_path

logger = logging.getLogger(__name__)


def _sort_score(entry: Entry, now: Epoch) -> Rank:
    """Score with NaN ranked last, so sorting sees a total order."""
    value = entry.get_score(now)
    return -math.inf if math.isnan(value) else value


class Database:
    """
    In-memory directory records backed by a single binary file.

    `entries` may be mutated directly by callers; whoever does so must
    set `dirty` so the change is saved. add(), remove() and age() do
    this themselves.
    """

    def __init__(self, data_dir: Path, entries: Optional[list[Entry]] = None):
        self.data_dir = Path(data_dir)
        self.entries: list[Entry] = entries if entries is not None else []
        self.dirty = False
        self._closed = False

    @property
    def path(self) -> Path:
        """Path to the database file."""
        return get_path(self.data_dir)

    @classmethod
    def open(cls, data_dir: Path) -> "Database":
        """
        Load the database from `data_dir`, creating the directory if needed.

        A missing or empty database file gives an empty database.

        Raises:
            IoUnavailable: If the directory can't be created or the file read
            DatabaseCorrupted: If the file is malformed or too large
            UnsupportedSchema: If the file was written with another schema
        """
        data_dir = Path(data_dir)
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IoUnavailable("unable to create data directory", data_dir) from e

        path = get_path(data_dir)
        try:
            buffer = path.read_bytes()
        except FileNotFoundError:
            logger.debug("No database at %s, starting empty", path)
            return cls(data_dir)
        except OSError as e:
            raise IoUnavailable("could not read from database", path) from e

        try:
            _, entries = codec.decode(buffer)
        except UnsupportedSchema as e:
            raise UnsupportedSchema(e.version, path) from e
        except DatabaseCorrupted as e:
            raise DatabaseCorrupted(str(e), path) from e

        logger.debug("Loaded %d entries from %s", len(entries), path)
        return cls(data_dir, entries)

    def save(self) -> None:
        """
        Write the database to disk if it has unsaved changes.

        Raises:
            SerializationFailure: If the entries can't be encoded
            IoUnavailable: If the file can't be written
        """
        if not self.dirty:
            return
        buffer = codec.encode(codec.CURRENT_VERSION, self.entries)
        atomic_write(self.data_dir, buffer)
        self.dirty = False
        logger.info("Saved %d entries to %s", len(self.entries), self.path)

    def close(self) -> None:
        """Save once, logging rather than raising any failure."""
        if self._closed:
            return
        self._closed = True
        try:
            self.save()
        except BurrowError as e:
            logger.error("Failed to save database: %s", e)

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def matches(self, now: Epoch, keywords: Sequence[str]) -> Iterator[Entry]:
        """
        Entries matching `keywords`, best score first.

        Sorts `entries` in place by score at `now`, then yields lazily,
        skipping entries that are invalid (rank too low, directory gone)
        or don't match. Keywords are lowercased here.
        """
        self.entries.sort(key=lambda entry: _sort_score(entry, now), reverse=True)
        keywords = [keyword.lower() for keyword in keywords]
        return (
            entry for entry in self.entries
            if entry.is_match(keywords) and entry.is_valid()
        )

    def find(self, path: str) -> Optional[Entry]:
        for entry in self.entries:
            if entry.path == path:
                return entry
        return None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(self, path: str, now: Epoch) -> Entry:
        """Record a visit: bump an existing entry or start a new one at rank 1."""
        entry = self.find(path)
        if entry is None:
            entry = Entry(path=path, rank=1.0, last_accessed=now)
            self.entries.append(entry)
        else:
            entry.rank += 1.0
            entry.last_accessed = now
        self.dirty = True
        return entry

    def remove(self, path: str) -> bool:
        """Forget a directory. Returns False if it wasn't tracked."""
        for i, entry in enumerate(self.entries):
            if entry.path == path:
                del self.entries[i]
                self.dirty = True
                return True
        return False

    def age(self, max_age: Rank) -> None:
        """
        Keep the total rank under `max_age`.

        When the ranks add up to more than `max_age`, all of them are
        scaled down to 90% of it and anything left below rank 1 is dropped.
        Non-finite ranks don't count towards the total.
        """
        total = math.fsum(entry.rank for entry in self.entries if math.isfinite(entry.rank))
        if not total > max_age:
            return
        factor = 0.9 * max_age / total
        kept = []
        for entry in self.entries:
            entry.rank *= factor
            if entry.rank >= 1.0:
                kept.append(entry)
        logger.debug("Aged database: factor %.4f, dropped %d entries",
                     factor, len(self.entries) - len(kept))
        self.entries[:] = kept
        self.dirty = True
