"""
burrow - frecency-ranked directory database.

Tracks visited directories and ranks them by frequency and recency so a
navigation tool can jump to the best match for a partial query.

Quick Start:
    import time
    from burrow import Database

    with Database.open(data_dir) as db:
        db.add("/home/me/projects/burrow", int(time.time()))
        for entry in db.matches(int(time.time()), ["proj"]):
            print(entry.path)
"""

from .codec import CURRENT_VERSION, MAX_SIZE, decode, encode
from .errors import (
    BurrowError,
    DatabaseCorrupted,
    IoUnavailable,
    SerializationFailure,
    UnsupportedSchema,
)
from .matcher import is_match
from .scoring import clamp_score, score
from .store import Database
from .types import Entry

__version__ = "0.1.0"
__all__ = [
    "Database",
    "Entry",
    "encode",
    "decode",
    "CURRENT_VERSION",
    "MAX_SIZE",
    "score",
    "clamp_score",
    "is_match",
    "BurrowError",
    "IoUnavailable",
    "DatabaseCorrupted",
    "UnsupportedSchema",
    "SerializationFailure",
]
