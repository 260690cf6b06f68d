"""
Binary encoding of the directory database.

The file is a fixed-width schema version followed by the entry list:

    u32  schema version
    u64  entry count
    per entry:
        u64  path length in bytes
        ...  path, UTF-8
        f64  rank
        i64  last accessed (epoch seconds)

All integers are little-endian. There is exactly one readable schema;
anything else is rejected rather than migrated.
"""

import struct
from dataclasses import dataclass
from typing import Sequence, Union

from .errors import DatabaseCorrupted, SerializationFailure, UnsupportedSchema
from .types import Entry

CURRENT_VERSION = 3
MAX_SIZE = 8 * 1024 * 1024  # 8 MiB

_VERSION = struct.Struct("<I")
_LENGTH = struct.Struct("<Q")
_FIELDS = struct.Struct("<dq")

VERSION_SIZE = _VERSION.size


@dataclass(frozen=True)
class Recognized:
    """A buffer written with the current schema, and its entries."""
    entries: list[Entry]


@dataclass(frozen=True)
class Unrecognized:
    """A buffer written with some other schema version."""
    version: int


SchemaVersion = Union[Recognized, Unrecognized]


def _encode_path(path: str) -> bytes:
    try:
        return path.encode("utf-8")
    except UnicodeEncodeError as e:
        raise SerializationFailure(f"could not encode path: {path!r}") from e


def encode(version: int, entries: Sequence[Entry]) -> bytes:
    """Serialize entries under the given schema version.

    The output size is computed first so the buffer is allocated once.

    Raises:
        SerializationFailure: If a field can't be represented
    """
    paths = [_encode_path(entry.path) for entry in entries]
    size = VERSION_SIZE + _LENGTH.size
    size += sum(_LENGTH.size + len(raw) + _FIELDS.size for raw in paths)

    buffer = bytearray(size)
    offset = 0
    try:
        _VERSION.pack_into(buffer, offset, version)
        offset += VERSION_SIZE
        _LENGTH.pack_into(buffer, offset, len(entries))
        offset += _LENGTH.size
        for entry, raw in zip(entries, paths):
            _LENGTH.pack_into(buffer, offset, len(raw))
            offset += _LENGTH.size
            buffer[offset:offset + len(raw)] = raw
            offset += len(raw)
            _FIELDS.pack_into(buffer, offset, entry.rank, entry.last_accessed)
            offset += _FIELDS.size
    except struct.error as e:
        raise SerializationFailure(f"could not serialize database: {e}") from e
    return bytes(buffer)


def _decode_entries(payload: memoryview) -> list[Entry]:
    try:
        (count,) = _LENGTH.unpack_from(payload, 0)
        offset = _LENGTH.size
        # Every entry takes at least this many bytes; reject absurd counts up front.
        if count * (_LENGTH.size + _FIELDS.size) > len(payload) - offset:
            raise DatabaseCorrupted("entry count exceeds database size")
        entries = []
        for _ in range(count):
            (length,) = _LENGTH.unpack_from(payload, offset)
            offset += _LENGTH.size
            if offset + length > len(payload):
                raise DatabaseCorrupted("path length exceeds database size")
            path = bytes(payload[offset:offset + length]).decode("utf-8")
            offset += length
            rank, last_accessed = _FIELDS.unpack_from(payload, offset)
            offset += _FIELDS.size
            entries.append(Entry(path=path, rank=rank, last_accessed=last_accessed))
    except (struct.error, UnicodeDecodeError) as e:
        raise DatabaseCorrupted(f"could not deserialize database: {e}") from e
    if offset != len(payload):
        raise DatabaseCorrupted("unexpected trailing bytes in database")
    return entries


def read_schema(buffer: bytes) -> SchemaVersion:
    """Classify a non-empty buffer by its version tag.

    Only a current-version buffer has its payload parsed.

    Raises:
        DatabaseCorrupted: If the buffer is too large, too short for the
            version tag, or its payload is malformed
    """
    if len(buffer) > MAX_SIZE:
        raise DatabaseCorrupted(f"database exceeds {MAX_SIZE} bytes")
    if len(buffer) < VERSION_SIZE:
        raise DatabaseCorrupted()
    view = memoryview(buffer)
    (version,) = _VERSION.unpack_from(view, 0)
    if version != CURRENT_VERSION:
        return Unrecognized(version)
    return Recognized(_decode_entries(view[VERSION_SIZE:]))


def decode(buffer: bytes) -> tuple[int, list[Entry]]:
    """Deserialize a database buffer.

    An empty buffer is a fresh database with no entries.

    Raises:
        DatabaseCorrupted: If the buffer can't be parsed
        UnsupportedSchema: If the buffer uses another schema version
    """
    if not buffer:
        return CURRENT_VERSION, []
    schema = read_schema(buffer)
    if isinstance(schema, Unrecognized):
        raise UnsupportedSchema(schema.version)
    return CURRENT_VERSION, schema.entries
