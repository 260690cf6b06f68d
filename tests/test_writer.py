"""Tests for atomic replacement of the database file."""

import builtins
import re
from unittest.mock import patch

import pytest

from burrow.errors import IoUnavailable
from burrow.writer import atomic_write, get_path, get_path_tmp


def _tmp_files(data_dir):
    return sorted(p.name for p in data_dir.glob("*.tmp"))


class FaultyFile:
    """Real file whose truncate, write or close can be made to fail."""

    def __init__(self, real, fail_truncate=False, fail_write=False, fail_close=False):
        self._real = real
        self.fail_truncate = fail_truncate
        self.fail_write = fail_write
        self.fail_close = fail_close

    def __getattr__(self, name):
        return getattr(self._real, name)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self._real.close()
        if self.fail_close:
            raise OSError("close failed")

    def truncate(self, size):
        if self.fail_truncate:
            raise OSError("preallocation not supported")
        return self._real.truncate(size)

    def write(self, data):
        if self.fail_write:
            raise OSError("disk full")
        return self._real.write(data)


def _faulty_open(**faults):
    """Stand-in for open() that wraps the real temp file in a FaultyFile."""
    real_open = builtins.open

    def _open(path, mode):
        return FaultyFile(real_open(path, mode), **faults)

    return patch("burrow.writer.open", side_effect=_open, create=True)


class TestPaths:

    def test_temp_name_is_unique_and_recognizable(self, data_dir):
        first = get_path_tmp(data_dir)
        second = get_path_tmp(data_dir)
        assert first != second
        assert first.parent == data_dir
        assert re.fullmatch(r"db-[0-9a-f-]{36}\.zo\.tmp", first.name)

    def test_database_path(self, data_dir):
        assert get_path(data_dir) == data_dir / "db.zo"


class TestAtomicWrite:

    def test_writes_and_leaves_no_temp_file(self, data_dir):
        data_dir.mkdir()
        path = atomic_write(data_dir, b"hello")
        assert path.read_bytes() == b"hello"
        assert _tmp_files(data_dir) == []

    def test_replaces_existing_file(self, data_dir):
        data_dir.mkdir()
        get_path(data_dir).write_bytes(b"old contents, longer")
        atomic_write(data_dir, b"new")
        assert get_path(data_dir).read_bytes() == b"new"

    def test_missing_directory(self, data_dir):
        with pytest.raises(IoUnavailable) as exc_info:
            atomic_write(data_dir, b"x")
        assert "could not create temporary database" in str(exc_info.value)
        assert exc_info.value.path.parent == data_dir

    def test_rename_failure_cleans_up(self, data_dir):
        data_dir.mkdir()
        get_path(data_dir).write_bytes(b"previous")
        with patch("burrow.writer.os.replace", side_effect=OSError("rename failed")):
            with pytest.raises(IoUnavailable) as exc_info:
                atomic_write(data_dir, b"next")
        assert "could not create database" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, OSError)
        assert get_path(data_dir).read_bytes() == b"previous"
        assert _tmp_files(data_dir) == []

    def test_cleanup_failure_replaces_original_error(self, data_dir):
        data_dir.mkdir()
        with patch("burrow.writer.os.replace", side_effect=OSError("rename failed")), \
                patch("burrow.writer.os.remove", side_effect=OSError("remove failed")):
            with pytest.raises(IoUnavailable) as exc_info:
                atomic_write(data_dir, b"next")
        assert "could not remove temporary database" in str(exc_info.value)
        assert str(exc_info.value.__cause__) == "remove failed"
        # The temp file stays behind
        assert len(_tmp_files(data_dir)) == 1

    def test_presize_failure_is_tolerated(self, data_dir):
        data_dir.mkdir()
        with _faulty_open(fail_truncate=True):
            atomic_write(data_dir, b"contents")
        assert get_path(data_dir).read_bytes() == b"contents"
        assert _tmp_files(data_dir) == []

    def test_write_failure_cleans_up(self, data_dir):
        data_dir.mkdir()
        get_path(data_dir).write_bytes(b"previous")
        with _faulty_open(fail_write=True):
            with pytest.raises(IoUnavailable) as exc_info:
                atomic_write(data_dir, b"next")
        assert "could not write to temporary database" in str(exc_info.value)
        assert str(exc_info.value.__cause__) == "disk full"
        assert get_path(data_dir).read_bytes() == b"previous"
        assert _tmp_files(data_dir) == []

    def test_close_failure_cleans_up(self, data_dir):
        data_dir.mkdir()
        get_path(data_dir).write_bytes(b"previous")
        with _faulty_open(fail_close=True):
            with pytest.raises(IoUnavailable) as exc_info:
                atomic_write(data_dir, b"next")
        assert "could not write to temporary database" in str(exc_info.value)
        assert get_path(data_dir).read_bytes() == b"previous"
        assert _tmp_files(data_dir) == []

    def test_contents_synced_before_rename(self, data_dir):
        data_dir.mkdir()
        calls = []
        with patch("burrow.writer.os.fsync", side_effect=lambda fd: calls.append("fsync")), \
                patch("burrow.writer.os.replace",
                      side_effect=lambda src, dst: calls.append("replace")):
            atomic_write(data_dir, b"x")
        assert calls == ["fsync", "replace"]
