"""
Shared pytest fixtures for burrow tests.

Every test gets a private data directory and a clean BURROW_* environment.
"""

from pathlib import Path

import pytest

from burrow.types import Entry


_BURROW_ENV = (
    "BURROW_DATA_DIR",
    "BURROW_MAXAGE",
    "BURROW_EXCLUDE_DIRS",
    "BURROW_RESOLVE_SYMLINKS",
    "BURROW_VERBOSE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's own burrow settings out of the tests."""
    for name in _BURROW_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def data_dir(tmp_path) -> Path:
    """Data directory for the database (not created yet)."""
    return tmp_path / "data"


@pytest.fixture
def make_dir(tmp_path):
    """Factory creating real directories to track."""
    root = tmp_path / "dirs"

    def _make(relative: str) -> str:
        path = root / relative
        path.mkdir(parents=True, exist_ok=True)
        return str(path)

    return _make


@pytest.fixture
def sample_entries() -> list[Entry]:
    return [
        Entry(path="/home/user/projects", rank=12.5, last_accessed=1_700_000_000),
        Entry(path="/var/log", rank=1.0, last_accessed=1_699_000_000),
        Entry(path="/home/user/Документы", rank=3.0, last_accessed=-5),
    ]
