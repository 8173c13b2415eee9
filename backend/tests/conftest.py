"""Root conftest - a fresh file-backed SQLite database per test.

Invariants:
    - Every test gets its own database under tmp_path (never the user's data dir)
    - The database directory does not exist before the manager opens it
"""

import os

import pytest

from reviewdb.infrastructure.database import DatabaseSessionManager

# Ensure tests never touch the user's real review database
os.environ.setdefault("REVIEWDB_DATA_DIR", "/tmp/reviewdb-tests")
os.environ.setdefault("REVIEWDB_LOG_FORMAT", "text")


@pytest.fixture
def database_path(tmp_path):
    return tmp_path / "data" / "reviewdb.sqlite"


@pytest.fixture
def database_url(database_path):
    return f"sqlite+aiosqlite:///{database_path}"


@pytest.fixture
async def db_manager(database_url):
    manager = DatabaseSessionManager(database_url)
    await manager.initialize()
    yield manager
    await manager.dispose()
