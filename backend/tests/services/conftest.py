"""Service test fixtures - ReviewStore over the per-test database.

Invariants:
    - id_factory is the real uuid4 generator unless a test overrides it
    - seed_review is persisted before the test body runs
"""

import pytest
from sqlalchemy import text

from reviewdb.models import Review
from reviewdb.services.review_store import ReviewStore


@pytest.fixture
def store(db_manager):
    return ReviewStore(db_manager)


@pytest.fixture
async def seed_review(store):
    """A persisted review for octo/hello#42."""
    return await store.create_review(
        Review(host="github", owner="octo", repo="hello", number="42"),
    )


@pytest.fixture
def count_rows(db_manager):
    """Count rows of a table, optionally restricted to one id."""
    async def _count(table: str, entity_id: str | None = None) -> int:
        sql = f"SELECT COUNT(*) FROM {table}"
        params = {}
        if entity_id is not None:
            sql += " WHERE id = :id"
            params["id"] = entity_id
        async with db_manager.session() as session:
            result = await session.execute(text(sql), params)
            return result.scalar()
    return _count
