"""Delete Review - cascade through buffer, path and comment.

Invariants:
    - Deleting a review removes every buffer, path and comment below it
    - The cascade is enforced by SQLite foreign keys, not only by the ORM
    - Other reviews are untouched
    - Deleting a missing review returns False
"""

from sqlalchemy import text

from reviewdb.models import Review


async def _populate(store, review_id):
    for name in ("a.py", "b.py", "a.py"):
        await store.set_current_path(review_id, name)
        await store.record_written_lines(review_id, 2)
        await store.mark_identifier_written(review_id, f"{name}-id")


async def test_delete_cascades_to_descendants(store, seed_review, count_rows):
    await _populate(store, seed_review.id)
    assert await count_rows("path") == 3
    assert await count_rows("comment") == 3

    assert await store.delete_review(seed_review.id) is True

    for table in ("pullreq", "buffer", "path", "comment"):
        assert await count_rows(table) == 0, table
    assert await store.get_review(seed_review.id) is None
    assert await store.get_current_path(seed_review.id) is None
    assert await store.get_raw_comments(seed_review.id) == []


async def test_delete_leaves_other_reviews(store, seed_review, count_rows):
    other = await store.create_review(Review(owner="octo", repo="other", number="1"))
    await _populate(store, seed_review.id)
    await _populate(store, other.id)

    await store.delete_review(seed_review.id)

    assert await count_rows("pullreq") == 1
    assert await count_rows("path") == 3
    assert await store.already_written(other.id, "a.py-id") is True


async def test_storage_level_cascade(store, seed_review, db_manager, count_rows):
    await _populate(store, seed_review.id)

    async with db_manager.transaction() as session:
        await session.execute(
            text("DELETE FROM pullreq WHERE id = :id"), {"id": seed_review.id},
        )

    for table in ("buffer", "path", "comment"):
        assert await count_rows(table) == 0, table


async def test_delete_missing_review(store):
    assert await store.delete_review("nope") is False
