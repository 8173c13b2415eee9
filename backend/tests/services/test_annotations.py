"""Session Annotations - feedback, state, replies, local review and buffer text."""

import pytest

from reviewdb.core.errors import ResourceNotFoundError


async def test_feedback(store, seed_review):
    assert await store.get_feedback(seed_review.id) is None
    await store.set_feedback(seed_review.id, "Looks good overall")
    assert await store.get_feedback(seed_review.id) == "Looks good overall"


async def test_state(store, seed_review):
    await store.set_state(seed_review.id, "APPROVE")
    assert await store.get_state(seed_review.id) == "APPROVE"
    await store.set_state(seed_review.id, None)
    assert await store.get_state(seed_review.id) is None


async def test_replies_keep_written_order(store, seed_review):
    await store.push_reply(seed_review.id, {"comment_id": "c1", "body": "done"})
    replies = await store.push_reply(seed_review.id, {"comment_id": "c2", "body": "why?"})
    assert [r["comment_id"] for r in replies] == ["c1", "c2"]
    assert await store.get_replies(seed_review.id) == replies


async def test_clear_replies(store, seed_review):
    await store.push_reply(seed_review.id, {"comment_id": "c1"})
    await store.clear_replies(seed_review.id)
    assert await store.get_replies(seed_review.id) == []


async def test_local_review(store, seed_review):
    draft = {"body": "Please add tests", "comments": [{"path": "a.py", "line": 3}]}
    await store.set_local_review(seed_review.id, draft)
    assert await store.get_local_review(seed_review.id) == draft


async def test_annotation_defaults_for_missing_review(store):
    assert await store.get_feedback("nope") is None
    assert await store.get_state("nope") is None
    assert await store.get_replies("nope") == []
    assert await store.get_local_review("nope") is None
    assert await store.get_buffer_text("nope") is None
    assert await store.list_paths("nope") == []


async def test_annotation_writes_on_missing_review_raise(store):
    with pytest.raises(ResourceNotFoundError):
        await store.set_feedback("nope", "x")
    with pytest.raises(ResourceNotFoundError):
        await store.push_reply("nope", {"body": "x"})
    with pytest.raises(ResourceNotFoundError):
        await store.set_buffer_text("nope", "x")


async def test_buffer_text_creates_buffer(store, seed_review, count_rows):
    buffer = await store.set_buffer_text(seed_review.id, "rendered diff")
    assert buffer.id == seed_review.id
    assert buffer.paths == []
    assert await store.get_buffer_text(seed_review.id) == "rendered diff"


async def test_buffer_text_reuses_path_buffer(store, seed_review, count_rows):
    await store.set_current_path(seed_review.id, "a.py")
    await store.set_buffer_text(seed_review.id, "rendered diff")
    assert await count_rows("buffer") == 1
    assert (await store.get_current_path(seed_review.id)).name == "a.py"
