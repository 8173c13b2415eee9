"""Review Store - domain operations over the Review -> Buffer -> Path -> Comment tree.

Invariants:
    - Reads never raise for missing rows: absent review/path/comment yields None, 0 or []
    - Mutations of a missing review (or of a review without a current path) raise
      ResourceNotFoundError
    - After every set_current_path, exactly one Path under the buffer has at_pos_p = True
    - Buffer is created before Path, Path before Comment (FKs always satisfied)
    - raw_comments is newest-first: append_raw_comment prepends
    - identifiers of a tracking comment are newest-first and never deduplicated
    - Every operation runs in one transaction; a failure leaves no partial write

Design Decisions:
    - Buffer id == review id, tracking Comment id == path id (1:1 by construction)
    - Revisiting a file inserts a new Path row; older rows with the same name keep
      their head_pos and comments and are never current again
    - Linear scans over paths: a review holds tens of paths, not thousands
    - Entities returned to callers are reloaded before the session closes, so their
      owned collections are populated and readable once detached
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Mapping

from reviewdb.core.domain_types import (
    HEAD_SHA_KEYS, REVIEW_NODES_KEYS, IdFactory, new_id,
)
from reviewdb.core.errors import ErrorContext, ResourceNotFoundError
from reviewdb.infrastructure.database import DatabaseSessionManager
from reviewdb.models import Buffer, Comment, Path, Review
from reviewdb.schemas.review import ReviewSummary
from reviewdb.services.repository import EntityRepository

logger = logging.getLogger(__name__)


def dig(payload: Any, keys: tuple[str, ...]) -> Any:
    """Follow `keys` through nested mappings; None as soon as a level is missing."""
    for key in keys:
        if not isinstance(payload, Mapping):
            return None
        payload = payload.get(key)
    return payload


def tracking_comment(path: Path) -> Comment | None:
    return path.comments[0] if path.comments else None


class ReviewStore:
    """Persisted state of review sessions."""

    def __init__(self, db: DatabaseSessionManager, id_factory: IdFactory = new_id):
        self.db = db
        self.id_factory = id_factory

    @asynccontextmanager
    async def _unit(self) -> AsyncGenerator[EntityRepository, None]:
        await self.db.ensure_connected()
        async with self.db.transaction() as session:
            yield EntityRepository(session)

    # ─── Lookup helpers ─────────────────────────────────────────

    async def _require_review(self, repo: EntityRepository, review_id: str) -> Review:
        review = await repo.get_one(Review, review_id)
        if review is None:
            raise ResourceNotFoundError(
                "Review", review_id, ErrorContext(review_id=review_id),
            )
        return review

    async def _buffer(self, repo: EntityRepository, review_id: str) -> Buffer | None:
        buffers = await repo.get_children(Buffer, review_id)
        return buffers[0] if buffers else None

    async def _paths(self, repo: EntityRepository, review_id: str) -> list[Path]:
        buffer = await self._buffer(repo, review_id)
        if buffer is None:
            return []
        return await repo.get_children(Path, buffer.id)

    async def _current_path(self, repo: EntityRepository, review_id: str) -> Path | None:
        for path in await self._paths(repo, review_id):
            if path.at_pos_p:
                return path
        return None

    async def _require_current_path(self, repo: EntityRepository, review_id: str) -> Path:
        path = await self._current_path(repo, review_id)
        if path is None:
            raise ResourceNotFoundError(
                "Current path", review_id, ErrorContext(review_id=review_id),
            )
        return path

    async def _read(self, review_id: str, field: str, default: Any = None) -> Any:
        async with self._unit() as repo:
            review = await repo.get_one(Review, review_id)
        if review is None:
            return default
        value = getattr(review, field)
        return default if value is None else value

    async def _update(self, review_id: str, **fields: Any) -> Review:
        async with self._unit() as repo:
            review = await self._require_review(repo, review_id)
            for name, value in fields.items():
                setattr(review, name, value)
            await repo.save(review)
        logger.debug(
            f"Review fields updated: {', '.join(fields)}",
            extra={"review_id": review_id},
        )
        return review

    # ─── Review lifecycle ───────────────────────────────────────

    async def create_review(self, review: Review) -> Review:
        """Assign a fresh id to `review` and persist it."""
        review.id = self.id_factory()
        async with self._unit() as repo:
            await repo.save(review)
            created = await repo.get_one(Review, review.id)
        logger.info(
            f"Review created for {review.owner}/{review.repo}#{review.number}",
            extra={"review_id": review.id},
        )
        return created

    async def get_review(self, review_id: str) -> Review | None:
        """Load a review with its buffer, paths and comments."""
        async with self._unit() as repo:
            return await repo.get_one(Review, review_id)

    async def delete_review(self, review_id: str) -> bool:
        """Delete a review and, by cascade, its whole subtree. False if absent."""
        async with self._unit() as repo:
            review = await repo.get_one(Review, review_id)
            if review is None:
                return False
            await repo.delete(review)
        logger.info("Review deleted", extra={"review_id": review_id})
        return True

    async def save_review(self, review: Review) -> Review:
        """Upsert `review` as given (row only, children untouched)."""
        async with self._unit() as repo:
            await repo.save(review)
            return await repo.get_one(Review, review.id)

    async def update_infos(self, review: Review, infos: dict) -> Review:
        """Store a remote infos payload and the head sha / review nodes read from it."""
        review.raw_infos = infos
        review.sha = dig(infos, HEAD_SHA_KEYS)
        review.raw_comments = dig(infos, REVIEW_NODES_KEYS)
        saved = await self.save_review(review)
        logger.info(
            f"Infos updated, head at {review.sha}", extra={"review_id": review.id},
        )
        return saved

    async def update_diff(self, review: Review, diff: str) -> Review:
        review.raw_diff = diff
        return await self.save_review(review)

    async def append_raw_comment(self, review_id: str, comment: Any) -> list:
        """Prepend `comment` to the cached raw comments. Returns the new list."""
        async with self._unit() as repo:
            review = await self._require_review(repo, review_id)
            review.raw_comments = [comment, *(review.raw_comments or [])]
            await repo.save(review)
            return review.raw_comments

    async def sha_update(self, review_id: str, sha: str) -> Review:
        return await self._update(review_id, sha=sha)

    async def get_infos(self, review_id: str) -> dict | None:
        return await self._read(review_id, "raw_infos")

    async def get_raw_diff(self, review_id: str) -> str | None:
        return await self._read(review_id, "raw_diff")

    async def get_raw_comments(self, review_id: str) -> list:
        return await self._read(review_id, "raw_comments", [])

    async def get_review_summary(self, review_id: str) -> ReviewSummary | None:
        """Owner, repo, number and sha of a review."""
        async with self._unit() as repo:
            review = await repo.get_one(Review, review_id)
        if review is None:
            return None
        return ReviewSummary.model_validate(review)

    # ─── Session annotations ────────────────────────────────────

    async def get_feedback(self, review_id: str) -> str | None:
        return await self._read(review_id, "feedback")

    async def set_feedback(self, review_id: str, feedback: str | None) -> Review:
        return await self._update(review_id, feedback=feedback)

    async def get_state(self, review_id: str) -> str | None:
        return await self._read(review_id, "state")

    async def set_state(self, review_id: str, state: str | None) -> Review:
        return await self._update(review_id, state=state)

    async def get_local_review(self, review_id: str) -> dict | None:
        return await self._read(review_id, "review")

    async def set_local_review(self, review_id: str, review: dict | None) -> Review:
        return await self._update(review_id, review=review)

    async def get_replies(self, review_id: str) -> list:
        return await self._read(review_id, "replies", [])

    async def push_reply(self, review_id: str, reply: Any) -> list:
        """Append a drafted reply; replies keep the order they were written in."""
        async with self._unit() as repo:
            review = await self._require_review(repo, review_id)
            review.replies = [*(review.replies or []), reply]
            await repo.save(review)
            return review.replies

    async def clear_replies(self, review_id: str) -> Review:
        return await self._update(review_id, replies=None)

    async def get_buffer_text(self, review_id: str) -> str | None:
        async with self._unit() as repo:
            buffer = await self._buffer(repo, review_id)
        return buffer.raw_text if buffer else None

    async def set_buffer_text(self, review_id: str, text: str | None) -> Buffer:
        """Cache the rendered diff text, creating the buffer on first use."""
        async with self._unit() as repo:
            await self._require_review(repo, review_id)
            buffer = await self._buffer(repo, review_id)
            if buffer is None:
                buffer = Buffer(id=review_id, review_id=review_id)
            buffer.raw_text = text
            buffer = await repo.save(buffer)
            return await repo.get_one(Buffer, buffer.id)

    # ─── Current path ───────────────────────────────────────────

    async def set_current_path(self, review_id: str, path_name: str) -> Path:
        """Make `path_name` the current path of the review's buffer.

        Creates the buffer on first use. Otherwise clears at_pos_p on every
        existing path, then inserts a new current Path row, all in one
        transaction. A revisited file gets a new row as well.
        """
        async with self._unit() as repo:
            await self._require_review(repo, review_id)
            buffer = await self._buffer(repo, review_id)
            if buffer is None:
                buffer = await repo.save(Buffer(id=review_id, review_id=review_id))
            else:
                for sibling in await repo.get_children(Path, buffer.id):
                    sibling.at_pos_p = False
            path = await repo.save(Path(
                id=self.id_factory(), name=path_name,
                buffer_id=buffer.id, at_pos_p=True,
            ))
            current = await repo.get_one(Path, path.id)
        logger.debug(
            f"Current path set to {path_name}",
            extra={"review_id": review_id, "path_name": path_name},
        )
        return current

    async def get_current_path(self, review_id: str) -> Path | None:
        async with self._unit() as repo:
            return await self._current_path(repo, review_id)

    async def list_paths(self, review_id: str) -> list[Path]:
        """Every path row of the review's buffer, oldest first."""
        async with self._unit() as repo:
            return await self._paths(repo, review_id)

    async def set_head_position(self, review_id: str, path_name: str, pos: int | None) -> int:
        """Set head_pos on every path named `path_name`. Returns the number of rows touched."""
        touched = 0
        async with self._unit() as repo:
            for path in await self._paths(repo, review_id):
                if path.name == path_name:
                    path.head_pos = pos
                    await repo.save(path)
                    touched += 1
        return touched

    async def get_head_position(self, review_id: str, path_name: str) -> int | None:
        async with self._unit() as repo:
            for path in await self._paths(repo, review_id):
                if path.name == path_name:
                    return path.head_pos
        return None

    # ─── Write tracking ─────────────────────────────────────────

    async def record_written_lines(self, review_id: str, count: int) -> int:
        """Add `count` to the current path's written-lines counter. Returns the new total."""
        async with self._unit() as repo:
            path = await self._require_current_path(repo, review_id)
            comment = tracking_comment(path)
            if comment is None:
                comment = Comment(id=path.id, path_id=path.id, identifiers=[])
            comment.loc_written = (comment.loc_written or 0) + count
            comment = await repo.save(comment)
            return comment.loc_written

    async def mark_identifier_written(self, review_id: str, identifier: str) -> list:
        """Record `identifier` on the current path's tracking comment. Returns its identifiers."""
        async with self._unit() as repo:
            path = await self._require_current_path(repo, review_id)
            comment = tracking_comment(path)
            if comment is None:
                comment = Comment(id=path.id, path_id=path.id, identifiers=[identifier])
            else:
                comment.identifiers = [identifier, *(comment.identifiers or [])]
            comment = await repo.save(comment)
            return comment.identifiers

    async def already_written(self, review_id: str, identifier: str) -> bool:
        """True if any path's tracking comment of the review holds `identifier`."""
        async with self._unit() as repo:
            paths = await self._paths(repo, review_id)
        return any(
            identifier in (comment.identifiers or [])
            for comment in map(tracking_comment, paths)
            if comment is not None
        )

    async def get_written_position(self, comment_id: str) -> int:
        async with self._unit() as repo:
            comment = await repo.get_one(Comment, comment_id)
        if comment is None:
            return 0
        return comment.loc_written or 0
