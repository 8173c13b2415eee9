"""Entity Repository - load/save/delete primitives over one AsyncSession.

Invariants:
    - get_one returns an entity or None; never a collection
    - get_children returns a list (possibly empty); never None
    - save is an upsert by primary key and is idempotent
    - Loading an entity populates its owned children (selectin, one query per child table)
    - Only Review rows are ever deleted; descendants go via ON DELETE CASCADE

Design Decisions:
    - save uses Session.merge: relationships carry no "merge" cascade, so only the
      entity's own row is written
    - populate_existing on reads: rows changed earlier in the same session are
      reloaded, not served from the identity map
"""

from typing import Iterable, TypeVar

from sqlalchemy import literal_column, select
from sqlalchemy.ext.asyncio import AsyncSession

from reviewdb.models import Buffer, Comment, Path, Review

E = TypeVar("E")

# Parent foreign key of each owned entity
_PARENT_KEYS = {
    Buffer: Buffer.review_id,
    Path: Path.buffer_id,
    Comment: Comment.path_id,
}


class EntityRepository:
    """Generic persistence primitives for the four review entities."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_one(self, model: type[E], entity_id: str) -> E | None:
        return await self.session.get(model, entity_id, populate_existing=True)

    async def get_children(self, model: type[E], parent_id: str) -> list[E]:
        """Rows of `model` owned by `parent_id`, in insertion order."""
        parent_key = _PARENT_KEYS[model]
        result = await self.session.execute(
            select(model)
            .where(parent_key == parent_id)
            .order_by(literal_column(f"{model.__tablename__}.rowid"))
            .execution_options(populate_existing=True),
        )
        return list(result.scalars().all())

    async def save(self, entity: E) -> E:
        merged = await self.session.merge(entity)
        await self.session.flush()
        return merged

    async def save_all(self, entities: Iterable[E]) -> list[E]:
        return [await self.save(entity) for entity in entities]

    async def delete(self, entity: Review) -> None:
        await self.session.delete(entity)
        await self.session.flush()
