"""Comment ORM - per-path tracking comment for write progress.

Invariants:
    - Always belongs to a Path (column `path`, ON DELETE CASCADE)
    - The tracking comment of a path reuses the path's id
    - identifiers is an ordered list, newest first; duplicates are not removed
    - loc_written None means zero
"""

from sqlalchemy import JSON, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reviewdb.core.domain_types import EntityClass
from reviewdb.db.base import Base


class Comment(Base):
    """Tracking comment - written line count and processed identifiers."""
    __tablename__ = "comment"

    entity_class: Mapped[str] = mapped_column(
        "class", String(20), nullable=False, default=EntityClass.COMMENT.value,
    )
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    path_id: Mapped[str] = mapped_column(
        "path", String(36),
        ForeignKey("path.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    loc_written: Mapped[int | None] = mapped_column(Integer, nullable=True)
    identifiers: Mapped[list | None] = mapped_column(JSON, nullable=True)

    path: Mapped["Path"] = relationship("Path", back_populates="comments")
