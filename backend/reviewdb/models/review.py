"""Review ORM - the aggregate root for one pull/merge request under review.

Invariants:
    - id is a caller-assigned UUID-v4 string (never generated by the database)
    - raw_infos / raw_comments hold remote payloads verbatim (JSON)
    - sha and raw_comments are derived from raw_infos on every infos update
    - Owns zero or one Buffer in practice; domain code uses the first one

Design Decisions:
    - Table keeps the historical name `pullreq`
    - Owned collection has no "merge" cascade: save() is a row-level upsert and
      never rewrites children from a stale in-memory collection
    - passive_deletes: SQLite ON DELETE CASCADE removes descendants
"""

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reviewdb.core.domain_types import EntityClass
from reviewdb.db.base import Base


class Review(Base):
    """Review aggregate root - owns the Buffer/Path/Comment tree."""
    __tablename__ = "pullreq"

    entity_class: Mapped[str] = mapped_column(
        "class", String(20), nullable=False, default=EntityClass.REVIEW.value,
    )
    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    # Remote identifiers
    host: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner: Mapped[str | None] = mapped_column(Text, nullable=True)
    repo: Mapped[str | None] = mapped_column(Text, nullable=True)
    number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    sha: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Cached remote payloads
    raw_infos: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    raw_diff: Mapped[str | None] = mapped_column(Text, nullable=True)
    raw_comments: Mapped[list | None] = mapped_column(JSON, nullable=True)

    # Session-local annotations
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    state: Mapped[str | None] = mapped_column(String(32), nullable=True)
    replies: Mapped[list | None] = mapped_column(JSON, nullable=True)
    review: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    callback: Mapped[str | None] = mapped_column(Text, nullable=True)

    buffers: Mapped[list["Buffer"]] = relationship(
        "Buffer", back_populates="review",
        cascade="save-update, delete", passive_deletes=True, lazy="selectin",
    )
