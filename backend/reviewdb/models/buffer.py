"""Buffer ORM - cached diff text and owner of the file-level Path collection.

Invariants:
    - Always belongs to a Review (column `pullreq`, ON DELETE CASCADE)
    - Created lazily by the first current-path selection, with id == review id
"""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reviewdb.core.domain_types import EntityClass
from reviewdb.db.base import Base


class Buffer(Base):
    """Buffer entity - one per Review in practice."""
    __tablename__ = "buffer"

    entity_class: Mapped[str] = mapped_column(
        "class", String(20), nullable=False, default=EntityClass.BUFFER.value,
    )
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    review_id: Mapped[str] = mapped_column(
        "pullreq", String(36),
        ForeignKey("pullreq.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    raw_text: Mapped[str | None] = mapped_column(Text, nullable=True)

    review: Mapped["Review"] = relationship("Review", back_populates="buffers")
    paths: Mapped[list["Path"]] = relationship(
        "Path", back_populates="buffer",
        cascade="save-update, delete", passive_deletes=True, lazy="selectin",
    )
