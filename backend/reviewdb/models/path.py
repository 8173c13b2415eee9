"""Path ORM - one file of the reviewed diff.

Invariants:
    - Always belongs to a Buffer (column `buffer`, ON DELETE CASCADE)
    - At most one Path per Buffer has at_pos_p = True (the current path);
      enforced by ReviewStore.set_current_path, not by a constraint
    - name is not unique: revisiting a file inserts a new row

Design Decisions:
    - head_pos nullable: unknown until the diff is rendered
"""

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reviewdb.core.domain_types import EntityClass
from reviewdb.db.base import Base


class Path(Base):
    """Path entity - a file within the diff, possibly the current one."""
    __tablename__ = "path"

    entity_class: Mapped[str] = mapped_column(
        "class", String(20), nullable=False, default=EntityClass.PATH.value,
    )
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    head_pos: Mapped[int | None] = mapped_column(Integer, nullable=True)
    buffer_id: Mapped[str] = mapped_column(
        "buffer", String(36),
        ForeignKey("buffer.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    at_pos_p: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )

    buffer: Mapped["Buffer"] = relationship("Buffer", back_populates="paths")
    comments: Mapped[list["Comment"]] = relationship(
        "Comment", back_populates="path",
        cascade="save-update, delete", passive_deletes=True, lazy="selectin",
    )
