"""ORM Models - SQLAlchemy declarative models for the review aggregate.

Invariants:
    - All models inherit from Base (db/base.py)
    - Review is the aggregate root: Review -> Buffer -> Path -> Comment
    - Every child FK is ON DELETE CASCADE; deleting a Review removes its whole subtree

Design Decisions:
    - One file per entity
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from reviewdb.models.review import Review  # noqa: F401
from reviewdb.models.buffer import Buffer  # noqa: F401
from reviewdb.models.path import Path  # noqa: F401
from reviewdb.models.comment import Comment  # noqa: F401
