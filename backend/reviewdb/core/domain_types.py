"""Domain Types - identity types and table discriminators for the review aggregate.

Invariants:
    - ReviewId, BufferId, PathId, CommentId wrap UUID-v4 shaped strings
    - Ids are generated by the caller (ReviewStore.id_factory), never by SQLite
    - EntityClass values are the fixed `class` discriminator of each table

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: persist as plain strings without custom converters
"""

import uuid
from enum import Enum
from typing import Callable, NewType


# ─── Identity Types ──────────────────────────────────────────────

ReviewId = NewType("ReviewId", str)
BufferId = NewType("BufferId", str)
PathId = NewType("PathId", str)
CommentId = NewType("CommentId", str)

IdFactory = Callable[[], str]


def new_id() -> str:
    """Random UUID-v4 string. Collisions are not checked."""
    return str(uuid.uuid4())


# ─── Enums ───────────────────────────────────────────────────────

class EntityClass(str, Enum):
    """Value stored in the `class` column of each table."""
    REVIEW = "review"
    BUFFER = "buffer"
    PATH = "path"
    COMMENT = "comment"


# ─── Remote payload keys ─────────────────────────────────────────

# The only two locations read out of a raw infos payload; everything
# else in the payload is opaque.
HEAD_SHA_KEYS = ("headRef", "target", "oid")
REVIEW_NODES_KEYS = ("reviews", "nodes")
