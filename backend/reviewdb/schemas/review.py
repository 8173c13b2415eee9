"""Review Schemas - read-only projections of a Review row.

Invariants:
    - ReviewSummary carries exactly the remote coordinates of a review
    - Projections are frozen: mutating them never touches the database
"""

from pydantic import BaseModel, ConfigDict


class ReviewSummary(BaseModel):
    """Owner/repo/number/sha tuple identifying the reviewed revision."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    owner: str | None = None
    repo: str | None = None
    number: str | None = None
    sha: str | None = None
