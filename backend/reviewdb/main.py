"""reviewdb entry point - builds a ready-to-use ReviewStore from settings.

Invariants:
    - open_store() configures logging, opens the database and creates or verifies
      the schema before returning
    - A schema version mismatch propagates as SchemaVersionError unless the caller
      asked for reset_on_mismatch

Design Decisions:
    - Explicit open/close pair instead of an import-time singleton
"""

import logging

from reviewdb.config import Settings, get_settings
from reviewdb.core.domain_types import IdFactory, new_id
from reviewdb.core.errors import SchemaVersionError
from reviewdb.infrastructure.database import DatabaseSessionManager
from reviewdb.infrastructure.observability import setup_logging
from reviewdb.infrastructure.schema import reset_schema
from reviewdb.services.review_store import ReviewStore

logger = logging.getLogger(__name__)


async def open_store(
    settings: Settings | None = None,
    id_factory: IdFactory = new_id,
    reset_on_mismatch: bool = False,
) -> ReviewStore:
    """Open the review database described by `settings`."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = DatabaseSessionManager(settings.database_url)
    try:
        await db.initialize()
    except SchemaVersionError:
        if not reset_on_mismatch:
            await db.dispose()
            raise
        logger.warning("Discarding review database with incompatible schema")
        await reset_schema(db.engine)
    logger.info("Review store opened")
    return ReviewStore(db, id_factory=id_factory)


async def close_store(store: ReviewStore) -> None:
    await store.db.dispose()
    logger.info("Review store closed")
