"""Schema Manager - creates the four review tables and stamps the schema version.

Invariants:
    - SCHEMA_VERSION is stored in SQLite's `PRAGMA user_version`
    - A fresh database (stamp 0) gets all four tables and the stamp in ONE transaction
    - A matching stamp is a no-op; any other stamp raises SchemaVersionError
    - No forward migrations: a mismatch is the caller's to handle (reset_schema)
"""

import logging

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from reviewdb.core.errors import SchemaVersionError
from reviewdb.db.base import Base
import reviewdb.models  # noqa: F401

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 7


async def _read_version(conn: AsyncConnection) -> int:
    result = await conn.exec_driver_sql("PRAGMA user_version")
    return int(result.scalar() or 0)


async def _stamp(conn: AsyncConnection, version: int) -> None:
    # PRAGMA does not accept bound parameters
    await conn.exec_driver_sql(f"PRAGMA user_version = {int(version)}")


async def schema_version(engine: AsyncEngine) -> int:
    """Return the version stamp of the database behind engine (0 = empty)."""
    async with engine.connect() as conn:
        return await _read_version(conn)


async def init_schema(engine: AsyncEngine) -> int:
    """Create tables on a fresh database or verify the stamp of an existing one.

    Returns the schema version in effect. Raises SchemaVersionError when the
    database was written by an incompatible version.
    """
    async with engine.begin() as conn:
        found = await _read_version(conn)
        if found == 0:
            await conn.run_sync(Base.metadata.create_all)
            await _stamp(conn, SCHEMA_VERSION)
            logger.info(
                f"Created review schema v{SCHEMA_VERSION}",
                extra={"schema_version": SCHEMA_VERSION},
            )
            return SCHEMA_VERSION
    if found != SCHEMA_VERSION:
        logger.error(
            f"Schema version mismatch: found {found}, expected {SCHEMA_VERSION}",
            extra={"schema_version": found},
        )
        raise SchemaVersionError(found, SCHEMA_VERSION)
    return found


async def reset_schema(engine: AsyncEngine) -> int:
    """Discard every table and recreate the current schema."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await _stamp(conn, 0)
    logger.warning("Review schema discarded")
    return await init_schema(engine)
