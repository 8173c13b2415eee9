"""Database Session Manager - SQLite engine with foreign keys, explicit transactions and reconnection.

Invariants:
    - Every DB-API connection runs with PRAGMA foreign_keys = ON (cascade delete is enforced by SQLite)
    - Every transaction starts with an explicit BEGIN, so a multi-statement write
      (DDL included) is all-or-nothing
    - Every session auto-rolls-back on exception (no partial commits leak)
    - All SQLAlchemy exceptions mapped to ReviewDbError subclasses (core/errors.py)
    - The parent directory of a file database is created if missing

Design Decisions:
    - Explicit handle instead of a module-level singleton: ReviewStore holds one manager
    - ensure_connected() re-probes before work: a disposed engine, a deleted database
      file or a failed health check rebuilds the engine and re-runs init_schema
    - expire_on_commit=False: returned entities stay readable after the session closes
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import (
    ArgumentError, DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)

from reviewdb.core.errors import (
    DatabaseError, IntegrityViolationError, StorageUnavailableError,
)
from reviewdb.infrastructure.schema import init_schema

logger = logging.getLogger(__name__)


def _on_connect(dbapi_connection, connection_record):
    # Take BEGIN/COMMIT away from the driver; _on_begin emits our own BEGIN.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def _on_begin(conn):
    conn.exec_driver_sql("BEGIN")


def database_file(database_url: str) -> str | None:
    """Filesystem path behind a SQLite URL, or None for in-memory databases."""
    database = make_url(database_url).database
    if not database or database == ":memory:" or database.startswith("file:"):
        return None
    return database


class DatabaseSessionManager:
    """Owns the async engine and hands out sessions and transactions."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._build_engine()

    def _build_engine(self) -> None:
        path = database_file(self.database_url)
        try:
            if path:
                os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
            engine = create_async_engine(self.database_url, pool_pre_ping=True)
        except (ArgumentError, ImportError, OSError) as e:
            logger.error(f"Cannot open review database: {e}")
            raise StorageUnavailableError(str(e)) from e
        event.listen(engine.sync_engine, "connect", _on_connect)
        event.listen(engine.sync_engine, "begin", _on_begin)
        self.engine = engine
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False,
        )

    async def initialize(self) -> int:
        """Create or verify the schema. Returns the schema version."""
        try:
            return await init_schema(self.engine)
        except DBAPIError as e:
            logger.error(f"Cannot initialize review database: {e}")
            raise StorageUnavailableError(str(e.orig or e)) from e

    def _file_missing(self) -> bool:
        path = database_file(self.database_url)
        return path is not None and not os.path.exists(path)

    async def ensure_connected(self) -> None:
        """Reopen the engine if it was disposed, its file vanished, or it stopped answering."""
        if self.engine is not None and not self._file_missing():
            if await self.health_check():
                return
        logger.warning("Review database connection lost, reopening")
        await self.dispose()
        self._build_engine()
        await self.initialize()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        if self._session_factory is None:
            raise StorageUnavailableError("database manager has been disposed")
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"DB integrity error: {e}", extra={"error_code": "INTEGRITY_VIOLATION"})
            raise IntegrityViolationError(str(e.orig or e)) from e
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB operational error: {e}", extra={"operation": "execute"})
            raise DatabaseError("Connection or operational error", "execute") from e
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"DB driver error: {e}", extra={"operation": "query"})
            raise DatabaseError("Database driver error", "query") from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise DatabaseError("Database operation failed", "unknown") from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Session inside one BEGIN ... COMMIT; any exception rolls back every write."""
        async with self.session() as session:
            async with session.begin():
                yield session

    async def health_check(self) -> bool:
        """Check database connectivity."""
        if self.engine is None:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        """Close every pooled connection. The manager can be reopened with ensure_connected()."""
        if self.engine is not None:
            await self.engine.dispose()
        self.engine = None
        self._session_factory = None
