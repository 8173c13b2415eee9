"""Schema Manager - table layout, cascade foreign keys and the version stamp.

Invariants:
    - A fresh database is stamped with SCHEMA_VERSION (7)
    - All four tables exist with an `id` primary key and a `class` column
    - Every parent FK is ON DELETE CASCADE
    - A foreign stamp raises SchemaVersionError; reset_schema recovers
"""

import pytest

from reviewdb.core.errors import SchemaVersionError
from reviewdb.infrastructure.schema import (
    SCHEMA_VERSION, init_schema, reset_schema, schema_version,
)


async def _columns(engine, table):
    async with engine.connect() as conn:
        result = await conn.exec_driver_sql(f"PRAGMA table_info({table})")
        return {row[1]: row for row in result.fetchall()}


async def _foreign_keys(engine, table):
    async with engine.connect() as conn:
        result = await conn.exec_driver_sql(f"PRAGMA foreign_key_list({table})")
        # (id, seq, table, from, to, on_update, on_delete, match)
        return [(row[2], row[3], row[4], row[6]) for row in result.fetchall()]


async def _stamp(engine, version):
    async with engine.begin() as conn:
        await conn.exec_driver_sql(f"PRAGMA user_version = {version}")


def test_schema_version_constant():
    assert SCHEMA_VERSION == 7


async def test_fresh_database_is_stamped(db_manager):
    assert await schema_version(db_manager.engine) == SCHEMA_VERSION


async def test_tables_have_expected_columns(db_manager):
    engine = db_manager.engine
    pullreq = await _columns(engine, "pullreq")
    assert set(pullreq) == {
        "class", "id", "raw_infos", "raw_diff", "raw_comments", "host", "sha",
        "owner", "repo", "number", "feedback", "replies", "review", "state",
        "callback",
    }
    assert set(await _columns(engine, "buffer")) == {"class", "id", "pullreq", "raw_text"}
    assert set(await _columns(engine, "path")) == {
        "class", "id", "name", "head_pos", "buffer", "at_pos_p",
    }
    assert set(await _columns(engine, "comment")) == {
        "class", "id", "path", "loc_written", "identifiers",
    }


async def test_id_is_primary_key_everywhere(db_manager):
    for table in ("pullreq", "buffer", "path", "comment"):
        columns = await _columns(db_manager.engine, table)
        # table_info row: (cid, name, type, notnull, dflt_value, pk)
        assert columns["id"][5] == 1, table


async def test_foreign_keys_cascade_on_delete(db_manager):
    engine = db_manager.engine
    assert await _foreign_keys(engine, "buffer") == [("pullreq", "pullreq", "id", "CASCADE")]
    assert await _foreign_keys(engine, "path") == [("buffer", "buffer", "id", "CASCADE")]
    assert await _foreign_keys(engine, "comment") == [("path", "path", "id", "CASCADE")]


async def test_init_schema_is_noop_on_matching_stamp(db_manager):
    assert await init_schema(db_manager.engine) == SCHEMA_VERSION
    assert await schema_version(db_manager.engine) == SCHEMA_VERSION


async def test_mismatched_stamp_raises(db_manager):
    await _stamp(db_manager.engine, 3)
    with pytest.raises(SchemaVersionError) as exc:
        await init_schema(db_manager.engine)
    assert exc.value.found == 3
    assert exc.value.expected == SCHEMA_VERSION


async def test_reset_schema_recreates_tables_and_stamp(db_manager):
    await _stamp(db_manager.engine, 3)
    assert await reset_schema(db_manager.engine) == SCHEMA_VERSION
    assert await schema_version(db_manager.engine) == SCHEMA_VERSION
    assert "at_pos_p" in await _columns(db_manager.engine, "path")
