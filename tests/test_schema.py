# tests/test_schema.py
#
# Schema creation, column migration of legacy prompts tables, and rollback.

import pytest
from sqlalchemy.exc import IntegrityError

from prompt_library.core.exceptions import SchemaMigrationException
from prompt_library.database import schema
from prompt_library.database.schema import (
    MIGRATED_PROMPT_COLUMNS,
    SCHEMA_VERSION,
    ensure_schema,
    existing_columns,
    schema_version,
)
from prompt_library.database.session import Database
from prompt_library.services.prompt_store import PromptStore

LEGACY_PROMPTS_DDL = """
CREATE TABLE prompts (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    content TEXT NOT NULL,
    tags TEXT,
    created TEXT NOT NULL,
    lastModified TEXT NOT NULL
)
"""

LEGACY_ROW = """
INSERT INTO prompts (id, title, description, content, tags, created, lastModified)
VALUES ('legacy-1', 'Old prompt', 'from before', 'Be helpful.', 'old,kept',
        '2022-06-01T08:00:00.000Z', '2022-06-01T08:00:00.000Z')
"""


async def _columns(database, table):
    async with database.connection() as conn:
        return await conn.run_sync(existing_columns, table)


async def _create_legacy_table(database, extra_columns=()):
    async with database.connection() as conn:
        await conn.exec_driver_sql(LEGACY_PROMPTS_DDL)
        for ddl in extra_columns:
            await conn.exec_driver_sql(f"ALTER TABLE prompts ADD COLUMN {ddl}")
        await conn.exec_driver_sql(LEGACY_ROW)


async def test_fresh_database_gets_both_tables(database):
    added = await ensure_schema(database)

    assert added == []
    prompt_columns = await _columns(database, "prompts")
    history_columns = await _columns(database, "upload_history")
    assert {"id", "title", "description", "content", "tags", "created", "lastModified"} <= prompt_columns
    assert set(MIGRATED_PROMPT_COLUMNS) <= prompt_columns
    assert history_columns == {
        "id", "fileName", "uploadDate", "status", "isActive", "promptCount", "errorMessage"
    }
    assert await schema_version(database) == SCHEMA_VERSION


async def test_ensure_schema_is_idempotent(database):
    await ensure_schema(database)
    before = await _columns(database, "prompts")

    assert await ensure_schema(database) == []
    assert await ensure_schema(database) == []
    assert await _columns(database, "prompts") == before


async def test_legacy_table_is_migrated_and_backfilled(database):
    await _create_legacy_table(database)

    added = await ensure_schema(database)

    assert added == list(MIGRATED_PROMPT_COLUMNS)
    assert set(MIGRATED_PROMPT_COLUMNS) <= await _columns(database, "prompts")

    store = PromptStore(database)
    await store.open()
    prompt = await store.get_prompt("legacy-1")
    assert prompt is not None
    assert prompt.title == "Old prompt"
    assert prompt.tags == ["old", "kept"]
    assert prompt.is_active is True
    assert prompt.history_id is None
    assert prompt.history_is_active is True
    assert prompt.rating == 0
    assert prompt.rating_count == 0
    assert prompt.is_favorite is False


async def test_partially_migrated_table_only_gets_missing_columns(database):
    await _create_legacy_table(database, extra_columns=["isActive BOOLEAN DEFAULT 1", "historyId TEXT"])

    added = await ensure_schema(database)

    assert added == ["rating", "ratingCount", "isFavorite"]
    assert set(MIGRATED_PROMPT_COLUMNS) <= await _columns(database, "prompts")


async def test_migrated_rating_column_keeps_range_check(database):
    await _create_legacy_table(database)
    await ensure_schema(database)

    with pytest.raises(IntegrityError) as excinfo:
        async with database.connection() as conn:
            await conn.exec_driver_sql("UPDATE prompts SET rating = 9 WHERE id = 'legacy-1'")
    assert "CHECK constraint failed" in str(excinfo.value)


async def test_failed_migration_leaves_schema_untouched(database, monkeypatch):
    await _create_legacy_table(database)
    before = await _columns(database, "prompts")

    def failing_backfill(sync_conn, added_columns):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(schema, "_backfill", failing_backfill)

    with pytest.raises(SchemaMigrationException, match="disk on fire"):
        await ensure_schema(database)

    assert await _columns(database, "prompts") == before
    assert await _columns(database, "upload_history") == set()
    assert await schema_version(database) == 0


async def test_store_open_creates_file_and_parent_directory(db_file):
    store = PromptStore(Database(f"sqlite+aiosqlite:///{db_file}"))
    await store.open()
    await store.close()

    assert db_file.exists()

    reopened = PromptStore(Database(f"sqlite+aiosqlite:///{db_file}"))
    await reopened.open()
    assert await schema_version(reopened.database) == SCHEMA_VERSION
    await reopened.close()


async def test_ensure_schema_keeps_existing_rows(seeded_store):
    await seeded_store.set_rating("2", 4)
    await seeded_store.set_favorite("2", True)
    await seeded_store.toggle_history_active("3")
    prompts_before = await seeded_store.list_prompts()
    history_before = await seeded_store.list_history()

    assert await ensure_schema(seeded_store.database) == []
    assert await ensure_schema(seeded_store.database) == []

    assert await seeded_store.list_prompts() == prompts_before
    assert await seeded_store.list_history() == history_before
