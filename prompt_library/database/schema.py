"""
Schema management for the prompt library database.

ensure_schema() is idempotent and runs on every startup. It creates missing
tables (upload_history before prompts), adds columns introduced after the
first release to an existing prompts table, backfills their defaults, and
stamps PRAGMA user_version. Everything happens in one transaction, so a
failure leaves the schema exactly as it was.
"""
import logging
import time
from typing import List, Set

from sqlalchemy import Column, inspect, update
from sqlalchemy.engine import Connection
from sqlalchemy.schema import CreateColumn

from prompt_library.core.exceptions import SchemaMigrationException
from prompt_library.core.logging import log_operation_complete, log_operation_error, log_operation_start
from prompt_library.database.base import Base
from prompt_library.database.models import Prompt, UploadHistory
from prompt_library.database.session import Database

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

# Columns added to prompts after the first release, in the order they were introduced
MIGRATED_PROMPT_COLUMNS = ("isActive", "historyId", "rating", "ratingCount", "isFavorite")

# Values written into rows that predate a column
_PROMPT_BACKFILLS = {
    "isActive": True,
    "rating": 0,
    "ratingCount": 0,
    "isFavorite": False,
}


def existing_columns(sync_conn: Connection, table_name: str) -> Set[str]:
    """
    Return the column names currently present on a table (empty if the table is missing).
    """
    inspector = inspect(sync_conn)
    if not inspector.has_table(table_name):
        return set()
    return {column["name"] for column in inspector.get_columns(table_name)}


def _add_column(sync_conn: Connection, column: Column) -> None:
    # DDL is rendered from the ORM definition: type, DEFAULT, NOT NULL and inline CHECK.
    # SQLite cannot add a REFERENCES clause here, so historyId arrives as a plain column.
    column_ddl = CreateColumn(column).compile(dialect=sync_conn.dialect)
    sync_conn.exec_driver_sql(f"ALTER TABLE {column.table.name} ADD COLUMN {column_ddl}")


def _backfill(sync_conn: Connection, added_columns: List[str]) -> None:
    table = Prompt.__table__
    columns_by_name = {column.name: column for column in table.columns}
    for name in added_columns:
        if name not in _PROMPT_BACKFILLS:
            continue
        column = columns_by_name[name]
        sync_conn.execute(
            update(table)
            .where(column.is_(None))
            .values({column: _PROMPT_BACKFILLS[name]})
        )


def _migrate(sync_conn: Connection) -> List[str]:
    Base.metadata.create_all(
        sync_conn,
        tables=[UploadHistory.__table__, Prompt.__table__],
        checkfirst=True,
    )

    present = existing_columns(sync_conn, Prompt.__tablename__)
    columns_by_name = {column.name: column for column in Prompt.__table__.columns}

    added: List[str] = []
    for name in MIGRATED_PROMPT_COLUMNS:
        if name not in present:
            _add_column(sync_conn, columns_by_name[name])
            added.append(name)

    _backfill(sync_conn, added)

    for index in Prompt.__table__.indexes:
        index.create(sync_conn, checkfirst=True)

    sync_conn.exec_driver_sql(f"PRAGMA user_version = {SCHEMA_VERSION}")
    return added


async def ensure_schema(database: Database) -> List[str]:
    """
    Create or migrate the schema.

    Args:
        database: Open database

    Returns:
        Names of the prompts columns added by this run (empty when up to date)

    Raises:
        SchemaMigrationException: If any step fails; nothing is left half-applied
    """
    operation = "ensure_schema"
    start_time = time.time()
    log_operation_start(
        logger=__name__,
        function="ensure_schema",
        operation=operation,
        context={"database_url": database.url, "target_version": SCHEMA_VERSION}
    )

    try:
        async with database.connection() as conn:
            added = await conn.run_sync(_migrate)
    except Exception as e:
        log_operation_error(
            logger=__name__,
            function="ensure_schema",
            operation=operation,
            error=e,
            message="Schema migration rolled back",
            context={"database_url": database.url}
        )
        raise SchemaMigrationException(str(e)) from e

    if added:
        logger.info(f"Added prompts columns: {', '.join(added)}")
    log_operation_complete(
        logger=__name__,
        function="ensure_schema",
        operation=operation,
        context={"added_columns": added, "schema_version": SCHEMA_VERSION},
        duration=time.time() - start_time
    )
    return added


async def schema_version(database: Database) -> int:
    """
    Read the schema version stamped by ensure_schema (0 for a fresh file).
    """
    async with database.connection() as conn:
        result = await conn.exec_driver_sql("PRAGMA user_version")
        return int(result.scalar() or 0)
