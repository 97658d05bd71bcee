"""
Database session management.
Provides the Database object owning the async SQLAlchemy engine, its session
factory and the open/close lifecycle.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _enable_transactional_ddl(engine: AsyncEngine) -> None:
    """
    Let SQLAlchemy, not the sqlite3 driver, decide where transactions begin.

    pysqlite only opens a transaction implicitly before DML, so ALTER TABLE
    would otherwise run in autocommit mode and could not be rolled back.
    """
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


class Database:
    """
    One embedded SQLite database behind a single connection.

    Units of work are serialized with an asyncio lock: operations may interleave
    between transactions but never inside one.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call open() first.")
        return self._engine

    def _ensure_parent_dir(self) -> None:
        # sqlite+aiosqlite:///relative/or/absolute/path.db
        _, _, path = self.url.partition(":///")
        if path and path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)

    async def open(self) -> None:
        """
        Create the engine and session factory.
        Calling open() on an already open database is a no-op.
        """
        if self._engine is not None:
            return

        self._ensure_parent_dir()
        engine = create_async_engine(
            self.url,
            echo=self.echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        _enable_transactional_ddl(engine)

        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info(f"Opened database {self.url}")

    async def close(self) -> None:
        """
        Dispose of the engine and release the connection.
        """
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info(f"Closed database {self.url}")

    def get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call open() first.")
        return self._session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Yield a session inside one transaction.

        Commits when the block exits normally, rolls back and re-raises otherwise.
        """
        session_factory = self.get_session_factory()
        async with self._lock:
            async with session_factory() as session:
                async with session.begin():
                    yield session

    @asynccontextmanager
    async def connection(self) -> AsyncIterator:
        """
        Yield a Core connection inside one transaction (used for DDL).
        """
        engine = self.engine
        async with self._lock:
            async with engine.begin() as conn:
                yield conn
