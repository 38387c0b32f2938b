"""
Engine and session handling for chartmerge.

Merges rely on SAVEPOINTs, so every SQLite engine built here has the
driver's own transaction handling switched off.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from ..settings import DatabaseDriver, Settings, settings
from ..utils.logger import logger


def enable_sqlite_savepoints(engine: AsyncEngine) -> AsyncEngine:
    """Make SAVEPOINT work on an aiosqlite engine.

    The sqlite3 driver opens transactions lazily on its own and silently
    commits around SAVEPOINT statements. Turning that off and emitting BEGIN
    from SQLAlchemy gives nested transactions real rollback-to semantics.
    Foreign keys are switched on for the same connections.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:  # noqa: ARG001
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    return engine


class DatabaseManager:
    """Lazily builds one async engine and session factory for a ``Settings``."""

    def __init__(self, config: Settings | None = None) -> None:
        self.config = config or settings
        self._async_engine: AsyncEngine | None = None
        self._async_session_factory: async_sessionmaker[AsyncSession] | None = None

    def _create_async_engine(self) -> AsyncEngine:
        url = self.config.async_database_url
        if self.config.database_driver == DatabaseDriver.SQLITE:
            engine = enable_sqlite_savepoints(
                create_async_engine(
                    url,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool if self.config.debug else None,
                    echo=self.config.debug,
                )
            )
        else:
            engine = create_async_engine(url, echo=self.config.debug, pool_size=5)

        logger.info(f"Database engine ready: {url}")
        return engine

    @property
    def async_engine(self) -> AsyncEngine:
        """Engine for the configured database, created on first access."""
        if self._async_engine is None:
            self._async_engine = self._create_async_engine()
        return self._async_engine

    @property
    def async_session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Session factory bound to ``async_engine``; sessions keep state after commit."""
        if self._async_session_factory is None:
            self._async_session_factory = async_sessionmaker(
                self.async_engine, class_=AsyncSession, expire_on_commit=False
            )
        return self._async_session_factory

    async def create_db_and_tables_async(self) -> None:
        """Create every chartmerge table that does not exist yet."""
        from .. import models  # noqa: F401

        async with self.async_engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info(f"Tables ready: {', '.join(sorted(SQLModel.metadata.tables))}")

    @asynccontextmanager
    async def get_async_session_context(self) -> AsyncGenerator[AsyncSession]:
        """Session that commits when the block exits and rolls back on a database error."""
        async with self.async_session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                logger.error(f"Database error: {e}")
                await session.rollback()
                raise

    async def close(self) -> None:
        """Dispose of the engine; the next access builds a fresh one."""
        if self._async_engine is not None:
            await self._async_engine.dispose()
            self._async_engine = None
            self._async_session_factory = None


db_manager = DatabaseManager()
