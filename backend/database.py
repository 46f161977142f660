"""Database engine and session management."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

    from backend.config import Settings

# Execution option read by the SQLite begin hook: "IMMEDIATE" takes the write
# lock up front so two writers cannot deadlock upgrading their read locks.
SQLITE_BEGIN_MODE = "sqlite_begin_mode"


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINTs nest inside it.

    The sqlite3 driver otherwise defers BEGIN until the first write, and a
    released outermost savepoint commits the whole transaction. File
    databases are switched to WAL so readers do not block a committing
    writer.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Connection) -> None:
        # A COMMIT that failed with SQLITE_BUSY leaves the driver transaction open
        if conn.connection.driver_connection.in_transaction:
            conn.exec_driver_sql("ROLLBACK")
        mode = conn.get_execution_options().get(SQLITE_BEGIN_MODE)
        conn.exec_driver_sql(f"BEGIN {mode}" if mode else "BEGIN")


async def begin_write(session: AsyncSession) -> None:
    """Start the session's transaction holding the database write lock.

    Must be called before the session runs any statement in the
    transaction. Other backends ignore the option.
    """
    await session.connection(execution_options={SQLITE_BEGIN_MODE: "IMMEDIATE"})


def create_engine(
    settings: Settings,
) -> tuple[
    AsyncEngine,
    async_sessionmaker[AsyncSession],
]:
    """Create async engine and session factory.

    Server databases get a capped connection pool shared by the whole process;
    SQLite keeps SQLAlchemy's default pool.

    Returns (engine, session_factory) tuple.
    """
    engine_kwargs: dict[str, Any] = {"echo": settings.debug}
    is_sqlite = settings.database_url.startswith("sqlite")
    if not is_sqlite:
        engine_kwargs["pool_size"] = settings.db_pool_size
        engine_kwargs["max_overflow"] = settings.db_max_overflow
        engine_kwargs["pool_pre_ping"] = True
    engine = create_async_engine(settings.database_url, **engine_kwargs)
    if is_sqlite:
        _enable_sqlite_savepoints(engine)
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return engine, session_factory
