from __future__ import annotations

from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from calshare.core.config import settings

# Seconds a SQLite writer waits on a locked database before giving up
SQLITE_BUSY_TIMEOUT = 30


def _serialize_sqlite_transactions(engine: AsyncEngine) -> None:
    """Open every SQLite transaction with ``BEGIN IMMEDIATE``.

    A unit of work then holds the write lock from its first read until it
    commits or rolls back, so the rows it checked cannot change before it writes.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(
    url: str | None = None,
    *,
    echo: bool | None = None,
    poolclass: Any = None,
) -> AsyncEngine:
    url = url or settings.DATABASE_URL
    kwargs: dict[str, Any] = {
        "echo": settings.DB_ECHO if echo is None else echo,
    }
    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": SQLITE_BUSY_TIMEOUT,
        }
    if poolclass is not None:
        kwargs["poolclass"] = poolclass

    engine = create_async_engine(url, **kwargs)
    if is_sqlite:
        _serialize_sqlite_transactions(engine)
    return engine


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine()
session_factory = build_session_factory(engine)


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create database tables in environments without migrations."""
    import calshare.models  # noqa: F401  registers the tables on SQLModel.metadata

    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
