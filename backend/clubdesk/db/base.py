"""
Engine, session factory and the per-request session dependency.

Ledger postings and approval steps rely on SAVEPOINTs, so every engine built
here goes through ``enable_sqlite_savepoints``; PostgreSQL needs nothing extra.
"""
from typing import AsyncIterator

from sqlalchemy import MetaData, event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from clubdesk.core.config import settings

NAMING_CONVENTION = {
    "pk": "%(table_name)s_pkey",
    "fk": "%(table_name)s_%(column_0_name)s_fkey",
    "uq": "%(table_name)s_%(column_0_N_name)s_key",
    "ix": "%(table_name)s_%(column_0_N_name)s_idx",
    "ck": "%(table_name)s_%(constraint_name)s_check",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """
    Make SAVEPOINT work on aiosqlite.

    pysqlite opens transactions lazily and commits around DDL, which breaks
    nested transactions. Turn that off and issue BEGIN from SQLAlchemy's
    own ``begin`` event instead. Other dialects are left alone.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _autocommit_driver(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str, **options) -> AsyncEngine:
    options.setdefault("echo", settings.SQL_ECHO)
    engine = create_async_engine(url, **options)
    enable_sqlite_savepoints(engine)
    return engine


def session_factory(bind: AsyncEngine) -> async_sessionmaker:
    # objects stay readable after commit; routes serialize them afterwards
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL)
async_session_maker = session_factory(engine)


async def get_db() -> AsyncIterator[AsyncSession]:
    """One session per request, committed when the route returns normally."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create any missing tables."""
    import clubdesk.models  # noqa: F401  registers every table on the metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
