"""
Database connection management.

Provides the async SQLAlchemy engine and session factory used by the
worker, the services and the retriever.

Dependencies: sqlalchemy, dreamcore.configs
System role: Database connection lifecycle management
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from dreamcore.boundary.db.base import Base
from dreamcore.configs import get_settings
from dreamcore.configs.database import DatabaseSettings


def _enable_sqlite_write_locking(engine: AsyncEngine) -> None:
    """
    Make SQLite transactions take the write lock on BEGIN.

    pysqlite defers BEGIN until the first write, so two sessions that both
    read then write deadlock on "database is locked". Issuing BEGIN IMMEDIATE
    serializes writers instead, which the conditional job claim relies on.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def get_async_engine(db_config: DatabaseSettings | None = None) -> AsyncEngine:
    """
    Create async SQLAlchemy engine with connection pooling.

    pool_pre_ping=True verifies connections before use to detect
    stale/broken connections early. SQLite URLs get a busy timeout and
    immediate-mode transactions instead of pool sizing.

    Args:
        db_config: Database settings (defaults to application settings)

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Raises:
        ArgumentError: If database URL is invalid or engine creation fails

    Usage:
        engine = get_async_engine()
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    db_config = db_config or get_settings().database

    if db_config.is_sqlite:
        engine = create_async_engine(
            db_config.async_database_url,
            echo=db_config.echo_sql,
            connect_args={"timeout": db_config.pool_timeout},
        )
        _enable_sqlite_write_locking(engine)
        return engine

    return create_async_engine(
        db_config.async_database_url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


def get_async_session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker:
    """
    Create async session factory for database operations.

    Returns fresh async_sessionmaker bound to engine with autocommit=False and
    autoflush=False for explicit transaction control and predictable behavior.

    Args:
        engine: Engine to bind (a new one is created from settings if omitted)

    Returns:
        async_sessionmaker: Async session factory configured for manual transaction control

    Usage:
        SessionFactory = get_async_session_factory()
        async with SessionFactory() as session:
            session.add(obj)
            await session.commit()
    """
    engine = engine or get_async_engine()
    return async_sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """
    Create all tables registered on Base.metadata that do not exist yet.

    Args:
        engine: Target async engine
    """
    # Import models so they register with the metadata
    import dreamcore.boundary.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
