"""Database Connection and Session Management"""

import re
import ssl
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from billing_service.config import settings

# Base class for declarative models
Base = declarative_base()


def normalize_database_url(url: str) -> tuple[str, Dict[str, Any]]:
    """
    Convert a plain postgresql:// URL to the asyncpg dialect.

    asyncpg takes ssl=SSLContext rather than sslmode, so sslmode is stripped
    from the URL and turned into connect_args.
    """
    url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    connect_args: Dict[str, Any] = {}
    if re.search(r"[?&]sslmode=(require|required|verify-full)", url, re.I):
        ssl_ctx = ssl.create_default_context()
        ssl_ctx.check_hostname = False
        ssl_ctx.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ssl_ctx
        url = re.sub(r"[?&]sslmode=[^&]+", "", url, flags=re.I)
        url = re.sub(r"\?&", "?", url).rstrip("?")
    return url.replace("?&", "?"), connect_args


def _lock_sqlite_on_begin(engine: AsyncEngine) -> None:
    """
    Open SQLite transactions with BEGIN IMMEDIATE.

    SQLite ignores FOR UPDATE, and the driver defers BEGIN until the first
    write, so two read-then-write transactions could both act on the same
    snapshot. Taking the write lock at BEGIN serialises them instead.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """
    Process-scoped connection pool and session factory.

    Created once at startup (see the application lifespan) and disposed at
    shutdown. `pool_timeout` bounds how long a request waits for a
    connection before failing.
    """

    def __init__(self, url: str, **engine_kwargs: Any) -> None:
        url, connect_args = normalize_database_url(url)
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url,
            connect_args=connect_args,
            pool_pre_ping=True,
            **engine_kwargs,
        )
        if self.engine.dialect.name == "sqlite":
            _lock_sqlite_on_begin(self.engine)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, url: Optional[str] = None) -> "Database":
        return cls(
            url or settings.DATABASE_URL,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            echo=settings.DEBUG,
        )

    async def create_all(self) -> None:
        """Create tables (development and tests only - use Alembic in production)"""
        # Register models on the metadata
        from billing_service.models import Bill  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close pooled connections"""
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency yielding a session from the application's Database.

    Services own their commits; anything left open when the request
    fails is rolled back here.

    Example:
        ```python
        @router.get("/bills")
        async def list_bills(db: AsyncSession = Depends(get_db)):
            ...
        ```
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
