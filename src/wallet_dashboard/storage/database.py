"""Engine and session plumbing for the SQL backend.

``DatabaseManager`` owns one async engine per database URL and hands out
short-lived sessions; ``SqlStorage`` opens one per storage call.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from wallet_dashboard.storage.models import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

_SYNC_POSTGRES_PREFIX = "postgresql://"
_ASYNC_POSTGRES_PREFIX = "postgresql+asyncpg://"


def normalize_async_database_url(database_url: str) -> str:
    """Swap a plain ``postgresql://`` URL onto the asyncpg driver."""
    if not database_url.startswith(_SYNC_POSTGRES_PREFIX):
        return database_url
    logger.warning("DATABASE_URL has no async driver, switching to %s", _ASYNC_POSTGRES_PREFIX)
    return _ASYNC_POSTGRES_PREFIX + database_url[len(_SYNC_POSTGRES_PREFIX) :]


def _is_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite")


def _is_sqlite_memory(database_url: str) -> bool:
    return _is_sqlite(database_url) and (
        database_url.endswith(":memory:") or database_url.rstrip("/").endswith("sqlite+aiosqlite:")
    )


def create_async_db_engine(database_url: str, **kwargs: Any) -> AsyncEngine:
    """Build an ``AsyncEngine``; ``kwargs`` go straight to ``create_async_engine``."""
    return create_async_engine(normalize_async_database_url(database_url), **kwargs)


def create_async_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # DTOs are built after commit, so attributes must stay loaded.
    return async_sessionmaker(bind=engine, expire_on_commit=False)


async def init_async_db(engine: AsyncEngine) -> None:
    """Create any of the dashboard tables that are missing.

    Existing tables are left alone; schema changes go through Alembic.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Dashboard schema ready")


class DatabaseManager:
    """Lazily built async engine plus a session factory bound to it.

    Nothing connects until the first session or schema call, so a manager
    pointed at an unreachable host can be constructed safely and only
    fails inside ``get_storage``'s guarded block.

    Args:
        database_url: ``postgresql+asyncpg://`` or ``sqlite+aiosqlite://`` URL.
        pool_size: Pooled connections kept open (PostgreSQL only).
        max_overflow: Extra connections allowed above ``pool_size`` (PostgreSQL only).
        echo: Log every emitted statement.
    """

    def __init__(
        self,
        database_url: str,
        *,
        pool_size: int = 5,
        max_overflow: int = 10,
        echo: bool = False,
    ) -> None:
        self.database_url = database_url
        self._pool_size = pool_size
        self._max_overflow = max_overflow
        self._echo = echo

        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    def _engine_options(self) -> dict[str, Any]:
        if _is_sqlite_memory(self.database_url):
            # Every session must see the same in-memory database.
            return {
                "echo": self._echo,
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        if _is_sqlite(self.database_url):
            return {"echo": self._echo}
        return {
            "echo": self._echo,
            "pool_size": self._pool_size,
            "max_overflow": self._max_overflow,
            "pool_pre_ping": True,
        }

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_db_engine(self.database_url, **self._engine_options())
        return self._engine

    @asynccontextmanager
    async def get_async_session(self) -> AsyncIterator[AsyncSession]:
        """Open a session that commits on clean exit and rolls back on error.

        Yields:
            A fresh ``AsyncSession``, closed when the block ends.
        """
        if self._sessions is None:
            self._sessions = create_async_session_factory(self.engine)

        session = self._sessions()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def init_schema_async(self) -> None:
        await init_async_db(self.engine)

    async def dispose_async(self) -> None:
        """Close pooled connections; the next call builds a new engine."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessions = None
        logger.info("Closed database connections for %s", _display_url(self.database_url))


def _display_url(database_url: str) -> str:
    # Drop credentials; keep driver, host and database name.
    scheme, sep, rest = database_url.partition("://")
    if not sep:
        return database_url
    return f"{scheme}://{rest.rpartition('@')[2]}"
