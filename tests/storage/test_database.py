"""Tests for engine and session handling."""

import pytest
from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from wallet_dashboard.storage.database import DatabaseManager, normalize_async_database_url


def test_sync_postgres_url_is_upgraded() -> None:
    assert (
        normalize_async_database_url("postgresql://u:p@db:5432/dash")
        == "postgresql+asyncpg://u:p@db:5432/dash"
    )
    assert normalize_async_database_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"


def test_manager_is_lazy() -> None:
    db = DatabaseManager("postgresql+asyncpg://u:p@unreachable.invalid/dash")
    assert db._engine is None


class TestDatabaseManager:
    @pytest.mark.asyncio
    async def test_memory_sqlite_shares_one_connection(self, db_manager: DatabaseManager) -> None:
        assert isinstance(db_manager.engine.pool, StaticPool)

        async with db_manager.get_async_session() as session:
            await session.execute(text("INSERT INTO users (username, password) VALUES ('a', 'b')"))

        async with db_manager.get_async_session() as session:
            count = (await session.execute(text("SELECT count(*) FROM users"))).scalar_one()

        assert count == 1

    @pytest.mark.asyncio
    async def test_error_rolls_back(self, db_manager: DatabaseManager) -> None:
        with pytest.raises(RuntimeError):
            async with db_manager.get_async_session() as session:
                await session.execute(text("INSERT INTO users (username, password) VALUES ('a', 'b')"))
                raise RuntimeError("boom")

        async with db_manager.get_async_session() as session:
            count = (await session.execute(text("SELECT count(*) FROM users"))).scalar_one()

        assert count == 0

    @pytest.mark.asyncio
    async def test_dispose_resets_engine(self, db_manager: DatabaseManager) -> None:
        first = db_manager.engine
        await db_manager.dispose_async()
        assert db_manager.engine is not first
