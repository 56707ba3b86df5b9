"""Pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta

import pytest

from wallet_dashboard.storage.base import DashboardStorage
from wallet_dashboard.storage.database import DatabaseManager
from wallet_dashboard.storage.memory import InMemoryStorage
from wallet_dashboard.storage.sql import SqlStorage

SQLITE_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


class TickingClock:
    """Deterministic clock: every call is one step later than the previous one."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)) -> None:
        self.now = start or datetime(2026, 1, 1, tzinfo=UTC)
        self.step = step

    def __call__(self) -> datetime:
        self.now += self.step
        return self.now


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
async def db_manager() -> AsyncIterator[DatabaseManager]:
    """DatabaseManager on a fresh in-memory SQLite database with the schema created."""
    db = DatabaseManager(SQLITE_MEMORY_URL)
    await db.init_schema_async()
    yield db
    await db.dispose_async()


@pytest.fixture
def sql_storage(db_manager: DatabaseManager, clock: TickingClock) -> SqlStorage:
    return SqlStorage(db_manager, clock=clock)


@pytest.fixture
def seeded_memory_storage(clock: TickingClock) -> InMemoryStorage:
    return InMemoryStorage(clock=clock)


@pytest.fixture(params=["memory", "sql"])
async def storage(request: pytest.FixtureRequest, clock: TickingClock) -> AsyncIterator[DashboardStorage]:
    """An empty store, once per backend."""
    if request.param == "memory":
        yield InMemoryStorage(seed=False, clock=clock)
        return

    db = DatabaseManager(SQLITE_MEMORY_URL)
    await db.init_schema_async()
    yield SqlStorage(db, clock=clock)
    await db.dispose_async()
