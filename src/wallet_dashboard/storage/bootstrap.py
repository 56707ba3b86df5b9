"""Storage startup: pick a backend, seed it on first run.

``get_storage`` prefers the SQL backend and falls back to in-memory
storage when no database is configured or the database cannot be
reached. Callers receive a ``DashboardStorage`` either way.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from wallet_dashboard.config import Settings, get_settings
from wallet_dashboard.storage import fixtures
from wallet_dashboard.storage.base import DashboardStorage
from wallet_dashboard.storage.database import DatabaseManager
from wallet_dashboard.storage.memory import InMemoryStorage
from wallet_dashboard.storage.sql import SqlStorage

logger = logging.getLogger(__name__)


async def initialize_database(
    storage: DashboardStorage, settings: Settings | None = None
) -> DashboardStorage:
    """Seed ``storage`` unless it already holds bot settings.

    Inserts whichever of the admin user, zeroed stats and default webhook
    config are missing, then the default bot settings. Bot settings are
    written last, so a seed interrupted part-way is completed on the next
    start without duplicating the rows it already wrote.

    Args:
        storage: Storage to seed.
        settings: Source of the admin credentials; defaults to ``get_settings()``.

    Returns:
        The same storage instance.
    """
    if await storage.get_bot_settings() is not None:
        logger.info("Database already initialized, skipping seed data")
        return storage

    settings = settings or get_settings()
    logger.info("Initializing database with seed data...")

    # Each step checks for its own row so a partial earlier seed is completed.
    if await storage.get_user_by_username(settings.admin.username) is None:
        await storage.create_user(
            fixtures.admin_user(
                username=settings.admin.username,
                password=settings.admin.password.get_secret_value(),
                email=settings.admin.email,
            )
        )
    if await storage.get_stats() is None:
        await storage.create_stats(fixtures.zeroed_stats())
    if await storage.get_webhook_config() is None:
        await storage.create_webhook_config(fixtures.default_webhook_config())
    await storage.create_bot_settings(fixtures.default_bot_settings())

    logger.info("Database initialization complete")
    return storage


async def get_storage(settings: Settings | None = None) -> DashboardStorage:
    """Build the storage backend for this process.

    Args:
        settings: Application settings; defaults to ``get_settings()``.

    Returns:
        A seeded ``SqlStorage``, or a fresh ``InMemoryStorage`` when the
        database is not configured or unreachable.
    """
    settings = settings or get_settings()
    if not settings.database.url:
        logger.warning("DATABASE_URL is not set, using in-memory storage")
        return InMemoryStorage()

    db = DatabaseManager(
        settings.database.url,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        echo=settings.database.echo,
    )
    try:
        if settings.database.create_schema:
            await db.init_schema_async()
        return await initialize_database(SqlStorage(db), settings)
    except (SQLAlchemyError, OSError):
        logger.exception("Failed to initialize database")
        await db.dispose_async()
        logger.warning("Falling back to in-memory storage")
        return InMemoryStorage()
