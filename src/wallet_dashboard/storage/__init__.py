"""Storage layer - storage contract, backends and bootstrap."""

from wallet_dashboard.storage.base import DashboardStorage
from wallet_dashboard.storage.bootstrap import get_storage, initialize_database
from wallet_dashboard.storage.database import (
    DatabaseManager,
    create_async_db_engine,
    create_async_session_factory,
    init_async_db,
)
from wallet_dashboard.storage.entities import (
    BotSettingsDTO,
    StatsDTO,
    TransactionDTO,
    UserDTO,
    WalletDTO,
    WebhookConfigDTO,
)
from wallet_dashboard.storage.memory import InMemoryStorage
from wallet_dashboard.storage.models import Base
from wallet_dashboard.storage.sql import SqlStorage

__all__ = [
    "Base",
    "BotSettingsDTO",
    "DashboardStorage",
    "DatabaseManager",
    "InMemoryStorage",
    "SqlStorage",
    "StatsDTO",
    "TransactionDTO",
    "UserDTO",
    "WalletDTO",
    "WebhookConfigDTO",
    "create_async_db_engine",
    "create_async_session_factory",
    "get_storage",
    "init_async_db",
    "initialize_database",
]
