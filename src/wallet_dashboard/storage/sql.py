"""SQL storage backend.

Every call opens one session from the ``DatabaseManager``, runs a single
repository statement and commits. Constraint violations (for example a
duplicate username) propagate to the caller as SQLAlchemy errors.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

from wallet_dashboard.storage.base import DEFAULT_PAGE_SIZE, DashboardStorage, check_page
from wallet_dashboard.storage.entities import (
    BotSettingsDTO,
    StatsDTO,
    TransactionDTO,
    UserDTO,
    WalletDTO,
    WebhookConfigDTO,
    utcnow,
)
from wallet_dashboard.storage.repos import (
    BotSettingsRepository,
    StatsRepository,
    TransactionRepository,
    UserRepository,
    WalletRepository,
    WebhookConfigRepository,
)

if TYPE_CHECKING:
    from wallet_dashboard.storage.database import DatabaseManager

logger = logging.getLogger(__name__)


class SqlStorage(DashboardStorage):
    """``DashboardStorage`` backed by SQLAlchemy's async engine."""

    def __init__(self, db: DatabaseManager, *, clock: Callable[[], datetime] = utcnow) -> None:
        self.db = db
        self._clock = clock

    async def close(self) -> None:
        await self.db.dispose_async()

    # Users

    async def get_user(self, user_id: int) -> UserDTO | None:
        async with self.db.get_async_session() as session:
            return await UserRepository(session).get_by_id(user_id)

    async def get_user_by_username(self, username: str) -> UserDTO | None:
        async with self.db.get_async_session() as session:
            return await UserRepository(session).get_by_username(username)

    async def create_user(self, user: UserDTO) -> UserDTO:
        async with self.db.get_async_session() as session:
            created = await UserRepository(session).insert(user)
        logger.debug("Created user %s (id=%s)", created.username, created.id)
        return created

    # Wallets

    async def get_wallets(self) -> list[WalletDTO]:
        async with self.db.get_async_session() as session:
            return await WalletRepository(session).list_all()

    async def get_wallet_by_id(self, wallet_id: int) -> WalletDTO | None:
        async with self.db.get_async_session() as session:
            return await WalletRepository(session).get_by_id(wallet_id)

    async def get_wallet_by_address(self, address: str) -> WalletDTO | None:
        async with self.db.get_async_session() as session:
            return await WalletRepository(session).get_by_address(address)

    async def create_wallet(self, wallet: WalletDTO) -> WalletDTO:
        async with self.db.get_async_session() as session:
            return await WalletRepository(session, clock=self._clock).insert(wallet)

    async def update_wallet(self, wallet_id: int, changes: Mapping[str, Any]) -> WalletDTO | None:
        async with self.db.get_async_session() as session:
            return await WalletRepository(session, clock=self._clock).update(wallet_id, changes)

    async def delete_wallet(self, wallet_id: int) -> bool:
        async with self.db.get_async_session() as session:
            deleted = await WalletRepository(session).delete(wallet_id)
        logger.debug("Delete wallet id=%s: %s", wallet_id, "removed" if deleted else "not found")
        return deleted

    # Transactions

    async def get_transactions(
        self, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> list[TransactionDTO]:
        check_page(limit, offset)
        async with self.db.get_async_session() as session:
            return await TransactionRepository(session).list_recent(limit=limit, offset=offset)

    async def get_transaction_by_id(self, transaction_pk: int) -> TransactionDTO | None:
        async with self.db.get_async_session() as session:
            return await TransactionRepository(session).get_by_id(transaction_pk)

    async def get_transaction_by_transaction_id(self, transaction_id: str) -> TransactionDTO | None:
        async with self.db.get_async_session() as session:
            return await TransactionRepository(session).get_by_transaction_id(transaction_id)

    async def create_transaction(self, transaction: TransactionDTO) -> TransactionDTO:
        async with self.db.get_async_session() as session:
            return await TransactionRepository(session, clock=self._clock).insert(transaction)

    async def update_transaction(
        self, transaction_pk: int, changes: Mapping[str, Any]
    ) -> TransactionDTO | None:
        async with self.db.get_async_session() as session:
            return await TransactionRepository(session, clock=self._clock).update(
                transaction_pk, changes
            )

    async def count_transactions(self) -> int:
        async with self.db.get_async_session() as session:
            return await TransactionRepository(session).count()

    async def get_transactions_by_currency(self, currency: str) -> list[TransactionDTO]:
        async with self.db.get_async_session() as session:
            return await TransactionRepository(session).list_by_currency(currency)

    # Webhook configuration

    async def get_webhook_config(self) -> WebhookConfigDTO | None:
        async with self.db.get_async_session() as session:
            return await WebhookConfigRepository(session).get_current()

    async def create_webhook_config(self, config: WebhookConfigDTO) -> WebhookConfigDTO:
        async with self.db.get_async_session() as session:
            return await WebhookConfigRepository(session, clock=self._clock).insert(config)

    async def update_webhook_config(
        self, config_id: int, changes: Mapping[str, Any]
    ) -> WebhookConfigDTO | None:
        async with self.db.get_async_session() as session:
            return await WebhookConfigRepository(session, clock=self._clock).update(config_id, changes)

    # Bot settings

    async def get_bot_settings(self) -> BotSettingsDTO | None:
        async with self.db.get_async_session() as session:
            return await BotSettingsRepository(session).get_current()

    async def create_bot_settings(self, settings: BotSettingsDTO) -> BotSettingsDTO:
        async with self.db.get_async_session() as session:
            return await BotSettingsRepository(session, clock=self._clock).insert(settings)

    async def update_bot_settings(
        self, settings_id: int, changes: Mapping[str, Any]
    ) -> BotSettingsDTO | None:
        async with self.db.get_async_session() as session:
            return await BotSettingsRepository(session, clock=self._clock).update(settings_id, changes)

    # Stats

    async def get_stats(self) -> StatsDTO | None:
        async with self.db.get_async_session() as session:
            return await StatsRepository(session).get_current()

    async def create_stats(self, stats: StatsDTO) -> StatsDTO:
        async with self.db.get_async_session() as session:
            return await StatsRepository(session, clock=self._clock).insert(stats)

    async def update_stats(self, changes: Mapping[str, Any]) -> StatsDTO | None:
        async with self.db.get_async_session() as session:
            return await StatsRepository(session, clock=self._clock).update_current(changes)

    async def increment_webhook_calls(self) -> StatsDTO | None:
        async with self.db.get_async_session() as session:
            return await StatsRepository(session, clock=self._clock).increment_webhook_calls()
