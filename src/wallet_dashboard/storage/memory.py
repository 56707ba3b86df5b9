"""In-memory storage backend.

Data lives in per-kind dicts keyed by id and is lost when the process
exits. Used for local development, tests, and as the fallback when the
database cannot be reached at startup.
"""

from __future__ import annotations

import dataclasses
import itertools
import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, Generic, TypeVar

from wallet_dashboard.storage import fixtures
from wallet_dashboard.storage.base import DEFAULT_PAGE_SIZE, DashboardStorage, check_page
from wallet_dashboard.storage.entities import (
    BotSettingsDTO,
    StatsDTO,
    TransactionDTO,
    UserDTO,
    WalletDTO,
    WebhookConfigDTO,
    check_changes,
    merge,
    utcnow,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Table(Generic[T]):
    """Rows of one entity kind plus an id counter that never goes backwards."""

    def __init__(self) -> None:
        self.rows: dict[int, T] = {}
        self._ids = itertools.count(1)

    def insert(self, entity: T, **managed: Any) -> T:
        stored = dataclasses.replace(entity, id=next(self._ids), **managed)  # type: ignore[type-var]
        self.rows[stored.id] = stored  # type: ignore[attr-defined]
        return stored

    def first(self) -> T | None:
        # dicts keep insertion order and ids only grow, so this is the lowest id.
        return next(iter(self.rows.values()), None)

    def find(self, predicate: Callable[[T], bool]) -> T | None:
        return next((row for row in self.rows.values() if predicate(row)), None)

    def save(self, entity: T) -> T:
        self.rows[entity.id] = entity  # type: ignore[attr-defined]
        return entity


class InMemoryStorage(DashboardStorage):
    """Dict-backed implementation of ``DashboardStorage``.

    Args:
        seed: Load the demo fixture (wallets, transactions, stats, webhook
            config and bot settings) on construction.
        clock: Source of timestamps for created_at / updated_at.
    """

    def __init__(self, *, seed: bool = True, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._users: _Table[UserDTO] = _Table()
        self._wallets: _Table[WalletDTO] = _Table()
        self._transactions: _Table[TransactionDTO] = _Table()
        self._webhook_configs: _Table[WebhookConfigDTO] = _Table()
        self._bot_settings: _Table[BotSettingsDTO] = _Table()
        self._stats: _Table[StatsDTO] = _Table()

        if seed:
            self._load_demo_data()

    def _load_demo_data(self) -> None:
        self._stats.insert(fixtures.demo_stats(), updated_at=self._clock())
        for wallet in fixtures.demo_wallets():
            self._wallets.insert(wallet, created_at=self._clock())
        for transaction in fixtures.demo_transactions():
            now = self._clock()
            self._transactions.insert(transaction, created_at=now, updated_at=now)
        now = self._clock()
        self._webhook_configs.insert(fixtures.default_webhook_config(), created_at=now, updated_at=now)
        now = self._clock()
        self._bot_settings.insert(fixtures.default_bot_settings(), created_at=now, updated_at=now)
        logger.info(
            "In-memory storage seeded with %d wallets and %d transactions",
            len(self._wallets.rows),
            len(self._transactions.rows),
        )

    # Users

    async def get_user(self, user_id: int) -> UserDTO | None:
        return self._users.rows.get(user_id)

    async def get_user_by_username(self, username: str) -> UserDTO | None:
        return self._users.find(lambda user: user.username == username)

    async def create_user(self, user: UserDTO) -> UserDTO:
        return self._users.insert(user)

    # Wallets

    async def get_wallets(self) -> list[WalletDTO]:
        return list(self._wallets.rows.values())

    async def get_wallet_by_id(self, wallet_id: int) -> WalletDTO | None:
        return self._wallets.rows.get(wallet_id)

    async def get_wallet_by_address(self, address: str) -> WalletDTO | None:
        return self._wallets.find(lambda wallet: wallet.address == address)

    async def create_wallet(self, wallet: WalletDTO) -> WalletDTO:
        return self._wallets.insert(wallet, created_at=self._clock())

    async def update_wallet(self, wallet_id: int, changes: Mapping[str, Any]) -> WalletDTO | None:
        wallet = self._wallets.rows.get(wallet_id)
        if wallet is None:
            check_changes(WalletDTO, changes)
            return None
        return self._wallets.save(merge(wallet, changes))

    async def delete_wallet(self, wallet_id: int) -> bool:
        return self._wallets.rows.pop(wallet_id, None) is not None

    # Transactions

    async def get_transactions(
        self, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> list[TransactionDTO]:
        check_page(limit, offset)
        # sorted() is stable, so equal timestamps keep insertion order even reversed.
        newest_first = sorted(
            self._transactions.rows.values(), key=lambda tx: tx.created_at, reverse=True
        )
        return newest_first[offset : offset + limit]

    async def get_transaction_by_id(self, transaction_pk: int) -> TransactionDTO | None:
        return self._transactions.rows.get(transaction_pk)

    async def get_transaction_by_transaction_id(self, transaction_id: str) -> TransactionDTO | None:
        return self._transactions.find(lambda tx: tx.transaction_id == transaction_id)

    async def create_transaction(self, transaction: TransactionDTO) -> TransactionDTO:
        now = self._clock()
        return self._transactions.insert(transaction, created_at=now, updated_at=now)

    async def update_transaction(
        self, transaction_pk: int, changes: Mapping[str, Any]
    ) -> TransactionDTO | None:
        return self._update_timestamped(self._transactions, TransactionDTO, transaction_pk, changes)

    async def count_transactions(self) -> int:
        return len(self._transactions.rows)

    async def get_transactions_by_currency(self, currency: str) -> list[TransactionDTO]:
        return [tx for tx in self._transactions.rows.values() if tx.currency == currency]

    # Webhook configuration

    async def get_webhook_config(self) -> WebhookConfigDTO | None:
        return self._webhook_configs.first()

    async def create_webhook_config(self, config: WebhookConfigDTO) -> WebhookConfigDTO:
        now = self._clock()
        return self._webhook_configs.insert(config, created_at=now, updated_at=now)

    async def update_webhook_config(
        self, config_id: int, changes: Mapping[str, Any]
    ) -> WebhookConfigDTO | None:
        return self._update_timestamped(self._webhook_configs, WebhookConfigDTO, config_id, changes)

    # Bot settings

    async def get_bot_settings(self) -> BotSettingsDTO | None:
        return self._bot_settings.first()

    async def create_bot_settings(self, settings: BotSettingsDTO) -> BotSettingsDTO:
        now = self._clock()
        return self._bot_settings.insert(settings, created_at=now, updated_at=now)

    async def update_bot_settings(
        self, settings_id: int, changes: Mapping[str, Any]
    ) -> BotSettingsDTO | None:
        return self._update_timestamped(self._bot_settings, BotSettingsDTO, settings_id, changes)

    # Stats

    async def get_stats(self) -> StatsDTO | None:
        return self._stats.first()

    async def create_stats(self, stats: StatsDTO) -> StatsDTO:
        return self._stats.insert(stats, updated_at=self._clock())

    async def update_stats(self, changes: Mapping[str, Any]) -> StatsDTO | None:
        stats = self._stats.first()
        if stats is None:
            check_changes(StatsDTO, changes)
            return None
        return self._stats.save(merge(stats, changes, updated_at=self._clock()))

    async def increment_webhook_calls(self) -> StatsDTO | None:
        stats = self._stats.first()
        if stats is None:
            return None
        return self._stats.save(
            dataclasses.replace(stats, webhook_calls=stats.webhook_calls + 1, updated_at=self._clock())
        )

    def _update_timestamped(
        self, table: _Table[T], dto_type: type[T], row_id: int, changes: Mapping[str, Any]
    ) -> T | None:
        current = table.rows.get(row_id)
        if current is None:
            check_changes(dto_type, changes)
            return None
        return table.save(merge(current, changes, updated_at=self._clock()))
