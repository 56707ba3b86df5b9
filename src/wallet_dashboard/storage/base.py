"""Storage contract shared by the in-memory and SQL backends.

Callers hold a ``DashboardStorage`` and never need to know which backend
they were given. Lookups that find nothing return ``None`` (``False`` for
deletes) instead of raising.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from wallet_dashboard.storage.entities import (
    BotSettingsDTO,
    StatsDTO,
    TransactionDTO,
    UserDTO,
    WalletDTO,
    WebhookConfigDTO,
)

DEFAULT_PAGE_SIZE = 50


def check_page(limit: int, offset: int) -> None:
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    if offset < 0:
        raise ValueError(f"offset must be >= 0, got {offset}")


class DashboardStorage(ABC):
    """Abstract CRUD contract for the wallet dashboard.

    Partial updates take a mapping of field name to new value. Fields not
    named keep their stored value; ``id``, ``created_at`` and ``updated_at``
    are managed by the store and rejected with ``ValueError``.

    Webhook config, bot settings and stats are singletons by convention:
    nothing stops a second row being created, and readers always take the
    first one (lowest id).
    """

    async def close(self) -> None:
        """Release backend resources. The default has nothing to release."""
        return None

    # Users

    @abstractmethod
    async def get_user(self, user_id: int) -> UserDTO | None:
        """Get a user by id."""

    @abstractmethod
    async def get_user_by_username(self, username: str) -> UserDTO | None:
        """Get a user by exact username."""

    @abstractmethod
    async def create_user(self, user: UserDTO) -> UserDTO:
        """Store a user as given and return it with its assigned id."""

    # Wallets

    @abstractmethod
    async def get_wallets(self) -> list[WalletDTO]:
        """List all wallets in insertion order."""

    @abstractmethod
    async def get_wallet_by_id(self, wallet_id: int) -> WalletDTO | None:
        """Get a wallet by id."""

    @abstractmethod
    async def get_wallet_by_address(self, address: str) -> WalletDTO | None:
        """Get the first wallet (in insertion order) with this address."""

    @abstractmethod
    async def create_wallet(self, wallet: WalletDTO) -> WalletDTO:
        """Store a wallet, assigning ``id`` and ``created_at``."""

    @abstractmethod
    async def update_wallet(self, wallet_id: int, changes: Mapping[str, Any]) -> WalletDTO | None:
        """Merge ``changes`` into a wallet.

        Returns:
            The updated wallet, or None if no wallet has this id.
        """

    @abstractmethod
    async def delete_wallet(self, wallet_id: int) -> bool:
        """Delete a wallet.

        Returns:
            True if deleted, False if not found.
        """

    # Transactions

    @abstractmethod
    async def get_transactions(
        self, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> list[TransactionDTO]:
        """List transactions, most recent first.

        Args:
            limit: Maximum number of transactions to return.
            offset: Number of transactions to skip.

        Returns:
            Transactions ordered by ``created_at`` descending; transactions
            created at the same instant keep insertion order.

        Raises:
            ValueError: If ``limit`` or ``offset`` is negative.
        """

    @abstractmethod
    async def get_transaction_by_id(self, transaction_pk: int) -> TransactionDTO | None:
        """Get a transaction by its storage id."""

    @abstractmethod
    async def get_transaction_by_transaction_id(self, transaction_id: str) -> TransactionDTO | None:
        """Get a transaction by its external correlation id."""

    @abstractmethod
    async def create_transaction(self, transaction: TransactionDTO) -> TransactionDTO:
        """Store a transaction; ``created_at`` and ``updated_at`` are both set to now."""

    @abstractmethod
    async def update_transaction(
        self, transaction_pk: int, changes: Mapping[str, Any]
    ) -> TransactionDTO | None:
        """Merge ``changes`` into a transaction and refresh ``updated_at``."""

    @abstractmethod
    async def count_transactions(self) -> int:
        """Count all stored transactions."""

    @abstractmethod
    async def get_transactions_by_currency(self, currency: str) -> list[TransactionDTO]:
        """List every transaction in ``currency`` (exact match), unpaginated."""

    # Webhook configuration

    @abstractmethod
    async def get_webhook_config(self) -> WebhookConfigDTO | None:
        """Get the current webhook configuration."""

    @abstractmethod
    async def create_webhook_config(self, config: WebhookConfigDTO) -> WebhookConfigDTO:
        """Store a webhook configuration."""

    @abstractmethod
    async def update_webhook_config(
        self, config_id: int, changes: Mapping[str, Any]
    ) -> WebhookConfigDTO | None:
        """Merge ``changes`` into a webhook configuration and refresh ``updated_at``."""

    # Bot settings

    @abstractmethod
    async def get_bot_settings(self) -> BotSettingsDTO | None:
        """Get the current bot settings."""

    @abstractmethod
    async def create_bot_settings(self, settings: BotSettingsDTO) -> BotSettingsDTO:
        """Store bot settings."""

    @abstractmethod
    async def update_bot_settings(
        self, settings_id: int, changes: Mapping[str, Any]
    ) -> BotSettingsDTO | None:
        """Merge ``changes`` into bot settings and refresh ``updated_at``."""

    # Stats

    @abstractmethod
    async def get_stats(self) -> StatsDTO | None:
        """Get the current stats row."""

    @abstractmethod
    async def create_stats(self, stats: StatsDTO) -> StatsDTO:
        """Store a stats row."""

    @abstractmethod
    async def update_stats(self, changes: Mapping[str, Any]) -> StatsDTO | None:
        """Merge ``changes`` into the current stats row.

        Returns None when there is no stats row; this never creates one.
        """

    @abstractmethod
    async def increment_webhook_calls(self) -> StatsDTO | None:
        """Add one to ``webhook_calls`` on the current stats row."""
