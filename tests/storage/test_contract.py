"""Behaviour every DashboardStorage backend must share.

The ``storage`` fixture runs each test against an empty in-memory store
and an empty SQLite-backed store.
"""

from __future__ import annotations

import dataclasses
from decimal import Decimal

import pytest

from wallet_dashboard.storage import fixtures
from wallet_dashboard.storage.base import DashboardStorage
from wallet_dashboard.storage.entities import (
    StatsDTO,
    TransactionDTO,
    UserDTO,
    WalletDTO,
    WebhookConfigDTO,
)


def _tx(transaction_id: str, **overrides) -> TransactionDTO:
    values = {
        "transaction_id": transaction_id,
        "amount": Decimal("1.5"),
        "currency": "ETH",
        "network": "ETH",
        "confirmations": 0,
        "required_confirmations": 15,
        "wallet_id": 1,
    }
    values.update(overrides)
    return TransactionDTO(**values)


def _wallet(address: str = "0xabc", **overrides) -> WalletDTO:
    values = {"name": "Main", "address": address, "currency": "ETH", "network": "ETH"}
    values.update(overrides)
    return WalletDTO(**values)


# ============================================================================
# Users
# ============================================================================


class TestUsers:
    @pytest.mark.asyncio
    async def test_create_and_lookup(self, storage: DashboardStorage) -> None:
        created = await storage.create_user(UserDTO(username="alice", password="pw", email="a@x.io"))

        assert created.id is not None
        assert await storage.get_user(created.id) == created
        assert await storage.get_user_by_username("alice") == created

    @pytest.mark.asyncio
    async def test_password_stored_as_given(self, storage: DashboardStorage) -> None:
        created = await storage.create_user(UserDTO(username="bob", password="plain-text"))
        fetched = await storage.get_user(created.id)
        assert fetched is not None
        assert fetched.password == "plain-text"

    @pytest.mark.asyncio
    async def test_missing_user(self, storage: DashboardStorage) -> None:
        assert await storage.get_user(999) is None
        assert await storage.get_user_by_username("nobody") is None

    @pytest.mark.asyncio
    async def test_username_match_is_exact(self, storage: DashboardStorage) -> None:
        await storage.create_user(UserDTO(username="Carol", password="pw"))
        assert await storage.get_user_by_username("carol") is None


# ============================================================================
# Wallets
# ============================================================================


class TestWallets:
    @pytest.mark.asyncio
    async def test_create_assigns_id_and_created_at(self, storage: DashboardStorage) -> None:
        wallet = await storage.create_wallet(_wallet())

        assert wallet.id is not None
        assert wallet.created_at is not None
        assert wallet.is_active is True

    @pytest.mark.asyncio
    async def test_ids_are_unique_and_not_reused_after_delete(self, storage: DashboardStorage) -> None:
        first = await storage.create_wallet(_wallet("a"))
        second = await storage.create_wallet(_wallet("b"))
        assert first.id != second.id

        assert await storage.delete_wallet(second.id) is True
        third = await storage.create_wallet(_wallet("c"))

        assert third.id not in (first.id, second.id)
        assert third.id > second.id

    @pytest.mark.asyncio
    async def test_list_in_insertion_order(self, storage: DashboardStorage) -> None:
        created = [await storage.create_wallet(_wallet(addr)) for addr in ("a", "b", "c")]
        assert await storage.get_wallets() == created

    @pytest.mark.asyncio
    async def test_get_by_address_returns_first_match(self, storage: DashboardStorage) -> None:
        first = await storage.create_wallet(_wallet("dup", name="First"))
        await storage.create_wallet(_wallet("dup", name="Second"))

        found = await storage.get_wallet_by_address("dup")
        assert found == first
        assert await storage.get_wallet_by_address("missing") is None

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, storage: DashboardStorage) -> None:
        wallet = await storage.create_wallet(_wallet(discord_user_id="42"))

        updated = await storage.update_wallet(wallet.id, {"is_active": False})

        assert updated == dataclasses.replace(wallet, is_active=False)
        assert await storage.get_wallet_by_id(wallet.id) == updated

    @pytest.mark.asyncio
    async def test_empty_update_returns_wallet_unchanged(self, storage: DashboardStorage) -> None:
        wallet = await storage.create_wallet(_wallet())
        assert await storage.update_wallet(wallet.id, {}) == wallet

    @pytest.mark.asyncio
    async def test_update_and_delete_missing(self, storage: DashboardStorage) -> None:
        assert await storage.get_wallet_by_id(404) is None
        assert await storage.update_wallet(404, {"name": "x"}) is None
        assert await storage.delete_wallet(404) is False

    @pytest.mark.asyncio
    async def test_delete_twice(self, storage: DashboardStorage) -> None:
        wallet = await storage.create_wallet(_wallet())
        assert await storage.delete_wallet(wallet.id) is True
        assert await storage.delete_wallet(wallet.id) is False
        assert await storage.get_wallet_by_id(wallet.id) is None

    @pytest.mark.asyncio
    async def test_update_rejects_managed_fields(self, storage: DashboardStorage) -> None:
        wallet = await storage.create_wallet(_wallet())
        with pytest.raises(ValueError, match="created_at"):
            await storage.update_wallet(wallet.id, {"created_at": None})
        with pytest.raises(ValueError, match="nickname"):
            await storage.update_wallet(wallet.id, {"nickname": "x"})


# ============================================================================
# Transactions
# ============================================================================


class TestTransactions:
    @pytest.mark.asyncio
    async def test_create_sets_timestamps_and_default_status(self, storage: DashboardStorage) -> None:
        tx = await storage.create_transaction(_tx("t1"))

        assert tx.id is not None
        assert tx.status == "pending"
        assert tx.created_at is not None
        assert tx.created_at == tx.updated_at

    @pytest.mark.asyncio
    async def test_listing_is_newest_first_with_pagination(self, storage: DashboardStorage) -> None:
        a = await storage.create_transaction(_tx("A"))
        b = await storage.create_transaction(_tx("B"))
        c = await storage.create_transaction(_tx("C"))
        assert a.created_at < b.created_at < c.created_at

        assert [t.transaction_id for t in await storage.get_transactions(limit=2, offset=0)] == ["C", "B"]
        assert [t.transaction_id for t in await storage.get_transactions(limit=2, offset=1)] == ["B", "A"]
        assert await storage.get_transactions(limit=2, offset=5) == []

    @pytest.mark.asyncio
    async def test_default_page(self, storage: DashboardStorage) -> None:
        for i in range(3):
            await storage.create_transaction(_tx(f"t{i}"))
        listed = await storage.get_transactions()
        assert [t.transaction_id for t in listed] == ["t2", "t1", "t0"]

    @pytest.mark.asyncio
    async def test_negative_paging_rejected(self, storage: DashboardStorage) -> None:
        with pytest.raises(ValueError):
            await storage.get_transactions(limit=-1)
        with pytest.raises(ValueError):
            await storage.get_transactions(offset=-1)

    @pytest.mark.asyncio
    async def test_lookup_by_ids(self, storage: DashboardStorage) -> None:
        tx = await storage.create_transaction(_tx("ext-1"))

        assert await storage.get_transaction_by_id(tx.id) == tx
        assert await storage.get_transaction_by_transaction_id("ext-1") == tx
        assert await storage.get_transaction_by_id(999) is None
        assert await storage.get_transaction_by_transaction_id("ext-404") is None

    @pytest.mark.asyncio
    async def test_update_refreshes_updated_at(self, storage: DashboardStorage) -> None:
        tx = await storage.create_transaction(_tx("t1"))

        updated = await storage.update_transaction(tx.id, {"confirmations": 15, "status": "completed"})

        assert updated is not None
        assert updated.confirmations == 15
        assert updated.status == "completed"
        assert updated.created_at == tx.created_at
        assert updated.updated_at > tx.updated_at
        assert updated.amount == tx.amount

    @pytest.mark.asyncio
    async def test_empty_update_only_touches_updated_at(self, storage: DashboardStorage) -> None:
        tx = await storage.create_transaction(_tx("t1"))

        updated = await storage.update_transaction(tx.id, {})

        assert updated is not None
        assert updated.updated_at > tx.updated_at
        assert updated == dataclasses.replace(tx, updated_at=updated.updated_at)

    @pytest.mark.asyncio
    async def test_update_missing_returns_none(self, storage: DashboardStorage) -> None:
        assert await storage.update_transaction(999, {"confirmations": 1}) is None

    @pytest.mark.asyncio
    async def test_unknown_status_rejected_even_for_missing_id(self, storage: DashboardStorage) -> None:
        with pytest.raises(ValueError, match="status"):
            await storage.update_transaction(999, {"status": "refunded"})

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_status(self, storage: DashboardStorage) -> None:
        tx = await storage.create_transaction(_tx("t1"))
        with pytest.raises(ValueError, match="status"):
            await storage.update_transaction(tx.id, {"status": "refunded"})

    @pytest.mark.asyncio
    async def test_count_is_unfiltered(self, storage: DashboardStorage) -> None:
        assert await storage.count_transactions() == 0
        await storage.create_transaction(_tx("t1", currency="BTC", network="BTC"))
        await storage.create_transaction(_tx("t2", status="failed"))
        assert await storage.count_transactions() == 2

    @pytest.mark.asyncio
    async def test_by_currency_is_exact(self, storage: DashboardStorage) -> None:
        btc = await storage.create_transaction(_tx("t1", currency="BTC", network="BTC"))
        await storage.create_transaction(_tx("t2", currency="ETH"))
        await storage.create_transaction(_tx("t3", currency="btc"))

        assert await storage.get_transactions_by_currency("BTC") == [btc]
        assert await storage.get_transactions_by_currency("DOGE") == []


# ============================================================================
# Singleton-by-convention kinds
# ============================================================================


class TestSingletons:
    @pytest.mark.asyncio
    async def test_empty_store_returns_none(self, storage: DashboardStorage) -> None:
        assert await storage.get_webhook_config() is None
        assert await storage.get_bot_settings() is None
        assert await storage.get_stats() is None

    @pytest.mark.asyncio
    async def test_webhook_config_first_row_wins(self, storage: DashboardStorage) -> None:
        first = await storage.create_webhook_config(fixtures.default_webhook_config())
        await storage.create_webhook_config(WebhookConfigDTO(url="https://example.com/second"))

        assert await storage.get_webhook_config() == first

    @pytest.mark.asyncio
    async def test_webhook_config_update(self, storage: DashboardStorage) -> None:
        config = await storage.create_webhook_config(fixtures.default_webhook_config())
        assert config.created_at == config.updated_at

        updated = await storage.update_webhook_config(config.id, {"notify_wallet": True})

        assert updated is not None
        assert updated.notify_wallet is True
        assert updated.url == config.url
        assert updated.updated_at > config.updated_at
        assert await storage.update_webhook_config(999, {"notify_wallet": True}) is None

    @pytest.mark.asyncio
    async def test_bot_settings_update(self, storage: DashboardStorage) -> None:
        settings = await storage.create_bot_settings(fixtures.default_bot_settings())

        updated = await storage.update_bot_settings(settings.id, {"solana_confirmations": 40})

        assert updated is not None
        assert updated.solana_confirmations == 40
        assert updated.token == settings.token
        assert updated.discord_guild_id == settings.discord_guild_id
        assert await storage.get_bot_settings() == updated
        assert await storage.update_bot_settings(999, {}) is None

    @pytest.mark.asyncio
    async def test_update_stats_never_creates(self, storage: DashboardStorage) -> None:
        assert await storage.update_stats({"active_wallets": 3}) is None
        assert await storage.increment_webhook_calls() is None
        assert await storage.get_stats() is None

    @pytest.mark.asyncio
    async def test_update_stats_partial(self, storage: DashboardStorage) -> None:
        stats = await storage.create_stats(fixtures.demo_stats())

        updated = await storage.update_stats({"active_wallets": 13, "wallets_growth": "3"})

        assert updated is not None
        assert updated.active_wallets == 13
        assert updated.wallets_growth == "3"
        assert updated.webhook_calls == stats.webhook_calls
        assert updated.updated_at > stats.updated_at

    @pytest.mark.asyncio
    async def test_increment_webhook_calls_twice(self, storage: DashboardStorage) -> None:
        stats = await storage.create_stats(StatsDTO(webhook_calls=2456))

        once = await storage.increment_webhook_calls()
        twice = await storage.increment_webhook_calls()

        assert once is not None and twice is not None
        assert once.webhook_calls == 2457
        assert twice.webhook_calls == 2458
        assert stats.updated_at < once.updated_at < twice.updated_at
        assert (await storage.get_stats()) == twice

    @pytest.mark.asyncio
    async def test_increment_targets_first_row(self, storage: DashboardStorage) -> None:
        await storage.create_stats(StatsDTO(webhook_calls=10))
        await storage.create_stats(StatsDTO(webhook_calls=500))

        result = await storage.increment_webhook_calls()

        assert result is not None
        assert result.webhook_calls == 11
