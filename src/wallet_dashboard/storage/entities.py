"""Data transfer objects shared by every storage backend.

Each DTO mirrors one table in ``storage.models``. ``id`` and the
store-managed timestamps are ``None`` until the entity has been stored.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from wallet_dashboard.storage.models import (
        BotSettingsModel,
        StatsModel,
        TransactionModel,
        UserModel,
        WalletModel,
        WebhookConfigModel,
    )

TRANSACTION_STATUSES = ("pending", "completed", "failed")
DEFAULT_TRANSACTION_STATUS = "pending"

# Set by the store, never by callers.
MANAGED_FIELDS = frozenset({"id", "created_at", "updated_at"})

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(UTC)


def check_status(status: str) -> str:
    if status not in TRANSACTION_STATUSES:
        raise ValueError(f"Invalid transaction status {status!r}; expected one of {TRANSACTION_STATUSES}")
    return status


def updatable_fields(dto_type: type) -> frozenset[str]:
    """Names of the fields a caller may pass in a partial update."""
    return frozenset(f.name for f in dataclasses.fields(dto_type)) - MANAGED_FIELDS


def check_changes(dto_type: type, changes: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a partial update payload.

    Args:
        dto_type: DTO class the changes apply to.
        changes: Field name to new value.

    Returns:
        A plain dict copy of ``changes``.

    Raises:
        ValueError: If a key is unknown or store-managed, or a transaction
            status is not one of ``TRANSACTION_STATUSES``.
    """
    unknown = set(changes) - updatable_fields(dto_type)
    if unknown:
        raise ValueError(f"Cannot update {dto_type.__name__} fields: {', '.join(sorted(unknown))}")
    if "status" in changes and dto_type is TransactionDTO:
        check_status(changes["status"])
    return dict(changes)


def merge(entity: T, changes: Mapping[str, Any], **managed: Any) -> T:
    """Overlay ``changes`` (and store-managed values) onto a stored entity."""
    values = check_changes(type(entity), changes)
    return dataclasses.replace(entity, **values, **managed)  # type: ignore[type-var]


@dataclass(frozen=True)
class UserDTO:
    """Dashboard admin account."""

    username: str
    password: str
    email: str | None = None
    id: int | None = None

    @classmethod
    def from_model(cls, model: UserModel) -> UserDTO:
        return cls(
            id=model.id,
            username=model.username,
            password=model.password,
            email=model.email,
        )


@dataclass(frozen=True)
class WalletDTO:
    """Watched wallet address."""

    name: str
    address: str
    currency: str
    network: str
    discord_user_id: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    id: int | None = None

    @classmethod
    def from_model(cls, model: WalletModel) -> WalletDTO:
        return cls(
            id=model.id,
            name=model.name,
            address=model.address,
            currency=model.currency,
            network=model.network,
            discord_user_id=model.discord_user_id,
            is_active=model.is_active,
            created_at=model.created_at,
        )


@dataclass(frozen=True)
class TransactionDTO:
    """Incoming payment observed on a wallet."""

    transaction_id: str
    amount: Decimal
    currency: str
    network: str
    confirmations: int = 0
    required_confirmations: int = 1
    status: str = DEFAULT_TRANSACTION_STATUS
    wallet_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        check_status(self.status)

    @classmethod
    def from_model(cls, model: TransactionModel) -> TransactionDTO:
        return cls(
            id=model.id,
            transaction_id=model.transaction_id,
            amount=model.amount,
            currency=model.currency,
            network=model.network,
            confirmations=model.confirmations,
            required_confirmations=model.required_confirmations,
            status=model.status,
            wallet_id=model.wallet_id,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


@dataclass(frozen=True)
class WebhookConfigDTO:
    """Discord webhook target and which events it receives."""

    url: str
    notify_success: bool = True
    notify_pending: bool = True
    notify_failed: bool = True
    notify_wallet: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    id: int | None = None

    @classmethod
    def from_model(cls, model: WebhookConfigModel) -> WebhookConfigDTO:
        return cls(
            id=model.id,
            url=model.url,
            notify_success=model.notify_success,
            notify_pending=model.notify_pending,
            notify_failed=model.notify_failed,
            notify_wallet=model.notify_wallet,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


@dataclass(frozen=True)
class BotSettingsDTO:
    """Bot credentials and per-network confirmation thresholds."""

    token: str
    bitcoin_confirmations: int = 3
    ethereum_confirmations: int = 15
    litecoin_confirmations: int = 6
    erc20_confirmations: int = 12
    trc20_confirmations: int = 15
    bep20_confirmations: int = 10
    polygon_confirmations: int = 15
    solana_confirmations: int = 32
    discord_client_id: str | None = None
    discord_client_secret: str | None = None
    discord_redirect_uri: str | None = None
    discord_guild_id: str | None = None
    gitbook_api_key: str | None = None
    gitbook_space_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    id: int | None = None

    @classmethod
    def from_model(cls, model: BotSettingsModel) -> BotSettingsDTO:
        return cls(
            id=model.id,
            token=model.token,
            bitcoin_confirmations=model.bitcoin_confirmations,
            ethereum_confirmations=model.ethereum_confirmations,
            litecoin_confirmations=model.litecoin_confirmations,
            erc20_confirmations=model.erc20_confirmations,
            trc20_confirmations=model.trc20_confirmations,
            bep20_confirmations=model.bep20_confirmations,
            polygon_confirmations=model.polygon_confirmations,
            solana_confirmations=model.solana_confirmations,
            discord_client_id=model.discord_client_id,
            discord_client_secret=model.discord_client_secret,
            discord_redirect_uri=model.discord_redirect_uri,
            discord_guild_id=model.discord_guild_id,
            gitbook_api_key=model.gitbook_api_key,
            gitbook_space_id=model.gitbook_space_id,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


@dataclass(frozen=True)
class StatsDTO:
    """Dashboard counters and their growth labels."""

    total_transactions: int = 0
    total_volume: Decimal = Decimal("0")
    active_wallets: int = 0
    webhook_calls: int = 0
    transactions_growth: str = "0%"
    volume_growth: str = "0%"
    wallets_growth: str = "0"
    webhooks_growth: str = "0%"
    updated_at: datetime | None = None
    id: int | None = None

    @classmethod
    def from_model(cls, model: StatsModel) -> StatsDTO:
        return cls(
            id=model.id,
            total_transactions=model.total_transactions,
            total_volume=model.total_volume,
            active_wallets=model.active_wallets,
            webhook_calls=model.webhook_calls,
            transactions_growth=model.transactions_growth,
            volume_growth=model.volume_growth,
            wallets_growth=model.wallets_growth,
            webhooks_growth=model.webhooks_growth,
            updated_at=model.updated_at,
        )
