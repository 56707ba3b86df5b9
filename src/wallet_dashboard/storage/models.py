"""SQLAlchemy models for persistent storage.

This module defines the database schema for dashboard users, watched
wallets, incoming transactions, webhook configuration, bot settings
and the aggregate stats row.
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    TypeDecorator,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from wallet_dashboard.storage.entities import utcnow

if TYPE_CHECKING:
    from sqlalchemy.engine import Dialect


class UTCDateTime(TypeDecorator[datetime]):
    """Timezone-aware DateTime that always round-trips as UTC.

    SQLite stores no offset, so values are normalized to UTC on the way in
    and tagged as UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> Any:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("UTCDateTime requires timezone-aware datetimes")
        return value.astimezone(UTC)

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


# SQLite otherwise hands a deleted max id to the next insert.
_SQLITE_NO_ID_REUSE = {"sqlite_autoincrement": True}


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UserModel(Base):
    """Dashboard admin accounts."""

    __tablename__ = "users"
    __table_args__ = _SQLITE_NO_ID_REUSE

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)


class WalletModel(Base):
    """Wallet addresses watched for incoming payments."""

    __tablename__ = "wallets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Not unique: lookups by address take the first match.
    address: Mapped[str] = mapped_column(String(128), nullable=False)
    currency: Mapped[str] = mapped_column(String(16), nullable=False)
    network: Mapped[str] = mapped_column(String(32), nullable=False)
    discord_user_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)

    __table_args__ = (Index("idx_wallets_address", "address"), _SQLITE_NO_ID_REUSE)


class TransactionModel(Base):
    """Payments observed on watched wallets."""

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    transaction_id: Mapped[str] = mapped_column(String(128), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(30, 8), nullable=False)
    currency: Mapped[str] = mapped_column(String(16), nullable=False)
    network: Mapped[str] = mapped_column(String(32), nullable=False)
    confirmations: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    required_confirmations: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    # Plain reference; wallets can be deleted without touching their history.
    wallet_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'completed', 'failed')",
            name="ck_transactions_status",
        ),
        Index("idx_transactions_transaction_id", "transaction_id"),
        Index("idx_transactions_created_at", "created_at"),
        Index("idx_transactions_currency", "currency"),
        _SQLITE_NO_ID_REUSE,
    )


class WebhookConfigModel(Base):
    """Webhook target; readers use the first row."""

    __tablename__ = "webhook_configs"
    __table_args__ = _SQLITE_NO_ID_REUSE

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    notify_success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notify_pending: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notify_failed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notify_wallet: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)


class BotSettingsModel(Base):
    """Bot credentials and confirmation thresholds; readers use the first row."""

    __tablename__ = "bot_settings"
    __table_args__ = _SQLITE_NO_ID_REUSE

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token: Mapped[str] = mapped_column(Text, nullable=False)

    bitcoin_confirmations: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    ethereum_confirmations: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    litecoin_confirmations: Mapped[int] = mapped_column(Integer, nullable=False, default=6)
    erc20_confirmations: Mapped[int] = mapped_column(Integer, nullable=False, default=12)
    trc20_confirmations: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    bep20_confirmations: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    polygon_confirmations: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    solana_confirmations: Mapped[int] = mapped_column(Integer, nullable=False, default=32)

    discord_client_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    discord_client_secret: Mapped[str | None] = mapped_column(Text, nullable=True)
    discord_redirect_uri: Mapped[str | None] = mapped_column(Text, nullable=True)
    discord_guild_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    gitbook_api_key: Mapped[str | None] = mapped_column(Text, nullable=True)
    gitbook_space_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)


class StatsModel(Base):
    """Aggregate dashboard counters; readers use the first row."""

    __tablename__ = "stats"
    __table_args__ = _SQLITE_NO_ID_REUSE

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    total_transactions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_volume: Mapped[Decimal] = mapped_column(Numeric(30, 8), nullable=False, default=0)
    active_wallets: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    webhook_calls: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    transactions_growth: Mapped[str] = mapped_column(String(16), nullable=False, default="0%")
    volume_growth: Mapped[str] = mapped_column(String(16), nullable=False, default="0%")
    wallets_growth: Mapped[str] = mapped_column(String(16), nullable=False, default="0")
    webhooks_growth: Mapped[str] = mapped_column(String(16), nullable=False, default="0%")
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
