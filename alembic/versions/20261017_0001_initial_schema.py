"""Initial schema: users, wallets, transactions, webhook configs, bot settings, stats.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17 00:00:00.000000+00:00
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(*, created: bool = True) -> list[sa.Column]:
    columns = [sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)]
    if created:
        columns.insert(0, sa.Column("created_at", sa.DateTime(timezone=True), nullable=False))
    return columns


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("password", sa.Text(), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "wallets",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("address", sa.String(128), nullable=False),
        sa.Column("currency", sa.String(16), nullable=False),
        sa.Column("network", sa.String(32), nullable=False),
        sa.Column("discord_user_id", sa.String(32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("idx_wallets_address", "wallets", ["address"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("transaction_id", sa.String(128), nullable=False),
        sa.Column("amount", sa.Numeric(30, 8), nullable=False),
        sa.Column("currency", sa.String(16), nullable=False),
        sa.Column("network", sa.String(32), nullable=False),
        sa.Column("confirmations", sa.Integer(), nullable=False),
        sa.Column("required_confirmations", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("wallet_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('pending', 'completed', 'failed')", name="ck_transactions_status"
        ),
        sqlite_autoincrement=True,
    )
    op.create_index("idx_transactions_transaction_id", "transactions", ["transaction_id"])
    op.create_index("idx_transactions_created_at", "transactions", ["created_at"])
    op.create_index("idx_transactions_currency", "transactions", ["currency"])

    op.create_table(
        "webhook_configs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("notify_success", sa.Boolean(), nullable=False),
        sa.Column("notify_pending", sa.Boolean(), nullable=False),
        sa.Column("notify_failed", sa.Boolean(), nullable=False),
        sa.Column("notify_wallet", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "bot_settings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("token", sa.Text(), nullable=False),
        sa.Column("bitcoin_confirmations", sa.Integer(), nullable=False),
        sa.Column("ethereum_confirmations", sa.Integer(), nullable=False),
        sa.Column("litecoin_confirmations", sa.Integer(), nullable=False),
        sa.Column("erc20_confirmations", sa.Integer(), nullable=False),
        sa.Column("trc20_confirmations", sa.Integer(), nullable=False),
        sa.Column("bep20_confirmations", sa.Integer(), nullable=False),
        sa.Column("polygon_confirmations", sa.Integer(), nullable=False),
        sa.Column("solana_confirmations", sa.Integer(), nullable=False),
        sa.Column("discord_client_id", sa.String(32), nullable=True),
        sa.Column("discord_client_secret", sa.Text(), nullable=True),
        sa.Column("discord_redirect_uri", sa.Text(), nullable=True),
        sa.Column("discord_guild_id", sa.String(32), nullable=True),
        sa.Column("gitbook_api_key", sa.Text(), nullable=True),
        sa.Column("gitbook_space_id", sa.String(64), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "stats",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("total_transactions", sa.Integer(), nullable=False),
        sa.Column("total_volume", sa.Numeric(30, 8), nullable=False),
        sa.Column("active_wallets", sa.Integer(), nullable=False),
        sa.Column("webhook_calls", sa.Integer(), nullable=False),
        sa.Column("transactions_growth", sa.String(16), nullable=False),
        sa.Column("volume_growth", sa.String(16), nullable=False),
        sa.Column("wallets_growth", sa.String(16), nullable=False),
        sa.Column("webhooks_growth", sa.String(16), nullable=False),
        *_timestamps(created=False),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )


def downgrade() -> None:
    op.drop_table("stats")
    op.drop_table("bot_settings")
    op.drop_table("webhook_configs")
    op.drop_index("idx_transactions_currency", table_name="transactions")
    op.drop_index("idx_transactions_created_at", table_name="transactions")
    op.drop_index("idx_transactions_transaction_id", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("idx_wallets_address", table_name="wallets")
    op.drop_table("wallets")
    op.drop_table("users")
