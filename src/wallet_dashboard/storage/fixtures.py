"""Demo and seed payloads.

The in-memory store loads the demo set on construction and the SQL
bootstrap seeds the same webhook and bot settings shape, so dashboards
look alike on either backend.
"""

from __future__ import annotations

from decimal import Decimal

from wallet_dashboard.storage.entities import (
    BotSettingsDTO,
    StatsDTO,
    TransactionDTO,
    UserDTO,
    WalletDTO,
    WebhookConfigDTO,
)

DEMO_DISCORD_USER_ID = "219521086801625344"


def demo_stats() -> StatsDTO:
    return StatsDTO(
        total_transactions=156,
        total_volume=Decimal("5.8"),
        active_wallets=12,
        webhook_calls=2456,
        transactions_growth="12%",
        volume_growth="8%",
        wallets_growth="2",
        webhooks_growth="18%",
    )


def zeroed_stats() -> StatsDTO:
    return StatsDTO()


def demo_wallets() -> list[WalletDTO]:
    """One wallet per supported currency/network pairing, ids 1-5 in order."""
    rows = [
        ("Bitcoin Wallet", "bc1q9h5ywrfltzwlj7n96xadxtm49nuark4v5xgx0h", "BTC", "BTC"),
        ("Ethereum Wallet", "0x742d35Cc6634C0532925a3b844Bc454e4438f44e", "ETH", "ETH"),
        ("USDT Wallet (ERC20)", "0x8f2242bF7C2834Cb730087E59b026Af3e986FD04", "USDT", "ERC20"),
        ("USDC Wallet (Solana)", "5TfvgRXRr5ksXtfo1tFeqUGJX9sUGP1qdP7Yb7TjSQ1V", "USDC", "Solana"),
        ("USDT Wallet (TRC20)", "TUQjA8kHZRGb7BKKe5P6BDFfy1ZQaSQQWG", "USDT", "TRC20"),
    ]
    return [
        WalletDTO(
            name=name,
            address=address,
            currency=currency,
            network=network,
            discord_user_id=DEMO_DISCORD_USER_ID,
            is_active=True,
        )
        for name, address, currency, network in rows
    ]


def demo_transactions() -> list[TransactionDTO]:
    """Transactions referencing the ``demo_wallets`` ids."""
    # (transaction_id, amount, currency, network, confirmations, required, status, wallet_id)
    rows = [
        ("txn_1KbH7ZmQ8X5p9L", "0.0458", "BTC", "BTC", 6, 3, "completed", 1),
        ("txn_8JhT9PqR3K7L2M", "1.25", "ETH", "ETH", 8, 15, "pending", 2),
        ("txn_5GtY7ZmQ8X5p9L", "0.0128", "BTC", "BTC", 0, 3, "failed", 1),
        ("txn_ERC20_USDT_123", "500.00", "USDT", "ERC20", 15, 12, "completed", 3),
        ("txn_SOL_USDC_456", "250.00", "USDC", "Solana", 25, 32, "pending", 4),
        ("txn_TRC20_USDT_789", "1000.00", "USDT", "TRC20", 19, 15, "completed", 5),
    ]
    return [
        TransactionDTO(
            transaction_id=txid,
            amount=Decimal(amount),
            currency=currency,
            network=network,
            confirmations=confirmations,
            required_confirmations=required,
            status=status,
            wallet_id=wallet_id,
        )
        for txid, amount, currency, network, confirmations, required, status, wallet_id in rows
    ]


def default_webhook_config() -> WebhookConfigDTO:
    return WebhookConfigDTO(
        url="https://discord.com/api/webhooks/1234567890/abcdefghijklmnopqrstuvwxyz",
        notify_success=True,
        notify_pending=True,
        notify_failed=True,
        notify_wallet=False,
    )


def default_bot_settings() -> BotSettingsDTO:
    """Placeholder credentials; real values are entered through the dashboard."""
    return BotSettingsDTO(
        token="discord_bot_token_placeholder",
        bitcoin_confirmations=3,
        ethereum_confirmations=15,
        litecoin_confirmations=6,
        erc20_confirmations=12,
        trc20_confirmations=15,
        bep20_confirmations=10,
        polygon_confirmations=15,
        solana_confirmations=32,
        discord_client_id="123456789012345678",
        discord_client_secret="client_secret_placeholder",
        discord_redirect_uri="https://crypto-dashboard.replit.app/auth/discord/callback",
        discord_guild_id="987654321098765432",
        gitbook_api_key="gitbook_api_key_placeholder",
        gitbook_space_id="space_123456",
    )


def admin_user(
    username: str = "admin", password: str = "admin", email: str | None = "admin@example.com"
) -> UserDTO:
    return UserDTO(username=username, password=password, email=email)
