"""Wallet dashboard - storage layer for wallets, transactions and bot settings."""

__version__ = "0.1.0"
