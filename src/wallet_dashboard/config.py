"""Settings for the wallet dashboard, read from the environment and ``.env``.

``DATABASE_URL`` picks the SQL backend; leaving it unset runs on the
in-memory store. ``ADMIN_*`` feeds the account created on first run.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url

_ENV_FILE = ".env"
_ENV_FILE_ENCODING = "utf-8"

_SUPPORTED_URL_PREFIXES = ("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")


class DatabaseSettings(BaseSettings):
    """Where the SQL backend lives and how its pool is sized."""

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description="Database connection string; in-memory storage is used when unset",
    )
    echo: bool = Field(
        default=False,
        alias="DATABASE_ECHO",
        description="Log every SQL statement",
    )
    pool_size: int = Field(
        default=5,
        alias="DATABASE_POOL_SIZE",
        description="Connection pool size (PostgreSQL only)",
        ge=1,
    )
    max_overflow: int = Field(
        default=10,
        alias="DATABASE_MAX_OVERFLOW",
        description="Connections allowed beyond pool_size (PostgreSQL only)",
        ge=0,
    )
    create_schema: bool = Field(
        default=True,
        alias="DATABASE_CREATE_SCHEMA",
        description="Create missing tables at startup",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Only async-capable PostgreSQL and SQLite URLs are accepted."""
        if v is None:
            return v
        if not v.startswith(_SUPPORTED_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL or sqlite+aiosqlite connection string"
            )
        return v


class AdminSettings(BaseSettings):
    """Credentials for the admin user created on first run."""

    model_config = SettingsConfigDict(env_prefix="ADMIN_", extra="ignore")

    username: str = Field(
        default="admin",
        alias="ADMIN_USERNAME",
        description="Username of the seeded admin account",
        min_length=1,
    )
    password: SecretStr = Field(
        default=SecretStr("admin"),
        alias="ADMIN_PASSWORD",
        description="Password of the seeded admin account",
    )
    email: str | None = Field(
        default="admin@example.com",
        alias="ADMIN_EMAIL",
        description="Email of the seeded admin account",
    )


class Settings(BaseSettings):
    """Top-level settings object handed to bootstrap and the CLI.

    Each nested section reads its own variables from the environment and
    the ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding=_ENV_FILE_ENCODING,
        extra="ignore",
    )

    database: DatabaseSettings = Field(
        default_factory=lambda: DatabaseSettings(
            _env_file=_ENV_FILE,
            _env_file_encoding=_ENV_FILE_ENCODING,
        )
    )
    admin: AdminSettings = Field(
        default_factory=lambda: AdminSettings(
            _env_file=_ENV_FILE,
            _env_file_encoding=_ENV_FILE_ENCODING,
        )
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )

    def get_logging_level(self) -> int:
        """``log_level`` as the ``logging`` module constant."""
        level: int = getattr(logging, self.log_level)
        return level

    def redacted_summary(self) -> dict[str, str | dict[str, str]]:
        """Settings as printable strings, safe to show an operator.

        Returns:
            Nested dict with the database password and admin password masked.
        """
        return {
            "database": {
                "url": self._redact_url(self.database.url) if self.database.url else "(not set)",
                "echo": str(self.database.echo),
                "pool_size": str(self.database.pool_size),
                "max_overflow": str(self.database.max_overflow),
                "create_schema": str(self.database.create_schema),
            },
            "admin": {
                "username": self.admin.username,
                "password": "(set)" if self.admin.password.get_secret_value() else "(not set)",
                "email": self.admin.email or "(not set)",
            },
            "log_level": self.log_level,
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        # Keep the user name, mask only the password.
        return make_url(url).render_as_string(hide_password=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, parsed on first call.

    Raises:
        ValidationError: If a variable is set to an invalid value.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next ``get_settings`` re-reads the environment."""
    get_settings.cache_clear()
