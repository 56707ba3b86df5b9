"""Repository pattern implementations for data access.

Each repository wraps one ``AsyncSession`` and issues a single statement
per call. Transaction boundaries belong to whoever owns the session.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from sqlalchemy import delete, select, update

from wallet_dashboard.storage.entities import (
    BotSettingsDTO,
    StatsDTO,
    TransactionDTO,
    UserDTO,
    WalletDTO,
    WebhookConfigDTO,
    check_changes,
    updatable_fields,
    utcnow,
)
from wallet_dashboard.storage.models import (
    Base,
    BotSettingsModel,
    StatsModel,
    TransactionModel,
    UserModel,
    WalletModel,
    WebhookConfigModel,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _insert_values(dto: object) -> dict[str, Any]:
    return {name: getattr(dto, name) for name in updatable_fields(type(dto))}


async def _update_returning(
    session: AsyncSession,
    model_cls: type[Base],
    criterion: sa.ColumnElement[bool],
    values: Mapping[str, Any],
) -> Any:
    result = await session.execute(
        update(model_cls).where(criterion).values(**values).returning(model_cls)
    )
    return result.scalar_one_or_none()


class UserRepository:
    """Repository for dashboard users."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, user_id: int) -> UserDTO | None:
        model = await self.session.get(UserModel, user_id)
        return UserDTO.from_model(model) if model else None

    async def get_by_username(self, username: str) -> UserDTO | None:
        result = await self.session.execute(
            select(UserModel).where(UserModel.username == username).order_by(UserModel.id).limit(1)
        )
        model = result.scalar_one_or_none()
        return UserDTO.from_model(model) if model else None

    async def insert(self, dto: UserDTO) -> UserDTO:
        model = UserModel(**_insert_values(dto))
        self.session.add(model)
        await self.session.flush()
        return UserDTO.from_model(model)


class WalletRepository:
    """Repository for watched wallets."""

    def __init__(self, session: AsyncSession, *, clock: Clock = utcnow) -> None:
        self.session = session
        self.clock = clock

    async def list_all(self) -> list[WalletDTO]:
        result = await self.session.execute(select(WalletModel).order_by(WalletModel.id))
        return [WalletDTO.from_model(m) for m in result.scalars().all()]

    async def get_by_id(self, wallet_id: int) -> WalletDTO | None:
        model = await self.session.get(WalletModel, wallet_id)
        return WalletDTO.from_model(model) if model else None

    async def get_by_address(self, address: str) -> WalletDTO | None:
        """Get the earliest wallet registered under ``address``."""
        result = await self.session.execute(
            select(WalletModel).where(WalletModel.address == address).order_by(WalletModel.id).limit(1)
        )
        model = result.scalar_one_or_none()
        return WalletDTO.from_model(model) if model else None

    async def insert(self, dto: WalletDTO) -> WalletDTO:
        model = WalletModel(**_insert_values(dto), created_at=self.clock())
        self.session.add(model)
        await self.session.flush()
        return WalletDTO.from_model(model)

    async def update(self, wallet_id: int, changes: Mapping[str, Any]) -> WalletDTO | None:
        values = check_changes(WalletDTO, changes)
        if not values:
            # Wallets carry no updated_at, so there is nothing to write.
            return await self.get_by_id(wallet_id)
        model = await _update_returning(self.session, WalletModel, WalletModel.id == wallet_id, values)
        return WalletDTO.from_model(model) if model else None

    async def delete(self, wallet_id: int) -> bool:
        """Delete a wallet.

        Returns:
            True if deleted, False if not found.
        """
        result = await self.session.execute(
            delete(WalletModel).where(WalletModel.id == wallet_id).returning(WalletModel.id)
        )
        return result.scalar_one_or_none() is not None


class TransactionRepository:
    """Repository for wallet transactions."""

    def __init__(self, session: AsyncSession, *, clock: Clock = utcnow) -> None:
        self.session = session
        self.clock = clock

    async def list_recent(self, *, limit: int = 50, offset: int = 0) -> list[TransactionDTO]:
        """List transactions newest first.

        Args:
            limit: Maximum number of rows.
            offset: Number of rows to skip.

        Returns:
            Transactions ordered by created_at descending, ties by id.
        """
        result = await self.session.execute(
            select(TransactionModel)
            .order_by(TransactionModel.created_at.desc(), TransactionModel.id.asc())
            .limit(limit)
            .offset(offset)
        )
        return [TransactionDTO.from_model(m) for m in result.scalars().all()]

    async def get_by_id(self, transaction_pk: int) -> TransactionDTO | None:
        model = await self.session.get(TransactionModel, transaction_pk)
        return TransactionDTO.from_model(model) if model else None

    async def get_by_transaction_id(self, transaction_id: str) -> TransactionDTO | None:
        result = await self.session.execute(
            select(TransactionModel)
            .where(TransactionModel.transaction_id == transaction_id)
            .order_by(TransactionModel.id)
            .limit(1)
        )
        model = result.scalar_one_or_none()
        return TransactionDTO.from_model(model) if model else None

    async def list_by_currency(self, currency: str) -> list[TransactionDTO]:
        result = await self.session.execute(
            select(TransactionModel)
            .where(TransactionModel.currency == currency)
            .order_by(TransactionModel.id)
        )
        return [TransactionDTO.from_model(m) for m in result.scalars().all()]

    async def count(self) -> int:
        result = await self.session.execute(select(sa.func.count()).select_from(TransactionModel))
        return int(result.scalar_one())

    async def insert(self, dto: TransactionDTO) -> TransactionDTO:
        now = self.clock()
        model = TransactionModel(**_insert_values(dto), created_at=now, updated_at=now)
        self.session.add(model)
        await self.session.flush()
        return TransactionDTO.from_model(model)

    async def update(self, transaction_pk: int, changes: Mapping[str, Any]) -> TransactionDTO | None:
        values = check_changes(TransactionDTO, changes)
        model = await _update_returning(
            self.session,
            TransactionModel,
            TransactionModel.id == transaction_pk,
            {**values, "updated_at": self.clock()},
        )
        return TransactionDTO.from_model(model) if model else None


class WebhookConfigRepository:
    """Repository for the webhook configuration (first row wins)."""

    def __init__(self, session: AsyncSession, *, clock: Clock = utcnow) -> None:
        self.session = session
        self.clock = clock

    async def get_current(self) -> WebhookConfigDTO | None:
        result = await self.session.execute(
            select(WebhookConfigModel).order_by(WebhookConfigModel.id).limit(1)
        )
        model = result.scalar_one_or_none()
        return WebhookConfigDTO.from_model(model) if model else None

    async def insert(self, dto: WebhookConfigDTO) -> WebhookConfigDTO:
        now = self.clock()
        model = WebhookConfigModel(**_insert_values(dto), created_at=now, updated_at=now)
        self.session.add(model)
        await self.session.flush()
        return WebhookConfigDTO.from_model(model)

    async def update(self, config_id: int, changes: Mapping[str, Any]) -> WebhookConfigDTO | None:
        values = check_changes(WebhookConfigDTO, changes)
        model = await _update_returning(
            self.session,
            WebhookConfigModel,
            WebhookConfigModel.id == config_id,
            {**values, "updated_at": self.clock()},
        )
        return WebhookConfigDTO.from_model(model) if model else None


class BotSettingsRepository:
    """Repository for bot settings (first row wins)."""

    def __init__(self, session: AsyncSession, *, clock: Clock = utcnow) -> None:
        self.session = session
        self.clock = clock

    async def get_current(self) -> BotSettingsDTO | None:
        result = await self.session.execute(
            select(BotSettingsModel).order_by(BotSettingsModel.id).limit(1)
        )
        model = result.scalar_one_or_none()
        return BotSettingsDTO.from_model(model) if model else None

    async def insert(self, dto: BotSettingsDTO) -> BotSettingsDTO:
        now = self.clock()
        model = BotSettingsModel(**_insert_values(dto), created_at=now, updated_at=now)
        self.session.add(model)
        await self.session.flush()
        return BotSettingsDTO.from_model(model)

    async def update(self, settings_id: int, changes: Mapping[str, Any]) -> BotSettingsDTO | None:
        values = check_changes(BotSettingsDTO, changes)
        model = await _update_returning(
            self.session,
            BotSettingsModel,
            BotSettingsModel.id == settings_id,
            {**values, "updated_at": self.clock()},
        )
        return BotSettingsDTO.from_model(model) if model else None


class StatsRepository:
    """Repository for the aggregate stats row (first row wins)."""

    def __init__(self, session: AsyncSession, *, clock: Clock = utcnow) -> None:
        self.session = session
        self.clock = clock

    @staticmethod
    def _first_row() -> sa.ColumnElement[bool]:
        return StatsModel.id == select(sa.func.min(StatsModel.id)).scalar_subquery()

    async def get_current(self) -> StatsDTO | None:
        result = await self.session.execute(select(StatsModel).order_by(StatsModel.id).limit(1))
        model = result.scalar_one_or_none()
        return StatsDTO.from_model(model) if model else None

    async def insert(self, dto: StatsDTO) -> StatsDTO:
        model = StatsModel(**_insert_values(dto), updated_at=self.clock())
        self.session.add(model)
        await self.session.flush()
        return StatsDTO.from_model(model)

    async def update_current(self, changes: Mapping[str, Any]) -> StatsDTO | None:
        """Merge ``changes`` into the first stats row; never creates one."""
        values = check_changes(StatsDTO, changes)
        model = await _update_returning(
            self.session, StatsModel, self._first_row(), {**values, "updated_at": self.clock()}
        )
        return StatsDTO.from_model(model) if model else None

    async def increment_webhook_calls(self) -> StatsDTO | None:
        """Add one to webhook_calls in place, without a read-then-write."""
        model = await _update_returning(
            self.session,
            StatsModel,
            self._first_row(),
            {"webhook_calls": StatsModel.webhook_calls + 1, "updated_at": self.clock()},
        )
        if model is None:
            logger.debug("No stats row to increment webhook calls on")
            return None
        return StatsDTO.from_model(model)
