"""Typed async access to the ``subscriptions`` and ``usage_stats`` tables."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from db import Subscription, UsageStat

from .plans import UsageAction


class StoreError(Exception):
    """The persistent store could not be reached or rejected a query."""


@dataclass(frozen=True)
class UserSubscription:
    id: int
    user_id: int
    plan_id: str
    start_date: datetime
    end_date: datetime
    is_active: bool
    transaction_id: str
    created_at: Optional[datetime]


@dataclass(frozen=True)
class UsageRecord:
    id: int
    user_id: int
    action: str
    count: int
    created_at: datetime


def _to_subscription(row: Subscription) -> UserSubscription:
    return UserSubscription(
        id=row.id,
        user_id=row.user_id,
        plan_id=row.plan_id,
        start_date=row.start_date,
        end_date=row.end_date,
        is_active=bool(row.is_active),
        transaction_id=row.transaction_id,
        created_at=row.created_at,
    )


def _to_usage(row: UsageStat) -> UsageRecord:
    return UsageRecord(
        id=row.id,
        user_id=row.user_id,
        action=row.action_type,
        count=row.count or 0,
        created_at=row.created_at,
    )


class SubscriptionStore:
    """Subscription rows. Rows are never deleted, only deactivated."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_active(self, user_id: int) -> Optional[UserSubscription]:
        stmt = (
            select(Subscription)
            .where(Subscription.user_id == user_id, Subscription.is_active.is_(True))
            .order_by(Subscription.start_date.desc(), Subscription.id.desc())
            .limit(1)
        )
        try:
            async with self._session_factory() as session:
                row = await session.scalar(stmt)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load active subscription for user {user_id}: {e}") from e
        return _to_subscription(row) if row is not None else None

    async def list_for_user(self, user_id: int) -> List[UserSubscription]:
        stmt = (
            select(Subscription)
            .where(Subscription.user_id == user_id)
            .order_by(Subscription.start_date, Subscription.id)
        )
        try:
            async with self._session_factory() as session:
                rows = (await session.scalars(stmt)).all()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list subscriptions for user {user_id}: {e}") from e
        return [_to_subscription(row) for row in rows]

    async def insert(
        self,
        *,
        user_id: int,
        plan_id: str,
        start_date: datetime,
        end_date: datetime,
        transaction_id: str,
        created_at: datetime,
    ) -> UserSubscription:
        row = Subscription(
            user_id=user_id,
            plan_id=plan_id,
            start_date=start_date,
            end_date=end_date,
            is_active=True,
            transaction_id=transaction_id,
            created_at=created_at,
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(row)
                    await session.flush()
                    result = _to_subscription(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to insert subscription for user {user_id}: {e}") from e
        return result

    async def deactivate_active(self, user_id: int) -> int:
        return await self._deactivate(
            user_id,
            Subscription.user_id == user_id,
            Subscription.is_active.is_(True),
        )

    async def deactivate_all(self, user_id: int) -> int:
        return await self._deactivate(user_id, Subscription.user_id == user_id)

    async def _deactivate(self, user_id: int, *criteria) -> int:
        stmt = update(Subscription).where(*criteria).values(is_active=False)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to deactivate subscriptions for user {user_id}: {e}") from e
        return result.rowcount or 0


class UsageStore:
    """Daily usage counters."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_since(
        self,
        user_id: int,
        action: UsageAction,
        since: datetime,
    ) -> List[UsageRecord]:
        stmt = (
            select(UsageStat)
            .where(
                UsageStat.user_id == user_id,
                UsageStat.action_type == action.value,
                UsageStat.created_at >= since,
            )
            .order_by(UsageStat.created_at, UsageStat.id)
        )
        try:
            async with self._session_factory() as session:
                rows = (await session.scalars(stmt)).all()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read usage of {action.value} for user {user_id}: {e}") from e
        return [_to_usage(row) for row in rows]

    async def insert(
        self,
        user_id: int,
        action: UsageAction,
        count: int,
        created_at: datetime,
    ) -> UsageRecord:
        row = UsageStat(
            user_id=user_id,
            action_type=action.value,
            count=count,
            created_at=created_at,
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(row)
                    await session.flush()
                    result = _to_usage(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to insert usage of {action.value} for user {user_id}: {e}") from e
        return result

    async def set_count(self, record_id: int, count: int) -> None:
        stmt = update(UsageStat).where(UsageStat.id == record_id).values(count=count)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to update usage row {record_id}: {e}") from e
