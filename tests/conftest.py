from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bot.subscription import (
    EntitlementGate,
    StoreError,
    SubscriptionService,
    SubscriptionStore,
    UsageLedger,
    UsageStore,
)
from db import Base


class FrozenClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2024, 5, 10, 12, 0, 0))


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest.fixture
def subscription_store(session_factory) -> SubscriptionStore:
    return SubscriptionStore(session_factory)


@pytest.fixture
def usage_store(session_factory) -> UsageStore:
    return UsageStore(session_factory)


@pytest.fixture
def subscriptions(subscription_store, clock) -> SubscriptionService:
    return SubscriptionService(subscription_store, clock=clock)


@pytest.fixture
def ledger(usage_store, clock) -> UsageLedger:
    return UsageLedger(usage_store, clock=clock)


@pytest.fixture
def gate(subscriptions, ledger) -> EntitlementGate:
    return EntitlementGate(subscriptions, ledger)


class UnavailableSubscriptionStore:
    async def get_active(self, user_id):
        raise StoreError("database is locked")

    async def list_for_user(self, user_id):
        raise StoreError("database is locked")

    async def insert(self, **kwargs):
        raise StoreError("database is locked")

    async def deactivate_active(self, user_id):
        raise StoreError("database is locked")

    async def deactivate_all(self, user_id):
        raise StoreError("database is locked")


class UnavailableUsageStore:
    async def find_since(self, user_id, action, since):
        raise StoreError("no such table: usage_stats")

    async def insert(self, user_id, action, count, created_at):
        raise StoreError("no such table: usage_stats")

    async def set_count(self, record_id, count):
        raise StoreError("no such table: usage_stats")


@pytest.fixture
def unavailable_subscription_store() -> UnavailableSubscriptionStore:
    return UnavailableSubscriptionStore()


@pytest.fixture
def unavailable_usage_store() -> UnavailableUsageStore:
    return UnavailableUsageStore()
