from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock

from sqlalchemy import select

from bot.hendlers.client.media import check_and_record_usage
from bot.hendlers.client.start import save_user
from bot.hendlers.client.subscription import activate_from_confirmation, purchasable_plan
from bot.middlewares import UserContextMiddleware
from bot.payments import PaymentConfirmation
from bot.subscription import UsageAction
from db import User


def _message(user_id: int = 1):
    return SimpleNamespace(from_user=SimpleNamespace(id=user_id), answer=AsyncMock())


async def test_usage_is_recorded_when_allowed(gate, subscriptions, ledger):
    message = _message()

    allowed = await check_and_record_usage(message, UsageAction.DAILY_GENERATIONS, "en", gate, subscriptions)

    assert allowed is True
    assert await ledger.get_today_usage(1, UsageAction.DAILY_GENERATIONS) == 1
    message.answer.assert_awaited_once()
    assert "3 generations left" in message.answer.await_args.args[0]


async def test_exhausted_quota_is_not_recorded(gate, subscriptions, ledger):
    message = _message()
    await gate.record_usage(1, UsageAction.IMAGE_GENERATIONS)

    allowed = await check_and_record_usage(message, UsageAction.IMAGE_GENERATIONS, "en", gate, subscriptions)

    assert allowed is False
    assert await ledger.get_today_usage(1, UsageAction.IMAGE_GENERATIONS) == 1
    assert "reached today's limit" in message.answer.await_args.args[0]


async def test_no_warning_for_unlimited_plans(gate, subscriptions):
    await subscriptions.create_subscription(1, "pro", "charge-1")
    message = _message()

    assert await check_and_record_usage(message, UsageAction.VOICE_ANALYSIS, "en", gate, subscriptions)
    message.answer.assert_not_awaited()


def test_only_paid_plans_are_purchasable():
    assert purchasable_plan("basic").id == "basic"
    assert purchasable_plan("free") is None
    assert purchasable_plan("enterprise") is None
    assert purchasable_plan(None) is None


async def test_payment_confirmation_activates_plan(subscriptions):
    confirmation = PaymentConfirmation(user_id=3, plan_id="premium", transaction_id="charge-3", total_amount=500)

    plan = await activate_from_confirmation(confirmation, subscriptions)

    assert plan.id == "premium"
    assert (await subscriptions.get_current_plan(3)).id == "premium"


async def test_payment_for_unknown_plan_is_not_activated(subscriptions):
    confirmation = PaymentConfirmation(user_id=3, plan_id="gold", transaction_id="charge-3", total_amount=500)

    assert await activate_from_confirmation(confirmation, subscriptions) is None
    assert await subscriptions.is_active(3) is False


async def test_save_user_creates_then_updates(session_factory):
    async with session_factory() as session:
        await save_user(session, 10, "alice", "Alice", "en")
        await session.commit()

    async with session_factory() as session:
        await save_user(session, 10, "alice_new", "Alice", "ru")
        await session.commit()

    async with session_factory() as session:
        users = (await session.scalars(select(User))).all()

    assert len(users) == 1
    assert users[0].username == "alice_new"
    assert users[0].language == "en"
    assert users[0].last_seen_at is not None


async def test_user_context_prefers_stored_language(session_factory):
    async with session_factory() as session:
        await save_user(session, 10, "alice", "Alice", "en")
        await session.commit()

    seen = {}

    async def handler(event, data):
        seen.update(data)

    event = SimpleNamespace(from_user=SimpleNamespace(id=10, language_code="ru"))
    async with session_factory() as session:
        await UserContextMiddleware()(handler, event, {"session": session})

    assert seen["language"] == "en"
    assert seen["user_profile"].telegram_id == 10


async def test_user_context_for_unknown_user(session_factory):
    seen = {}

    async def handler(event, data):
        seen.update(data)

    event = SimpleNamespace(from_user=SimpleNamespace(id=99, language_code="de"))
    async with session_factory() as session:
        await UserContextMiddleware()(handler, event, {"session": session})

    assert seen["language"] == "en"
    assert seen["user_profile"] is None
    assert seen["last_seen_at"] is None


async def test_user_context_passes_previous_visit_to_handlers(session_factory):
    previous_visit = datetime(2024, 1, 2, 3, 4, 5)
    async with session_factory() as session:
        user = await save_user(session, 10, "alice", "Alice", "en")
        user.last_seen_at = previous_visit
        await session.commit()

    seen = {}

    async def handler(event, data):
        seen.update(data)

    event = SimpleNamespace(from_user=SimpleNamespace(id=10, language_code="en"))
    async with session_factory() as session:
        await UserContextMiddleware()(handler, event, {"session": session})
        await session.commit()

    assert seen["last_seen_at"] == previous_visit
    assert seen["user_profile"].last_seen_at > previous_visit
