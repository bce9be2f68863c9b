"""Subscription lifecycle helpers."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from logging_config import register_log_translations

from .plans import FREE_PLAN, PlanDefinition, get_plan
from .store import StoreError, SubscriptionStore, UserSubscription

logger = logging.getLogger(__name__)

register_log_translations(
    {
        "Error getting user subscription: %s": {
            "ru": "Ошибка при получении подписки пользователя: %s",
        },
        "Subscription of user %s expired at %s": {
            "ru": "Подписка пользователя %s истекла %s",
        },
        "Subscription deactivated: user=%s": {
            "ru": "Подписка деактивирована: пользователь=%s",
        },
        "Error deactivating subscription: %s": {
            "ru": "Ошибка при деактивации подписки: %s",
        },
        "Error deactivating all subscriptions: %s": {
            "ru": "Ошибка при деактивации всех подписок: %s",
        },
        "Plan not found: %s": {
            "ru": "План не найден: %s",
        },
        "Plan %s is not purchasable": {
            "ru": "План %s нельзя купить",
        },
        "Error creating subscription: %s": {
            "ru": "Ошибка при создании подписки: %s",
        },
        "Subscription created: user=%s, plan=%s, transaction=%s": {
            "ru": "Подписка создана: пользователь=%s, план=%s, транзакция=%s",
        },
        "Active subscription of user %s references unknown plan %s": {
            "ru": "Активная подписка пользователя %s ссылается на неизвестный план %s",
        },
    }
)

Clock = Callable[[], datetime]


class SubscriptionService:
    """Creates, expires and resolves user subscriptions.

    At most one row per user is active at a time. This is maintained here and
    not by the store: a purchase deactivates every previous row of the user
    before inserting the new one, and expired rows are deactivated lazily
    whenever they are read through :meth:`is_active` or
    :meth:`get_current_plan`.

    Store failures never propagate. Reads fall back to "no subscription"
    (free plan) and :meth:`create_subscription` reports ``False``.
    """

    def __init__(self, store: SubscriptionStore, *, clock: Clock = datetime.now) -> None:
        self._store = store
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    async def get_active_subscription(self, user_id: int) -> Optional[UserSubscription]:
        try:
            return await self._store.get_active(user_id)
        except StoreError as e:
            logger.error("Error getting user subscription: %s", e)
            return None

    async def get_current_subscription(self, user_id: int) -> Optional[UserSubscription]:
        """Return the active subscription only if it has not expired yet."""
        subscription = await self.get_active_subscription(user_id)
        if subscription is None:
            return None
        if self._is_expired(subscription, self.now()):
            logger.info("Subscription of user %s expired at %s", user_id, subscription.end_date)
            await self._deactivate(user_id)
            return None
        return subscription if subscription.is_active else None

    async def is_active(self, user_id: int) -> bool:
        return await self.get_current_subscription(user_id) is not None

    async def get_current_plan(self, user_id: int) -> PlanDefinition:
        subscription = await self.get_current_subscription(user_id)
        return self.resolve_plan(subscription)

    def resolve_plan(self, subscription: Optional[UserSubscription]) -> PlanDefinition:
        if subscription is None or not subscription.is_active:
            return FREE_PLAN
        plan = get_plan(subscription.plan_id)
        if plan is None:
            logger.warning(
                "Active subscription of user %s references unknown plan %s",
                subscription.user_id,
                subscription.plan_id,
            )
            return FREE_PLAN
        return plan

    async def create_subscription(self, user_id: int, plan_id: str, transaction_id: str) -> bool:
        plan = get_plan(plan_id)
        if plan is None:
            logger.error("Plan not found: %s", plan_id)
            return False
        if plan.is_free:
            logger.error("Plan %s is not purchasable", plan.id)
            return False

        if not await self._deactivate_all(user_id):
            return False

        start_date = self.now()
        end_date = start_date + timedelta(days=plan.duration_days)
        try:
            await self._store.insert(
                user_id=user_id,
                plan_id=plan.id,
                start_date=start_date,
                end_date=end_date,
                transaction_id=transaction_id or "",
                created_at=start_date,
            )
        except StoreError as e:
            logger.error("Error creating subscription: %s", e)
            return False

        logger.info(
            "Subscription created: user=%s, plan=%s, transaction=%s",
            user_id,
            plan.id,
            transaction_id,
        )
        return True

    @staticmethod
    def _is_expired(subscription: UserSubscription, now: datetime) -> bool:
        return now >= subscription.end_date

    async def _deactivate(self, user_id: int) -> bool:
        try:
            await self._store.deactivate_active(user_id)
        except StoreError as e:
            logger.error("Error deactivating subscription: %s", e)
            return False
        logger.info("Subscription deactivated: user=%s", user_id)
        return True

    async def _deactivate_all(self, user_id: int) -> bool:
        try:
            await self._store.deactivate_all(user_id)
        except StoreError as e:
            logger.error("Error deactivating all subscriptions: %s", e)
            return False
        return True
