"""Entitlement checks composed from the current plan and today's usage."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Mapping, Optional

from .plans import PlanDefinition, UsageAction
from .service import SubscriptionService
from .store import UserSubscription
from .usage import UsageLedger

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class EntitlementDecision:
    allowed: bool
    remaining: int
    limit: int
    used: int


@dataclass(frozen=True)
class SubscriptionInfo:
    plan: PlanDefinition
    subscription: Optional[UserSubscription]
    days_left: Optional[int]
    usage: Mapping[UsageAction, EntitlementDecision]


def days_left(subscription: UserSubscription, now: datetime) -> int:
    return math.ceil((subscription.end_date - now) / _ONE_DAY)


class EntitlementGate:
    """Answers "may this user run this action now" and records consumption.

    Callers check first, perform the work only when the decision allows it,
    and then call :meth:`record_usage`. Store failures surface as zero usage
    in :class:`UsageLedger`, so the gate fails open.
    """

    def __init__(self, subscriptions: SubscriptionService, ledger: UsageLedger) -> None:
        self._subscriptions = subscriptions
        self._ledger = ledger

    async def check_usage_limit(self, user_id: int, action: UsageAction) -> EntitlementDecision:
        action = UsageAction(action)
        plan = await self._subscriptions.get_current_plan(user_id)
        return await self._decide(user_id, plan, action)

    async def record_usage(self, user_id: int, action: UsageAction) -> None:
        await self._ledger.record_usage(user_id, action)

    async def get_subscription_info(self, user_id: int) -> SubscriptionInfo:
        subscription = await self._subscriptions.get_current_subscription(user_id)
        plan = self._subscriptions.resolve_plan(subscription)
        remaining_days = None
        if subscription is not None:
            remaining_days = days_left(subscription, self._subscriptions.now())
        usage = {}
        for action in UsageAction:
            usage[action] = await self._decide(user_id, plan, action)
        return SubscriptionInfo(
            plan=plan,
            subscription=subscription,
            days_left=remaining_days,
            usage=usage,
        )

    async def _decide(self, user_id: int, plan: PlanDefinition, action: UsageAction) -> EntitlementDecision:
        limit = plan.limit_for(action)
        used = await self._ledger.get_today_usage(user_id, action)
        return EntitlementDecision(
            allowed=used < limit,
            remaining=max(0, limit - used),
            limit=limit,
            used=used,
        )
