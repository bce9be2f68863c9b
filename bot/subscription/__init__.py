"""Subscription and usage-metering package."""

from .gate import EntitlementDecision, EntitlementGate, SubscriptionInfo, days_left
from .plans import (
    FREE_PLAN,
    UNLIMITED,
    PlanDefinition,
    UsageAction,
    get_plan,
    list_paid_plans,
    list_plans,
)
from .service import SubscriptionService
from .store import StoreError, SubscriptionStore, UsageRecord, UsageStore, UserSubscription
from .usage import UsageLedger, start_of_day

__all__ = [
    "FREE_PLAN",
    "UNLIMITED",
    "EntitlementDecision",
    "EntitlementGate",
    "PlanDefinition",
    "StoreError",
    "SubscriptionInfo",
    "SubscriptionService",
    "SubscriptionStore",
    "UsageAction",
    "UsageLedger",
    "UsageRecord",
    "UsageStore",
    "UserSubscription",
    "days_left",
    "get_plan",
    "list_paid_plans",
    "list_plans",
    "start_of_day",
]
