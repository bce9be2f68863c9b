from .base import Base
from .model import ChatMessage, Subscription, UsageStat, User
from .stats import QueryStats, QueryStatsSnapshot

__all__ = [
    "Base",
    "ChatMessage",
    "QueryStats",
    "QueryStatsSnapshot",
    "Subscription",
    "UsageStat",
    "User",
]
