from .main import (
    BUY_PREFIX,
    SHOW_PLANS,
    SHOW_SUBSCRIPTION,
    plans_keyboard,
    profile_keyboard,
    upgrade_keyboard,
)

__all__ = [
    "BUY_PREFIX",
    "SHOW_PLANS",
    "SHOW_SUBSCRIPTION",
    "plans_keyboard",
    "profile_keyboard",
    "upgrade_keyboard",
]
