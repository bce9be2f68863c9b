from typing import Iterable

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from bot.localization import BUTTONS, get_label, get_text
from bot.subscription import PlanDefinition

SHOW_PLANS = "subscription:plans"
SHOW_SUBSCRIPTION = "subscription:info"
BUY_PREFIX = "subscription:buy:"


def plans_keyboard(plans: Iterable[PlanDefinition], language: str | None) -> InlineKeyboardMarkup:
    rows = [
        [
            InlineKeyboardButton(
                text=get_text("plan_button", language, name=plan.name, price=str(plan.price)),
                callback_data=f"{BUY_PREFIX}{plan.id}",
            )
        ]
        for plan in plans
    ]
    return InlineKeyboardMarkup(inline_keyboard=rows)


def upgrade_keyboard(language: str | None) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text=get_label(BUTTONS, "subscription_upgrade", language), callback_data=SHOW_PLANS)],
        ]
    )


def profile_keyboard(language: str | None) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text=get_label(BUTTONS, "subscription_manage", language), callback_data=SHOW_SUBSCRIPTION)],
        ]
    )
