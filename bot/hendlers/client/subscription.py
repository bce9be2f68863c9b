"""Handlers for subscription management and Telegram Stars payments."""

from __future__ import annotations

import logging
from typing import Iterable

from aiogram import Bot, F, Router
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command
from aiogram.types import CallbackQuery, LabeledPrice, Message, PreCheckoutQuery

from bot.localization import get_text
from bot.markups.client import (
    BUY_PREFIX,
    SHOW_PLANS,
    SHOW_SUBSCRIPTION,
    plans_keyboard,
    upgrade_keyboard,
)
from bot.payments import (
    STARS_CURRENCY,
    InvoicePayload,
    MalformedPayload,
    PaymentConfirmation,
    confirmation_from_payment,
)
from bot.subscription import (
    EntitlementGate,
    PlanDefinition,
    SubscriptionService,
    get_plan,
    list_paid_plans,
)
from bot.utils import render_payment_success, render_plans, render_subscription_info
from logging_config import register_log_translations

logger = logging.getLogger(__name__)

register_log_translations(
    {
        "Invoice created: user=%s, plan=%s, price=%s Stars": {
            "ru": "Счёт создан: пользователь=%s, план=%s, цена=%s Stars",
        },
        "Error creating invoice: %s": {
            "ru": "Ошибка при создании счёта: %s",
        },
        "Pre-checkout approved: user=%s, plan=%s": {
            "ru": "Pre-checkout одобрен: пользователь=%s, план=%s",
        },
        "Pre-checkout rejected: %s": {
            "ru": "Pre-checkout отклонён: %s",
        },
        "Payment received: user=%s, amount=%s Stars, transaction=%s": {
            "ru": "Платёж получен: пользователь=%s, сумма=%s Stars, транзакция=%s",
        },
        "Malformed successful payment from user %s: %s": {
            "ru": "Некорректный успешный платёж от пользователя %s: %s",
        },
        "Payment %s received but subscription was not activated": {
            "ru": "Платёж %s получен, но подписка не активирована",
        },
        "Error showing subscription: %s": {
            "ru": "Ошибка при показе подписки: %s",
        },
        "Failed to notify admin %s": {
            "ru": "Не удалось уведомить администратора %s",
        },
    }
)


def purchasable_plan(plan_id: str | None) -> PlanDefinition | None:
    plan = get_plan(plan_id)
    if plan is None or plan.is_free:
        return None
    return plan


async def _notify_admins(bot: Bot, admin_ids: Iterable[int], text: str) -> None:
    for admin_id in admin_ids:
        try:
            await bot.send_message(admin_id, text, disable_web_page_preview=True)
        except TelegramAPIError:
            logger.warning("Failed to notify admin %s", admin_id)


async def _send_plans(message: Message, language: str) -> None:
    plans = list_paid_plans()
    await message.answer(
        render_plans(plans, language),
        parse_mode="HTML",
        reply_markup=plans_keyboard(plans, language),
    )


async def _send_subscription_info(message: Message, user_id: int, language: str, gate: EntitlementGate) -> None:
    try:
        info = await gate.get_subscription_info(user_id)
    except Exception as ex:
        logger.error("Error showing subscription: %s", ex)
        await message.answer(get_text("info_error", language))
        return
    await message.answer(
        render_subscription_info(info, language),
        parse_mode="HTML",
        reply_markup=upgrade_keyboard(language),
    )


async def activate_from_confirmation(
    confirmation: PaymentConfirmation,
    subscriptions: SubscriptionService,
) -> PlanDefinition | None:
    """Create the subscription for a confirmed payment; ``None`` means not granted."""
    created = await subscriptions.create_subscription(
        confirmation.user_id,
        confirmation.plan_id,
        confirmation.transaction_id,
    )
    if not created:
        return None
    return get_plan(confirmation.plan_id)


def subscription_router() -> Router:
    router = Router(name="subscription")

    @router.message(Command("subscribe"))
    async def command_subscribe(message: Message, language: str) -> None:
        await _send_plans(message, language)

    @router.message(Command("subscription"))
    async def command_subscription(message: Message, language: str, gate: EntitlementGate) -> None:
        if message.from_user is None:
            await message.answer(get_text("user_info_missing", language))
            return
        await _send_subscription_info(message, message.from_user.id, language, gate)

    @router.callback_query(F.data == SHOW_PLANS)
    async def callback_plans(callback: CallbackQuery, language: str) -> None:
        await callback.answer()
        if callback.message is not None:
            await _send_plans(callback.message, language)

    @router.callback_query(F.data == SHOW_SUBSCRIPTION)
    async def callback_subscription(callback: CallbackQuery, language: str, gate: EntitlementGate) -> None:
        await callback.answer()
        if callback.message is not None:
            await _send_subscription_info(callback.message, callback.from_user.id, language, gate)

    @router.callback_query(F.data.startswith(BUY_PREFIX))
    async def callback_buy(callback: CallbackQuery, bot: Bot, language: str) -> None:
        await callback.answer()
        plan = purchasable_plan(callback.data[len(BUY_PREFIX):])
        if plan is None:
            await bot.send_message(callback.from_user.id, get_text("plan_not_found", language))
            return

        payload = InvoicePayload.create(callback.from_user.id, plan.id)
        try:
            await bot.send_invoice(
                chat_id=callback.from_user.id,
                title=plan.name,
                description=plan.description,
                payload=payload.encode(),
                currency=STARS_CURRENCY,
                prices=[LabeledPrice(label=plan.name, amount=plan.price)],
            )
        except TelegramAPIError as ex:
            logger.error("Error creating invoice: %s", ex)
            await bot.send_message(callback.from_user.id, get_text("invoice_error", language))
            return
        logger.info(
            "Invoice created: user=%s, plan=%s, price=%s Stars",
            callback.from_user.id,
            plan.id,
            plan.price,
        )

    @router.pre_checkout_query()
    async def pre_checkout(query: PreCheckoutQuery, language: str) -> None:
        try:
            payload = InvoicePayload.decode(query.invoice_payload)
        except MalformedPayload as ex:
            logger.warning("Pre-checkout rejected: %s", ex)
            await query.answer(ok=False, error_message=get_text("pre_checkout_error", language))
            return

        if purchasable_plan(payload.plan_id) is None:
            logger.warning("Pre-checkout rejected: %s", payload.plan_id)
            await query.answer(ok=False, error_message=get_text("pre_checkout_plan_missing", language))
            return

        await query.answer(ok=True)
        logger.info("Pre-checkout approved: user=%s, plan=%s", payload.user_id, payload.plan_id)

    @router.message(F.successful_payment)
    async def successful_payment(
        message: Message,
        bot: Bot,
        language: str,
        subscriptions: SubscriptionService,
        admin_ids: tuple[int, ...] = (),
    ) -> None:
        payment = message.successful_payment
        user_id = message.from_user.id if message.from_user else None
        try:
            confirmation = confirmation_from_payment(payment)
        except MalformedPayload as ex:
            logger.error("Malformed successful payment from user %s: %s", user_id, ex)
            await message.answer(get_text("payment_activation_failed", language))
            await _notify_admins(
                bot,
                admin_ids,
                get_text(
                    "payment_admin_notification",
                    language,
                    user_id=str(user_id),
                    plan="?",
                    amount=str(payment.total_amount),
                    transaction=payment.telegram_payment_charge_id or "?",
                ),
            )
            return

        logger.info(
            "Payment received: user=%s, amount=%s Stars, transaction=%s",
            confirmation.user_id,
            confirmation.total_amount,
            confirmation.transaction_id,
        )

        plan = await activate_from_confirmation(confirmation, subscriptions)
        if plan is None:
            logger.error("Payment %s received but subscription was not activated", confirmation.transaction_id)
            await message.answer(get_text("payment_activation_failed", language))
            await _notify_admins(
                bot,
                admin_ids,
                get_text(
                    "payment_admin_notification",
                    language,
                    user_id=str(confirmation.user_id),
                    plan=confirmation.plan_id,
                    amount=str(confirmation.total_amount),
                    transaction=confirmation.transaction_id,
                ),
            )
            return

        await message.answer(render_payment_success(plan, language), parse_mode="HTML")
        await message.answer(get_text("payment_thanks", language))

    return router
