import logging
from datetime import datetime
from html import escape

from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.types import Message
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bot.localization import get_text, resolve_language
from bot.markups.client import profile_keyboard
from bot.subscription import EntitlementGate
from bot.utils import format_datetime
from db import User
from logging_config import register_log_translations

logger = logging.getLogger(__name__)

register_log_translations(
    {
        "New user created: %s": {
            "ru": "Создан новый пользователь: %s",
        },
        "User saved: %s": {
            "ru": "Пользователь сохранён: %s",
        },
        "Error in /start handler: %s": {
            "ru": "Ошибка в обработчике /start: %s",
        },
        "Error in profile command: %s": {
            "ru": "Ошибка в команде профиля: %s",
        },
    }
)


async def save_user(
    session: AsyncSession,
    telegram_id: int,
    username: str | None,
    first_name: str | None,
    language: str | None,
) -> User:
    """Insert or refresh the user row keyed by Telegram id."""
    user = await session.scalar(select(User).where(User.telegram_id == telegram_id))
    now = datetime.now()

    if user:
        user.username = username
        user.first_name = first_name
        user.last_seen_at = now
        if language and not user.language:
            user.language = language
        logger.info("User saved: %s", telegram_id)
        return user

    user = User(
        telegram_id=telegram_id,
        username=username,
        first_name=first_name,
        language=language,
        created_at=now,
        last_seen_at=now,
    )
    session.add(user)
    await session.flush()
    logger.info("New user created: %s", telegram_id)
    return user


def start_router() -> Router:
    router = Router(name="start")

    @router.message(CommandStart())
    async def start(message: Message, session: AsyncSession, language: str) -> None:
        if message.from_user is None:
            await message.answer(get_text("user_info_missing", language))
            return
        try:
            user = await save_user(
                session,
                telegram_id=message.from_user.id,
                username=message.from_user.username,
                first_name=message.from_user.first_name,
                language=resolve_language(message.from_user.language_code),
            )
        except SQLAlchemyError as ex:
            logger.exception("Error in /start handler: %s", ex)
            await session.rollback()
            user = None

        lang = user.language if user is not None and user.language else language
        await message.answer(
            get_text("start_welcome", lang, name=escape(message.from_user.first_name or "")),
            parse_mode="HTML",
        )

    @router.message(Command("help"))
    async def help_command(message: Message, language: str) -> None:
        await message.answer(get_text("help_text", language), parse_mode="HTML")

    @router.message(Command("profile"))
    async def profile(
        message: Message,
        language: str,
        gate: EntitlementGate,
        user_profile: User | None = None,
        last_seen_at: datetime | None = None,
    ) -> None:
        if message.from_user is None:
            await message.answer(get_text("user_info_missing", language))
            return
        if user_profile is None:
            await message.answer(get_text("start_required", language))
            return

        try:
            info = await gate.get_subscription_info(message.from_user.id)
        except Exception as ex:
            logger.exception("Error in profile command: %s", ex)
            await message.answer(get_text("profile_error", language))
            return

        last_seen = last_seen_at or user_profile.created_at
        lines = [
            get_text(
                "profile_text",
                language,
                telegram_id=str(user_profile.telegram_id),
                username=escape(user_profile.username or get_text("profile_username_missing", language)),
                first_name=escape(user_profile.first_name or ""),
                last_seen=format_datetime(last_seen, language) if last_seen else "—",
                plan=escape(info.plan.name),
            )
        ]
        if info.days_left is not None:
            lines.append(get_text("days_left", language, days=str(info.days_left)))

        await message.answer(
            "\n".join(lines),
            parse_mode="HTML",
            reply_markup=profile_keyboard(language),
        )

    return router
