from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bot.localization import resolve_language
from db import User
from logging_config import register_log_translations

logger = logging.getLogger(__name__)

register_log_translations(
    {
        "Failed to load user %s: %s": {
            "ru": "Не удалось загрузить пользователя %s: %s",
        },
    }
)


class UserContextMiddleware(BaseMiddleware):
    """Expose the stored user and the interface language to handlers."""

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        session: AsyncSession | None = data.get("session")
        from_user = getattr(event, "from_user", None)

        data["user_profile"] = None
        data["last_seen_at"] = None
        data["language"] = resolve_language(getattr(from_user, "language_code", None))

        if session is None or from_user is None:
            return await handler(event, data)

        try:
            user = await session.scalar(select(User).where(User.telegram_id == from_user.id))
        except SQLAlchemyError as exc:
            logger.error("Failed to load user %s: %s", from_user.id, exc)
            await session.rollback()
            return await handler(event, data)

        if user is not None:
            # Handlers see the previous visit, the row gets this one
            data["last_seen_at"] = user.last_seen_at or user.created_at
            user.last_seen_at = datetime.now()
            if user.language:
                data["language"] = user.language
        data["user_profile"] = user
        return await handler(event, data)
