"""Health commands: bot round-trip latency and database timings."""

from __future__ import annotations

import logging
import time
from datetime import datetime

from aiogram import Router
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command
from aiogram.types import Message
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bot.localization import get_text
from bot.utils import render_ping, render_status
from db import QueryStats, User
from logging_config import register_log_translations

logger = logging.getLogger(__name__)

register_log_translations(
    {
        "⏱️ /ping command: %sms": {
            "ru": "⏱️ Команда /ping: %sмс",
        },
        "⏱️ /status command processed in %sms": {
            "ru": "⏱️ Команда /status обработана за %sмс",
        },
        "Error in /ping command: %s": {
            "ru": "Ошибка в команде /ping: %s",
        },
        "Error in /status command: %s": {
            "ru": "Ошибка в команде /status: %s",
        },
    }
)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


async def measure_database(session: AsyncSession) -> int:
    """Run a small users count and return how long it took in milliseconds."""
    started = time.perf_counter()
    await session.execute(select(func.count()).select_from(User))
    return _elapsed_ms(started)


def status_router() -> Router:
    router = Router(name="status")

    @router.message(Command("ping"))
    async def ping(message: Message, language: str) -> None:
        started = time.perf_counter()
        try:
            sent = await message.answer(get_text("ping_pending", language))
            latency = _elapsed_ms(started)
            await sent.edit_text(render_ping(latency, datetime.now(), language), parse_mode="HTML")
        except TelegramAPIError as ex:
            logger.error("Error in /ping command: %s", ex)
            await message.answer(get_text("ping_error", language))
            return
        logger.info("⏱️ /ping command: %sms", latency)

    @router.message(Command("status"))
    async def status(message: Message, session: AsyncSession, language: str, db_stats: QueryStats) -> None:
        started = time.perf_counter()
        try:
            sent = await message.answer(get_text("status_pending", language))
            bot_latency = _elapsed_ms(started)
            db_latency = await measure_database(session)
            total = _elapsed_ms(started)
            text = render_status(bot_latency, db_latency, total, db_stats.snapshot(), datetime.now(), language)
            await sent.edit_text(text, parse_mode="HTML")
        except SQLAlchemyError as ex:
            logger.error("Error in /status command: %s", ex)
            await session.rollback()
            await message.answer(get_text("status_error", language))
            return
        except TelegramAPIError as ex:
            logger.error("Error in /status command: %s", ex)
            await message.answer(get_text("status_error", language))
            return
        logger.info("⏱️ /status command processed in %sms", total)

    return router
