"""AI feature handlers metered by the entitlement gate."""

from __future__ import annotations

import logging
import time
from html import escape

from aiogram import Bot, F, Router
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command, CommandObject
from aiogram.types import BufferedInputFile, Message
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bot.ai import GenerationBackend, GenerationError
from bot.localization import get_text
from bot.subscription import EntitlementGate, SubscriptionService, UsageAction
from bot.utils import render_quota_exceeded, truncate
from db import ChatMessage
from logging_config import register_log_translations

logger = logging.getLogger(__name__)

LOW_QUOTA_THRESHOLD = 3
CAPTION_PREVIEW = 200
MESSAGE_PREVIEW = 50
ANSWER_LIMIT = 4000

register_log_translations(
    {
        "Usage limit reached: user=%s, action=%s, limit=%s": {
            "ru": "Лимит исчерпан: пользователь=%s, действие=%s, лимит=%s",
        },
        "⏱️ %s for user %s took %sms": {
            "ru": "⏱️ %s для пользователя %s заняло %sмс",
        },
        "%s failed for user %s: %s": {
            "ru": "%s не удалось для пользователя %s: %s",
        },
        "Message saved: user=%s, %sms": {
            "ru": "Сообщение сохранено: пользователь=%s, %sмс",
        },
        "Error saving message: %s": {
            "ru": "Ошибка при сохранении сообщения: %s",
        },
    }
)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


async def _file_url(bot: Bot, file_id: str) -> str:
    file = await bot.get_file(file_id)
    return f"https://api.telegram.org/file/bot{bot.token}/{file.file_path}"


async def check_and_record_usage(
    message: Message,
    action: UsageAction,
    language: str,
    gate: EntitlementGate,
    subscriptions: SubscriptionService,
) -> bool:
    """Consume one unit of ``action`` for the sender or explain why not.

    Returns ``False`` after telling the user the quota is exhausted. When the
    unit is granted and only a few remain, the user gets a heads-up.
    """
    user_id = message.from_user.id
    decision = await gate.check_usage_limit(user_id, action)
    if not decision.allowed:
        plan = await subscriptions.get_current_plan(user_id)
        logger.info("Usage limit reached: user=%s, action=%s, limit=%s", user_id, action.value, decision.limit)
        await message.answer(render_quota_exceeded(plan, decision, language))
        return False

    await gate.record_usage(user_id, action)
    if 0 < decision.remaining <= LOW_QUOTA_THRESHOLD:
        await message.answer(get_text("quota_low", language, remaining=str(decision.remaining)))
    return True


def media_router() -> Router:
    router = Router(name="media")

    @router.message(Command("imagine"))
    async def imagine(
        message: Message,
        command: CommandObject,
        language: str,
        gate: EntitlementGate,
        subscriptions: SubscriptionService,
        generator: GenerationBackend,
    ) -> None:
        if message.from_user is None:
            await message.answer(get_text("user_info_missing", language))
            return
        prompt = (command.args or "").strip()
        if not prompt:
            await message.answer(get_text("imagine_usage", language), parse_mode="HTML")
            return
        if not await check_and_record_usage(message, UsageAction.IMAGE_GENERATIONS, language, gate, subscriptions):
            return

        await message.answer(get_text("imagine_in_progress", language))
        started = time.perf_counter()
        try:
            image = await generator.generate_image(prompt)
        except GenerationError as ex:
            logger.error("%s failed for user %s: %s", "Image generation", message.from_user.id, ex)
            await message.answer(get_text("imagine_error", language))
            return

        elapsed = _elapsed_ms(started)
        logger.info("⏱️ %s for user %s took %sms", "Image generation", message.from_user.id, elapsed)
        await message.answer_photo(
            BufferedInputFile(image, filename="nano-banana.png"),
            caption=get_text(
                "imagine_caption",
                language,
                prompt=escape(truncate(prompt, CAPTION_PREVIEW)),
                ms=str(elapsed),
            ),
            parse_mode="HTML",
        )

    @router.message(F.photo)
    async def photo(
        message: Message,
        bot: Bot,
        language: str,
        gate: EntitlementGate,
        subscriptions: SubscriptionService,
        generator: GenerationBackend,
    ) -> None:
        if message.from_user is None:
            await message.answer(get_text("user_info_missing", language))
            return
        if not await check_and_record_usage(message, UsageAction.IMAGE_GENERATIONS, language, gate, subscriptions):
            return

        instruction = (message.caption or "").strip()
        started = time.perf_counter()
        try:
            url = await _file_url(bot, message.photo[-1].file_id)
            if instruction:
                await message.answer(get_text("photo_editing", language))
                image = await generator.edit_image(url, instruction)
            else:
                await message.answer(get_text("photo_analyzing", language))
                analysis = await generator.analyze_image(url, get_text("photo_analysis_prompt", language))
        except (GenerationError, TelegramAPIError) as ex:
            logger.error("%s failed for user %s: %s", "Photo processing", message.from_user.id, ex)
            key = "photo_edit_error" if instruction else "photo_analysis_error"
            await message.answer(get_text(key, language))
            return

        elapsed = _elapsed_ms(started)
        logger.info("⏱️ %s for user %s took %sms", "Photo processing", message.from_user.id, elapsed)
        if instruction:
            await message.answer_photo(
                BufferedInputFile(image, filename="nano-banana-edit.png"),
                caption=get_text(
                    "photo_edit_caption",
                    language,
                    instruction=escape(truncate(instruction, CAPTION_PREVIEW)),
                    ms=str(elapsed),
                ),
                parse_mode="HTML",
            )
            return
        await message.answer(
            get_text(
                "photo_analysis_result",
                language,
                analysis=escape(truncate(analysis, ANSWER_LIMIT)),
                ms=str(elapsed),
            ),
            parse_mode="HTML",
        )

    async def _transcribe(
        message: Message,
        bot: Bot,
        file_id: str,
        language: str,
        generator: GenerationBackend,
        kind: str,
    ) -> None:
        await message.answer(get_text(f"{kind}_processing", language))
        started = time.perf_counter()
        try:
            url = await _file_url(bot, file_id)
            text = await generator.analyze_audio(url)
        except (GenerationError, TelegramAPIError) as ex:
            logger.error("%s failed for user %s: %s", kind.capitalize(), message.from_user.id, ex)
            await message.answer(get_text(f"{kind}_error", language))
            return

        elapsed = _elapsed_ms(started)
        logger.info("⏱️ %s for user %s took %sms", kind.capitalize(), message.from_user.id, elapsed)
        await message.answer(
            get_text(f"{kind}_result", language, text=escape(truncate(text, ANSWER_LIMIT)), ms=str(elapsed)),
            parse_mode="HTML",
        )

    @router.message(F.voice)
    async def voice(
        message: Message,
        bot: Bot,
        language: str,
        gate: EntitlementGate,
        subscriptions: SubscriptionService,
        generator: GenerationBackend,
    ) -> None:
        if message.from_user is None:
            await message.answer(get_text("user_info_missing", language))
            return
        if not await check_and_record_usage(message, UsageAction.VOICE_ANALYSIS, language, gate, subscriptions):
            return
        await _transcribe(message, bot, message.voice.file_id, language, generator, "voice")

    @router.message(F.audio)
    async def audio(
        message: Message,
        bot: Bot,
        language: str,
        gate: EntitlementGate,
        subscriptions: SubscriptionService,
        generator: GenerationBackend,
    ) -> None:
        if message.from_user is None:
            await message.answer(get_text("user_info_missing", language))
            return
        if not await check_and_record_usage(message, UsageAction.VOICE_ANALYSIS, language, gate, subscriptions):
            return
        await _transcribe(message, bot, message.audio.file_id, language, generator, "audio")

    @router.message(F.video)
    async def video(
        message: Message,
        bot: Bot,
        language: str,
        gate: EntitlementGate,
        subscriptions: SubscriptionService,
        generator: GenerationBackend,
    ) -> None:
        if message.from_user is None:
            await message.answer(get_text("user_info_missing", language))
            return
        if not await check_and_record_usage(message, UsageAction.DAILY_GENERATIONS, language, gate, subscriptions):
            return

        prompt = (message.caption or "").strip() or get_text("video_prompt_default", language)
        await message.answer(get_text("video_processing", language))
        started = time.perf_counter()
        try:
            url = await _file_url(bot, message.video.file_id)
            text = await generator.analyze_video(url, prompt)
        except (GenerationError, TelegramAPIError) as ex:
            logger.error("%s failed for user %s: %s", "Video analysis", message.from_user.id, ex)
            await message.answer(get_text("video_error", language))
            return

        elapsed = _elapsed_ms(started)
        logger.info("⏱️ %s for user %s took %sms", "Video analysis", message.from_user.id, elapsed)
        await message.answer(
            get_text("video_result", language, text=escape(truncate(text, ANSWER_LIMIT)), ms=str(elapsed)),
            parse_mode="HTML",
        )

    @router.message(F.text & ~F.text.startswith("/"))
    async def text_message(message: Message, session: AsyncSession, language: str) -> None:
        if message.from_user is None:
            await message.answer(get_text("user_info_missing", language))
            return
        started = time.perf_counter()
        try:
            session.add(ChatMessage(telegram_id=message.from_user.id, message=message.text))
            await session.flush()
        except SQLAlchemyError as ex:
            logger.error("Error saving message: %s", ex)
            await session.rollback()
            await message.answer(get_text("message_save_error", language))
            return

        elapsed = _elapsed_ms(started)
        logger.info("Message saved: user=%s, %sms", message.from_user.id, elapsed)
        await message.answer(
            get_text(
                "message_saved",
                language,
                text=truncate(message.text, MESSAGE_PREVIEW),
                ms=str(elapsed),
            )
        )

    return router
