"""
Stars AI bot: Telegram bot with AI features metered by paid subscriptions.
"""

import argparse
import asyncio
import logging
import os
import sys

from aiohttp import web
from aiogram.client.session.aiohttp import AiohttpSession

from logging_config import (
    available_log_languages,
    get_default_log_language,
    register_log_translations,
    setup_logging,
)

from config import (
    TOKEN,
    DATABASE_URL,
    RUN_VIA_POLLING,
    RESET_DB_ON_START,
    BASE_URL,
    MAIN_BOT_PATH,
    WEB_SERVER_HOST,
    WEB_SERVER_PORT,
    ADMIN_IDS,
    LOG_LANGUAGE,
    GEMINI_API_KEY,
    GEMINI_TEXT_MODEL,
    GEMINI_IMAGE_MODEL,
    GEMINI_TIMEOUT,
)

register_log_translations(
    {
        "Bot starting up in POLLING mode...": {
            "ru": "Бот запускается в режиме long polling...",
        },
        "Removed existing database file: %s": {
            "ru": "Удалён существующий файл базы данных: %s",
        },
        "Error removing database file %s: %s": {
            "ru": "Ошибка при удалении файла базы данных %s: %s",
        },
        "Bot authorized as @%s (ID: %s)": {
            "ru": "Бот авторизован как @%s (ID: %s)",
        },
        "Database tables created/ensured.": {
            "ru": "Таблицы базы данных созданы или проверены.",
        },
        "Shutting down (polling mode), closing database connections...": {
            "ru": "Завершение работы (polling): закрываем соединения с базой данных...",
        },
        "Database connections closed.": {
            "ru": "Соединения с базой данных закрыты.",
        },
        "Bot starting up in WEBHOOK mode...": {
            "ru": "Бот запускается в режиме webhook...",
        },
        "Setting webhook to: %s": {
            "ru": "Устанавливаем webhook: %s",
        },
        "Shutting down (webhook mode)...": {
            "ru": "Завершение работы (webhook)...",
        },
        "Webhook deleted": {
            "ru": "Webhook удалён",
        },
        "Starting polling...": {
            "ru": "Запуск long polling...",
        },
        "Polling finished or interrupted. Closing bot session.": {
            "ru": "Опрос завершён или прерван. Закрываем сессию бота.",
        },
        "Starting web server on %s:%s": {
            "ru": "Запуск веб-сервера на %s:%s",
        },
        "Attempting to run in POLLING mode.": {
            "ru": "Пробуем запустить бота в режиме long polling.",
        },
        "Attempting to run in WEBHOOK mode.": {
            "ru": "Пробуем запустить бота в режиме webhook.",
        },
        "GEMINI_API_KEY is not set, AI features will answer with an error.": {
            "ru": "GEMINI_API_KEY не задан, AI-функции будут отвечать ошибкой.",
        },
        "BASE_URL is not configured correctly for webhook mode. Please set it in .env. Exiting.": {
            "ru": "BASE_URL настроен некорректно для режима webhook. Укажите значение в .env. Выходим.",
        },
        "MAIN_BOT_PATH is not configured. Please set it in .env. Exiting.": {
            "ru": "MAIN_BOT_PATH не задан. Укажите его в .env. Выходим.",
        },
    }
)

logger = logging.getLogger(__name__)


def _normalize_log_language(candidate: str | None) -> str:
    """Validate and normalize a log language candidate."""

    available = {lang.lower() for lang in available_log_languages()}
    if candidate:
        normalized = candidate.strip().lower()
        if normalized in available:
            return normalized
    return get_default_log_language()


def configure_logging(*, language: str | None = None, level: str | int | None = logging.DEBUG) -> str:
    """Set up logging once per process and return the active language."""

    effective_language = _normalize_log_language(language or LOG_LANGUAGE)
    setup_logging(level=level, language=effective_language)
    return effective_language


def parse_cli_args(argv: list[str] | None = None) -> tuple[argparse.Namespace, list[str]]:
    """Parse and return known CLI arguments plus unhandled extras."""

    parser = argparse.ArgumentParser(description="Run the Stars AI Telegram bot")
    parser.add_argument(
        "--log-language",
        dest="log_language",
        choices=available_log_languages(),
        metavar="LANG",
        help="Override log language (default from .env)",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        metavar="LEVEL",
        help="Override base log level (name or number)",
    )
    return parser.parse_known_args(argv)


# Configure logging immediately for library consumers; main block may override later.
configure_logging(language=LOG_LANGUAGE, level=logging.INFO)

from aiogram import Bot, Dispatcher
from aiogram.types import Update
from aiogram.webhook.aiohttp_server import SimpleRequestHandler, setup_application

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from bot.ai import GeminiClient
from bot.hendlers import setup_routers
from bot.middlewares import DbSessionMiddleware, UserContextMiddleware
from bot.subscription import (
    EntitlementGate,
    SubscriptionService,
    SubscriptionStore,
    UsageLedger,
    UsageStore,
)

from db import Base, QueryStats


def get_db_path(db_url):
    if db_url.startswith("sqlite+aiosqlite:///./"):
        return db_url[len("sqlite+aiosqlite:///./"):]
    elif db_url.startswith("sqlite+aiosqlite:///"):
        return db_url[len("sqlite+aiosqlite:///"):]
    return None

_USING_SQLITE = DATABASE_URL.startswith("sqlite+aiosqlite")

_engine_kwargs: dict[str, object] = {}
if _USING_SQLITE:
    _engine_kwargs["connect_args"] = {"timeout": 30}
    _engine_kwargs["poolclass"] = NullPool

_engine = create_async_engine(DATABASE_URL, **_engine_kwargs)
_sessionmaker = async_sessionmaker(_engine, expire_on_commit=False, class_=AsyncSession)
_query_stats = QueryStats()
_query_stats.attach(_engine)


def _apply_sqlite_pragmas(sync_conn) -> None:
    """Enable WAL mode and generous timeouts for concurrent SQLite access."""
    sync_conn.exec_driver_sql("PRAGMA journal_mode=WAL")
    sync_conn.exec_driver_sql("PRAGMA synchronous=NORMAL")
    sync_conn.exec_driver_sql("PRAGMA busy_timeout=30000")


def _reset_database() -> None:
    db_path = get_db_path(DATABASE_URL)
    if db_path and os.path.exists(db_path):
        try:
            os.remove(db_path)
            logger.info("Removed existing database file: %s", db_path)
        except OSError as e:
            logger.error("Error removing database file %s: %s", db_path, e)


async def _prepare_database() -> None:
    async with _engine.begin() as conn:
        if _USING_SQLITE:
            await conn.run_sync(_apply_sqlite_pragmas)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created/ensured.")


async def on_startup_polling(bot: Bot):
    logger.info("Bot starting up in POLLING mode...")
    if RESET_DB_ON_START:
        _reset_database()

    bot_info = await bot.get_me()
    logger.info("Bot authorized as @%s (ID: %s)", bot_info.username, bot_info.id)
    await _prepare_database()


async def on_shutdown_polling():
    logger.info("Shutting down (polling mode), closing database connections...")
    await _engine.dispose()
    logger.info("Database connections closed.")


async def on_startup_webhook(bot: Bot):
    logger.info("Bot starting up in WEBHOOK mode...")
    if RESET_DB_ON_START:
        _reset_database()

    webhook_url = f"{BASE_URL}{MAIN_BOT_PATH}"
    logger.info("Setting webhook to: %s", webhook_url)
    await bot.delete_webhook(drop_pending_updates=True)
    await bot.set_webhook(webhook_url, allowed_updates=list(Update.model_fields.keys()))
    bot_info = await bot.get_me()
    logger.info("Bot authorized as @%s (ID: %s)", bot_info.username, bot_info.id)
    await _prepare_database()


async def on_shutdown_webhook(bot: Bot):
    logger.info("Shutting down (webhook mode)...")
    await bot.delete_webhook(drop_pending_updates=True)
    logger.info("Webhook deleted")
    await _engine.dispose()
    logger.info("Database connections closed.")


def build_dispatcher() -> Dispatcher:
    """Wire stores, services, middlewares and routers into a dispatcher."""
    subscriptions = SubscriptionService(SubscriptionStore(_sessionmaker))
    ledger = UsageLedger(UsageStore(_sessionmaker))
    generator = GeminiClient(
        GEMINI_API_KEY,
        text_model=GEMINI_TEXT_MODEL,
        image_model=GEMINI_IMAGE_MODEL,
        timeout=GEMINI_TIMEOUT,
    )
    if not generator.is_configured:
        logger.warning("GEMINI_API_KEY is not set, AI features will answer with an error.")

    dp = Dispatcher()
    dp.workflow_data.update(
        subscriptions=subscriptions,
        gate=EntitlementGate(subscriptions, ledger),
        generator=generator,
        admin_ids=ADMIN_IDS,
        db_stats=_query_stats,
    )

    db_middleware = DbSessionMiddleware(_sessionmaker)
    user_context_middleware = UserContextMiddleware()

    dp.message.middleware(db_middleware)
    dp.message.middleware(user_context_middleware)
    dp.callback_query.middleware(db_middleware)
    dp.callback_query.middleware(user_context_middleware)
    dp.pre_checkout_query.middleware(db_middleware)
    dp.pre_checkout_query.middleware(user_context_middleware)

    dp.include_router(setup_routers())
    return dp


async def main_polling():
    session = AiohttpSession()
    local_bot = Bot(token=TOKEN, session=session)
    dp = build_dispatcher()

    dp.startup.register(on_startup_polling)
    dp.shutdown.register(on_shutdown_polling)

    try:
        logger.info("Starting polling...")
        await dp.start_polling(local_bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        logger.info("Polling finished or interrupted. Closing bot session.")
        await local_bot.session.close()


def main_webhook():
    session = AiohttpSession()
    local_bot = Bot(token=TOKEN, session=session)
    dp = build_dispatcher()

    dp.startup.register(on_startup_webhook)
    dp.shutdown.register(on_shutdown_webhook)

    app = web.Application()
    SimpleRequestHandler(dispatcher=dp, bot=local_bot).register(app, path=MAIN_BOT_PATH)
    # Runs dispatcher startup/shutdown with the aiohttp app lifecycle
    setup_application(app, dp, bot=local_bot)

    logger.info("Starting web server on %s:%s", WEB_SERVER_HOST, WEB_SERVER_PORT)
    web.run_app(app, host=WEB_SERVER_HOST, port=WEB_SERVER_PORT)


if __name__ == "__main__":
    args, remaining_argv = parse_cli_args()
    sys.argv = [sys.argv[0], *remaining_argv]

    configure_logging(language=args.log_language, level=args.log_level or logging.INFO)

    if RUN_VIA_POLLING:
        logger.info("Attempting to run in POLLING mode.")
        asyncio.run(main_polling())
    else:
        logger.info("Attempting to run in WEBHOOK mode.")
        if not BASE_URL or BASE_URL == "https://example.com":
            logger.error("BASE_URL is not configured correctly for webhook mode. Please set it in .env. Exiting.")
            sys.exit(1)
        if not MAIN_BOT_PATH:
            logger.error("MAIN_BOT_PATH is not configured. Please set it in .env. Exiting.")
            sys.exit(1)
        main_webhook()
