"""Localized messages and button labels for the bot."""

from __future__ import annotations

from typing import Dict

DEFAULT_LANGUAGE = "ru"
SUPPORTED_LANGUAGES = ("ru", "en")

MESSAGES: Dict[str, Dict[str, str]] = {
    "user_info_missing": {
        "ru": "❌ Не удалось получить информацию о пользователе",
        "en": "❌ Could not get information about the user",
    },
    "start_required": {
        "ru": "Пользователь не найден. Используйте /start",
        "en": "User not found. Please use /start",
    },
    "start_welcome": {
        "ru": (
            "<b>👋 Привет, {name}!</b>\n\n"
            "Я AI-бот на базе Gemini. Вот что я умею:\n"
            "• /imagine [промпт] — сгенерировать изображение 🍌\n"
            "• Фото — анализ, а фото с подписью — редактирование\n"
            "• Голосовые и аудио — расшифровка и анализ\n"
            "• Видео — описание содержания\n\n"
            "💎 Тарифы: /subscribe\n"
            "📊 Ваша подписка: /subscription\n"
            "❓ Помощь: /help"
        ),
        "en": (
            "<b>👋 Hi, {name}!</b>\n\n"
            "I am an AI bot powered by Gemini. Here is what I can do:\n"
            "• /imagine [prompt] — generate an image 🍌\n"
            "• Photo — analysis, photo with a caption — editing\n"
            "• Voice and audio — transcription and analysis\n"
            "• Video — content description\n\n"
            "💎 Plans: /subscribe\n"
            "📊 Your subscription: /subscription\n"
            "❓ Help: /help"
        ),
    },
    "help_text": {
        "ru": (
            "<b>❓ Помощь</b>\n\n"
            "/start — начать работу\n"
            "/profile — ваш профиль\n"
            "/subscribe — доступные подписки\n"
            "/subscription — текущая подписка и лимиты\n"
            "/imagine [промпт] — генерация изображения\n"
            "/ping — задержка бота\n"
            "/status — состояние бота и базы данных\n\n"
            "Лимиты обновляются каждый день в полночь."
        ),
        "en": (
            "<b>❓ Help</b>\n\n"
            "/start — get started\n"
            "/profile — your profile\n"
            "/subscribe — available subscriptions\n"
            "/subscription — current subscription and limits\n"
            "/imagine [prompt] — image generation\n"
            "/ping — bot latency\n"
            "/status — bot and database health\n\n"
            "Limits reset every day at midnight."
        ),
    },
    "profile_text": {
        "ru": (
            "<b>👤 Ваш профиль</b>\n\n"
            "ID: {telegram_id}\n"
            "Username: @{username}\n"
            "Имя: {first_name}\n"
            "Последний визит: {last_seen}\n\n"
            "💎 <b>Подписка:</b> {plan}"
        ),
        "en": (
            "<b>👤 Your profile</b>\n\n"
            "ID: {telegram_id}\n"
            "Username: @{username}\n"
            "Name: {first_name}\n"
            "Last seen: {last_seen}\n\n"
            "💎 <b>Subscription:</b> {plan}"
        ),
    },
    "profile_username_missing": {
        "ru": "не указан",
        "en": "not set",
    },
    "profile_error": {
        "ru": "Произошла ошибка при получении профиля.",
        "en": "Failed to load your profile.",
    },
    "days_left": {
        "ru": "⏰ Осталось: {days} дн.",
        "en": "⏰ Days left: {days}",
    },
    "info_title": {
        "ru": "<b>📊 Ваша подписка</b>",
        "en": "<b>📊 Your subscription</b>",
    },
    "info_plan": {
        "ru": "💎 План: {plan}",
        "en": "💎 Plan: {plan}",
    },
    "info_expires": {
        "ru": "📅 Истекает: {date}",
        "en": "📅 Expires: {date}",
    },
    "info_features_header": {
        "ru": "<b>Возможности:</b>",
        "en": "<b>Features:</b>",
    },
    "info_usage_header": {
        "ru": "<b>Использование сегодня:</b>",
        "en": "<b>Usage today:</b>",
    },
    "info_usage_line": {
        "ru": "{label}: {used}/{limit}",
        "en": "{label}: {used}/{limit}",
    },
    "info_usage_unlimited": {
        "ru": "{label}: {used}/∞",
        "en": "{label}: {used}/∞",
    },
    "info_error": {
        "ru": "❌ Ошибка при получении информации о подписке",
        "en": "❌ Failed to load subscription information",
    },
    "plans_title": {
        "ru": "<b>🌟 Доступные подписки</b>\n\nВыберите план, который подходит вам:",
        "en": "<b>🌟 Available subscriptions</b>\n\nChoose the plan that suits you:",
    },
    "plan_block": {
        "ru": "<b>{name}</b>\n💰 Цена: {price} Stars\n⏰ Срок: {days} дн.\n📝 {description}\n{features}",
        "en": "<b>{name}</b>\n💰 Price: {price} Stars\n⏰ Duration: {days} days\n📝 {description}\n{features}",
    },
    "plans_how_to_pay": {
        "ru": "💡 <b>Как оплатить?</b>\nНажмите на кнопку нужного плана ниже 👇",
        "en": "💡 <b>How to pay?</b>\nTap the button of the plan you want below 👇",
    },
    "plan_button": {
        "ru": "{name} - {price} ⭐",
        "en": "{name} - {price} ⭐",
    },
    "plan_not_found": {
        "ru": "❌ План не найден",
        "en": "❌ Plan not found",
    },
    "invoice_error": {
        "ru": "❌ Ошибка при создании счёта. Попробуйте позже или свяжитесь с поддержкой.",
        "en": "❌ Failed to create the invoice. Try again later or contact support.",
    },
    "pre_checkout_plan_missing": {
        "ru": "План подписки не найден",
        "en": "Subscription plan not found",
    },
    "pre_checkout_error": {
        "ru": "Ошибка при обработке платежа",
        "en": "Failed to process the payment",
    },
    "payment_success": {
        "ru": (
            "🎉 <b>Поздравляем!</b>\n\n"
            "✅ Подписка <b>{plan}</b> успешно активирована!\n\n"
            "📅 Срок действия: {days} дн.\n"
            "💎 Теперь вам доступны все возможности:\n\n"
            "{features}\n\n"
            "🚀 Начните использовать прямо сейчас!\n"
            "Введите /imagine [ваш промпт] для генерации изображения"
        ),
        "en": (
            "🎉 <b>Congratulations!</b>\n\n"
            "✅ The <b>{plan}</b> subscription is active!\n\n"
            "📅 Duration: {days} days\n"
            "💎 All of these are now available:\n\n"
            "{features}\n\n"
            "🚀 Start right away!\n"
            "Send /imagine [your prompt] to generate an image"
        ),
    },
    "payment_thanks": {
        "ru": "🙏 Спасибо за вашу поддержку!\n\nЕсли возникнут вопросы, используйте /help",
        "en": "🙏 Thank you for your support!\n\nIf you have any questions, use /help",
    },
    "payment_activation_failed": {
        "ru": (
            "❌ Ошибка при активации подписки.\n"
            "Платёж получен, но подписка не активирована.\n"
            "Пожалуйста, свяжитесь с поддержкой."
        ),
        "en": (
            "❌ Failed to activate the subscription.\n"
            "The payment was received but the subscription is not active.\n"
            "Please contact support."
        ),
    },
    "payment_admin_notification": {
        "ru": (
            "⚠️ Платёж без активации подписки\n"
            "Пользователь: {user_id}\nПлан: {plan}\nСумма: {amount} Stars\nТранзакция: {transaction}"
        ),
        "en": (
            "⚠️ Payment without subscription activation\n"
            "User: {user_id}\nPlan: {plan}\nAmount: {amount} Stars\nTransaction: {transaction}"
        ),
    },
    "quota_exceeded": {
        "ru": (
            "❌ Вы достигли лимита на сегодня!\n\n"
            "💎 Ваш план: {plan}\n"
            "📊 Лимит: {limit} в день\n"
            "⏰ Лимит обновится завтра\n\n"
            "⭐ Хотите больше? Улучшите подписку: /subscribe"
        ),
        "en": (
            "❌ You have reached today's limit!\n\n"
            "💎 Your plan: {plan}\n"
            "📊 Limit: {limit} per day\n"
            "⏰ The limit resets tomorrow\n\n"
            "⭐ Want more? Upgrade your subscription: /subscribe"
        ),
    },
    "quota_low": {
        "ru": "⚠️ Внимание: осталось {remaining} генераций на сегодня",
        "en": "⚠️ Heads up: {remaining} generations left for today",
    },
    "ai_unavailable": {
        "ru": "❌ AI сейчас недоступен. Попробуйте позже.",
        "en": "❌ AI is unavailable right now. Please try again later.",
    },
    "imagine_usage": {
        "ru": (
            "🍌 <b>Nano Banana - Генерация изображений</b>\n\n"
            "Использование: <code>/imagine [ваш промпт]</code>\n\n"
            "Пример: <code>/imagine кот в космосе</code>"
        ),
        "en": (
            "🍌 <b>Nano Banana - Image generation</b>\n\n"
            "Usage: <code>/imagine [your prompt]</code>\n\n"
            "Example: <code>/imagine a cat in space</code>"
        ),
    },
    "imagine_in_progress": {
        "ru": "🍌 Генерирую изображение...",
        "en": "🍌 Generating the image...",
    },
    "imagine_caption": {
        "ru": "🍌 <b>Nano Banana</b>\n\n📝 Промпт: \"{prompt}\"\n\n⏱️ Время: {ms}ms",
        "en": "🍌 <b>Nano Banana</b>\n\n📝 Prompt: \"{prompt}\"\n\n⏱️ Time: {ms}ms",
    },
    "imagine_error": {
        "ru": "❌ Ошибка при генерации изображения. Попробуй другой промпт или повтори позже.",
        "en": "❌ Image generation failed. Try another prompt or retry later.",
    },
    "photo_analysis_prompt": {
        "ru": "Опиши это изображение подробно",
        "en": "Describe this image in detail",
    },
    "photo_analyzing": {
        "ru": "🖼️ Анализирую изображение...",
        "en": "🖼️ Analyzing the image...",
    },
    "photo_analysis_result": {
        "ru": (
            "🤖 <b>Результат анализа:</b>\n\n{analysis}\n\n⏱️ Время: {ms}ms\n\n"
            "💡 <b>Подсказка:</b> Отправь фото с подписью, чтобы отредактировать его через Nano Banana! 🍌"
        ),
        "en": (
            "🤖 <b>Analysis:</b>\n\n{analysis}\n\n⏱️ Time: {ms}ms\n\n"
            "💡 <b>Tip:</b> Send a photo with a caption to edit it with Nano Banana! 🍌"
        ),
    },
    "photo_analysis_error": {
        "ru": "❌ Ошибка при анализе изображения",
        "en": "❌ Image analysis failed",
    },
    "photo_editing": {
        "ru": "🍌 Редактирую изображение...",
        "en": "🍌 Editing the image...",
    },
    "photo_edit_caption": {
        "ru": "🍌 <b>Nano Banana Edit</b>\n\n📝 Инструкция: \"{instruction}\"\n\n⏱️ Время: {ms}ms",
        "en": "🍌 <b>Nano Banana Edit</b>\n\n📝 Instruction: \"{instruction}\"\n\n⏱️ Time: {ms}ms",
    },
    "photo_edit_error": {
        "ru": "❌ Ошибка при редактировании изображения",
        "en": "❌ Image editing failed",
    },
    "voice_processing": {
        "ru": "🎤 Обрабатываю голосовое сообщение...",
        "en": "🎤 Processing the voice message...",
    },
    "voice_result": {
        "ru": "🎤 <b>Расшифровка:</b>\n\n{text}\n\n⏱️ Время: {ms}ms",
        "en": "🎤 <b>Transcription:</b>\n\n{text}\n\n⏱️ Time: {ms}ms",
    },
    "voice_error": {
        "ru": "❌ Ошибка при обработке голосового сообщения",
        "en": "❌ Failed to process the voice message",
    },
    "audio_processing": {
        "ru": "🎵 Анализирую аудио...",
        "en": "🎵 Analyzing the audio...",
    },
    "audio_result": {
        "ru": "🎵 <b>Анализ аудио:</b>\n\n{text}\n\n⏱️ Время: {ms}ms",
        "en": "🎵 <b>Audio analysis:</b>\n\n{text}\n\n⏱️ Time: {ms}ms",
    },
    "audio_error": {
        "ru": "❌ Ошибка при анализе аудио",
        "en": "❌ Audio analysis failed",
    },
    "video_prompt_default": {
        "ru": "Опиши содержание этого видео",
        "en": "Describe the content of this video",
    },
    "video_processing": {
        "ru": "🎬 Анализирую видео...",
        "en": "🎬 Analyzing the video...",
    },
    "video_result": {
        "ru": "🎬 <b>Анализ видео:</b>\n\n{text}\n\n⏱️ Время: {ms}ms",
        "en": "🎬 <b>Video analysis:</b>\n\n{text}\n\n⏱️ Time: {ms}ms",
    },
    "video_error": {
        "ru": "❌ Ошибка при анализе видео",
        "en": "❌ Video analysis failed",
    },
    "message_saved": {
        "ru": "✅ Сообщение сохранено!\n\n📝 Текст: \"{text}\"\n⏱️ Время сохранения: {ms}ms",
        "en": "✅ Message saved!\n\n📝 Text: \"{text}\"\n⏱️ Save time: {ms}ms",
    },
    "message_save_error": {
        "ru": "Произошла ошибка при обработке сообщения.",
        "en": "Failed to process the message.",
    },
    "ping_pending": {
        "ru": "🏓 Пингую...",
        "en": "🏓 Pinging...",
    },
    "ping_result": {
        "ru": "🏓 <b>Pong!</b>\n\n⏱️ Задержка: {ms}ms\n⏰ Время: {time}",
        "en": "🏓 <b>Pong!</b>\n\n⏱️ Latency: {ms}ms\n⏰ Time: {time}",
    },
    "ping_error": {
        "ru": "❌ Ошибка при выполнении команды /ping",
        "en": "❌ The /ping command failed",
    },
    "status_pending": {
        "ru": "⏳ Проверяю статус...",
        "en": "⏳ Checking status...",
    },
    "status_text": {
        "ru": (
            "<b>📊 Статус бота</b>\n\n"
            "🤖 Бот: {bot_ms}ms {bot_grade}\n"
            "🗄️ База данных: {db_ms}ms {db_grade}\n\n"
            "<b>📈 Запросы к БД</b>\n"
            "Всего: {queries}\n"
            "Среднее: {avg_ms}ms\n"
            "Минимум: {min_ms}\n"
            "Максимум: {max_ms}ms\n\n"
            "⏱️ Общее время: {total_ms}ms {total_grade}\n"
            "⏰ Время: {time}"
        ),
        "en": (
            "<b>📊 Bot status</b>\n\n"
            "🤖 Bot: {bot_ms}ms {bot_grade}\n"
            "🗄️ Database: {db_ms}ms {db_grade}\n\n"
            "<b>📈 Database queries</b>\n"
            "Total: {queries}\n"
            "Average: {avg_ms}ms\n"
            "Min: {min_ms}\n"
            "Max: {max_ms}ms\n\n"
            "⏱️ Total time: {total_ms}ms {total_grade}\n"
            "⏰ Time: {time}"
        ),
    },
    "status_no_queries": {
        "ru": "Н/Д",
        "en": "N/A",
    },
    "status_error": {
        "ru": "❌ Ошибка при выполнении команды /status",
        "en": "❌ The /status command failed",
    },
}

BUTTONS: Dict[str, Dict[str, str]] = {
    "subscription_upgrade": {
        "ru": "⭐ Улучшить подписку",
        "en": "⭐ Upgrade subscription",
    },
    "subscription_manage": {
        "ru": "⭐ Управление подпиской",
        "en": "⭐ Manage subscription",
    },
}

LATENCY_GRADES: Dict[str, Dict[str, str]] = {
    "excellent": {
        "ru": "🟢 Отлично",
        "en": "🟢 Excellent",
    },
    "good": {
        "ru": "🟡 Хорошо",
        "en": "🟡 Good",
    },
    "medium": {
        "ru": "🟠 Средне",
        "en": "🟠 Fair",
    },
    "slow": {
        "ru": "🔴 Медленно",
        "en": "🔴 Slow",
    },
}

USAGE_ACTION_LABELS = {
    "dailyGenerations": {
        "ru": "🎨 Генерации",
        "en": "🎨 Generations",
    },
    "imageGenerations": {
        "ru": "🖼️ Изображения",
        "en": "🖼️ Images",
    },
    "voiceAnalysis": {
        "ru": "🎤 Голос",
        "en": "🎤 Voice",
    },
}


def resolve_language(language_code: str | None) -> str:
    """Map a Telegram ``language_code`` (``en-US``, ``ru``...) to a supported language."""
    if not language_code:
        return DEFAULT_LANGUAGE
    base = language_code.split("-")[0].strip().lower()
    return base if base in SUPPORTED_LANGUAGES else "en"


def get_text(key: str, language: str | None, /, **format_kwargs: str) -> str:
    """Return localized text for the given key and language."""
    lang = (language or DEFAULT_LANGUAGE).lower()
    if key in MESSAGES:
        template = MESSAGES[key].get(lang) or MESSAGES[key][DEFAULT_LANGUAGE]
    else:
        template = key
    return template.format(**format_kwargs)


def get_label(mapping: Dict[str, Dict[str, str]], key: str, language: str | None) -> str:
    """Return localized label from mapping with graceful fallback."""
    lang = (language or DEFAULT_LANGUAGE).lower()
    variants = mapping.get(key, {})
    return variants.get(lang) or variants.get(DEFAULT_LANGUAGE) or key
