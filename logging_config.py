"""Logging setup: rich console output and translated log templates.

Modules log English %-style templates and register translations for them
with :func:`register_log_translations`. A filter on the root handlers swaps
the template for the active language before the record is formatted, so
arguments are interpolated exactly as in the original message.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, Mapping, MutableMapping

from rich.console import Console
from rich.logging import RichHandler

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LOG_FORMAT = "%(name)s | %(message)s"

_BASE_LANGUAGE = "en"
_DEFAULT_LANGUAGE = "ru"
_active_language = _DEFAULT_LANGUAGE
_translations: dict[str, dict[str, str]] = {}
_languages: set[str] = {_BASE_LANGUAGE, _DEFAULT_LANGUAGE}

# Library loggers and the env var that overrides each default level
_LIBRARY_LEVELS: dict[str, tuple[str, str]] = {
    "aiogram.event": ("AIOGRAM_EVENT_LOG_LEVEL", "INFO"),
    "aiogram.dispatcher": ("AIOGRAM_DISPATCHER_LOG_LEVEL", "INFO"),
    "aiohttp.access": ("AIOHTTP_ACCESS_LOG_LEVEL", "WARNING"),
    "aiosqlite": ("SQL_LOG_LEVEL", "INFO"),
    "sqlalchemy.engine": ("SQLALCHEMY_LOG_LEVEL", "WARNING"),
    "asyncio": ("ASYNCIO_LOG_LEVEL", "WARNING"),
}


def localize(template: str) -> str:
    """Return ``template`` in the active log language, or unchanged."""
    return _translations.get(template, {}).get(_active_language, template)


class _LocalizationFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = localize(record.msg)
        return True


def _coerce_level(value: str | int | None, fallback: int) -> int:
    if value is None:
        return fallback
    if isinstance(value, int):
        return value
    candidate = value.strip().upper()
    if candidate.isdigit():
        return int(candidate)
    level = logging.getLevelName(candidate)
    return level if isinstance(level, int) else fallback


def set_log_language(language: str | None) -> None:
    """Switch the language of subsequent records; unknown values reset to the default."""
    global _active_language
    normalized = (language or "").strip().lower()
    _active_language = normalized if normalized in _languages else _DEFAULT_LANGUAGE


def get_log_language() -> str:
    return _active_language


def register_log_translations(translations: Mapping[str, Mapping[str, str]]) -> None:
    """Register translations keyed by the English template passed to the logger.

    Placeholders must be kept intact in every translation.
    """
    for template, localized in translations.items():
        bucket = _translations.setdefault(template, {})
        for language, message in localized.items():
            language = language.strip().lower()
            if language:
                bucket[language] = message
                _languages.add(language)


def available_log_languages() -> tuple[str, ...]:
    return tuple(sorted(_languages))


def get_default_log_language() -> str:
    return _DEFAULT_LANGUAGE


def setup_logging(
    *,
    level: str | int | None = None,
    module_levels: Mapping[str, str | int] | None = None,
    noisy_modules: Iterable[str] | None = None,
    language: str | None = None,
) -> None:
    """Configure the root logger with a rich handler.

    ``level`` falls back to ``LOG_LEVEL`` and then ``INFO``; ``language`` to
    ``LOG_LANGUAGE``. ``module_levels`` override the library defaults and
    ``noisy_modules`` are capped at ``INFO``.
    """
    set_log_language(language or os.getenv("LOG_LANGUAGE"))
    base_level = _coerce_level(level or os.getenv("LOG_LEVEL"), logging.INFO)

    handler = RichHandler(
        markup=False,
        rich_tracebacks=True,
        show_path=False,
        show_time=True,
        log_time_format=_DATE_FORMAT,
        console=Console(stderr=True, soft_wrap=False),
    )
    handler.addFilter(_LocalizationFilter())

    logging.basicConfig(
        level=base_level,
        format=_LOG_FORMAT,
        datefmt=_DATE_FORMAT,
        handlers=[handler],
        force=True,  # Replace any handlers pre-configured by libraries
    )
    logging.captureWarnings(True)

    levels: MutableMapping[str, str | int] = {
        name: os.getenv(env_var, default) for name, (env_var, default) in _LIBRARY_LEVELS.items()
    }
    if module_levels:
        levels.update(module_levels)
    for module_name in noisy_modules or ():
        levels.setdefault(module_name, "INFO")

    for module_name, module_level in levels.items():
        logging.getLogger(module_name).setLevel(_coerce_level(module_level, logging.INFO))


__all__ = [
    "setup_logging",
    "set_log_language",
    "get_log_language",
    "localize",
    "register_log_translations",
    "available_log_languages",
    "get_default_log_language",
]
