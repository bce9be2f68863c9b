"""Localization utilities and message dictionaries for the bot."""

from .messages import (
    DEFAULT_LANGUAGE,
    SUPPORTED_LANGUAGES,
    MESSAGES,
    BUTTONS,
    USAGE_ACTION_LABELS,
    LATENCY_GRADES,
    get_text,
    get_label,
    resolve_language,
)

__all__ = [
    "DEFAULT_LANGUAGE",
    "SUPPORTED_LANGUAGES",
    "MESSAGES",
    "BUTTONS",
    "USAGE_ACTION_LABELS",
    "LATENCY_GRADES",
    "get_text",
    "get_label",
    "resolve_language",
]
