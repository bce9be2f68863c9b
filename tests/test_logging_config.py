import logging

import pytest

from logging_config import (
    available_log_languages,
    get_log_language,
    localize,
    register_log_translations,
    set_log_language,
)


@pytest.fixture(autouse=True)
def restore_language():
    previous = get_log_language()
    yield
    set_log_language(previous)


def test_registered_template_is_translated():
    register_log_translations({"Quota checked for %s": {"ru": "Квота проверена для %s"}})

    set_log_language("ru")
    assert localize("Quota checked for %s") == "Квота проверена для %s"

    set_log_language("en")
    assert localize("Quota checked for %s") == "Quota checked for %s"


def test_unknown_template_is_left_alone():
    set_log_language("ru")

    assert localize("never registered %s") == "never registered %s"


def test_unknown_language_falls_back_to_default():
    set_log_language("klingon")

    assert get_log_language() == "ru"
    assert "en" in available_log_languages()


def test_subscription_templates_have_russian_translations():
    import bot.subscription.service  # noqa: F401

    set_log_language("ru")
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "Plan not found: %s", ("gold",), None)

    assert localize(record.msg) % record.args == "План не найден: gold"
