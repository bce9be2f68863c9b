"""Per-user, per-action daily usage counters."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from logging_config import register_log_translations

from .plans import UsageAction
from .store import StoreError, UsageStore

logger = logging.getLogger(__name__)

register_log_translations(
    {
        "Error getting usage stats: %s": {
            "ru": "Ошибка при получении статистики использования: %s",
        },
        "Error recording usage: %s": {
            "ru": "Ошибка при записи использования: %s",
        },
        "User %s has %s usage rows for %s today": {
            "ru": "У пользователя %s %s строк использования %s за сегодня",
        },
    }
)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


class UsageLedger:
    """Daily counters backing quota checks.

    "Today" begins at local midnight of the process clock, not of the user.

    Reads fail open: when the store is unavailable usage is reported as zero
    so that a broken database never blocks a feature. Increments are
    read-then-write and not atomic; two concurrent increments for the same
    user and action may lose one count, and two concurrent first increments
    of the day may create two rows. Such duplicate rows are summed on read.
    """

    def __init__(self, store: UsageStore, *, clock: Callable[[], datetime] = datetime.now) -> None:
        self._store = store
        self._clock = clock

    async def get_today_usage(self, user_id: int, action: UsageAction) -> int:
        action = UsageAction(action)
        since = start_of_day(self._clock())
        try:
            records = await self._store.find_since(user_id, action, since)
        except StoreError as e:
            logger.error("Error getting usage stats: %s", e)
            return 0
        return sum(record.count for record in records)

    async def record_usage(self, user_id: int, action: UsageAction) -> None:
        action = UsageAction(action)
        now = self._clock()
        try:
            records = await self._store.find_since(user_id, action, start_of_day(now))
            if records:
                if len(records) > 1:
                    logger.warning(
                        "User %s has %s usage rows for %s today",
                        user_id,
                        len(records),
                        action.value,
                    )
                first = records[0]
                await self._store.set_count(first.id, first.count + 1)
            else:
                await self._store.insert(user_id, action, 1, now)
        except StoreError as e:
            logger.error("Error recording usage: %s", e)
