from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from bot.subscription import UsageAction, UsageLedger, start_of_day


def test_start_of_day():
    assert start_of_day(datetime(2024, 5, 10, 23, 59, 59, 999)) == datetime(2024, 5, 10)


async def test_first_use_creates_row_then_increments_it(ledger, usage_store, clock):
    await ledger.record_usage(1, UsageAction.DAILY_GENERATIONS)
    await ledger.record_usage(1, UsageAction.DAILY_GENERATIONS)

    rows = await usage_store.find_since(1, UsageAction.DAILY_GENERATIONS, start_of_day(clock.now))
    assert len(rows) == 1
    assert rows[0].count == 2
    assert await ledger.get_today_usage(1, UsageAction.DAILY_GENERATIONS) == 2


async def test_usage_is_tracked_per_action_and_user(ledger):
    await ledger.record_usage(1, UsageAction.VOICE_ANALYSIS)

    assert await ledger.get_today_usage(1, UsageAction.VOICE_ANALYSIS) == 1
    assert await ledger.get_today_usage(1, UsageAction.IMAGE_GENERATIONS) == 0
    assert await ledger.get_today_usage(2, UsageAction.VOICE_ANALYSIS) == 0


async def test_duplicate_rows_of_the_same_day_are_summed(ledger, usage_store, clock):
    first = await usage_store.insert(1, UsageAction.IMAGE_GENERATIONS, 2, clock.now - timedelta(hours=2))
    await usage_store.insert(1, UsageAction.IMAGE_GENERATIONS, 3, clock.now - timedelta(hours=1))

    assert await ledger.get_today_usage(1, UsageAction.IMAGE_GENERATIONS) == 5

    await ledger.record_usage(1, UsageAction.IMAGE_GENERATIONS)

    rows = await usage_store.find_since(1, UsageAction.IMAGE_GENERATIONS, start_of_day(clock.now))
    assert rows[0].id == first.id
    assert [row.count for row in rows] == [3, 3]
    assert await ledger.get_today_usage(1, UsageAction.IMAGE_GENERATIONS) == 6


async def test_usage_resets_at_local_midnight(ledger, clock):
    clock.now = datetime(2024, 5, 10, 23, 59)
    await ledger.record_usage(1, UsageAction.DAILY_GENERATIONS)
    assert await ledger.get_today_usage(1, UsageAction.DAILY_GENERATIONS) == 1

    clock.now = datetime(2024, 5, 11, 0, 0)
    assert await ledger.get_today_usage(1, UsageAction.DAILY_GENERATIONS) == 0

    await ledger.record_usage(1, UsageAction.DAILY_GENERATIONS)
    assert await ledger.get_today_usage(1, UsageAction.DAILY_GENERATIONS) == 1


async def test_action_strings_are_coerced(ledger):
    await ledger.record_usage(1, "voiceAnalysis")

    assert await ledger.get_today_usage(1, "voiceAnalysis") == 1
    with pytest.raises(ValueError):
        await ledger.get_today_usage(1, "unknown")


async def test_unavailable_store_fails_open(unavailable_usage_store, clock):
    ledger = UsageLedger(unavailable_usage_store, clock=clock)

    assert await ledger.get_today_usage(1, UsageAction.DAILY_GENERATIONS) == 0
    await ledger.record_usage(1, UsageAction.DAILY_GENERATIONS)
