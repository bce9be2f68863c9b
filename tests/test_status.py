from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from bot.hendlers.client.status import measure_database, status_router
from bot.utils import latency_grade, render_status
from db import QueryStats, QueryStatsSnapshot


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    await engine.dispose()


def _handler(name: str):
    router = status_router()
    return next(handler.callback for handler in router.message.handlers if handler.callback.__name__ == name)


def _message():
    sent = SimpleNamespace(edit_text=AsyncMock())
    return SimpleNamespace(from_user=SimpleNamespace(id=1), answer=AsyncMock(return_value=sent)), sent


def test_empty_stats_have_no_minimum():
    assert QueryStats().snapshot() == QueryStatsSnapshot(queries=0, avg_ms=0.0, min_ms=None, max_ms=0.0)


def test_recorded_durations_are_aggregated():
    stats = QueryStats()
    for elapsed in (4.0, 1.0, 7.0):
        stats.record(elapsed)

    assert stats.snapshot() == QueryStatsSnapshot(queries=3, avg_ms=4.0, min_ms=1.0, max_ms=7.0)

    stats.reset()
    assert stats.snapshot().queries == 0


async def test_attached_stats_time_every_statement(engine):
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 0"))
    stats = QueryStats()
    stats.attach(engine)

    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
        await conn.execute(text("SELECT 2"))

    snapshot = stats.snapshot()
    assert snapshot.queries == 2
    assert 0 <= snapshot.min_ms <= snapshot.avg_ms <= snapshot.max_ms

    stats.detach(engine)
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 3"))
    assert stats.snapshot().queries == 2


@pytest.mark.parametrize(
    ("elapsed", "grade"),
    [
        (0, "🟢 Excellent"),
        (99, "🟢 Excellent"),
        (100, "🟡 Good"),
        (299, "🟡 Good"),
        (300, "🟠 Fair"),
        (499, "🟠 Fair"),
        (500, "🔴 Slow"),
        (5000, "🔴 Slow"),
    ],
)
def test_latency_grade_boundaries(elapsed, grade):
    assert latency_grade(elapsed, "en") == grade


def test_status_without_queries_shows_placeholder():
    rendered = render_status(12, 3, 40, QueryStats().snapshot(), datetime(2024, 5, 10, 12, 0), "en")

    assert "Bot: 12ms 🟢 Excellent" in rendered
    assert "Database: 3ms" in rendered
    assert "Min: N/A" in rendered
    assert "Total time: 40ms" in rendered


async def test_measure_database_counts_users(session_factory):
    async with session_factory() as session:
        assert await measure_database(session) >= 0


async def test_ping_edits_the_pending_reply():
    message, sent = _message()

    await _handler("ping")(message, language="en")

    assert message.answer.await_args.args[0] == "🏓 Pinging..."
    sent.edit_text.assert_awaited_once()
    assert "Pong!" in sent.edit_text.await_args.args[0]


async def test_status_reports_database_timings(session_factory):
    message, sent = _message()
    stats = QueryStats()
    stats.record(2.5)

    async with session_factory() as session:
        await _handler("status")(message, session=session, language="en", db_stats=stats)

    assert message.answer.await_args.args[0] == "⏳ Checking status..."
    reply = sent.edit_text.await_args.args[0]
    assert "Total: 1" in reply
    assert "Min: 2.50ms" in reply
