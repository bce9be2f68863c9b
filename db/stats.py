"""Per-query timing collected from SQLAlchemy cursor events."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine

_STARTED_KEY = "query_started_at"


@dataclass(frozen=True)
class QueryStatsSnapshot:
    queries: int
    avg_ms: float
    min_ms: Optional[float]
    max_ms: float


class QueryStats:
    """Running count and min/avg/max duration of executed statements."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._queries = 0
        self._total_ms = 0.0
        self._min_ms: Optional[float] = None
        self._max_ms = 0.0

    def record(self, elapsed_ms: float) -> None:
        self._queries += 1
        self._total_ms += elapsed_ms
        self._min_ms = elapsed_ms if self._min_ms is None else min(self._min_ms, elapsed_ms)
        self._max_ms = max(self._max_ms, elapsed_ms)

    def snapshot(self) -> QueryStatsSnapshot:
        avg_ms = self._total_ms / self._queries if self._queries else 0.0
        return QueryStatsSnapshot(
            queries=self._queries,
            avg_ms=avg_ms,
            min_ms=self._min_ms,
            max_ms=self._max_ms,
        )

    def attach(self, engine: AsyncEngine) -> None:
        """Time every statement executed through ``engine``."""
        sync_engine = engine.sync_engine
        event.listen(sync_engine, "before_cursor_execute", self._before_cursor_execute)
        event.listen(sync_engine, "after_cursor_execute", self._after_cursor_execute)

    def detach(self, engine: AsyncEngine) -> None:
        sync_engine = engine.sync_engine
        event.remove(sync_engine, "before_cursor_execute", self._before_cursor_execute)
        event.remove(sync_engine, "after_cursor_execute", self._after_cursor_execute)

    def _before_cursor_execute(self, conn, cursor, statement, parameters, context, executemany) -> None:
        conn.info.setdefault(_STARTED_KEY, []).append(time.perf_counter())

    def _after_cursor_execute(self, conn, cursor, statement, parameters, context, executemany) -> None:
        started = conn.info.get(_STARTED_KEY)
        if not started:
            return
        self.record((time.perf_counter() - started.pop()) * 1000)
