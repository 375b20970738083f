"""
===============================================================================
CRC CARD — infrastructure/db/instrumentation.py
===============================================================================

Classes:
  - TimedConnection (Proxy)
  - InstrumentedConnectionPool (Facade/Proxy)

Responsibilities:
  - Time conn.execute(...) without touching the repositories.
  - Log slow queries (low cardinality: statement kind only, never params).
  - Optional healthcheck on acquire (SELECT 1).
  - Turn acquisition failures (pool exhausted, queue full, timeout) into
    DatabaseConnectionError.

Collaborators:
  - crosscutting.logger / crosscutting.metrics
  - psycopg_pool.ConnectionPool (real pool)
===============================================================================
"""

from __future__ import annotations

import time
from typing import Any, ContextManager

from ...crosscutting.logger import logger
from ...crosscutting.metrics import observe_db_query_duration
from .errors import DatabaseConnectionError, PoolClosedError


def _statement_kind(sql: Any) -> str:
    """First SQL keyword (SELECT/INSERT/...) for low-cardinality labels."""
    parts = str(sql).lstrip().split(None, 1)
    return parts[0].upper() if parts else "UNKNOWN"


class TimedConnection:
    """
    Connection proxy: wraps execute() and delegates everything else.
    """

    def __init__(self, inner_conn, *, slow_query_seconds: float) -> None:
        self._conn = inner_conn
        self._slow = slow_query_seconds

    def execute(self, sql, *args, **kwargs):
        start = time.perf_counter()
        try:
            return self._conn.execute(sql, *args, **kwargs)
        finally:
            elapsed = time.perf_counter() - start
            kind = _statement_kind(sql)
            observe_db_query_duration(kind, elapsed)
            if elapsed >= self._slow:
                logger.warning(
                    "slow DB query",
                    extra={"kind": kind, "seconds": round(elapsed, 4)},
                )

    def __getattr__(self, item: str):
        return getattr(self._conn, item)


class _ConnectionContext(ContextManager[TimedConnection]):
    """Wraps the pool's own context manager."""

    def __init__(
        self, inner_ctx, *, slow_query_seconds: float, healthcheck: bool
    ) -> None:
        self._inner_ctx = inner_ctx
        self._slow = slow_query_seconds
        self._healthcheck = healthcheck

    def __enter__(self) -> TimedConnection:
        try:
            conn = self._inner_ctx.__enter__()
        except Exception as exc:
            raise DatabaseConnectionError("Could not acquire a DB connection.") from exc

        if self._healthcheck:
            try:
                conn.execute("SELECT 1")
            except Exception as exc:
                self._inner_ctx.__exit__(type(exc), exc, exc.__traceback__)
                raise DatabaseConnectionError(
                    "DB connection failed its healthcheck."
                ) from exc

        return TimedConnection(conn, slow_query_seconds=self._slow)

    def __exit__(self, exc_type, exc, tb) -> bool:
        return self._inner_ctx.__exit__(exc_type, exc, tb)


class InstrumentedConnectionPool:
    """
    Facade over the real pool.

    Repositories keep writing `with pool.connection() as conn:` and get a
    TimedConnection back.
    """

    def __init__(
        self,
        inner_pool,
        *,
        slow_query_seconds: float = 0.25,
        healthcheck_on_acquire: bool = True,
    ) -> None:
        self._pool = inner_pool
        self._slow_seconds = slow_query_seconds
        self._healthcheck = healthcheck_on_acquire
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def connection(self, *args, **kwargs) -> ContextManager[TimedConnection]:
        if self._closed:
            raise PoolClosedError("Connection pool is closed.")
        inner_ctx = self._pool.connection(*args, **kwargs)
        return _ConnectionContext(
            inner_ctx,
            slow_query_seconds=self._slow_seconds,
            healthcheck=self._healthcheck,
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._pool.close()

    # Delegate the rest of the pool API (get_stats, wait, ...).
    def __getattr__(self, item: str):
        return getattr(self._pool, item)
