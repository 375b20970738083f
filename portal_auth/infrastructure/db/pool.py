"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================

Component:
  Bounded PostgreSQL connection pool (one per container, no module global)

Responsibilities:
  - Build a psycopg_pool.ConnectionPool from Settings.
  - Bound it: max_size connections, max_waiting queued callers, timeout per
    acquisition.
  - Configure each connection (statement_timeout).
  - Return it wrapped in InstrumentedConnectionPool.

Collaborators:
  - psycopg_pool.ConnectionPool
  - crosscutting.config.Settings
  - infrastructure/db/instrumentation.InstrumentedConnectionPool
===============================================================================
"""

from __future__ import annotations

import os
from typing import Callable

from ...crosscutting.config import Settings
from ...crosscutting.logger import logger
from .instrumentation import InstrumentedConnectionPool


def _statement_timeout_configurer(timeout_ms: int) -> Callable[[object], None]:
    """Connection hook applied by the pool to every new connection."""

    def _configure(conn) -> None:
        if timeout_ms > 0:
            conn.execute(f"SET statement_timeout = {int(timeout_ms)}")
            conn.commit()

    return _configure


def create_pool(settings: Settings) -> InstrumentedConnectionPool:
    """
    Open a bounded pool for the configured database.

    Callers beyond max_size wait in a queue of at most db_pool_max_waiting
    (0 = unbounded) for up to db_pool_timeout_seconds, then fail.
    """
    # Lazy import: the app can run with STORE_BACKEND=memory without psycopg_pool.
    from psycopg_pool import ConnectionPool

    logger.info(
        "Opening DB pool",
        extra={
            "min_size": settings.db_pool_min_size,
            "max_size": settings.db_pool_max_size,
            "max_waiting": settings.db_pool_max_waiting,
        },
    )

    real_pool = ConnectionPool(
        conninfo=settings.resolved_database_url(),
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        max_waiting=settings.db_pool_max_waiting,
        timeout=settings.db_pool_timeout_seconds,
        configure=_statement_timeout_configurer(settings.db_statement_timeout_ms),
        open=True,
    )

    return InstrumentedConnectionPool(
        real_pool,
        slow_query_seconds=float(os.getenv("DB_SLOW_QUERY_SECONDS", "0.25")),
        healthcheck_on_acquire=os.getenv("DB_HEALTHCHECK_ON_ACQUIRE", "true").lower()
        in {"1", "true", "yes"},
    )


def close_pool(pool: InstrumentedConnectionPool | None) -> None:
    """Close the pool (idempotent)."""
    if pool is None or pool.closed:
        return
    logger.info("Closing DB pool")
    pool.close()
    logger.info("DB pool closed")
