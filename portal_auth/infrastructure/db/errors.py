"""
===============================================================================
CRC CARD — infrastructure/db/errors.py
===============================================================================

Component:
  Typed pool / connectivity errors

Responsibilities:
  - Avoid generic RuntimeError.
  - Distinguish "could not acquire" (exhausted, queue full, timeout) from
    "pool already closed".
===============================================================================
"""


class DatabasePoolError(Exception):
    """Base for connection pool errors."""


class PoolClosedError(DatabasePoolError):
    """The pool was used after close_pool()."""


class DatabaseConnectionError(DatabasePoolError):
    """Failed to acquire or validate a pooled connection."""
