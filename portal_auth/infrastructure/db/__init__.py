"""DB infra: pool factory + typed errors + instrumentation."""

from .errors import DatabaseConnectionError, DatabasePoolError, PoolClosedError
from .pool import close_pool, create_pool

__all__ = [
    "create_pool",
    "close_pool",
    "DatabasePoolError",
    "DatabaseConnectionError",
    "PoolClosedError",
]
