"""PostgreSQL repository implementations (raw SQL over psycopg)."""

from .credential_store import PostgresCredentialStore

__all__ = ["PostgresCredentialStore"]
