"""
============================================================
CRC CARD
============================================================
Class: infrastructure.repositories (package exports)

Responsibilities:
- Expose the concrete CredentialStore implementations from one import point.

Collaborators:
- Postgres store (raw SQL)
- In-memory store (tests / STORE_BACKEND=memory)
============================================================
"""

from .in_memory import InMemoryCredentialStore
from .postgres import PostgresCredentialStore

__all__ = ["InMemoryCredentialStore", "PostgresCredentialStore"]
