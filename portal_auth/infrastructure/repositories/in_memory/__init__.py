"""In-memory repository implementations (tests / local runs)."""

from .credential_store import InMemoryCredentialStore

__all__ = ["InMemoryCredentialStore"]
