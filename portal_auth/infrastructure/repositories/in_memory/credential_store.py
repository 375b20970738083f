"""
============================================================
CRC CARD — infrastructure/repositories/in_memory/credential_store.py
============================================================
Class: InMemoryCredentialStore

Responsibilities:
  - Keep credential records in memory with the same contract as Postgres.
  - Store identities encrypted through the same IdentityCipher.
  - Enforce identity uniqueness (DuplicateIdentityError).
  - Keep ordering aligned with Postgres: created_at DESC, id DESC.

Collaborators:
  - infrastructure.services.identity_cipher.IdentityCipher
  - identity.users.User / UserRole

Constraints / Notes:
  - Thread-safe: every read/write happens under a Lock.
  - Lookup decrypt-compares every record (no index).
============================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from itertools import count
from threading import Lock
from typing import Callable, Dict, List, Optional

from ....identity.errors import DuplicateIdentityError
from ....identity.users import User, UserRole
from ...services.identity_cipher import IdentityCipher


@dataclass(slots=True)
class _Row:
    id: int
    identity_ciphertext: bytes
    identity_lookup: bytes
    password_hash: str
    role: UserRole
    created_at: datetime


class InMemoryCredentialStore:
    """
    Thread-safe in-memory credential store.

    _rows plays the table (id -> row); ids come from a monotonic counter like
    a BIGINT IDENTITY column.
    """

    def __init__(
        self,
        cipher: IdentityCipher,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._cipher = cipher
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = Lock()
        self._rows: Dict[int, _Row] = {}
        self._ids = count(1)

    # =========================================================
    # Internal helpers
    # =========================================================
    def _to_user(self, row: _Row) -> User:
        return User(
            id=row.id,
            identity=self._cipher.decrypt(row.identity_ciphertext),
            password_hash=row.password_hash,
            role=row.role,
            created_at=row.created_at,
        )

    def _lookup_taken(self, lookup: bytes, *, exclude_id: int | None = None) -> bool:
        return any(
            row.identity_lookup == lookup and row.id != exclude_id
            for row in self._rows.values()
        )

    @staticmethod
    def _sort_key(row: _Row) -> tuple[datetime, int]:
        return (row.created_at, row.id)

    # =========================================================
    # CredentialStore API
    # =========================================================
    def find_by_identity(self, identity: str) -> Optional[User]:
        with self._lock:
            for row in self._rows.values():
                if self._cipher.decrypt(row.identity_ciphertext) == identity:
                    return self._to_user(row)
        return None

    def get_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            row = self._rows.get(user_id)
            return self._to_user(row) if row else None

    def create(self, identity: str, password_hash: str, role: UserRole) -> User:
        lookup = self._cipher.lookup_key(identity)
        with self._lock:
            if self._lookup_taken(lookup):
                raise DuplicateIdentityError()
            row = _Row(
                id=next(self._ids),
                identity_ciphertext=self._cipher.encrypt(identity),
                identity_lookup=lookup,
                password_hash=password_hash,
                role=UserRole(role),
                created_at=self._clock(),
            )
            self._rows[row.id] = row
            return self._to_user(row)

    def update_identity(self, user_id: int, new_identity: str) -> Optional[User]:
        lookup = self._cipher.lookup_key(new_identity)
        with self._lock:
            row = self._rows.get(user_id)
            if row is None:
                return None
            if self._lookup_taken(lookup, exclude_id=user_id):
                raise DuplicateIdentityError()
            row.identity_ciphertext = self._cipher.encrypt(new_identity)
            row.identity_lookup = lookup
            return self._to_user(row)

    def update_secret(self, user_id: int, password_hash: str) -> Optional[User]:
        with self._lock:
            row = self._rows.get(user_id)
            if row is None:
                return None
            row.password_hash = password_hash
            return self._to_user(row)

    def delete(self, user_id: int) -> bool:
        with self._lock:
            return self._rows.pop(user_id, None) is not None

    def list(self) -> List[User]:
        with self._lock:
            rows = sorted(self._rows.values(), key=self._sort_key, reverse=True)
            return [self._to_user(row) for row in rows]

    def ping(self) -> bool:
        return True
