"""
===============================================================================
CRC CARD — identity/users.py
===============================================================================

Module:
    User models

Responsibilities:
    - Define the closed set of user roles.
    - Define the User record used by login, authorization and user management.

Collaborators:
    - identity/role_guard.py: maps operations to allowed roles.
    - infrastructure/repositories/*: map stored rows -> User.
    - application/usecases/users: return User records to the API.

Notes:
    - No business logic here: only data shapes.
    - `identity` is the decrypted username; stores never persist it in clear.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    """Closed set of portal roles."""

    ADMIN = "admin"
    STAFF = "staff"
    DOCTOR = "doctor"

    @classmethod
    def parse(cls, value: object) -> "UserRole | None":
        """Return the role for `value`, or None when it is outside the set."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class User:
    """Credential record as seen by the application (identity decrypted)."""

    id: int
    identity: str
    password_hash: str
    role: UserRole
    created_at: datetime | None = None
