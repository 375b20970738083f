"""
===============================================================================
CRC CARD — identity/demo_identities.py
===============================================================================

Module:
    Built-in demo accounts

Responsibilities:
    - Enumerate the closed set of demo identities (admin / staff / doctor and
      their capitalised legacy spellings), each with its password and role.
    - Match an identity exactly (case-sensitive) against that set.

Collaborators:
    - identity/authenticator.py: checks this set before the credential store.
    - application/usecases/users/get_profile.py: synthesizes demo profiles.

Notes:
    - Demo accounts never exist in the credential store and cannot be
      modified or deleted.
    - The whole set can be switched off with DEMO_IDENTITIES_ENABLED=false.
===============================================================================
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from enum import Enum

from .users import UserRole


@dataclass(frozen=True, slots=True)
class DemoAccount:
    username: str
    password: str
    role: UserRole
    first_name: str
    last_name: str = "User"

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def password_matches(self, candidate: str) -> bool:
        return hmac.compare_digest(
            candidate.encode("utf-8"), self.password.encode("utf-8")
        )


class DemoIdentity(Enum):
    ADMIN = DemoAccount("admin", "admin", UserRole.ADMIN, "Admin")
    STAFF = DemoAccount("staff", "staff", UserRole.STAFF, "Staff")
    DOCTOR = DemoAccount("doctor", "doctor", UserRole.DOCTOR, "Doctor")
    # Legacy capitalised spellings
    ADMIN_LEGACY = DemoAccount("Admin", "Admin", UserRole.ADMIN, "Admin")
    STAFF_LEGACY = DemoAccount("Staff", "Staff", UserRole.STAFF, "Staff")
    DOCTOR_LEGACY = DemoAccount("Doctor", "Doctor", UserRole.DOCTOR, "Doctor")

    @property
    def account(self) -> DemoAccount:
        return self.value

    @classmethod
    def match(cls, identity: str) -> DemoAccount | None:
        """Exact, case-sensitive lookup by username."""
        for member in cls:
            if member.value.username == identity:
                return member.value
        return None
