"""
===============================================================================
CRC CARD — identity/passwords.py
===============================================================================

Module:
    Password hashers

Responsibilities:
    - Sha256PasswordHasher: unsalted SHA-256 hex digest. Matches the digests
      already stored for existing accounts.
    - Argon2PasswordHasher: salted Argon2id, selected with PASSWORD_SCHEME=argon2.
    - build_password_hasher(): pick the implementation from settings.

Collaborators:
    - identity/authenticator.py (verify on login)
    - application/usecases/users (hash on create / change password)
    - argon2-cffi

Notes:
    - sha256 is deterministic: equal passwords give equal digests across
      accounts. Kept as the default so existing digests keep verifying.
===============================================================================
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Protocol

from argon2 import PasswordHasher as _Argon2Hasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError


class PasswordHasher(Protocol):
    scheme: str

    def hash(self, plaintext: str) -> str: ...

    def verify(self, candidate: str, digest: str) -> bool: ...


class Sha256PasswordHasher:
    """hash(p) = hex(sha256(utf8(p))); verify is hash(candidate) == digest."""

    scheme = "sha256"

    def hash(self, plaintext: str) -> str:
        return hashlib.sha256(plaintext.encode("utf-8")).hexdigest()

    def verify(self, candidate: str, digest: str) -> bool:
        if not digest:
            return False
        return hmac.compare_digest(self.hash(candidate), digest)


class Argon2PasswordHasher:
    """Argon2id via argon2-cffi (salted, tunable cost)."""

    scheme = "argon2"

    def __init__(self, hasher: _Argon2Hasher | None = None) -> None:
        self._hasher = hasher or _Argon2Hasher()

    def hash(self, plaintext: str) -> str:
        return self._hasher.hash(plaintext)

    def verify(self, candidate: str, digest: str) -> bool:
        try:
            return self._hasher.verify(digest, candidate)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False


def build_password_hasher(scheme: str) -> PasswordHasher:
    """Return the hasher for `scheme` ("sha256" | "argon2")."""
    normalized = (scheme or "").strip().lower()
    if normalized == "sha256":
        return Sha256PasswordHasher()
    if normalized == "argon2":
        return Argon2PasswordHasher()
    raise ValueError(f"Unknown password scheme: {scheme!r}")
