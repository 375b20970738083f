"""
===============================================================================
CRC CARD — identity/tokens.py
===============================================================================

Module:
    Token service (signed, self-contained session tokens)

Responsibilities:
    - Issue HS256 JWTs carrying subject, role and source, expiring after a
      fixed TTL (default one hour).
    - Verify signature and expiry, failing with InvalidTokenError or
      TokenExpiredError (kept distinct).
    - Never perform I/O: verification is pure computation.

Collaborators:
    - PyJWT
    - identity/users.UserRole
    - identity/errors (InvalidTokenError / TokenExpiredError)
    - crosscutting/exceptions.InternalError (signing failures)

Notes:
    - No server-side session table: a token cannot be revoked before `exp`.
    - No refresh flow; clients log in again after expiry.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Literal

import jwt

from ..crosscutting.exceptions import InternalError
from .errors import InvalidTokenError, TokenExpiredError
from .users import UserRole

JWT_ALGORITHM: str = "HS256"
DEFAULT_TTL_SECONDS: int = 3600

CLAIM_SUB: str = "sub"
CLAIM_ROLE: str = "role"
CLAIM_SRC: str = "src"
CLAIM_IAT: str = "iat"
CLAIM_EXP: str = "exp"
CLAIM_TYP: str = "typ"

TOKEN_TYPE_ACCESS: str = "access"

SOURCE_STORE: str = "store"
SOURCE_DEMO: str = "demo"

TokenSource = Literal["store", "demo"]


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """What a token asserts about its bearer."""

    subject: str
    role: UserRole
    source: TokenSource = SOURCE_STORE
    issued_at: datetime | None = None
    expires_at: datetime | None = None

    @property
    def is_demo(self) -> bool:
        return self.source == SOURCE_DEMO


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    expires_in: int
    token_type: str = "bearer"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies access tokens with one server-side secret."""

    def __init__(
        self,
        secret: str,
        *,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not secret:
            raise ValueError("TokenService requires a non-empty secret")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be greater than 0")
        self._secret = secret
        self._ttl_seconds = int(ttl_seconds)
        self._clock = clock or _utcnow

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def issue(self, claims: TokenClaims) -> IssuedToken:
        """Sign `claims` into a token valid for ttl_seconds from now."""
        now = self._clock()
        payload: dict[str, object] = {
            CLAIM_SUB: str(claims.subject),
            CLAIM_ROLE: UserRole(claims.role).value,
            CLAIM_SRC: claims.source,
            CLAIM_IAT: int(now.timestamp()),
            CLAIM_EXP: int((now + timedelta(seconds=self._ttl_seconds)).timestamp()),
            CLAIM_TYP: TOKEN_TYPE_ACCESS,
        }
        try:
            token = jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise InternalError("Token signing failed", original_error=exc) from exc
        return IssuedToken(token=token, expires_in=self._ttl_seconds)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a token.

        Raises:
            TokenExpiredError: signature valid, `exp` in the past.
            InvalidTokenError: anything else (signature, format, claims).
        """
        if not token or not isinstance(token, str):
            raise InvalidTokenError("Empty token")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": [CLAIM_SUB, CLAIM_ROLE, CLAIM_IAT, CLAIM_EXP]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError("Token invalid") from exc

        subject = payload.get(CLAIM_SUB)
        if not subject or not isinstance(subject, str):
            raise InvalidTokenError("Token invalid")

        token_type = payload.get(CLAIM_TYP)
        if token_type is not None and token_type != TOKEN_TYPE_ACCESS:
            raise InvalidTokenError("Token type invalid")

        role = UserRole.parse(payload.get(CLAIM_ROLE))
        if role is None:
            raise InvalidTokenError("Token role invalid")

        source = payload.get(CLAIM_SRC, SOURCE_STORE)
        if source not in (SOURCE_STORE, SOURCE_DEMO):
            raise InvalidTokenError("Token source invalid")

        return TokenClaims(
            subject=subject,
            role=role,
            source=source,
            issued_at=datetime.fromtimestamp(payload[CLAIM_IAT], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload[CLAIM_EXP], tz=timezone.utc),
        )
