"""
===============================================================================
CRC CARD — identity/authorization.py
===============================================================================

Class:
    Authorizer

Responsibilities:
    - Extract the bearer token from an Authorization header value.
    - Verify it with the TokenService and build a Principal.
    - Collapse every failure (missing, malformed, tampered, expired) into one
      UnauthenticatedError with a uniform message.

Collaborators:
    - identity.tokens.TokenService
    - crosscutting.metrics.record_token_rejection
    - api/dependencies.require_principal (FastAPI edge)

Notes:
    - The credential store is never queried here; the token alone carries the
      subject and role.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from ..crosscutting.logger import logger
from ..crosscutting.metrics import record_token_rejection
from .errors import TokenExpiredError, TokenError, UnauthenticatedError
from .tokens import TokenClaims, TokenService
from .users import UserRole

BEARER_SCHEME = "bearer"


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller, as asserted by a verified token."""

    subject_id: str
    role: UserRole
    is_demo: bool = False

    @property
    def user_id(self) -> int | None:
        """Store record id, or None for demo subjects."""
        if self.is_demo:
            return None
        try:
            return int(self.subject_id)
        except ValueError:
            return None

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "Principal":
        return cls(subject_id=claims.subject, role=claims.role, is_demo=claims.is_demo)


def extract_bearer_token(authorization: str | None) -> str | None:
    """Token from `Authorization: Bearer <token>` (scheme case-insensitive)."""
    if not authorization:
        return None
    parts = authorization.strip().split(None, 1)
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
        return None
    token = parts[1].strip()
    return token or None


class Authorizer:
    """Turns a bearer token into a Principal or UnauthenticatedError."""

    def __init__(self, tokens: TokenService) -> None:
        self._tokens = tokens

    def authenticate(self, raw_token: str | None) -> Principal:
        if not raw_token:
            record_token_rejection("missing")
            raise UnauthenticatedError()

        try:
            claims = self._tokens.verify(raw_token)
        except TokenExpiredError as exc:
            record_token_rejection("expired")
            raise UnauthenticatedError() from exc
        except TokenError as exc:
            record_token_rejection("invalid")
            logger.info("bearer token rejected", extra={"reason": str(exc)})
            raise UnauthenticatedError() from exc

        return Principal.from_claims(claims)

    def authenticate_header(self, authorization: str | None) -> Principal:
        return self.authenticate(extract_bearer_token(authorization))
