"""
===============================================================================
CRC CARD — identity/errors.py
===============================================================================

Module:
    Authentication / authorization error taxonomy

Responsibilities:
    - Give every failure of the core a distinct, typed exception.
    - Keep credential failures generic (one message, no hint of which part
      was wrong).

Collaborators:
    - crosscutting/exceptions.PortalError (base: error_code + error_id)
    - api/exception_handlers.py (maps each type to an HTTP status)

Mapping:
    BadRequestError          -> 400
    InvalidCredentialsError  -> 401
    UnauthenticatedError     -> 401
    ForbiddenError           -> 403
    NotFoundError            -> 404
    DuplicateIdentityError   -> 409
    InternalError            -> 500 (crosscutting.exceptions)
===============================================================================
"""

from __future__ import annotations

from ..crosscutting.exceptions import PortalError

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"
UNAUTHENTICATED_MESSAGE = "Invalid or expired token"


class BadRequestError(PortalError):
    """Missing or malformed input."""

    error_code: str = "BAD_REQUEST"


class InvalidCredentialsError(PortalError):
    """Identity/secret pair rejected (never says which part was wrong)."""

    error_code: str = "INVALID_CREDENTIALS"

    def __init__(self, message: str = INVALID_CREDENTIALS_MESSAGE, **kwargs):
        super().__init__(message, **kwargs)


class UnauthenticatedError(PortalError):
    """Missing, malformed, tampered or expired bearer token."""

    error_code: str = "UNAUTHORIZED"

    def __init__(self, message: str = UNAUTHENTICATED_MESSAGE, **kwargs):
        super().__init__(message, **kwargs)


class ForbiddenError(PortalError):
    """Authenticated, but the role may not perform the operation."""

    error_code: str = "FORBIDDEN"

    def __init__(self, message: str = "Access denied", **kwargs):
        super().__init__(message, **kwargs)


class NotFoundError(PortalError):
    error_code: str = "NOT_FOUND"


class DuplicateIdentityError(PortalError):
    """The identity already belongs to another record."""

    error_code: str = "CONFLICT"

    def __init__(self, message: str = "Username already exists", **kwargs):
        super().__init__(message, **kwargs)


class TokenError(Exception):
    """Base for token verification failures (internal to the token service)."""


class InvalidTokenError(TokenError):
    """Bad signature, malformed payload or missing/unknown claims."""


class TokenExpiredError(TokenError):
    """Signature valid but `exp` is in the past."""
