"""
===============================================================================
MODULE: Typed internal exceptions
===============================================================================

Goal
----
Keep internal exceptions consistent, each with:
- a stable error_code
- an error_id for log correlation
- a human message (never carrying secrets)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Component:
  PortalError + subclasses

Responsibilities:
  - Base for every error the core raises
  - Provide error_code + error_id + message

Collaborators:
  - identity/errors.py (authentication / authorization taxonomy)
  - api/exception_handlers.py (maps to RFC 7807)
  - crosscutting/logger.py
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class PortalError(Exception):
    """Base for internal errors: error_code + error_id + message."""

    error_code: str = "PORTAL_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)


class DatabaseError(PortalError):
    """Store failures (connection, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"


class InternalError(PortalError):
    """Unexpected internal failure (e.g. token signing)."""

    error_code: str = "INTERNAL_ERROR"
