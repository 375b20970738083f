"""
===============================================================================
USER ACCESS HELPERS (shared by the user use cases)
===============================================================================

Responsibilities:
    - Re-check the role guard inside each use case (defense beyond the HTTP
      dependency) and record denials.
    - Build the standard UserError values so messages stay consistent.
    - Normalize usernames (trim) and enforce length rules.
    - Reserve the demo usernames while the demo accounts are enabled: login
      checks them first, so a stored record under one could never sign in.

Collaborators:
    - identity.role_guard (Operation, is_allowed)
    - crosscutting.metrics.record_authorization_denial
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.logger import logger
from ....crosscutting.metrics import record_authorization_denial
from ....identity.authorization import Principal
from ....identity.demo_identities import DemoIdentity
from ....identity.role_guard import Operation, is_allowed
from .user_results import UserError, UserErrorCode

MIN_USERNAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 3
RESERVED_IDENTITY_MESSAGE = "Username is reserved for a demo account"


def check_allowed(actor: Principal | None, operation: Operation) -> UserError | None:
    """None when `actor` may perform `operation`, else a FORBIDDEN error."""
    if actor is not None and is_allowed(actor.role, operation):
        return None
    record_authorization_denial(operation.value)
    logger.info(
        "authorization denied",
        extra={
            "operation": operation.value,
            "role": getattr(getattr(actor, "role", None), "value", None),
        },
    )
    return forbidden("Access denied")


def forbidden(message: str) -> UserError:
    return UserError(code=UserErrorCode.FORBIDDEN, message=message)


def validation_error(message: str) -> UserError:
    return UserError(code=UserErrorCode.VALIDATION_ERROR, message=message)


def not_found(user_id: object) -> UserError:
    return UserError(
        code=UserErrorCode.NOT_FOUND,
        message=f"User {user_id} not found",
        resource="User",
    )


def conflict(message: str = "Username already exists") -> UserError:
    return UserError(code=UserErrorCode.CONFLICT, message=message)


def is_reserved_identity(identity: str, *, demo_enabled: bool) -> bool:
    return demo_enabled and DemoIdentity.match(identity) is not None


def normalize_username(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""
