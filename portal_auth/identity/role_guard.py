"""
===============================================================================
CRC CARD — identity/role_guard.py
===============================================================================

Module:
    Role guard (declarative operation -> allowed roles table)

Responsibilities:
    - Define the catalog of guarded operations (server actions and client
      pages) in one place.
    - Map every operation to the set of roles allowed to perform it.
    - authorize(role, operation): return or raise ForbiddenError.
    - ensure_not_self(): an admin may not delete the record they are
      authenticated as.

Collaborators:
    - api/dependencies.require_operation (server enforcement)
    - application/usecases/users (re-check inside each use case)
    - client/navigation.guard_navigation (client enforcement, same table)

Invariants:
    - The table is total: every Operation has an entry (checked at import).
    - A role outside UserRole is never allowed anything.
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Protocol

from .errors import ForbiddenError
from .users import UserRole


class Operation(str, Enum):
    # Own account
    VIEW_OWN_PROFILE = "view_own_profile"
    UPDATE_OWN_PROFILE = "update_own_profile"
    CHANGE_OWN_PASSWORD = "change_own_password"

    # User management
    LIST_USERS = "list_users"
    CREATE_USER = "create_user"
    UPDATE_USER_IDENTITY = "update_user_identity"
    DELETE_USER = "delete_user"

    # Operations
    VIEW_METRICS = "view_metrics"

    # Client pages
    OPEN_ADMIN_PAGE = "open_admin_page"
    OPEN_STAFF_PAGE = "open_staff_page"
    OPEN_DOCTOR_PAGE = "open_doctor_page"


_ALL_ROLES = frozenset(UserRole)
_ADMIN_ONLY = frozenset({UserRole.ADMIN})

ROLE_POLICY: Mapping[Operation, frozenset[UserRole]] = MappingProxyType(
    {
        Operation.VIEW_OWN_PROFILE: _ALL_ROLES,
        Operation.UPDATE_OWN_PROFILE: _ALL_ROLES,
        Operation.CHANGE_OWN_PASSWORD: _ALL_ROLES,
        Operation.LIST_USERS: _ADMIN_ONLY,
        Operation.CREATE_USER: _ADMIN_ONLY,
        Operation.UPDATE_USER_IDENTITY: _ADMIN_ONLY,
        Operation.DELETE_USER: _ADMIN_ONLY,
        Operation.VIEW_METRICS: _ADMIN_ONLY,
        Operation.OPEN_ADMIN_PAGE: _ADMIN_ONLY,
        Operation.OPEN_STAFF_PAGE: frozenset({UserRole.STAFF}),
        Operation.OPEN_DOCTOR_PAGE: frozenset({UserRole.DOCTOR}),
    }
)

_missing = set(Operation) - set(ROLE_POLICY)
assert not _missing, f"ROLE_POLICY is missing operations: {sorted(_missing)}"
del _missing


class _HasSubject(Protocol):
    subject_id: str
    is_demo: bool


def allowed_roles(operation: Operation) -> frozenset[UserRole]:
    return ROLE_POLICY[Operation(operation)]


def is_allowed(role: object, operation: Operation) -> bool:
    """True when `role` is a known role listed for `operation`."""
    parsed = UserRole.parse(role)
    if parsed is None:
        return False
    return parsed in allowed_roles(operation)


def authorize(role: object, operation: Operation) -> None:
    """
    Raises:
        ForbiddenError: role not allowed (or not a known role).
    """
    if not is_allowed(role, operation):
        raise ForbiddenError(f"Access denied: {Operation(operation).value} not allowed")


def ensure_not_self(principal: _HasSubject, target_id: int) -> None:
    """
    Refuse actions an admin may not take on their own record.

    The subject comes from the verified token only, never from the request body.
    """
    if principal.is_demo:
        return
    if str(principal.subject_id) == str(target_id):
        raise ForbiddenError("Cannot delete your own account")
