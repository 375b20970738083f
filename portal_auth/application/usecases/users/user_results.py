"""
===============================================================================
USER USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Business Goal:
    Shared result and error models for the user management use cases, with an
    explicit contract for validation, authorization, not found, conflicts and
    credential checks.

Why:
    - Use cases return typed results instead of raising outward, which keeps
      HTTP mapping in the routers and makes flows easy to unit test.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Component:
    user_results models (module)

Responsibilities:
    - UserErrorCode: small, stable set of error categories.
    - UserError (code + message).
    - Results: UserResult, UserListResult, DeleteUserResult, ProfileResult,
      PasswordChangeResult.

Collaborators:
    - identity.users.User
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List

from ....identity.users import User, UserRole


class UserErrorCode(str, Enum):
    """
    Error categories for user use cases.

    - VALIDATION_ERROR: missing or invalid input.
    - FORBIDDEN: actor not allowed (role guard, self-delete, demo account).
    - NOT_FOUND: target record does not exist.
    - CONFLICT: identity already taken.
    - INVALID_CREDENTIALS: current password did not verify.
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"


@dataclass(frozen=True)
class UserError:
    code: UserErrorCode
    message: str
    resource: str | None = None


@dataclass
class UserResult:
    """Single user. error is None on success."""

    user: User | None = None
    error: UserError | None = None


@dataclass
class UserListResult:
    users: List[User] = field(default_factory=list)
    error: UserError | None = None


@dataclass
class DeleteUserResult:
    deleted: bool
    error: UserError | None = None


@dataclass(frozen=True)
class Profile:
    """
    Own-profile view.

    Demo subjects have no stored record: id is None and the profile is built
    from the token and the demo account table.
    """

    id: int | None
    username: str
    role: UserRole
    display_name: str
    is_demo: bool = False
    created_at: datetime | None = None


@dataclass
class ProfileResult:
    profile: Profile | None = None
    error: UserError | None = None


@dataclass
class PasswordChangeResult:
    changed: bool
    error: UserError | None = None
