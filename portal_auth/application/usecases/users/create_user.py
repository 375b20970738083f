"""
===============================================================================
USE CASE: Create User (admin)
===============================================================================

Business Goal:
    Let an administrator register a new staff portal account.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    CreateUserUseCase

Responsibilities:
    - Role guard: CREATE_USER.
    - Validate username (trimmed, non-empty), password (>= 3 chars) and role
      (closed set).
    - Hash the password and persist through the CredentialStore.
    - Map DuplicateIdentityError -> CONFLICT (never overwrite).
    - Refuse demo usernames with CONFLICT while the demo accounts are on.

Collaborators:
    - CredentialStore.create
    - PasswordHasher.hash
    - user_access helpers / user_results models

-------------------------------------------------------------------------------
FLOW
-------------------------------------------------------------------------------
1) Guard CREATE_USER -> FORBIDDEN.
2) Missing username/password/role -> VALIDATION_ERROR.
3) Password too short -> VALIDATION_ERROR.
4) Role outside {admin, staff, doctor} -> VALIDATION_ERROR.
5) Demo username (demo accounts enabled) -> CONFLICT.
6) store.create (duplicate -> CONFLICT).
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.logger import logger
from ....domain.repositories import CredentialStore
from ....identity.authorization import Principal
from ....identity.errors import DuplicateIdentityError
from ....identity.passwords import PasswordHasher
from ....identity.role_guard import Operation
from ....identity.users import UserRole
from .user_access import (
    MIN_PASSWORD_LENGTH,
    RESERVED_IDENTITY_MESSAGE,
    check_allowed,
    conflict,
    is_reserved_identity,
    normalize_username,
    validation_error,
)
from .user_results import UserResult


class CreateUserUseCase:
    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        *,
        demo_enabled: bool = True,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._demo_enabled = demo_enabled

    def execute(
        self,
        actor: Principal | None,
        *,
        username: object,
        password: object,
        role: object,
    ) -> UserResult:
        denied = check_allowed(actor, Operation.CREATE_USER)
        if denied:
            return UserResult(error=denied)

        identity = normalize_username(username)
        if not identity or not isinstance(password, str) or not password or not role:
            return UserResult(
                error=validation_error("Username, password, and role are required")
            )

        if len(password) < MIN_PASSWORD_LENGTH:
            return UserResult(
                error=validation_error(
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
                )
            )

        parsed_role = UserRole.parse(role)
        if parsed_role is None:
            return UserResult(error=validation_error("Invalid role"))

        if is_reserved_identity(identity, demo_enabled=self._demo_enabled):
            return UserResult(error=conflict(RESERVED_IDENTITY_MESSAGE))

        try:
            user = self._store.create(identity, self._hasher.hash(password), parsed_role)
        except DuplicateIdentityError:
            return UserResult(error=conflict())

        logger.info(
            "user created",
            extra={"user_id": user.id, "role": user.role.value},
        )
        return UserResult(user=user)
