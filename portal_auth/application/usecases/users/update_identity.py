"""
===============================================================================
USE CASE: Update Identity (rename a credential record)
===============================================================================

Business Goal:
    Change the username of a stored record. Administrators may rename any
    record; UpdateOwnProfileUseCase reuses this flow for the caller's own
    record under UPDATE_OWN_PROFILE.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    UpdateIdentityUseCase

Responsibilities:
    - Role guard for the requested operation.
    - Validate the new username (trimmed, >= 2 chars).
    - Persist via CredentialStore.update_identity.
    - Map None -> NOT_FOUND and DuplicateIdentityError -> CONFLICT.
    - Refuse demo usernames with CONFLICT while the demo accounts are on.

Collaborators:
    - CredentialStore.update_identity
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.logger import logger
from ....domain.repositories import CredentialStore
from ....identity.authorization import Principal
from ....identity.errors import DuplicateIdentityError
from ....identity.role_guard import Operation
from .user_access import (
    MIN_USERNAME_LENGTH,
    RESERVED_IDENTITY_MESSAGE,
    check_allowed,
    conflict,
    is_reserved_identity,
    normalize_username,
    not_found,
    validation_error,
)
from .user_results import UserResult


class UpdateIdentityUseCase:
    def __init__(self, store: CredentialStore, *, demo_enabled: bool = True) -> None:
        self._store = store
        self._demo_enabled = demo_enabled

    def execute(
        self,
        actor: Principal | None,
        user_id: int,
        *,
        username: object,
        operation: Operation = Operation.UPDATE_USER_IDENTITY,
    ) -> UserResult:
        denied = check_allowed(actor, operation)
        if denied:
            return UserResult(error=denied)

        identity = normalize_username(username)
        if len(identity) < MIN_USERNAME_LENGTH:
            return UserResult(
                error=validation_error(
                    f"Username must be at least {MIN_USERNAME_LENGTH} characters"
                )
            )

        if is_reserved_identity(identity, demo_enabled=self._demo_enabled):
            return UserResult(error=conflict(RESERVED_IDENTITY_MESSAGE))

        try:
            user = self._store.update_identity(user_id, identity)
        except DuplicateIdentityError:
            return UserResult(error=conflict())

        if user is None:
            return UserResult(error=not_found(user_id))

        logger.info(
            "user identity updated",
            extra={"user_id": user.id, "operation": operation.value},
        )
        return UserResult(user=user)
