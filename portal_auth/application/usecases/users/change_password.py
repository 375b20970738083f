"""
===============================================================================
USE CASE: Change Own Password
===============================================================================

Business Goal:
    Let any signed-in user replace their password after proving the current
    one.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    ChangePasswordUseCase

Responsibilities:
    - Role guard: CHANGE_OWN_PASSWORD.
    - Both fields required; new password >= 3 chars.
    - Verify the current password against the stored digest.
    - Store the new digest via CredentialStore.update_secret.

Error Mapping:
    - VALIDATION_ERROR: missing fields / short password
    - INVALID_CREDENTIALS: current password does not verify
    - FORBIDDEN: demo accounts (no stored record)
    - NOT_FOUND: subject record disappeared
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.logger import logger
from ....domain.repositories import CredentialStore
from ....identity.authorization import Principal
from ....identity.passwords import PasswordHasher
from ....identity.role_guard import Operation
from .update_own_profile import DEMO_READ_ONLY_MESSAGE
from .user_access import (
    MIN_PASSWORD_LENGTH,
    check_allowed,
    forbidden,
    not_found,
    validation_error,
)
from .user_results import PasswordChangeResult, UserError, UserErrorCode

CURRENT_PASSWORD_INCORRECT_MESSAGE = "Current password is incorrect"


class ChangePasswordUseCase:
    def __init__(self, store: CredentialStore, hasher: PasswordHasher) -> None:
        self._store = store
        self._hasher = hasher

    def execute(
        self,
        actor: Principal | None,
        *,
        current_password: object,
        new_password: object,
    ) -> PasswordChangeResult:
        denied = check_allowed(actor, Operation.CHANGE_OWN_PASSWORD)
        if denied:
            return PasswordChangeResult(changed=False, error=denied)

        if (
            not isinstance(current_password, str)
            or not isinstance(new_password, str)
            or not current_password
            or not new_password
        ):
            return PasswordChangeResult(
                changed=False,
                error=validation_error("Current password and new password are required"),
            )

        if len(new_password) < MIN_PASSWORD_LENGTH:
            return PasswordChangeResult(
                changed=False,
                error=validation_error(
                    f"New password must be at least {MIN_PASSWORD_LENGTH} characters"
                ),
            )

        if actor.is_demo:
            return PasswordChangeResult(
                changed=False, error=forbidden(DEMO_READ_ONLY_MESSAGE)
            )

        user = self._store.get_by_id(actor.user_id) if actor.user_id else None
        if user is None:
            return PasswordChangeResult(changed=False, error=not_found(actor.subject_id))

        if not self._hasher.verify(current_password, user.password_hash):
            return PasswordChangeResult(
                changed=False,
                error=UserError(
                    code=UserErrorCode.INVALID_CREDENTIALS,
                    message=CURRENT_PASSWORD_INCORRECT_MESSAGE,
                ),
            )

        if self._store.update_secret(user.id, self._hasher.hash(new_password)) is None:
            return PasswordChangeResult(changed=False, error=not_found(user.id))

        logger.info("password changed", extra={"user_id": user.id})
        return PasswordChangeResult(changed=True)
