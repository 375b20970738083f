"""
===============================================================================
USE CASE: Delete User (admin)
===============================================================================

Business Goal:
    Let an administrator remove a credential record, never their own.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    DeleteUserUseCase

Responsibilities:
    - Role guard: DELETE_USER.
    - Refuse self-deletion (subject taken from the verified token only).
    - Delete via CredentialStore.delete; False -> NOT_FOUND.

-------------------------------------------------------------------------------
BUSINESS RULES
-------------------------------------------------------------------------------
R1) Only admins delete.
R2) An admin cannot delete the record they are authenticated as, even when
    the id is supplied directly.
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.logger import logger
from ....domain.repositories import CredentialStore
from ....identity.authorization import Principal
from ....identity.errors import ForbiddenError
from ....identity.role_guard import Operation, ensure_not_self
from .user_access import check_allowed, forbidden, not_found
from .user_results import DeleteUserResult


class DeleteUserUseCase:
    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    def execute(self, actor: Principal | None, user_id: int) -> DeleteUserResult:
        denied = check_allowed(actor, Operation.DELETE_USER)
        if denied:
            return DeleteUserResult(deleted=False, error=denied)

        try:
            ensure_not_self(actor, user_id)
        except ForbiddenError as exc:
            logger.info("self-delete refused", extra={"user_id": user_id})
            return DeleteUserResult(deleted=False, error=forbidden(exc.message))

        if not self._store.delete(user_id):
            return DeleteUserResult(deleted=False, error=not_found(user_id))

        logger.info("user deleted", extra={"user_id": user_id})
        return DeleteUserResult(deleted=True)
