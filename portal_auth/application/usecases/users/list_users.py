"""
===============================================================================
USE CASE: List Users (admin)
===============================================================================

Responsibilities:
    - Role guard: LIST_USERS.
    - Return every credential record, newest first (store ordering).

Collaborators:
    - CredentialStore.list
===============================================================================
"""

from __future__ import annotations

from ....domain.repositories import CredentialStore
from ....identity.authorization import Principal
from ....identity.role_guard import Operation
from .user_access import check_allowed
from .user_results import UserListResult


class ListUsersUseCase:
    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    def execute(self, actor: Principal | None) -> UserListResult:
        denied = check_allowed(actor, Operation.LIST_USERS)
        if denied:
            return UserListResult(users=[], error=denied)
        return UserListResult(users=self._store.list())
