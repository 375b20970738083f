"""
===============================================================================
USE CASE: Update Own Profile
===============================================================================

Responsibilities:
    - Rename the caller's own record through UpdateIdentityUseCase under the
      UPDATE_OWN_PROFILE operation (any role).
    - Demo accounts have no stored record and cannot be modified.

Collaborators:
    - UpdateIdentityUseCase
===============================================================================
"""

from __future__ import annotations

from ....identity.authorization import Principal
from ....identity.role_guard import Operation
from .update_identity import UpdateIdentityUseCase
from .user_access import check_allowed, forbidden, not_found
from .user_results import Profile, ProfileResult

DEMO_READ_ONLY_MESSAGE = "Demo accounts cannot be modified"


class UpdateOwnProfileUseCase:
    def __init__(self, update_identity: UpdateIdentityUseCase) -> None:
        self._update_identity = update_identity

    def execute(self, actor: Principal | None, *, username: object) -> ProfileResult:
        denied = check_allowed(actor, Operation.UPDATE_OWN_PROFILE)
        if denied:
            return ProfileResult(error=denied)

        if actor.is_demo:
            return ProfileResult(error=forbidden(DEMO_READ_ONLY_MESSAGE))
        if actor.user_id is None:
            return ProfileResult(error=not_found(actor.subject_id))

        result = self._update_identity.execute(
            actor,
            actor.user_id,
            username=username,
            operation=Operation.UPDATE_OWN_PROFILE,
        )
        if result.error:
            return ProfileResult(error=result.error)

        user = result.user
        return ProfileResult(
            profile=Profile(
                id=user.id,
                username=user.identity,
                role=user.role,
                display_name=user.identity,
                created_at=user.created_at,
            )
        )
