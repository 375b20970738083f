"""
===============================================================================
USE CASE: Get Own Profile
===============================================================================

Responsibilities:
    - Role guard: VIEW_OWN_PROFILE.
    - Stored subjects: load the record by the token's subject id.
    - Demo subjects: build the profile from the demo account table (there is
      no stored record).

Collaborators:
    - CredentialStore.get_by_id
    - identity.demo_identities.DemoIdentity
===============================================================================
"""

from __future__ import annotations

from ....domain.repositories import CredentialStore
from ....identity.authorization import Principal
from ....identity.demo_identities import DemoIdentity
from ....identity.role_guard import Operation
from .user_access import check_allowed, not_found
from .user_results import Profile, ProfileResult


def demo_profile(actor: Principal) -> Profile:
    account = DemoIdentity.match(actor.subject_id)
    return Profile(
        id=None,
        username=actor.subject_id,
        role=actor.role,
        display_name=account.display_name if account else actor.subject_id,
        is_demo=True,
    )


class GetProfileUseCase:
    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    def execute(self, actor: Principal | None) -> ProfileResult:
        denied = check_allowed(actor, Operation.VIEW_OWN_PROFILE)
        if denied:
            return ProfileResult(error=denied)

        if actor.is_demo:
            return ProfileResult(profile=demo_profile(actor))

        user = self._store.get_by_id(actor.user_id) if actor.user_id else None
        if user is None:
            return ProfileResult(error=not_found(actor.subject_id))

        return ProfileResult(
            profile=Profile(
                id=user.id,
                username=user.identity,
                role=user.role,
                display_name=user.identity,
                created_at=user.created_at,
            )
        )
