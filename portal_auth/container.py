"""
===============================================================================
CRC CARD — portal_auth/container.py (Composition Root / manual DI)
===============================================================================

Responsibilities:
  - Build every collaborator once per application from Settings:
    password hasher, identity cipher, pool + credential store, token service,
    login authenticator, authorizer and user use cases.
  - Own the DB pool lifecycle (close()).
  - Keep runtime decisions (store backend, schemes, fallbacks) in one place.

Collaborators:
  - crosscutting.config.Settings
  - infrastructure.* (pool, stores, cipher)
  - identity.* (hasher, tokens, authenticator, authorizer)
  - application.usecases.users

Notes:
  - No business logic here.
  - No FastAPI imports: the API layer reads the container from app.state.
  - No module-level pool: each container owns its own.
===============================================================================
"""

from __future__ import annotations

from .application.usecases.users import (
    ChangePasswordUseCase,
    CreateUserUseCase,
    DeleteUserUseCase,
    GetProfileUseCase,
    ListUsersUseCase,
    UpdateIdentityUseCase,
    UpdateOwnProfileUseCase,
)
from .crosscutting.config import Settings, get_settings
from .crosscutting.logger import logger
from .domain.repositories import CredentialStore
from .identity.authenticator import LoginAuthenticator
from .identity.authorization import Authorizer
from .identity.passwords import build_password_hasher
from .identity.tokens import TokenService
from .infrastructure.db import close_pool, create_pool
from .infrastructure.repositories import (
    InMemoryCredentialStore,
    PostgresCredentialStore,
)
from .infrastructure.services import build_identity_cipher


class PortalContainer:
    """Holds the wired object graph for one application instance."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        store: CredentialStore | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        s = self.settings

        self.hasher = build_password_hasher(s.password_scheme)
        self.cipher = build_identity_cipher(
            s.identity_cipher_mode, s.resolved_identity_key()
        )

        self._pool = None
        if store is not None:
            self.store = store
        elif s.store_backend == "memory":
            logger.info("Credential store: in-memory backend")
            self.store = InMemoryCredentialStore(self.cipher)
        else:
            self._pool = create_pool(s)
            self.store = PostgresCredentialStore(self._pool, self.cipher)

        self.tokens = TokenService(
            s.resolved_jwt_secret(), ttl_seconds=s.jwt_access_ttl_minutes * 60
        )
        self.authenticator = LoginAuthenticator(
            self.store,
            self.hasher,
            self.tokens,
            demo_enabled=s.demo_identities_enabled,
        )
        self.authorizer = Authorizer(self.tokens)

        # User management use cases
        self.create_user = CreateUserUseCase(
            self.store, self.hasher, demo_enabled=s.demo_identities_enabled
        )
        self.list_users = ListUsersUseCase(self.store)
        self.update_identity = UpdateIdentityUseCase(
            self.store, demo_enabled=s.demo_identities_enabled
        )
        self.delete_user = DeleteUserUseCase(self.store)
        self.get_profile = GetProfileUseCase(self.store)
        self.update_own_profile = UpdateOwnProfileUseCase(self.update_identity)
        self.change_password = ChangePasswordUseCase(self.store, self.hasher)

    def close(self) -> None:
        """Release the DB pool (idempotent)."""
        close_pool(self._pool)
        self._pool = None
