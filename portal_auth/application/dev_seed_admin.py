# =============================================================================
# FILE: application/dev_seed_admin.py
# =============================================================================
"""
===============================================================================
TASK: Dev Seed Admin (local-only)
===============================================================================

What it does:
    Ensures a stored admin record exists for local development when
    DEV_SEED_ADMIN is enabled. Runs once in the FastAPI lifespan.

Safety:
    - Strict guard: only runs when APP_ENV is "local" or "development".
    - Refuses a demo username while the demo accounts are enabled (login
      would never reach the stored record).

Patterns:
    - Dependency Injection (store + hasher)
    - Fail-fast guard (safety boundary)
    - Idempotent (ensure-create / optional reset)

CRC:
    Component: ensure_dev_admin
    Responsibilities:
      - Validate the environment guard
      - Resolve the seed spec from Settings
      - Ensure the record (create, or reset the password if force_reset)
    Collaborators:
      - CredentialStore
      - PasswordHasher
      - Settings
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ..crosscutting.config import Settings
from ..crosscutting.logger import logger
from ..domain.repositories import CredentialStore
from ..identity.demo_identities import DemoIdentity
from ..identity.errors import DuplicateIdentityError
from ..identity.passwords import PasswordHasher
from ..identity.users import UserRole

_ALLOWED_ENVS: Final[frozenset[str]] = frozenset({"local", "development"})


@dataclass(frozen=True, slots=True)
class _AdminSeedSpec:
    """Resolved seed configuration (no I/O)."""

    username: str
    password: str
    role: UserRole
    force_reset: bool


def _resolve_role(role_str: str) -> UserRole:
    """Resolve UserRole, falling back to ADMIN."""
    role = UserRole.parse((role_str or "").strip().lower())
    if role is None:
        logger.warning(
            "Dev seed admin: invalid role; falling back to ADMIN",
            extra={"role": role_str},
        )
        return UserRole.ADMIN
    return role


def _resolve_seed_spec(settings: Settings) -> _AdminSeedSpec:
    return _AdminSeedSpec(
        username=(settings.dev_seed_admin_username or "").strip(),
        password=settings.dev_seed_admin_password or "",
        role=_resolve_role(settings.dev_seed_admin_role),
        force_reset=bool(settings.dev_seed_admin_force_reset),
    )


def _assert_allowed_environment(settings: Settings) -> None:
    env = (settings.app_env or "").strip().lower()
    if env not in _ALLOWED_ENVS:
        raise RuntimeError(
            f"FATAL: DEV_SEED_ADMIN is enabled but APP_ENV is '{env}' "
            "(must be 'local' or 'development'). "
            "Safety guard prevents accidental overrides."
        )


def ensure_dev_admin(
    settings: Settings,
    *,
    store: CredentialStore,
    hasher: PasswordHasher,
) -> None:
    """
    Ensure a development admin record exists if configured.

    Behavior:
      - Disabled: no-op
      - Enabled:
          - Create the record if missing
          - If force_reset: replace its password
          - Otherwise: skip if it exists
    """
    if not settings.dev_seed_admin:
        return

    _assert_allowed_environment(settings)

    spec = _resolve_seed_spec(settings)
    if not spec.username or not spec.password:
        raise ValueError("Dev seed admin is enabled but username/password are empty")
    if settings.demo_identities_enabled and DemoIdentity.match(spec.username):
        raise ValueError(
            f"Dev seed admin username '{spec.username}' is reserved for a demo account"
        )

    logger.info(
        "Dev seed admin: ensuring admin user",
        extra={"role": spec.role.value, "force_reset": spec.force_reset},
    )

    existing = store.find_by_identity(spec.username)

    if existing is None:
        try:
            user = store.create(spec.username, hasher.hash(spec.password), spec.role)
        except DuplicateIdentityError:
            # Another worker seeded it first.
            logger.info("Dev seed admin: user created concurrently; skipping")
            return
        logger.info(
            "Dev seed admin: user created",
            extra={"user_id": user.id, "role": user.role.value},
        )
        return

    if spec.force_reset:
        store.update_secret(existing.id, hasher.hash(spec.password))
        logger.info(
            "Dev seed admin: password reset applied", extra={"user_id": existing.id}
        )
        return

    logger.info("Dev seed admin: user exists; skipping", extra={"user_id": existing.id})
