"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure the test environment (no .env, APP_ENV=test)
  - Build Settings directly (in-memory store, fixed secrets)
  - Provide the in-memory credential store, container and TestClient
  - Provide token / user factories for authenticated requests

Collaborators:
  - pytest
  - fastapi.testclient.TestClient
  - portal_auth.container.PortalContainer

Notes:
  - Use function scope for per-test isolation (fresh store every test)
"""

import os

import pytest

from portal_auth.crosscutting import config as app_config

app_config.Settings.model_config["env_file"] = None
os.environ.setdefault("APP_ENV", "test")

from fastapi.testclient import TestClient  # noqa: E402

from portal_auth.api.main import create_app  # noqa: E402
from portal_auth.container import PortalContainer  # noqa: E402
from portal_auth.crosscutting.config import Settings  # noqa: E402
from portal_auth.identity.passwords import Sha256PasswordHasher  # noqa: E402
from portal_auth.identity.tokens import (  # noqa: E402
    SOURCE_DEMO,
    SOURCE_STORE,
    TokenClaims,
)
from portal_auth.identity.users import UserRole  # noqa: E402
from portal_auth.infrastructure.repositories import (  # noqa: E402
    InMemoryCredentialStore,
)
from portal_auth.infrastructure.services import (  # noqa: E402
    DeterministicIdentityCipher,
)

TEST_JWT_SECRET = "unit-test-jwt-secret-with-at-least-32-chars"
TEST_IDENTITY_KEY = "unit-test-identity-key"


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


# ============================================================================
# Settings / core collaborators
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """R: Settings for tests: in-memory store, explicit secrets."""
    return Settings(
        app_env="test",
        jwt_secret=TEST_JWT_SECRET,
        identity_encryption_key=TEST_IDENTITY_KEY,
        store_backend="memory",
        log_json=False,
    )


@pytest.fixture
def cipher() -> DeterministicIdentityCipher:
    return DeterministicIdentityCipher(TEST_IDENTITY_KEY)


@pytest.fixture
def hasher() -> Sha256PasswordHasher:
    return Sha256PasswordHasher()


@pytest.fixture
def store(cipher) -> InMemoryCredentialStore:
    """R: Fresh in-memory credential store per test."""
    return InMemoryCredentialStore(cipher)


@pytest.fixture
def container(settings, store) -> PortalContainer:
    return PortalContainer(settings, store=store)


@pytest.fixture
def client(container):
    """R: TestClient around an app wired with the in-memory container."""
    app = create_app(container)
    with TestClient(app) as test_client:
        yield test_client


# ============================================================================
# Factories
# ============================================================================


@pytest.fixture
def make_user(store, hasher):
    """R: Persist a user and return it: make_user("alice", "pw", UserRole.STAFF)."""

    def _make(username: str, password: str = "secret", role=UserRole.STAFF):
        return store.create(username, hasher.hash(password), UserRole(role))

    return _make


@pytest.fixture
def auth_headers(container):
    """
    R: Authorization headers for a subject.

    auth_headers(UserRole.ADMIN, subject="1") -> stored subject id "1"
    auth_headers(UserRole.ADMIN, subject="admin", demo=True) -> demo subject
    """

    def _headers(role, *, subject: str = "1", demo: bool = False) -> dict:
        issued = container.tokens.issue(
            TokenClaims(
                subject=subject,
                role=UserRole(role),
                source=SOURCE_DEMO if demo else SOURCE_STORE,
            )
        )
        return {"Authorization": f"Bearer {issued.token}"}

    return _headers
