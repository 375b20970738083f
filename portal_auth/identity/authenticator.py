"""
===============================================================================
CRC CARD — identity/authenticator.py
===============================================================================

Class:
    LoginAuthenticator

Responsibilities:
    - Validate login input (identity and secret present, non-empty strings).
    - Demo branch first: an exact demo identity match decides the outcome on
      its own (no fall-through to the store on a wrong password).
    - Persisted branch: store lookup, then hash comparison.
    - Issue a token on success; fail with one generic InvalidCredentialsError
      otherwise, including when the store lookup itself fails.

Collaborators:
    - domain.repositories.CredentialStore
    - identity.passwords.PasswordHasher
    - identity.tokens.TokenService
    - identity.demo_identities.DemoIdentity
    - crosscutting.metrics.record_login_attempt

Flow:
    1) identity/secret missing or not strings -> BadRequestError
    2) demo match?  yes -> password equal? token : InvalidCredentials
    3) store.find_by_identity (DatabaseError -> logged, InvalidCredentials)
    4) not found or hash mismatch -> InvalidCredentials
    5) token issue (signing failure -> InternalError)
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from ..crosscutting.exceptions import DatabaseError
from ..crosscutting.logger import logger
from ..crosscutting.metrics import record_login_attempt
from ..domain.repositories import CredentialStore
from .demo_identities import DemoIdentity
from .errors import BadRequestError, InvalidCredentialsError
from .passwords import PasswordHasher
from .tokens import SOURCE_DEMO, SOURCE_STORE, TokenClaims, TokenService
from .users import UserRole

MISSING_INPUT_MESSAGE = "Username and password required"


@dataclass(frozen=True, slots=True)
class LoginResult:
    token: str
    expires_in: int
    role: UserRole
    username: str
    display_name: str
    subject: str
    is_demo: bool = False


class LoginAuthenticator:
    """Turns an identity/secret pair into a signed session token."""

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        tokens: TokenService,
        *,
        demo_enabled: bool = True,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._tokens = tokens
        self._demo_enabled = demo_enabled

    def login(self, identity: object, secret: object) -> LoginResult:
        if (
            not isinstance(identity, str)
            or not isinstance(secret, str)
            or not identity
            or not secret
        ):
            record_login_attempt("none", "bad_request")
            raise BadRequestError(MISSING_INPUT_MESSAGE)

        if self._demo_enabled:
            demo = DemoIdentity.match(identity)
            if demo is not None:
                if not demo.password_matches(secret):
                    record_login_attempt("demo", "invalid_credentials")
                    raise InvalidCredentialsError()
                issued = self._tokens.issue(
                    TokenClaims(
                        subject=demo.username, role=demo.role, source=SOURCE_DEMO
                    )
                )
                record_login_attempt("demo", "success")
                logger.info(
                    "login succeeded",
                    extra={"branch": "demo", "role": demo.role.value},
                )
                return LoginResult(
                    token=issued.token,
                    expires_in=issued.expires_in,
                    role=demo.role,
                    username=demo.username,
                    display_name=demo.display_name,
                    subject=demo.username,
                    is_demo=True,
                )

        try:
            user = self._store.find_by_identity(identity)
        except DatabaseError as exc:
            # Store failures look like bad credentials to the caller.
            logger.error(
                "login store lookup failed",
                extra={"error_id": exc.error_id, "error": exc.message},
            )
            record_login_attempt("store", "error")
            raise InvalidCredentialsError() from exc

        if user is None or not self._hasher.verify(secret, user.password_hash):
            record_login_attempt("store", "invalid_credentials")
            raise InvalidCredentialsError()

        issued = self._tokens.issue(
            TokenClaims(subject=str(user.id), role=user.role, source=SOURCE_STORE)
        )
        record_login_attempt("store", "success")
        logger.info(
            "login succeeded",
            extra={
                "branch": "store",
                "subject_id": str(user.id),
                "role": user.role.value,
            },
        )
        return LoginResult(
            token=issued.token,
            expires_in=issued.expires_in,
            role=user.role,
            username=user.identity,
            display_name=user.identity,
            subject=str(user.id),
        )
