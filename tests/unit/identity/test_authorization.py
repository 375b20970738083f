"""
Name: Authorizer Tests

Responsibilities:
  - Bearer extraction (scheme case-insensitive)
  - Every token failure -> UnauthenticatedError with one message
  - Principal built from verified claims only
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from portal_auth.identity.authorization import (
    Authorizer,
    Principal,
    extract_bearer_token,
)
from portal_auth.identity.errors import UNAUTHENTICATED_MESSAGE, UnauthenticatedError
from portal_auth.identity.tokens import SOURCE_DEMO, TokenClaims, TokenService
from portal_auth.identity.users import UserRole

SECRET = "authorizer-test-secret"


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(SECRET)


@pytest.mark.unit
class TestExtractBearerToken:
    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc", "abc"),
            ("bearer abc", "abc"),
            ("BEARER   abc  ", "abc"),
            (None, None),
            ("", None),
            ("Basic abc", None),
            ("Bearer", None),
            ("abc", None),
        ],
    )
    def test_extract(self, header, expected):
        assert extract_bearer_token(header) == expected


@pytest.mark.unit
class TestAuthenticate:
    def test_valid_token_yields_principal(self, tokens):
        token = tokens.issue(TokenClaims(subject="12", role=UserRole.STAFF)).token

        principal = Authorizer(tokens).authenticate_header(f"Bearer {token}")

        assert principal == Principal(subject_id="12", role=UserRole.STAFF)
        assert principal.user_id == 12

    def test_demo_principal_has_no_user_id(self, tokens):
        token = tokens.issue(
            TokenClaims(subject="admin", role=UserRole.ADMIN, source=SOURCE_DEMO)
        ).token
        principal = Authorizer(tokens).authenticate(token)
        assert principal.is_demo is True
        assert principal.user_id is None

    def test_missing_header_is_unauthenticated(self, tokens):
        with pytest.raises(UnauthenticatedError) as excinfo:
            Authorizer(tokens).authenticate_header(None)
        assert excinfo.value.message == UNAUTHENTICATED_MESSAGE

    def test_expired_and_tampered_share_the_message(self, tokens):
        past = datetime.now(timezone.utc) - timedelta(hours=3)
        expired = TokenService(SECRET, clock=lambda: past).issue(
            TokenClaims(subject="1", role=UserRole.ADMIN)
        ).token
        foreign = TokenService("another-secret").issue(
            TokenClaims(subject="1", role=UserRole.ADMIN)
        ).token

        authorizer = Authorizer(tokens)
        messages = set()
        for token in (expired, foreign, "garbage"):
            with pytest.raises(UnauthenticatedError) as excinfo:
                authorizer.authenticate(token)
            messages.add(excinfo.value.message)

        assert messages == {UNAUTHENTICATED_MESSAGE}

    def test_store_is_never_consulted(self):
        tokens = Mock(spec=TokenService)
        tokens.verify.return_value = TokenClaims(subject="3", role=UserRole.DOCTOR)

        principal = Authorizer(tokens).authenticate("opaque")

        tokens.verify.assert_called_once_with("opaque")
        assert principal.role is UserRole.DOCTOR
