"""
Name: Client Navigation Guard Tests

Responsibilities:
  - Protected pages follow the shared role policy
  - Logged-out sessions are sent home
  - Unknown paths are not guarded
"""

import pytest

from portal_auth.client.navigation import HOME_PATH, guard_navigation
from portal_auth.client.session import ClientSession


def _session(role: str) -> ClientSession:
    return ClientSession(logged_in=True, token="t", role=role, username=role)


@pytest.mark.unit
class TestGuardNavigation:
    @pytest.mark.parametrize(
        "role,path,allowed",
        [
            ("admin", "/adminpage", True),
            ("staff", "/adminpage", False),
            ("doctor", "/adminpage", False),
            ("staff", "/staffpage", True),
            ("admin", "/staffpage", False),
            ("doctor", "/doctorpage", True),
            ("staff", "/doctorpage", False),
            ("admin", "/profile", True),
            ("staff", "/profile", True),
            ("doctor", "/profile", True),
        ],
    )
    def test_role_matrix(self, role, path, allowed):
        decision = guard_navigation(_session(role), path)
        assert decision.allowed is allowed
        assert decision.redirect_to == (None if allowed else HOME_PATH)

    def test_logged_out_is_redirected(self):
        decision = guard_navigation(ClientSession(), "/profile")
        assert decision.allowed is False
        assert decision.redirect_to == "/"

    def test_logged_in_flag_required(self):
        session = ClientSession(logged_in=False, role="admin")
        assert guard_navigation(session, "/adminpage").allowed is False

    def test_unknown_role_is_redirected(self):
        assert guard_navigation(_session("nurse"), "/profile").allowed is False

    @pytest.mark.parametrize("path", ["/AdminPage", "/adminpage/", "/adminpage?tab=users"])
    def test_path_normalization(self, path):
        assert guard_navigation(_session("staff"), path).allowed is False
        assert guard_navigation(_session("admin"), path).allowed is True

    @pytest.mark.parametrize("path", ["/", "/login", "", "/about"])
    def test_unguarded_paths(self, path):
        assert guard_navigation(ClientSession(), path).allowed is True
