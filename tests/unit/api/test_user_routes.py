"""
Name: User Routes Tests

Responsibilities:
  - Authentication: missing / expired / tampered tokens -> 401
  - Role guard: non-admin on admin routes -> 403
  - Own profile and password change
  - Admin CRUD, including self-delete refusal
"""

from datetime import datetime, timedelta, timezone

import pytest

from portal_auth.identity.tokens import TokenClaims, TokenService
from portal_auth.identity.users import UserRole


@pytest.mark.unit
class TestAuthentication:
    def test_missing_token(self, client):
        res = client.get("/api/user/profile")
        assert res.status_code == 401
        assert res.headers["WWW-Authenticate"] == "Bearer"
        assert res.json()["code"] == "UNAUTHORIZED"

    def test_expired_token(self, client, settings):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = TokenService(settings.jwt_secret, clock=lambda: past).issue(
            TokenClaims(subject="admin", role=UserRole.ADMIN, source="demo")
        ).token

        res = client.get(
            "/api/user/users", headers={"Authorization": f"Bearer {token}"}
        )

        assert res.status_code == 401
        assert res.json()["detail"] == "Invalid or expired token"

    def test_token_from_another_secret(self, client):
        token = TokenService("x" * 40).issue(
            TokenClaims(subject="admin", role=UserRole.ADMIN, source="demo")
        ).token
        res = client.get(
            "/api/user/users", headers={"Authorization": f"Bearer {token}"}
        )
        assert res.status_code == 401

    def test_wrong_scheme(self, client):
        res = client.get("/api/user/profile", headers={"Authorization": "Basic abc"})
        assert res.status_code == 401


@pytest.mark.unit
class TestRoleGuard:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/user/users"),
            ("POST", "/api/user/users"),
            ("PUT", "/api/user/users/1"),
            ("DELETE", "/api/user/users/1"),
        ],
    )
    @pytest.mark.parametrize("role", [UserRole.STAFF, UserRole.DOCTOR])
    def test_admin_routes_forbidden_for_other_roles(
        self, client, auth_headers, make_user, method, path, role
    ):
        make_user("target")
        res = client.request(
            method,
            path,
            headers=auth_headers(role),
            json={"username": "zz", "password": "pw1", "role": "staff"},
        )
        assert res.status_code == 403
        assert res.json()["code"] == "FORBIDDEN"

    def test_staff_cannot_delete(self, client, auth_headers, make_user, store):
        victim = make_user("victim")
        res = client.delete(
            f"/api/user/users/{victim.id}", headers=auth_headers(UserRole.STAFF)
        )
        assert res.status_code == 403
        assert store.get_by_id(victim.id) is not None


@pytest.mark.unit
class TestOwnAccount:
    def test_profile_stored_user(self, client, auth_headers, make_user):
        user = make_user("nurse1", role=UserRole.STAFF)
        res = client.get(
            "/api/user/profile",
            headers=auth_headers(UserRole.STAFF, subject=str(user.id)),
        )
        assert res.status_code == 200
        body = res.json()
        assert body["id"] == user.id
        assert body["username"] == "nurse1"
        assert body["is_demo"] is False

    def test_profile_demo_user(self, client, auth_headers):
        res = client.get(
            "/api/user/profile",
            headers=auth_headers(UserRole.DOCTOR, subject="doctor", demo=True),
        )
        assert res.status_code == 200
        assert res.json()["display_name"] == "Doctor User"
        assert res.json()["is_demo"] is True

    def test_update_own_profile(self, client, auth_headers, make_user, store):
        user = make_user("nurse1", role=UserRole.DOCTOR)
        res = client.put(
            "/api/user/profile",
            headers=auth_headers(UserRole.DOCTOR, subject=str(user.id)),
            json={"username": "nurse2"},
        )
        assert res.status_code == 200
        assert store.get_by_id(user.id).identity == "nurse2"

    def test_demo_profile_is_read_only(self, client, auth_headers):
        res = client.put(
            "/api/user/profile",
            headers=auth_headers(UserRole.STAFF, subject="staff", demo=True),
            json={"username": "someone"},
        )
        assert res.status_code == 403

    def test_change_password_then_login(self, client, auth_headers, make_user):
        user = make_user("nurse1", "old-pw")
        headers = auth_headers(UserRole.STAFF, subject=str(user.id))

        res = client.put(
            "/api/user/change-password",
            headers=headers,
            json={"currentPassword": "old-pw", "newPassword": "new-pw"},
        )

        assert res.status_code == 200
        assert res.json() == {"message": "Password updated successfully"}
        login = client.post(
            "/api/auth/login", json={"username": "nurse1", "password": "new-pw"}
        )
        assert login.status_code == 200

    def test_change_password_wrong_current(self, client, auth_headers, make_user):
        user = make_user("nurse1", "old-pw")
        res = client.put(
            "/api/user/change-password",
            headers=auth_headers(UserRole.STAFF, subject=str(user.id)),
            json={"currentPassword": "bad", "newPassword": "new-pw"},
        )
        assert res.status_code == 401
        assert res.json()["code"] == "INVALID_CREDENTIALS"

    def test_change_password_too_short(self, client, auth_headers, make_user):
        user = make_user("nurse1", "old-pw")
        res = client.put(
            "/api/user/change-password",
            headers=auth_headers(UserRole.STAFF, subject=str(user.id)),
            json={"currentPassword": "old-pw", "newPassword": "ab"},
        )
        assert res.status_code == 400


@pytest.mark.unit
class TestAdministration:
    def test_create_user(self, client, auth_headers, store):
        res = client.post(
            "/api/user/users",
            headers=auth_headers(UserRole.ADMIN, subject="admin", demo=True),
            json={"username": "doc1", "password": "pw1", "role": "doctor"},
        )
        assert res.status_code == 201
        body = res.json()
        assert body["message"] == "User created successfully"
        assert store.get_by_id(body["user_id"]).role is UserRole.DOCTOR

    def test_create_duplicate(self, client, auth_headers, make_user):
        make_user("doc1")
        res = client.post(
            "/api/user/users",
            headers=auth_headers(UserRole.ADMIN, subject="admin", demo=True),
            json={"username": "doc1", "password": "pw1", "role": "doctor"},
        )
        assert res.status_code == 409

    def test_create_demo_username_is_reserved(self, client, auth_headers, store):
        res = client.post(
            "/api/user/users",
            headers=auth_headers(UserRole.ADMIN, subject="admin", demo=True),
            json={"username": "doctor", "password": "real-pw", "role": "staff"},
        )
        assert res.status_code == 409
        assert res.json()["detail"] == "Username is reserved for a demo account"
        assert store.find_by_identity("doctor") is None

        login = client.post(
            "/api/auth/login", json={"username": "doctor", "password": "doctor"}
        )
        assert login.status_code == 200
        assert login.json()["role"] == "doctor"

    def test_create_invalid_role(self, client, auth_headers):
        res = client.post(
            "/api/user/users",
            headers=auth_headers(UserRole.ADMIN, subject="admin", demo=True),
            json={"username": "doc1", "password": "pw1", "role": "nurse"},
        )
        assert res.status_code == 400
        assert res.json()["detail"] == "Invalid role"

    def test_list_users(self, client, auth_headers, make_user):
        make_user("a1")
        make_user("b2", role=UserRole.DOCTOR)
        res = client.get(
            "/api/user/users",
            headers=auth_headers(UserRole.ADMIN, subject="admin", demo=True),
        )
        assert res.status_code == 200
        names = {u["username"] for u in res.json()["users"]}
        assert names == {"a1", "b2"}

    def test_update_user_identity(self, client, auth_headers, make_user):
        user = make_user("a1")
        res = client.put(
            f"/api/user/users/{user.id}",
            headers=auth_headers(UserRole.ADMIN, subject="admin", demo=True),
            json={"username": "a2"},
        )
        assert res.status_code == 200
        assert res.json()["username"] == "a2"

    def test_rename_to_demo_username_is_reserved(self, client, auth_headers, make_user):
        user = make_user("nurse1", "old-pw")
        res = client.put(
            f"/api/user/users/{user.id}",
            headers=auth_headers(UserRole.ADMIN, subject="admin", demo=True),
            json={"username": "Staff"},
        )
        assert res.status_code == 409

        login = client.post(
            "/api/auth/login", json={"username": "nurse1", "password": "old-pw"}
        )
        assert login.status_code == 200

    def test_own_profile_rename_to_demo_username(self, client, auth_headers, make_user):
        user = make_user("nurse1")
        res = client.put(
            "/api/user/profile",
            headers=auth_headers(UserRole.STAFF, subject=str(user.id)),
            json={"username": "admin"},
        )
        assert res.status_code == 409

    def test_update_missing_user(self, client, auth_headers):
        res = client.put(
            "/api/user/users/999",
            headers=auth_headers(UserRole.ADMIN, subject="admin", demo=True),
            json={"username": "a2"},
        )
        assert res.status_code == 404

    def test_delete_other_user(self, client, auth_headers, make_user, store):
        admin = make_user("boss", role=UserRole.ADMIN)
        victim = make_user("victim")
        res = client.delete(
            f"/api/user/users/{victim.id}",
            headers=auth_headers(UserRole.ADMIN, subject=str(admin.id)),
        )
        assert res.status_code == 200
        assert store.get_by_id(victim.id) is None

    def test_admin_cannot_delete_self(self, client, auth_headers, make_user, store):
        admin = make_user("boss", role=UserRole.ADMIN)
        res = client.delete(
            f"/api/user/users/{admin.id}",
            headers=auth_headers(UserRole.ADMIN, subject=str(admin.id)),
        )
        assert res.status_code == 403
        assert res.json()["detail"] == "Cannot delete your own account"
        assert store.get_by_id(admin.id) is not None

    def test_delete_missing_user(self, client, auth_headers):
        res = client.delete(
            "/api/user/users/999",
            headers=auth_headers(UserRole.ADMIN, subject="admin", demo=True),
        )
        assert res.status_code == 404
