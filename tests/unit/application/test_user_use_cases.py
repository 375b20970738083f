"""
Name: User Management Use Case Tests

Responsibilities:
  - Role guard re-checked inside each use case
  - Validation messages and error codes
  - Self-delete refusal, demo read-only rules
  - Store effects (in-memory store)
"""

import pytest

from portal_auth.application.usecases.users import (
    ChangePasswordUseCase,
    CreateUserUseCase,
    DeleteUserUseCase,
    GetProfileUseCase,
    ListUsersUseCase,
    UpdateIdentityUseCase,
    UpdateOwnProfileUseCase,
    UserErrorCode,
)
from portal_auth.identity.authorization import Principal
from portal_auth.identity.users import UserRole


def _actor(user, *, demo=False) -> Principal:
    return Principal(subject_id=str(user.id), role=user.role, is_demo=demo)


ADMIN_DEMO = Principal(subject_id="admin", role=UserRole.ADMIN, is_demo=True)
STAFF_DEMO = Principal(subject_id="staff", role=UserRole.STAFF, is_demo=True)


@pytest.mark.unit
class TestCreateUser:
    def test_admin_creates_user(self, store, hasher):
        result = CreateUserUseCase(store, hasher).execute(
            ADMIN_DEMO, username="  nurse1 ", password="pw1", role="staff"
        )

        assert result.error is None
        assert result.user.identity == "nurse1"
        assert result.user.role is UserRole.STAFF
        assert hasher.verify("pw1", store.find_by_identity("nurse1").password_hash)

    def test_staff_is_forbidden(self, store, hasher):
        result = CreateUserUseCase(store, hasher).execute(
            STAFF_DEMO, username="x1", password="pw1", role="staff"
        )
        assert result.error.code is UserErrorCode.FORBIDDEN
        assert store.list() == []

    def test_missing_actor_is_forbidden(self, store, hasher):
        result = CreateUserUseCase(store, hasher).execute(
            None, username="x1", password="pw1", role="staff"
        )
        assert result.error.code is UserErrorCode.FORBIDDEN

    @pytest.mark.parametrize(
        "username,password,role,message",
        [
            ("", "pw1", "staff", "Username, password, and role are required"),
            ("x1", "", "staff", "Username, password, and role are required"),
            ("x1", "pw1", "", "Username, password, and role are required"),
            ("x1", "pw", "staff", "Password must be at least 3 characters"),
            ("x1", "pw1", "superuser", "Invalid role"),
        ],
    )
    def test_validation(self, store, hasher, username, password, role, message):
        result = CreateUserUseCase(store, hasher).execute(
            ADMIN_DEMO, username=username, password=password, role=role
        )
        assert result.error.code is UserErrorCode.VALIDATION_ERROR
        assert result.error.message == message

    def test_duplicate_is_conflict(self, store, hasher, make_user):
        make_user("nurse1")
        result = CreateUserUseCase(store, hasher).execute(
            ADMIN_DEMO, username="nurse1", password="pw1", role="doctor"
        )
        assert result.error.code is UserErrorCode.CONFLICT

    @pytest.mark.parametrize("username", ["doctor", "Staff", " admin "])
    def test_demo_username_is_reserved(self, store, hasher, username):
        result = CreateUserUseCase(store, hasher).execute(
            ADMIN_DEMO, username=username, password="real-pw", role="staff"
        )
        assert result.error.code is UserErrorCode.CONFLICT
        assert result.error.message == "Username is reserved for a demo account"
        assert store.list() == []

    def test_demo_username_allowed_when_demo_disabled(self, store, hasher):
        result = CreateUserUseCase(store, hasher, demo_enabled=False).execute(
            ADMIN_DEMO, username="doctor", password="real-pw", role="doctor"
        )
        assert result.error is None
        assert result.user.identity == "doctor"


@pytest.mark.unit
class TestListUsers:
    def test_admin_lists_newest_first(self, store, make_user):
        make_user("a1")
        make_user("b2")
        result = ListUsersUseCase(store).execute(ADMIN_DEMO)
        assert result.error is None
        assert {u.identity for u in result.users} == {"a1", "b2"}

    def test_doctor_forbidden(self, store):
        doctor = Principal(subject_id="doctor", role=UserRole.DOCTOR, is_demo=True)
        result = ListUsersUseCase(store).execute(doctor)
        assert result.users == []
        assert result.error.code is UserErrorCode.FORBIDDEN


@pytest.mark.unit
class TestUpdateIdentity:
    def test_admin_renames(self, store, make_user):
        user = make_user("a1")
        result = UpdateIdentityUseCase(store).execute(ADMIN_DEMO, user.id, username="a2")
        assert result.user.identity == "a2"

    def test_short_username(self, store, make_user):
        user = make_user("a1")
        result = UpdateIdentityUseCase(store).execute(ADMIN_DEMO, user.id, username=" x ")
        assert result.error.code is UserErrorCode.VALIDATION_ERROR
        assert result.error.message == "Username must be at least 2 characters"

    def test_missing_user(self, store):
        result = UpdateIdentityUseCase(store).execute(ADMIN_DEMO, 77, username="abc")
        assert result.error.code is UserErrorCode.NOT_FOUND
        assert result.error.message == "User 77 not found"

    def test_collision(self, store, make_user):
        make_user("a1")
        other = make_user("b2")
        result = UpdateIdentityUseCase(store).execute(ADMIN_DEMO, other.id, username="a1")
        assert result.error.code is UserErrorCode.CONFLICT

    def test_rename_to_demo_username_is_reserved(self, store, make_user):
        user = make_user("nurse1")
        result = UpdateIdentityUseCase(store).execute(
            ADMIN_DEMO, user.id, username="Staff"
        )
        assert result.error.code is UserErrorCode.CONFLICT
        assert store.get_by_id(user.id).identity == "nurse1"

    def test_own_profile_rename_to_demo_username(self, store, make_user):
        user = make_user("nurse1")
        result = UpdateOwnProfileUseCase(UpdateIdentityUseCase(store)).execute(
            _actor(user), username="admin"
        )
        assert result.error.code is UserErrorCode.CONFLICT
        assert store.get_by_id(user.id).identity == "nurse1"

    def test_staff_cannot_rename_others(self, store, make_user):
        user = make_user("a1")
        result = UpdateIdentityUseCase(store).execute(STAFF_DEMO, user.id, username="zz")
        assert result.error.code is UserErrorCode.FORBIDDEN


@pytest.mark.unit
class TestDeleteUser:
    def test_admin_deletes_other(self, store, make_user):
        admin = make_user("boss", role=UserRole.ADMIN)
        victim = make_user("v1")
        result = DeleteUserUseCase(store).execute(_actor(admin), victim.id)
        assert result.deleted is True
        assert store.get_by_id(victim.id) is None

    def test_admin_cannot_delete_self(self, store, make_user):
        admin = make_user("boss", role=UserRole.ADMIN)
        result = DeleteUserUseCase(store).execute(_actor(admin), admin.id)
        assert result.deleted is False
        assert result.error.code is UserErrorCode.FORBIDDEN
        assert result.error.message == "Cannot delete your own account"
        assert store.get_by_id(admin.id) is not None

    def test_missing(self, store):
        result = DeleteUserUseCase(store).execute(ADMIN_DEMO, 404)
        assert result.error.code is UserErrorCode.NOT_FOUND

    def test_staff_forbidden(self, store, make_user):
        victim = make_user("v1")
        result = DeleteUserUseCase(store).execute(STAFF_DEMO, victim.id)
        assert result.error.code is UserErrorCode.FORBIDDEN
        assert store.get_by_id(victim.id) is not None


@pytest.mark.unit
class TestProfile:
    def test_stored_profile(self, store, make_user):
        user = make_user("nurse1", role=UserRole.STAFF)
        result = GetProfileUseCase(store).execute(_actor(user))
        assert result.profile.id == user.id
        assert result.profile.username == "nurse1"
        assert result.profile.display_name == "nurse1"
        assert result.profile.is_demo is False

    def test_demo_profile(self, store):
        result = GetProfileUseCase(store).execute(
            Principal(subject_id="doctor", role=UserRole.DOCTOR, is_demo=True)
        )
        assert result.profile.id is None
        assert result.profile.display_name == "Doctor User"
        assert result.profile.is_demo is True

    def test_deleted_subject(self, store):
        ghost = Principal(subject_id="99", role=UserRole.STAFF)
        result = GetProfileUseCase(store).execute(ghost)
        assert result.error.code is UserErrorCode.NOT_FOUND

    def test_update_own_profile(self, store, make_user):
        user = make_user("nurse1", role=UserRole.STAFF)
        use_case = UpdateOwnProfileUseCase(UpdateIdentityUseCase(store))
        result = use_case.execute(_actor(user), username="nurse2")
        assert result.profile.username == "nurse2"
        assert store.find_by_identity("nurse2").id == user.id

    def test_demo_cannot_update_profile(self, store):
        use_case = UpdateOwnProfileUseCase(UpdateIdentityUseCase(store))
        result = use_case.execute(STAFF_DEMO, username="someone")
        assert result.error.code is UserErrorCode.FORBIDDEN
        assert result.error.message == "Demo accounts cannot be modified"


@pytest.mark.unit
class TestChangePassword:
    def test_changes_password(self, store, hasher, make_user):
        user = make_user("nurse1", "old-pw")
        result = ChangePasswordUseCase(store, hasher).execute(
            _actor(user), current_password="old-pw", new_password="new-pw"
        )
        assert result.changed is True
        stored = store.get_by_id(user.id)
        assert hasher.verify("new-pw", stored.password_hash)
        assert not hasher.verify("old-pw", stored.password_hash)

    def test_wrong_current_password(self, store, hasher, make_user):
        user = make_user("nurse1", "old-pw")
        result = ChangePasswordUseCase(store, hasher).execute(
            _actor(user), current_password="nope", new_password="new-pw"
        )
        assert result.changed is False
        assert result.error.code is UserErrorCode.INVALID_CREDENTIALS
        assert result.error.message == "Current password is incorrect"

    @pytest.mark.parametrize(
        "current,new,message",
        [
            ("", "new-pw", "Current password and new password are required"),
            ("old-pw", None, "Current password and new password are required"),
            ("old-pw", "nw", "New password must be at least 3 characters"),
        ],
    )
    def test_validation(self, store, hasher, make_user, current, new, message):
        user = make_user("nurse1", "old-pw")
        result = ChangePasswordUseCase(store, hasher).execute(
            _actor(user), current_password=current, new_password=new
        )
        assert result.error.code is UserErrorCode.VALIDATION_ERROR
        assert result.error.message == message

    def test_demo_is_read_only(self, store, hasher):
        result = ChangePasswordUseCase(store, hasher).execute(
            STAFF_DEMO, current_password="staff", new_password="new-pw"
        )
        assert result.error.code is UserErrorCode.FORBIDDEN
