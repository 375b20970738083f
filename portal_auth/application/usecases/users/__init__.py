"""
User management use cases.

Admin: create / list / update identity / delete.
Any role: get own profile / update own profile / change own password.
"""

from .change_password import ChangePasswordUseCase
from .create_user import CreateUserUseCase
from .delete_user import DeleteUserUseCase
from .get_profile import GetProfileUseCase
from .list_users import ListUsersUseCase
from .update_identity import UpdateIdentityUseCase
from .update_own_profile import UpdateOwnProfileUseCase
from .user_results import (
    DeleteUserResult,
    PasswordChangeResult,
    Profile,
    ProfileResult,
    UserError,
    UserErrorCode,
    UserListResult,
    UserResult,
)

__all__ = [
    "ChangePasswordUseCase",
    "CreateUserUseCase",
    "DeleteUserUseCase",
    "GetProfileUseCase",
    "ListUsersUseCase",
    "UpdateIdentityUseCase",
    "UpdateOwnProfileUseCase",
    "DeleteUserResult",
    "PasswordChangeResult",
    "Profile",
    "ProfileResult",
    "UserError",
    "UserErrorCode",
    "UserListResult",
    "UserResult",
]
