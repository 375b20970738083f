"""
===============================================================================
CRC CARD — api/user_routes.py (own profile + user management)
===============================================================================

Responsibilities:
  - Own account (any role): GET/PUT /profile, PUT /change-password.
  - Administration (admin): GET/POST /users, PUT/DELETE /users/{user_id}.
  - Enforce the role guard at the edge (require_operation) and map use case
    errors to RFC 7807 responses.

Collaborators:
  - api/dependencies (require_operation, get_container)
  - application.usecases.users (via PortalContainer)
  - crosscutting.error_responses (factories)
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..application.usecases.users import Profile, UserError, UserErrorCode
from ..container import PortalContainer
from ..crosscutting.error_responses import (
    OPENAPI_ERROR_RESPONSES,
    bad_request,
    conflict,
    forbidden,
    internal_error,
    invalid_credentials,
    not_found,
)
from ..identity.authorization import Principal
from ..identity.role_guard import Operation
from ..identity.users import User
from .dependencies import get_container, require_operation
from .schemas import (
    ChangePasswordRequest,
    CreateUserRequest,
    CreateUserResponse,
    MessageResponse,
    ProfileResponse,
    UpdateIdentityRequest,
    UserResponse,
    UsersResponse,
)

router = APIRouter(prefix="/api/user", tags=["users"], responses=OPENAPI_ERROR_RESPONSES)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _raise_user_error(error: UserError, *, user_id: object = "-") -> None:
    if error.code == UserErrorCode.VALIDATION_ERROR:
        raise bad_request(error.message)
    if error.code == UserErrorCode.NOT_FOUND:
        raise not_found("User", str(user_id))
    if error.code == UserErrorCode.FORBIDDEN:
        raise forbidden(error.message)
    if error.code == UserErrorCode.CONFLICT:
        raise conflict(error.message)
    if error.code == UserErrorCode.INVALID_CREDENTIALS:
        raise invalid_credentials(error.message)
    raise internal_error(error.message)


def _to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.identity,
        role=user.role,
        created_at=user.created_at,
    )


def _to_profile_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        username=profile.username,
        role=profile.role,
        display_name=profile.display_name,
        is_demo=profile.is_demo,
        created_at=profile.created_at,
    )


# -----------------------------------------------------------------------------
# Own account
# -----------------------------------------------------------------------------


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    principal: Principal = Depends(require_operation(Operation.VIEW_OWN_PROFILE)),
    container: PortalContainer = Depends(get_container),
):
    result = container.get_profile.execute(principal)
    if result.error:
        _raise_user_error(result.error, user_id=principal.subject_id)
    return _to_profile_response(result.profile)


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    req: UpdateIdentityRequest,
    principal: Principal = Depends(require_operation(Operation.UPDATE_OWN_PROFILE)),
    container: PortalContainer = Depends(get_container),
):
    result = container.update_own_profile.execute(principal, username=req.username)
    if result.error:
        _raise_user_error(result.error, user_id=principal.subject_id)
    return _to_profile_response(result.profile)


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    req: ChangePasswordRequest,
    principal: Principal = Depends(require_operation(Operation.CHANGE_OWN_PASSWORD)),
    container: PortalContainer = Depends(get_container),
):
    result = container.change_password.execute(
        principal,
        current_password=req.current_password,
        new_password=req.new_password,
    )
    if result.error:
        _raise_user_error(result.error, user_id=principal.subject_id)
    return MessageResponse(message="Password updated successfully")


# -----------------------------------------------------------------------------
# Administration
# -----------------------------------------------------------------------------


@router.get("/users", response_model=UsersResponse)
def list_users(
    principal: Principal = Depends(require_operation(Operation.LIST_USERS)),
    container: PortalContainer = Depends(get_container),
):
    result = container.list_users.execute(principal)
    if result.error:
        _raise_user_error(result.error)
    return UsersResponse(users=[_to_user_response(u) for u in result.users])


@router.post(
    "/users",
    response_model=CreateUserResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_user(
    req: CreateUserRequest,
    principal: Principal = Depends(require_operation(Operation.CREATE_USER)),
    container: PortalContainer = Depends(get_container),
):
    result = container.create_user.execute(
        principal, username=req.username, password=req.password, role=req.role
    )
    if result.error:
        _raise_user_error(result.error)
    return CreateUserResponse(message="User created successfully", user_id=result.user.id)


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user_identity(
    user_id: int,
    req: UpdateIdentityRequest,
    principal: Principal = Depends(require_operation(Operation.UPDATE_USER_IDENTITY)),
    container: PortalContainer = Depends(get_container),
):
    result = container.update_identity.execute(principal, user_id, username=req.username)
    if result.error:
        _raise_user_error(result.error, user_id=user_id)
    return _to_user_response(result.user)


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    principal: Principal = Depends(require_operation(Operation.DELETE_USER)),
    container: PortalContainer = Depends(get_container),
):
    result = container.delete_user.execute(principal, user_id)
    if result.error:
        _raise_user_error(result.error, user_id=user_id)
    return MessageResponse(message="User deleted successfully")
