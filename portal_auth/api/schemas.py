"""
Name: HTTP DTOs (request / response models)

Responsibilities:
  - Shape request bodies and responses for the auth and user routers.
  - Keep wire names stable (login returns `token`, change-password accepts
    camelCase `currentPassword` / `newPassword`).

Notes:
  - Request fields are Optional so that "missing" reaches the use case /
    authenticator and is reported with the domain message (400).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..identity.users import UserRole


class LoginRequest(BaseModel):
    username: str | None = Field(default=None, max_length=256)
    password: str | None = Field(default=None, max_length=512)


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
    role: UserRole
    username: str
    display_name: str


class UserResponse(BaseModel):
    id: int
    username: str
    role: UserRole
    created_at: datetime | None = None


class UsersResponse(BaseModel):
    users: list[UserResponse]


class CreateUserRequest(BaseModel):
    username: str | None = Field(default=None, max_length=256)
    password: str | None = Field(default=None, max_length=512)
    role: str | None = None


class CreateUserResponse(BaseModel):
    message: str
    user_id: int


class UpdateIdentityRequest(BaseModel):
    username: str | None = Field(default=None, max_length=256)


class ProfileResponse(BaseModel):
    id: int | None = None
    username: str
    role: UserRole
    display_name: str
    is_demo: bool = False
    created_at: datetime | None = None


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str | None = Field(
        default=None, alias="currentPassword", max_length=512
    )
    new_password: str | None = Field(default=None, alias="newPassword", max_length=512)


class MessageResponse(BaseModel):
    message: str
