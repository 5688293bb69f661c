"""Pydantic schemas for the users API."""

from datetime import datetime
from typing import Any

from pydantic import ConfigDict

from api.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    """Registration body. Presence is checked by the service."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "alice",
                "password": "Secret123",
                "confirmPassword": "Secret123",
            }
        },
    )

    username: str | None = None
    password: str | None = None
    confirm_password: str | None = None


class RegisterResponse(CamelModel):
    """Registration outcome; degraded fields are omitted when unset."""

    message: str
    uid: str
    username: str
    server_fallback: bool | None = None
    firestore_error: str | None = None


class LoginRequest(CamelModel):
    """Login body. Presence is checked by the service."""

    username: str | None = None
    password: str | None = None


class LoginResponse(CamelModel):
    """Login outcome."""

    message: str
    uid: str
    username: str | None = None
    token: str | None = None
    server_fallback: bool | None = None


class UserSummary(CamelModel):
    """Profile as listed."""

    id: str
    username: str | None = None
    provider: str
    created_at: datetime | None = None


class UserDetail(UserSummary):
    """Single profile. The password hash is never exposed."""

    email: str | None = None
    profile_description: str | None = None
    settings: dict[str, Any] | None = None
    updated_at: datetime | None = None


class UserUpdateRequest(CamelModel):
    """Partial profile update."""

    username: str | None = None
    profile_description: str | None = None
    settings: dict[str, Any] | None = None
    password: str | None = None


class UserUpdateResponse(UserDetail):
    """Updated profile."""

    message: str = "User updated successfully"


class UserDeleteResponse(CamelModel):
    """Deletion outcome."""

    id: str
    message: str = "User deleted successfully"
    server_fallback: bool | None = None


class UserFilterItem(CamelModel):
    """Profile as returned by the provider filter."""

    id: str
    username: str | None = None
    provider: str


class UsernameItem(CamelModel):
    """Profile as returned by the username sort."""

    id: str
    username: str
