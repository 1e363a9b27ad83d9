"""User profile and user administration schemas."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import Field

from app.schemas.base import APIRequest, APIResponse
from app.schemas.enums import UserRole


if TYPE_CHECKING:
    from app.database.documents import UserDocument


class HealthProfileRequest(APIRequest):
    """Inputs to personalised recommendations."""

    age: int | None = Field(default=None, ge=0, le=150)
    health_conditions: list[str] = Field(default_factory=list)
    dietary_preferences: list[str] = Field(default_factory=list)


class AdminUserUpdateRequest(APIRequest):
    """Fields an admin may change on an account."""

    is_active: bool | None = None
    role: UserRole | None = None


class UserResponse(APIResponse):
    """A user without credentials."""

    id: str
    email: str = ""
    name: str = ""
    role: str = "user"
    is_active: bool = True
    created_at: datetime | None = None
    last_login: datetime | None = None
    age: int | None = None
    health_conditions: list[str] = Field(default_factory=list)
    dietary_preferences: list[str] = Field(default_factory=list)
    has_completed_health_profile: bool = False
    liked_recipes: list[str] = Field(default_factory=list)
    saved_recipes: list[str] = Field(default_factory=list)

    @classmethod
    def from_document(cls, user: UserDocument) -> UserResponse:
        return cls(**user.model_dump(by_alias=False, include=set(cls.model_fields)))


class UserListResponse(APIResponse):
    users: list[UserResponse]
    total: int


class UserDeletedResponse(APIResponse):
    user_id: str
