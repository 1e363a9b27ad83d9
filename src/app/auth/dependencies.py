"""FastAPI security dependencies.

The configured provider resolves the request to an ``AuthResult``; the admin
role is resolved here, once, and every route receives a ``CurrentUser``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from app.auth.permissions import Permission, Role, has_any_role, has_permission
from app.auth.providers import (
    AuthenticationError,
    AuthResult,
    TokenExpiredError,
    get_auth_provider,
)
from app.core.config import AuthMode, get_settings
from app.core.exceptions import ForbiddenException, UnauthorizedException
from app.observability.logging import bind_context


bearer_scheme = HTTPBearer(
    scheme_name="JWT",
    description="JWT Bearer token authentication",
    auto_error=False,
)


class CurrentUser(BaseModel):
    """The authenticated caller."""

    id: str
    email: str | None = None
    roles: list[str] = []
    permissions: list[str] = []
    token_type: str = "access"

    @classmethod
    def from_auth_result(cls, result: AuthResult) -> CurrentUser:
        return cls(
            id=result.user_id,
            email=result.email,
            roles=result.roles,
            permissions=result.permissions,
            token_type=result.token_type,
        )

    def has_permission(self, permission: Permission | str) -> bool:
        return has_permission(self.roles, self.permissions, permission)

    def has_role(self, role: Role | str) -> bool:
        return str(role) in self.roles

    def is_admin(self) -> bool:
        return self.has_role(Role.ADMIN)


async def _resolve(request: Request, token: str) -> AuthResult:
    settings = get_settings()
    result = await get_auth_provider().validate_token(token, request)
    result = result.with_admin_resolved(settings.auth.admin_email)
    request.state.user = result
    bind_context(user_id=result.user_id)
    return result


async def get_auth_result(
    request: Request,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> AuthResult:
    """Resolve the caller or fail with 401.

    Raises:
        UnauthorizedException: If no identity can be resolved.
    """
    token = credentials.credentials if credentials else ""
    if not token and get_settings().auth_mode_enum == AuthMode.LOCAL_JWT:
        raise UnauthorizedException("Not authenticated")

    try:
        return await _resolve(request, token)
    except TokenExpiredError:
        raise UnauthorizedException("Token has expired") from None
    except AuthenticationError as e:
        raise UnauthorizedException(str(e) or "Authentication failed") from None


async def get_auth_result_optional(
    request: Request,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> AuthResult | None:
    """Resolve the caller if possible; anonymous requests yield ``None``."""
    token = credentials.credentials if credentials else ""
    if not token and get_settings().auth_mode_enum == AuthMode.LOCAL_JWT:
        return None
    try:
        return await _resolve(request, token)
    except AuthenticationError:
        return None


async def get_current_user(
    auth_result: Annotated[AuthResult, Depends(get_auth_result)],
) -> CurrentUser:
    return CurrentUser.from_auth_result(auth_result)


async def get_current_user_optional(
    auth_result: Annotated[AuthResult | None, Depends(get_auth_result_optional)],
) -> CurrentUser | None:
    if auth_result is None:
        return None
    return CurrentUser.from_auth_result(auth_result)


class RequirePermissions:
    """Dependency requiring any (or all) of the given permissions.

    Usage:
        user: Annotated[CurrentUser, Depends(RequirePermissions(Permission.RECIPE_REVIEW))]
    """

    def __init__(self, *permissions: Permission | str, require_all: bool = False) -> None:
        self.permissions = list(permissions)
        self.require_all = require_all

    async def __call__(
        self,
        user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        check = all if self.require_all else any
        if not check(user.has_permission(p) for p in self.permissions):
            raise ForbiddenException("Insufficient permissions")
        return user


class RequireRoles:
    """Dependency requiring any of the given roles."""

    def __init__(self, *roles: Role | str) -> None:
        self.roles = list(roles)

    async def __call__(
        self,
        user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if not has_any_role(user.roles, self.roles):
            raise ForbiddenException("Insufficient role")
        return user


RequireAdmin = RequireRoles(Role.ADMIN)
