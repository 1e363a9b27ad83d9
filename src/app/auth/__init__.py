"""Identity resolution and role-based access control."""

from app.auth.dependencies import (
    CurrentUser,
    RequireAdmin,
    RequirePermissions,
    RequireRoles,
    get_current_user,
    get_current_user_optional,
)
from app.auth.permissions import Permission, Role


__all__ = [
    "CurrentUser",
    "Permission",
    "RequireAdmin",
    "RequirePermissions",
    "RequireRoles",
    "Role",
    "get_current_user",
    "get_current_user_optional",
]
