"""Role-Based Access Control (RBAC).

Permissions are granular ``resource:action`` strings; roles bundle them.
Ownership rules (own comment, own recipe) are enforced by the services,
on top of these coarse grants.
"""

from __future__ import annotations

from enum import StrEnum


class Permission(StrEnum):
    """Application permissions."""

    RECIPE_READ = "recipe:read"
    RECIPE_CREATE = "recipe:create"
    RECIPE_UPDATE = "recipe:update"
    RECIPE_DELETE = "recipe:delete"
    RECIPE_REVIEW = "recipe:review"

    COMMENT_CREATE = "comment:create"
    COMMENT_MODERATE = "comment:moderate"

    MEAL_PLAN_WRITE = "meal_plan:write"
    SHOPPING_LIST_WRITE = "shopping_list:write"

    USER_READ = "user:read"
    USER_UPDATE = "user:update"

    ADMIN_USERS = "admin:users"
    ADMIN_SYSTEM = "admin:system"


class Role(StrEnum):
    """Application roles."""

    USER = "user"
    ADMIN = "admin"
    # Internal callers such as the scheduler
    SERVICE = "service"


_MEMBER_PERMISSIONS = {
    Permission.RECIPE_READ,
    Permission.RECIPE_CREATE,
    Permission.RECIPE_UPDATE,
    Permission.RECIPE_DELETE,
    Permission.COMMENT_CREATE,
    Permission.MEAL_PLAN_WRITE,
    Permission.SHOPPING_LIST_WRITE,
    Permission.USER_READ,
    Permission.USER_UPDATE,
}

ROLE_PERMISSIONS: dict[Role, set[Permission]] = {
    Role.USER: _MEMBER_PERMISSIONS,
    Role.ADMIN: set(Permission),
    Role.SERVICE: {
        Permission.RECIPE_READ,
        Permission.ADMIN_SYSTEM,
    },
}


def get_permissions_for_roles(roles: list[Role | str]) -> set[Permission]:
    """Union of the permissions granted by ``roles``; unknown roles grant none."""
    permissions: set[Permission] = set()
    for role in roles:
        try:
            permissions |= ROLE_PERMISSIONS.get(Role(role), set())
        except ValueError:
            continue
    return permissions


def has_permission(
    user_roles: list[str],
    user_permissions: list[str],
    required_permission: Permission | str,
) -> bool:
    """True if granted directly or through any role."""
    required = str(required_permission)
    if required in user_permissions:
        return True
    return required in {str(p) for p in get_permissions_for_roles(user_roles)}


def has_any_role(user_roles: list[str], required_roles: list[Role | str]) -> bool:
    return any(str(role) in user_roles for role in required_roles)
