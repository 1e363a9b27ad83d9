"""Authentication provider models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from app.auth.permissions import Role


class AuthResult(BaseModel):
    """Identity resolved from a credential, independent of the provider.

    Attributes:
        user_id: Stable user identifier (``sub`` claim or header).
        email: Account email, used to recognise the distinguished admin account.
        roles: Role names granted to the user.
        permissions: Extra permission strings granted explicitly.
        token_type: Kind of credential that was validated.
        expires_at: Credential expiry timestamp, when known.
        raw_claims: Original claims for auditing.
    """

    user_id: str = Field(..., description="User identifier")
    email: str | None = Field(default=None, description="Account email")
    roles: list[str] = Field(default_factory=list, description="User roles")
    permissions: list[str] = Field(default_factory=list, description="User permissions")
    token_type: str = Field(default="access", description="Type of validated token")
    expires_at: int | None = Field(default=None, description="Expiration timestamp")
    raw_claims: dict[str, Any] = Field(
        default_factory=dict,
        description="Original token claims",
    )

    model_config = {"frozen": True}

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN.value in self.roles

    def with_admin_resolved(self, admin_email: str) -> AuthResult:
        """Grant the admin role when ``email`` is the configured admin account.

        Applied once per request by the auth dependency, so downstream code
        only ever checks the role.
        """
        if self.is_admin or not self.email or not admin_email:
            return self
        if self.email.strip().lower() != admin_email.strip().lower():
            return self
        return self.model_copy(update={"roles": [*self.roles, Role.ADMIN.value]})
