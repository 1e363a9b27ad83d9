"""Header-based authentication provider.

Trusts identity headers written by an upstream gateway that already
verified the user's credential. Never expose a service running in this
mode directly to clients.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.auth.providers.exceptions import AuthenticationError
from app.auth.providers.models import AuthResult
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from starlette.requests import Request

logger = get_logger(__name__)


def _split_header(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class HeaderAuthProvider:
    """Builds an ``AuthResult`` from ``X-User-*`` headers."""

    def __init__(
        self,
        user_id_header: str = "X-User-ID",
        email_header: str = "X-User-Email",
        roles_header: str = "X-User-Roles",
        permissions_header: str = "X-User-Permissions",
        default_roles: list[str] | None = None,
    ) -> None:
        self.user_id_header = user_id_header
        self.email_header = email_header
        self.roles_header = roles_header
        self.permissions_header = permissions_header
        self.default_roles = default_roles or ["user"]

    @property
    def provider_name(self) -> str:
        return "header"

    async def validate_token(
        self,
        _token: str,
        request: Request | None = None,
    ) -> AuthResult:
        """Read the identity headers; the bearer token is ignored.

        Raises:
            AuthenticationError: If there is no request or no user id header.
        """
        if request is None:
            msg = "HeaderAuthProvider requires request object for header access"
            raise AuthenticationError(msg)

        user_id = request.headers.get(self.user_id_header)
        if not user_id:
            msg = f"Missing required header: {self.user_id_header}"
            raise AuthenticationError(msg)

        roles = _split_header(request.headers.get(self.roles_header, ""))
        permissions = _split_header(request.headers.get(self.permissions_header, ""))

        return AuthResult(
            user_id=user_id,
            email=request.headers.get(self.email_header) or None,
            roles=roles or self.default_roles.copy(),
            permissions=permissions,
            token_type="header",  # noqa: S106 - not a password
            raw_claims={"source": "headers"},
        )

    async def initialize(self) -> None:
        logger.warning(
            "HeaderAuthProvider is enabled - ensure this is only used in "
            "development/testing or behind a trusted gateway",
            user_id_header=self.user_id_header,
        )

    async def shutdown(self) -> None:
        logger.debug("HeaderAuthProvider shutdown")
