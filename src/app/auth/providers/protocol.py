"""Authentication provider protocol definition."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    from starlette.requests import Request

    from app.auth.providers.models import AuthResult


@runtime_checkable
class AuthProvider(Protocol):
    """Resolves a bearer credential (or trusted headers) to an identity.

    Implementations are created by ``create_auth_provider`` according to
    ``auth.mode`` and live for the whole process.
    """

    @property
    def provider_name(self) -> str:
        """Short name used in logs, e.g. ``local_jwt`` or ``header``."""
        ...

    async def validate_token(
        self,
        token: str,
        request: Request | None = None,
    ) -> AuthResult:
        """Validate ``token`` and return the identity.

        Raises:
            TokenExpiredError: If the token has expired.
            TokenInvalidError: If the token is malformed or its signature fails.
            AuthenticationError: For any other authentication failure.
        """
        ...

    async def initialize(self) -> None:
        """Validate configuration at startup."""
        ...

    async def shutdown(self) -> None:
        """Release provider resources."""
        ...
