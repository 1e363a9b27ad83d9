"""Authentication provider factory and process-wide provider registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.auth.providers.exceptions import ConfigurationError
from app.auth.providers.header import HeaderAuthProvider
from app.auth.providers.local_jwt import LocalJWTAuthProvider
from app.auth.providers.models import AuthResult
from app.core.config import AuthMode, get_settings
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from app.auth.providers.protocol import AuthProvider
    from app.core.config import Settings

logger = get_logger(__name__)

# Fixed development secret - safe for local dev, blocked in production
_DEV_JWT_SECRET = "insecure-dev-key-do-not-use-in-production"  # noqa: S105

_state: dict[str, AuthProvider | None] = {"provider": None}


def _get_jwt_secret(settings: Settings) -> str:
    """Return the JWT secret; a missing secret is fatal only in production."""
    if settings.JWT_SECRET_KEY:
        return settings.JWT_SECRET_KEY

    if settings.is_production:
        msg = "JWT_SECRET_KEY must be set in production for local_jwt auth mode"
        raise ConfigurationError(msg)

    logger.warning("Using insecure development JWT secret - do not use in production")
    return _DEV_JWT_SECRET


class DisabledAuthProvider:
    """Resolves every request to one anonymous local user.

    Local development only; the user never holds the admin role.
    """

    @property
    def provider_name(self) -> str:
        return "disabled"

    async def validate_token(
        self,
        _token: str,
        _request: object = None,
    ) -> AuthResult:
        return AuthResult(
            user_id="anonymous",
            roles=["user"],
            token_type="none",  # noqa: S106 - not a password
            raw_claims={"auth_disabled": True},
        )

    async def initialize(self) -> None:
        logger.warning(
            "DisabledAuthProvider initialized - authentication is disabled! "
            "Ensure this is intentional and not a production deployment."
        )

    async def shutdown(self) -> None:
        pass


def create_auth_provider(settings: Settings | None = None) -> AuthProvider:
    """Create the provider selected by ``auth.mode``.

    Raises:
        ConfigurationError: If the mode cannot be served with current settings.
    """
    settings = settings or get_settings()
    mode = settings.auth_mode_enum
    logger.info("Creating auth provider", mode=mode.value)

    if mode == AuthMode.DISABLED:
        if settings.is_production:
            msg = "auth.mode=disabled is not allowed in production"
            raise ConfigurationError(msg)
        return DisabledAuthProvider()

    if mode == AuthMode.HEADER:
        headers = settings.auth.headers
        return HeaderAuthProvider(
            user_id_header=headers.user_id,
            email_header=headers.email,
            roles_header=headers.roles,
            permissions_header=headers.permissions,
        )

    return LocalJWTAuthProvider(
        secret_key=_get_jwt_secret(settings),
        algorithm=settings.auth.jwt.algorithm,
        issuer=settings.auth.jwt_validation.issuer,
        audience=settings.auth.jwt_validation.audience or None,
    )


def get_auth_provider() -> AuthProvider:
    """Return the provider installed at startup.

    Raises:
        RuntimeError: If ``initialize_auth_provider`` has not run.
    """
    provider = _state["provider"]
    if provider is None:
        msg = "Auth provider not initialized. Call set_auth_provider() during startup."
        raise RuntimeError(msg)
    return provider


def set_auth_provider(provider: AuthProvider) -> None:
    _state["provider"] = provider
    logger.info("Auth provider set", provider=provider.provider_name)


async def initialize_auth_provider() -> AuthProvider:
    """Create, initialize and install the configured provider."""
    provider = create_auth_provider()
    await provider.initialize()
    set_auth_provider(provider)
    return provider


async def shutdown_auth_provider() -> None:
    provider = _state["provider"]
    if provider is not None:
        await provider.shutdown()
        _state["provider"] = None
        logger.info("Auth provider shutdown complete")
