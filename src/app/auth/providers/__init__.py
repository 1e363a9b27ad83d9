"""Pluggable authentication providers.

Available providers:
- LocalJWTAuthProvider: Verifies JWTs with the shared secret
- HeaderAuthProvider: Trusts identity headers from an upstream gateway
- DisabledAuthProvider: Anonymous user for local development

Usage:
    from app.auth.providers import get_auth_provider

    result = await get_auth_provider().validate_token(token, request)
"""

from app.auth.providers.exceptions import (
    AuthenticationError,
    AuthProviderError,
    ConfigurationError,
    TokenExpiredError,
    TokenInvalidError,
)
from app.auth.providers.factory import (
    DisabledAuthProvider,
    create_auth_provider,
    get_auth_provider,
    initialize_auth_provider,
    set_auth_provider,
    shutdown_auth_provider,
)
from app.auth.providers.header import HeaderAuthProvider
from app.auth.providers.local_jwt import LocalJWTAuthProvider
from app.auth.providers.models import AuthResult
from app.auth.providers.protocol import AuthProvider


__all__ = [
    "AuthProvider",
    "AuthProviderError",
    "AuthResult",
    "AuthenticationError",
    "ConfigurationError",
    "DisabledAuthProvider",
    "HeaderAuthProvider",
    "LocalJWTAuthProvider",
    "TokenExpiredError",
    "TokenInvalidError",
    "create_auth_provider",
    "get_auth_provider",
    "initialize_auth_provider",
    "set_auth_provider",
    "shutdown_auth_provider",
]
