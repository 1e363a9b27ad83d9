"""Authentication provider exceptions.

Caught by ``app.auth.dependencies`` and rendered as 401 responses.
"""

from __future__ import annotations


class AuthProviderError(Exception):
    """Base exception for auth provider errors."""


class AuthenticationError(AuthProviderError):
    """Raised when no identity can be resolved from the request."""


class TokenExpiredError(AuthenticationError):
    """Raised when a token has expired."""


class TokenInvalidError(AuthenticationError):
    """Raised when a token is malformed or signature verification fails."""


class ConfigurationError(AuthProviderError):
    """Raised when the auth provider is misconfigured."""
