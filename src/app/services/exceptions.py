"""Failure taxonomy shared by all domain services.

Services raise exactly one of these per failed operation; nothing is
written when one is raised before the first store mutation. The API layer
translates each class into its HTTP counterpart (see
``app.api.errors.to_app_exception``).
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base exception for domain service failures.

    Attributes:
        message: User-facing, actionable description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(ServiceError):
    """A required field is missing or empty."""


class NotFoundError(ServiceError):
    """A referenced recipe, comment, plan or user does not exist."""


class UnauthorizedError(ServiceError):
    """No identity was resolved for an operation that needs one."""

    def __init__(self, message: str = "Please log in to continue") -> None:
        super().__init__(message)


class ForbiddenError(ServiceError):
    """The identity is known but may not perform the operation."""


class ConflictError(ServiceError):
    """Concurrent writers kept modifying the same document; retry later."""


class UnavailableError(ServiceError):
    """A downstream dependency failed transiently."""
