"""Translation of domain service failures into HTTP exceptions.

Usage in an endpoint::

    try:
        return await service.post(...)
    except ServiceError as e:
        raise to_app_exception(e) from None
"""

from __future__ import annotations

from app.core.exceptions import (
    AppException,
    BadRequestException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ServiceUnavailableException,
    UnauthorizedException,
)
from app.services.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
    UnavailableError,
    ValidationError,
)


_MAPPING: dict[type[ServiceError], type[AppException]] = {
    ValidationError: BadRequestException,
    NotFoundError: NotFoundException,
    UnauthorizedError: UnauthorizedException,
    ForbiddenError: ForbiddenException,
    ConflictError: ConflictException,
    UnavailableError: ServiceUnavailableException,
}


def to_app_exception(error: ServiceError) -> AppException:
    """Map a service failure onto its HTTP counterpart, keeping the message."""
    for service_type, http_type in _MAPPING.items():
        if isinstance(error, service_type):
            return http_type(error.message)
    return ServiceUnavailableException()
