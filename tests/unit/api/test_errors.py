"""Unit tests for service error translation."""

from __future__ import annotations

import pytest

from app.api.errors import to_app_exception
from app.services.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
    UnavailableError,
    ValidationError,
)
from app.services.recommendations.exceptions import ScorerUnavailableError


pytestmark = pytest.mark.unit


class TestToAppException:
    """Tests for to_app_exception."""

    @pytest.mark.parametrize(
        ("error", "status_code", "code"),
        [
            (ValidationError("Comment cannot be empty"), 400, "VALIDATION_ERROR"),
            (UnauthorizedError(), 401, "UNAUTHORIZED"),
            (ForbiddenError("nope"), 403, "FORBIDDEN"),
            (NotFoundError("Recipe not found"), 404, "NOT_FOUND"),
            (ConflictError("try again"), 409, "CONFLICT"),
            (UnavailableError("down"), 503, "SERVICE_UNAVAILABLE"),
        ],
    )
    def test_maps_each_failure(
        self, error: ServiceError, status_code: int, code: str
    ) -> None:
        """Should keep the service message on the HTTP error."""
        result = to_app_exception(error)

        assert result.status_code == status_code
        assert result.error == code
        assert result.message == error.message

    def test_subclasses_map_through_their_base(self) -> None:
        result = to_app_exception(ScorerUnavailableError())

        assert result.status_code == 503
        assert "temporarily unavailable" in result.message

    def test_unknown_failure_is_unavailable(self) -> None:
        result = to_app_exception(ServiceError("strange"))

        assert result.status_code == 503
