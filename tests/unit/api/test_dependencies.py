"""Unit tests for API dependencies.

Tests cover the service getters that read from app.state and report 503
while a service is not initialized.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from app.api.dependencies import (
    get_comment_service,
    get_meal_plan_service,
    get_recipe_service,
    get_recommendation_service,
    get_repair_service,
    get_shopping_service,
    get_social_service,
    get_user_service,
)
from app.core.exceptions import ServiceUnavailableException


pytestmark = pytest.mark.unit

GETTERS = [
    (get_recipe_service, "recipe_service"),
    (get_comment_service, "comment_service"),
    (get_social_service, "social_service"),
    (get_repair_service, "repair_service"),
    (get_meal_plan_service, "meal_plan_service"),
    (get_shopping_service, "shopping_service"),
    (get_user_service, "user_service"),
    (get_recommendation_service, "recommendation_service"),
]


def _request(name: str, service: object | None) -> MagicMock:
    request = MagicMock()
    request.app.state = MagicMock()
    setattr(request.app.state, name, service)
    return request


class TestServiceGetters:
    """Tests for the app.state service getters."""

    @pytest.mark.parametrize(("getter", "name"), GETTERS)
    async def test_returns_service_when_available(self, getter, name) -> None:
        """Should return the service stored on app.state."""
        service = MagicMock()

        result = await getter(_request(name, service))

        assert result is service

    @pytest.mark.parametrize(("getter", "name"), GETTERS)
    async def test_raises_503_when_not_initialized(self, getter, name) -> None:
        with pytest.raises(ServiceUnavailableException) as exc_info:
            await getter(_request(name, None))

        assert exc_info.value.status_code == 503
