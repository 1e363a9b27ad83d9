"""Request-level tests through the assembled application.

The lifespan is not run; services are mocks placed on app.state and the
gateway header provider resolves identities from ``X-User-*`` headers.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from app.auth.providers import HeaderAuthProvider, set_auth_provider
from app.auth.providers.factory import _state as provider_state
from app.factory import create_app
from app.schemas.comment import CommentPostedResponse, CommentResponse
from app.schemas.social import LikeToggleResponse
from app.services.exceptions import NotFoundError


if TYPE_CHECKING:
    from collections.abc import Iterator

    from fastapi import FastAPI


pytestmark = pytest.mark.unit

MEMBER = {"X-User-ID": "user-1", "X-User-Email": "ada@example.com", "X-User-Roles": "user"}


@pytest.fixture
def app() -> Iterator[FastAPI]:
    application = create_app()
    set_auth_provider(HeaderAuthProvider())
    yield application
    provider_state["provider"] = None


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


class TestRoutes:
    """Tests for the mounted routes."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_missing_service_is_503(self, client: TestClient) -> None:
        response = client.get("/api/v1/recipes", headers=MEMBER)

        assert response.status_code == 503
        assert response.json()["error"] == "SERVICE_UNAVAILABLE"

    def test_anonymous_like_is_401(self, app: FastAPI, client: TestClient) -> None:
        app.state.social_service = AsyncMock()

        response = client.post("/api/v1/recipes/r1/like")

        assert response.status_code == 401

    def test_like_returns_camel_case(self, app: FastAPI, client: TestClient) -> None:
        service = AsyncMock()
        service.toggle_like.return_value = LikeToggleResponse(
            recipe_id="r1", is_liked=True, likes_count=3, liked_recipes=["r1"]
        )
        app.state.social_service = service

        response = client.post("/api/v1/recipes/r1/like", headers=MEMBER)

        assert response.status_code == 200
        assert response.json() == {
            "recipeId": "r1",
            "isLiked": True,
            "likesCount": 3,
            "likedRecipes": ["r1"],
        }
        assert service.toggle_like.await_args.args[0] == "r1"

    def test_post_comment(self, app: FastAPI, client: TestClient) -> None:
        service = AsyncMock()
        service.post.return_value = CommentPostedResponse(
            comment=CommentResponse(
                id="c1",
                recipe_id="r1",
                user_id="user-1",
                user_name="ada",
                user_email="ada@example.com",
                content="Lovely",
                likes_count=0,
                created_at=datetime(2024, 5, 1, tzinfo=UTC),
            ),
            comments_count=1,
        )
        app.state.comment_service = service

        response = client.post(
            "/api/v1/recipes/r1/comments",
            headers=MEMBER,
            json={"content": "Lovely"},
        )

        assert response.status_code == 201
        assert response.json()["commentsCount"] == 1
        assert response.json()["comment"]["recipeId"] == "r1"

    def test_service_errors_use_envelope(self, app: FastAPI, client: TestClient) -> None:
        service = AsyncMock()
        service.get.side_effect = NotFoundError("Recipe not found")
        app.state.recipe_service = service

        response = client.get("/api/v1/recipes/r9", headers=MEMBER)

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"
        assert response.json()["message"] == "Recipe not found"

    def test_review_requires_admin(self, app: FastAPI, client: TestClient) -> None:
        app.state.recipe_service = AsyncMock()

        response = client.post(
            "/api/v1/recipes/r1/review",
            headers=MEMBER,
            json={"decision": "approve"},
        )

        assert response.status_code == 403

    def test_invalid_meal_plan_date(self, app: FastAPI, client: TestClient) -> None:
        app.state.meal_plan_service = AsyncMock()

        response = client.get("/api/v1/meal-plans/not-a-date", headers=MEMBER)

        assert response.status_code == 422
