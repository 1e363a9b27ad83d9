"""Shared test fixtures and configuration for the Recipe Community service tests.

Settings are read once per process, so the environment is pinned here before
any application module is imported.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest


os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-enough-length")

from app.auth.dependencies import CurrentUser  # noqa: E402
from app.database.documents import (  # noqa: E402
    CommentDocument,
    RecipeDocument,
    UserDocument,
)


BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def make_recipe(recipe_id: str = "r1", **overrides: Any) -> RecipeDocument:
    """Build an approved recipe owned by ``author-1`` with two ingredients."""
    data: dict[str, Any] = {
        "id": recipe_id,
        "name": "Lentil Soup",
        "description": "Warm and filling",
        "ingredients": [
            {"name": "Lentils", "amount": "200", "unit": "g"},
            {"name": "Onion", "amount": "1", "unit": ""},
        ],
        "instructions": ["Simmer everything"],
        "status": "approved",
        "author_id": "author-1",
        "author_email": "author@example.com",
        "created_at": BASE_TIME,
        "updated_at": BASE_TIME,
    }
    data.update(overrides)
    return RecipeDocument.model_validate(data)


def make_comment(
    comment_id: str,
    *,
    recipe_id: str = "r1",
    parent_id: str | None = None,
    minutes: int = 0,
    **overrides: Any,
) -> CommentDocument:
    """Build a comment created ``minutes`` after the base time."""
    data: dict[str, Any] = {
        "id": comment_id,
        "recipe_id": recipe_id,
        "user_id": "user-1",
        "user_name": "Ada",
        "user_email": "ada@example.com",
        "content": f"comment {comment_id}",
        "parent_id": parent_id,
        "created_at": BASE_TIME + timedelta(minutes=minutes),
    }
    data.update(overrides)
    return CommentDocument.model_validate(data)


def make_user(user_id: str = "user-1", **overrides: Any) -> UserDocument:
    data: dict[str, Any] = {
        "id": user_id,
        "email": f"{user_id}@example.com",
        "name": user_id.title(),
    }
    data.update(overrides)
    return UserDocument.model_validate(data)


@pytest.fixture
def member() -> CurrentUser:
    """A regular signed-in user."""
    return CurrentUser(id="user-1", email="ada@example.com", roles=["user"])


@pytest.fixture
def other_member() -> CurrentUser:
    return CurrentUser(id="user-2", email="bob@example.com", roles=["user"])


@pytest.fixture
def admin() -> CurrentUser:
    """A signed-in admin."""
    return CurrentUser(id="admin-1", email="admin@recipe.com", roles=["user", "admin"])


@pytest.fixture
def recipe_factory() -> Any:
    return make_recipe


@pytest.fixture
def comment_factory() -> Any:
    return make_comment


@pytest.fixture
def user_factory() -> Any:
    return make_user
