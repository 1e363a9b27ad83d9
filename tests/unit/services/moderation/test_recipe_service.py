"""Unit tests for the recipe moderation workflow."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from app.database.documents import RecipeDocument
from app.database.repositories.recipes import VISIBLE_FILTER
from app.schemas.enums import RecipeStatus, ReviewDecision
from app.schemas.recipe import IngredientIn, RecipeCreateRequest, RecipeUpdateRequest
from app.services.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from app.services.moderation.service import RecipeService


pytestmark = pytest.mark.unit


def _inserted(fields: dict[str, Any]) -> RecipeDocument:
    return RecipeDocument.model_validate({**fields, "id": "new-recipe"})


@pytest.fixture
def recipes_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.insert.side_effect = _inserted
    repo.find.return_value = []
    repo.count.return_value = 0
    repo.delete.return_value = True
    return repo


@pytest.fixture
def comments_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.delete_for_recipe.return_value = 3
    return repo


@pytest.fixture
def users_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.pull_recipe.return_value = 2
    return repo


@pytest.fixture
def service(recipes_repo, comments_repo, users_repo) -> RecipeService:
    return RecipeService(
        recipes_repo, comments_repo, users_repo, resubmit_on_edit=False
    )


@pytest.fixture
def submission() -> RecipeCreateRequest:
    return RecipeCreateRequest(
        name="Dal",
        ingredients=[IngredientIn(name="Lentils", amount="200", unit="g")],
    )


class TestSubmission:
    """Tests for recipe submission."""

    @pytest.mark.asyncio
    async def test_member_submission_is_pending(
        self, service, recipes_repo, submission, member
    ) -> None:
        """Should queue non-admin submissions for review."""
        result = await service.create(submission, member)

        fields = recipes_repo.insert.await_args.args[0]
        assert fields["status"] == "pending"
        assert fields["authorId"] == "user-1"
        assert fields["likedBy"] == []
        assert fields["likesCount"] == 0
        assert result.status == RecipeStatus.PENDING

    @pytest.mark.asyncio
    async def test_admin_submission_is_approved(
        self, service, submission, admin
    ) -> None:
        result = await service.create(submission, admin)

        assert result.status == RecipeStatus.APPROVED

    @pytest.mark.asyncio
    async def test_rejects_blank_name(self, service, recipes_repo, member) -> None:
        body = RecipeCreateRequest(name="  ", ingredients=[IngredientIn(name="Salt")])

        with pytest.raises(ValidationError, match="name"):
            await service.create(body, member)

        recipes_repo.insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejects_no_ingredients(self, service, member) -> None:
        with pytest.raises(ValidationError, match="ingredient"):
            await service.create(RecipeCreateRequest(name="Air"), member)

    @pytest.mark.asyncio
    async def test_requires_identity(self, service, submission) -> None:
        with pytest.raises(UnauthorizedError):
            await service.create(submission, None)


class TestListing:
    """Tests for public and admin listings."""

    @pytest.mark.asyncio
    async def test_public_listing_ignores_status(self, service, recipes_repo) -> None:
        """Should only show approved or legacy recipes by default."""
        await service.list_recipes(status=RecipeStatus.PENDING)

        assert recipes_repo.find.await_args.args[0] == VISIBLE_FILTER

    @pytest.mark.asyncio
    async def test_include_all_with_status(self, service, recipes_repo) -> None:
        await service.list_recipes(status=RecipeStatus.PENDING, include_all=True)

        assert recipes_repo.find.await_args.args[0] == {"status": "pending"}

    @pytest.mark.asyncio
    async def test_include_all_without_status(self, service, recipes_repo) -> None:
        await service.list_recipes(include_all=True)

        assert recipes_repo.find.await_args.args[0] == {}

    @pytest.mark.asyncio
    async def test_legacy_recipe_reports_approved(
        self, service, recipes_repo, recipe_factory
    ) -> None:
        recipes_repo.find.return_value = [recipe_factory(status=None)]
        recipes_repo.count.return_value = 1

        result = await service.list_recipes()

        assert result.total == 1
        assert result.recipes[0].status == RecipeStatus.APPROVED


class TestGet:
    """Tests for fetching single recipes."""

    @pytest.mark.asyncio
    async def test_pending_hidden_from_strangers(
        self, service, recipes_repo, recipe_factory, other_member
    ) -> None:
        recipes_repo.get.return_value = recipe_factory(status="pending")

        with pytest.raises(NotFoundError):
            await service.get("r1", other_member)

    @pytest.mark.asyncio
    async def test_pending_visible_to_owner(
        self, service, recipes_repo, recipe_factory, member
    ) -> None:
        recipes_repo.get.return_value = recipe_factory(
            status="pending", author_id="user-1", liked_by=["user-1"]
        )

        result = await service.get("r1", member)

        assert result.status == RecipeStatus.PENDING
        assert result.is_liked is True


class TestEditAndDelete:
    """Tests for owner and admin management."""

    @pytest.mark.asyncio
    async def test_edit_keeps_status(
        self, service, recipes_repo, recipe_factory, member
    ) -> None:
        """Should not send moderation fields with an edit."""
        recipes_repo.get.return_value = recipe_factory(
            status="rejected", author_id="user-1"
        )
        recipes_repo.update_fields.return_value = recipe_factory(
            status="rejected", author_id="user-1", name="Better Dal"
        )

        result = await service.update("r1", RecipeUpdateRequest(name="Better Dal"), member)

        fields = recipes_repo.update_fields.await_args.args[1]
        assert "status" not in fields
        assert fields["name"] == "Better Dal"
        assert result.status == RecipeStatus.REJECTED

    @pytest.mark.asyncio
    async def test_resubmit_on_edit_returns_to_pending(
        self, recipes_repo, comments_repo, users_repo, recipe_factory, member
    ) -> None:
        service = RecipeService(
            recipes_repo, comments_repo, users_repo, resubmit_on_edit=True
        )
        recipes_repo.get.return_value = recipe_factory(
            status="rejected", author_id="user-1"
        )
        recipes_repo.update_fields.return_value = recipe_factory(status="pending")

        await service.update("r1", RecipeUpdateRequest(description="fixed"), member)

        assert recipes_repo.update_fields.await_args.args[1]["status"] == "pending"

    @pytest.mark.asyncio
    async def test_explicit_nulls_keep_recipe_readable(
        self, service, recipes_repo, recipe_factory, member
    ) -> None:
        """Should ignore null on required fields and clear nullable ones."""
        stored = {
            **recipe_factory(
                author_id="user-1", servings=4, tags=["soup"], cuisine="Indian"
            ).to_mongo(),
            "_id": "r1",
        }

        def _apply(recipe_id: str, fields: dict[str, Any]) -> RecipeDocument:
            stored.update(fields)
            return RecipeDocument.from_mongo(stored)

        recipes_repo.get.return_value = RecipeDocument.from_mongo(stored)
        recipes_repo.update_fields.side_effect = _apply
        patch = RecipeUpdateRequest.model_validate(
            {"servings": None, "tags": None, "cuisine": None, "description": "Spicier"}
        )

        result = await service.update("r1", patch, member)

        fields = recipes_repo.update_fields.await_args.args[1]
        assert "servings" not in fields
        assert "tags" not in fields
        assert fields["cuisine"] is None
        assert result.servings == 4
        assert result.tags == ["soup"]
        assert result.description == "Spicier"
        assert RecipeDocument.from_mongo(stored).cuisine is None

    @pytest.mark.asyncio
    async def test_null_name_rejected(
        self, service, recipes_repo, recipe_factory, member
    ) -> None:
        recipes_repo.get.return_value = recipe_factory(author_id="user-1")

        with pytest.raises(ValidationError, match="name is required"):
            await service.update(
                "r1", RecipeUpdateRequest.model_validate({"name": None}), member
            )

        recipes_repo.update_fields.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stranger_cannot_edit(
        self, service, recipes_repo, recipe_factory, other_member
    ) -> None:
        recipes_repo.get.return_value = recipe_factory(author_id="user-1")

        with pytest.raises(ForbiddenError):
            await service.update("r1", RecipeUpdateRequest(name="x"), other_member)

    @pytest.mark.asyncio
    async def test_delete_cascades(
        self, service, recipes_repo, comments_repo, users_repo, recipe_factory, admin
    ) -> None:
        """Should remove comments and user references with the recipe."""
        recipes_repo.get.return_value = recipe_factory()

        result = await service.delete("r1", admin)

        comments_repo.delete_for_recipe.assert_awaited_once_with("r1")
        users_repo.pull_recipe.assert_awaited_once_with("r1")
        assert (result.comments_deleted, result.users_updated) == (3, 2)


class TestReview:
    """Tests for admin review."""

    @pytest.mark.asyncio
    async def test_reject_with_note(
        self, service, recipes_repo, recipe_factory, admin
    ) -> None:
        recipes_repo.update_fields.return_value = recipe_factory(
            status="rejected", review_note="Needs steps"
        )

        result = await service.review(
            "r1", ReviewDecision.REJECT, admin, note="Needs steps"
        )

        fields = recipes_repo.update_fields.await_args.args[1]
        assert fields["status"] == "rejected"
        assert fields["reviewNote"] == "Needs steps"
        assert "reviewedAt" in fields
        assert result.status == RecipeStatus.REJECTED

    @pytest.mark.asyncio
    async def test_accepts_raw_decision_value(
        self, service, recipes_repo, recipe_factory, admin
    ) -> None:
        recipes_repo.update_fields.return_value = recipe_factory()

        await service.review("r1", "approve", admin)

        assert recipes_repo.update_fields.await_args.args[1]["status"] == "approved"

    @pytest.mark.asyncio
    async def test_member_cannot_review(self, service, recipes_repo, member) -> None:
        with pytest.raises(ForbiddenError):
            await service.review("r1", ReviewDecision.APPROVE, member)

        recipes_repo.update_fields.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_recipe(self, service, recipes_repo, admin) -> None:
        recipes_repo.update_fields.return_value = None

        with pytest.raises(NotFoundError):
            await service.review("nope", ReviewDecision.APPROVE, admin)
