"""Unit tests for CommentService.

Tests cover:
- Thread rendering and counts
- Posting comments and replies, with validation
- Owner-only edit, owner-or-admin delete
- Like toggling
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock

import pytest

from app.database.documents import CommentDocument
from app.services.comments.service import CommentService
from app.services.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)


pytestmark = pytest.mark.unit


def _inserted(fields: dict[str, Any]) -> CommentDocument:
    return CommentDocument.model_validate({**fields, "id": "new-comment"})


@pytest.fixture
def comments_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.list_for_recipe.return_value = []
    repo.get.return_value = None
    repo.insert.side_effect = _inserted
    repo.delete.return_value = True
    return repo


@pytest.fixture
def recipes_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.exists.return_value = True
    repo.adjust_comments_count.return_value = 1
    return repo


@pytest.fixture
def service(comments_repo: AsyncMock, recipes_repo: AsyncMock) -> CommentService:
    return CommentService(comments=comments_repo, recipes=recipes_repo)


class TestGetThread:
    """Tests for thread rendering."""

    @pytest.mark.asyncio
    async def test_nests_replies_and_reports_viewer_likes(
        self, service, comments_repo, comment_factory, member
    ) -> None:
        """Should render a nested tree with per-viewer like flags."""
        comments_repo.list_for_recipe.return_value = [
            comment_factory("t1", likes=["user-1", "user-9"]),
            comment_factory("r1", parent_id="t1", minutes=1, likes=["user-9"]),
        ]

        result = await service.get_thread("r1", member)

        assert result.total_count == 2
        top = result.comments[0]
        assert top.likes_count == 2
        assert top.is_liked is True
        assert top.replies[0].likes_count == 1
        assert top.replies[0].is_liked is False

    @pytest.mark.asyncio
    async def test_anonymous_viewer_never_liked(
        self, service, comments_repo, comment_factory
    ) -> None:
        """Should report isLiked false without a viewer."""
        comments_repo.list_for_recipe.return_value = [
            comment_factory("t1", likes=["user-1"]),
        ]

        result = await service.get_thread("r1")

        assert result.comments[0].is_liked is False

    @pytest.mark.asyncio
    async def test_count_only(self, service, comments_repo, comment_factory) -> None:
        """Should split the count into comments and replies."""
        comments_repo.list_for_recipe.return_value = [
            comment_factory("t1"),
            comment_factory("r1", parent_id="t1", minutes=1),
            comment_factory("r2", parent_id="t1", minutes=2),
        ]

        result = await service.count("r1")

        assert (result.count, result.comments_count, result.replies_count) == (3, 1, 2)


class TestPost:
    """Tests for posting comments."""

    @pytest.mark.asyncio
    async def test_posts_top_level_comment(
        self, service, comments_repo, recipes_repo, member
    ) -> None:
        """Should trim content, start with no likes and bump the counter."""
        recipes_repo.adjust_comments_count.return_value = 4

        result = await service.post("r1", member, "  Tasty!  ")

        fields = comments_repo.insert.await_args.args[0]
        assert fields["content"] == "Tasty!"
        assert fields["likes"] == []
        assert "parentId" not in fields
        assert "updatedAt" not in fields
        recipes_repo.adjust_comments_count.assert_awaited_once_with("r1", 1)
        assert result.comments_count == 4
        assert result.comment.likes_count == 0

    @pytest.mark.asyncio
    async def test_user_name_defaults_to_email_local_part(
        self, service, comments_repo, member
    ) -> None:
        await service.post("r1", member, "hi")

        assert comments_repo.insert.await_args.args[0]["userName"] == "ada"

    @pytest.mark.asyncio
    async def test_reply_to_top_level_comment(
        self, service, comments_repo, comment_factory, member
    ) -> None:
        """Should store the parent id on replies."""
        comments_repo.get.return_value = comment_factory("t1")

        result = await service.post("r1", member, "agreed", parent_id="t1")

        assert comments_repo.insert.await_args.args[0]["parentId"] == "t1"
        assert result.comment.parent_id == "t1"

    @pytest.mark.asyncio
    async def test_rejects_reply_to_reply(
        self, service, comments_repo, comment_factory, member
    ) -> None:
        """Should keep threads two levels deep."""
        comments_repo.get.return_value = comment_factory("r1", parent_id="t1")

        with pytest.raises(ValidationError):
            await service.post("r1", member, "nested", parent_id="r1")

        comments_repo.insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejects_parent_from_other_recipe(
        self, service, comments_repo, comment_factory, member
    ) -> None:
        comments_repo.get.return_value = comment_factory("t1", recipe_id="other")

        with pytest.raises(NotFoundError, match="Parent comment not found"):
            await service.post("r1", member, "hello", parent_id="t1")

    @pytest.mark.asyncio
    async def test_rejects_empty_content(self, service, member) -> None:
        with pytest.raises(ValidationError, match="Comment cannot be empty"):
            await service.post("r1", member, "   ")

    @pytest.mark.asyncio
    async def test_rejects_missing_recipe(self, service, recipes_repo, member) -> None:
        recipes_repo.exists.return_value = False

        with pytest.raises(NotFoundError, match="Recipe not found"):
            await service.post("r1", member, "hello")

    @pytest.mark.asyncio
    async def test_requires_identity(self, service) -> None:
        with pytest.raises(UnauthorizedError):
            await service.post("r1", None, "hello")

    @pytest.mark.asyncio
    async def test_counter_failure_still_returns_comment(
        self, service, recipes_repo, member
    ) -> None:
        """Should keep the comment when only the counter update is lost."""
        recipes_repo.adjust_comments_count.return_value = None

        result = await service.post("r1", member, "hello")

        assert result.comment.content == "hello"
        assert result.comments_count == 0


class TestEditAndDelete:
    """Tests for edit and delete permissions."""

    @pytest.mark.asyncio
    async def test_owner_can_edit(
        self, service, comments_repo, comment_factory, member
    ) -> None:
        original = comment_factory("t1")
        comments_repo.get.return_value = original
        comments_repo.update_content.return_value = original.model_copy(
            update={"content": "edited", "updated_at": datetime.now(UTC)}
        )

        result = await service.edit("t1", member, " edited ")

        assert comments_repo.update_content.await_args.args[1] == "edited"
        assert result.content == "edited"
        assert result.created_at == original.created_at
        assert result.updated_at is not None

    @pytest.mark.asyncio
    async def test_non_owner_cannot_edit_even_as_admin(
        self, service, comments_repo, comment_factory, admin
    ) -> None:
        comments_repo.get.return_value = comment_factory("t1")

        with pytest.raises(ForbiddenError):
            await service.edit("t1", admin, "edited")

    @pytest.mark.asyncio
    async def test_admin_can_delete_any_comment(
        self, service, comments_repo, recipes_repo, comment_factory, admin
    ) -> None:
        """Should decrement the recipe counter after deleting."""
        comments_repo.get.return_value = comment_factory("t1")
        recipes_repo.adjust_comments_count.return_value = 2

        result = await service.delete("t1", admin)

        recipes_repo.adjust_comments_count.assert_awaited_once_with("r1", -1)
        assert result.comments_count == 2
        assert result.parent_id is None

    @pytest.mark.asyncio
    async def test_other_member_cannot_delete(
        self, service, comments_repo, comment_factory, other_member
    ) -> None:
        comments_repo.get.return_value = comment_factory("t1")

        with pytest.raises(ForbiddenError):
            await service.delete("t1", other_member)

        comments_repo.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_missing_comment(self, service, member) -> None:
        with pytest.raises(NotFoundError):
            await service.delete("nope", member)


class TestToggleLike:
    """Tests for comment likes."""

    @pytest.mark.asyncio
    async def test_reports_set_size(
        self, service, comments_repo, comment_factory, member
    ) -> None:
        comments_repo.toggle_like.return_value = comment_factory(
            "t1", likes=["user-1", "user-5"]
        )

        result = await service.toggle_like("t1", member)

        assert result.is_liked is True
        assert result.likes_count == 2

    @pytest.mark.asyncio
    async def test_unlike(self, service, comments_repo, comment_factory, member) -> None:
        comments_repo.toggle_like.return_value = comment_factory("t1", likes=[])

        result = await service.toggle_like("t1", member)

        assert result.is_liked is False
        assert result.likes_count == 0

    @pytest.mark.asyncio
    async def test_missing_comment(self, service, comments_repo, member) -> None:
        comments_repo.toggle_like.return_value = None

        with pytest.raises(NotFoundError):
            await service.toggle_like("nope", member)
