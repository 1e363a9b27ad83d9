"""Comment thread schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from app.schemas.base import APIRequest, APIResponse


class CommentCreateRequest(APIRequest):
    """Body for posting a comment or a reply."""

    content: str = Field(default="", description="Comment text")
    parent_id: str | None = Field(
        default=None,
        description="Top-level comment this is a reply to",
    )
    user_name: str | None = Field(
        default=None,
        description="Display name; defaults to the account email's local part",
    )


class CommentUpdateRequest(APIRequest):
    """Body for editing a comment."""

    content: str = Field(default="", description="New comment text")


class CommentResponse(APIResponse):
    """A comment as rendered for one viewer, with its replies nested."""

    id: str
    recipe_id: str
    user_id: str
    user_name: str
    user_email: str
    content: str
    parent_id: str | None = None
    likes_count: int = Field(..., description="Always equal to the size of the like set")
    is_liked: bool = Field(default=False, description="Whether the viewer liked it")
    created_at: datetime
    updated_at: datetime | None = None
    replies: list[CommentResponse] = Field(default_factory=list)


class CommentThreadResponse(APIResponse):
    """Newest-first top-level comments with oldest-first replies."""

    comments: list[CommentResponse]
    total_count: int = Field(..., description="Top-level comments plus their replies")


class CommentCountResponse(APIResponse):
    """Counts only, for list cards."""

    count: int
    comments_count: int
    replies_count: int


class CommentPostedResponse(APIResponse):
    """A new comment plus the recipe's updated comment counter."""

    comment: CommentResponse
    comments_count: int


class CommentDeletedResponse(APIResponse):
    """Deletion result plus the recipe's updated comment counter."""

    comment_id: str
    recipe_id: str
    parent_id: str | None = None
    comments_count: int


class CommentLikeResponse(APIResponse):
    """Membership and count after a like toggle."""

    comment_id: str
    is_liked: bool
    likes_count: int
