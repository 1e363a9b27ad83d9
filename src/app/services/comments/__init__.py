"""Comment thread service module."""

from app.services.comments.service import CommentService


__all__ = ["CommentService"]
