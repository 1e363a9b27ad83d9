"""Two-level comment tree assembly.

The store returns a flat list of comments for one recipe. A comment with no
``parent_id`` is top-level; every other comment is a reply and is attached
under its parent. Replies whose parent no longer exists are dropped: they
are never promoted to top level.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Iterable

    from app.database.documents import CommentDocument


@dataclass
class CommentNode:
    """A top-level comment and its replies, oldest reply first."""

    comment: CommentDocument
    replies: list[CommentDocument] = field(default_factory=list)


@dataclass(frozen=True)
class ThreadCounts:
    comments: int
    replies: int

    @property
    def total(self) -> int:
        return self.comments + self.replies


def _created(comment: CommentDocument) -> datetime:
    created = comment.created_at
    # Documents written without tz_aware come back naive; they are UTC.
    return created if created.tzinfo else created.replace(tzinfo=UTC)


def build_comment_tree(comments: Iterable[CommentDocument]) -> list[CommentNode]:
    """Nest replies under their parents.

    Top-level comments come back newest first; replies within a parent
    oldest first.
    """
    top_level: list[CommentNode] = []
    replies: list[CommentDocument] = []
    for comment in comments:
        if comment.parent_id:
            replies.append(comment)
        else:
            top_level.append(CommentNode(comment))

    by_id = {node.comment.id: node for node in top_level}
    for reply in sorted(replies, key=_created):
        parent = by_id.get(reply.parent_id or "")
        if parent is not None:
            parent.replies.append(reply)

    top_level.sort(key=lambda node: _created(node.comment), reverse=True)
    return top_level


def count_thread(comments: Iterable[CommentDocument]) -> ThreadCounts:
    """Count what ``build_comment_tree`` would render, without building it."""
    comments = list(comments)
    top_level_ids = {c.id for c in comments if not c.parent_id}
    replies = sum(1 for c in comments if c.parent_id in top_level_ids)
    return ThreadCounts(comments=len(top_level_ids), replies=replies)


def count_visible(index: Iterable[tuple[str, str | None]]) -> int:
    """Rendered size of a thread given ``(comment_id, parent_id)`` pairs."""
    pairs = list(index)
    top_level_ids = {comment_id for comment_id, parent_id in pairs if not parent_id}
    replies = sum(1 for _, parent_id in pairs if parent_id in top_level_ids)
    return len(top_level_ids) + replies
