"""Unit tests for comment tree assembly and counting."""

from __future__ import annotations

from datetime import datetime

import pytest

from app.services.comments.tree import build_comment_tree, count_thread, count_visible


pytestmark = pytest.mark.unit


class TestBuildCommentTree:
    """Tests for build_comment_tree."""

    def test_top_level_newest_first(self, comment_factory) -> None:
        """Should order top-level comments by creation, newest first."""
        comments = [
            comment_factory("a", minutes=1),
            comment_factory("b", minutes=5),
            comment_factory("c", minutes=3),
        ]

        tree = build_comment_tree(comments)

        assert [node.comment.id for node in tree] == ["b", "c", "a"]

    def test_replies_oldest_first_under_parent(self, comment_factory) -> None:
        """Should attach replies to their parent in ascending order."""
        comments = [
            comment_factory("top", minutes=0),
            comment_factory("late", parent_id="top", minutes=9),
            comment_factory("early", parent_id="top", minutes=2),
        ]

        tree = build_comment_tree(comments)

        assert len(tree) == 1
        assert [r.id for r in tree[0].replies] == ["early", "late"]

    def test_orphan_replies_are_dropped(self, comment_factory) -> None:
        """Should never promote a reply whose parent is gone."""
        comments = [
            comment_factory("top"),
            comment_factory("orphan", parent_id="deleted", minutes=1),
        ]

        tree = build_comment_tree(comments)

        assert [node.comment.id for node in tree] == ["top"]
        assert tree[0].replies == []

    def test_naive_timestamps_sort_with_aware_ones(self, comment_factory) -> None:
        """Should treat naive timestamps as UTC."""
        comments = [
            comment_factory("aware", minutes=10),
            comment_factory("naive", created_at=datetime(2024, 5, 1, 13, 0)),
        ]

        tree = build_comment_tree(comments)

        assert [node.comment.id for node in tree] == ["naive", "aware"]

    def test_empty(self) -> None:
        assert build_comment_tree([]) == []


class TestCounting:
    """Tests for count_thread and count_visible."""

    def test_count_thread_matches_rendered_tree(self, comment_factory) -> None:
        """Should count only what the tree renders."""
        comments = [
            comment_factory("t1"),
            comment_factory("t2", minutes=1),
            comment_factory("r1", parent_id="t1", minutes=2),
            comment_factory("r2", parent_id="t1", minutes=3),
            comment_factory("orphan", parent_id="gone", minutes=4),
        ]

        counts = count_thread(comments)
        tree = build_comment_tree(comments)

        assert counts.comments == 2
        assert counts.replies == 2
        assert counts.total == sum(1 + len(n.replies) for n in tree)

    def test_count_visible_from_index_pairs(self) -> None:
        """Should skip replies to missing parents."""
        index = [("t1", None), ("r1", "t1"), ("r2", "missing"), ("t2", "")]

        assert count_visible(index) == 3
