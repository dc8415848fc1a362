"""Tests for LikeHelper."""

import asyncio

import pytest

from boardcore.context import BoardContext
from boardcore.core.errors import BackingStoreError, ErrorCategory, InvalidInputError
from boardcore.helpers.likes import LikeHelper
from tests.mocks.board import ADMIN_ID, ALICE_ID


class TestLikeReads:
    """Tests for like lookups."""

    def test_has_liked(self, alice_ctx: BoardContext) -> None:
        """Should find the acting member's seeded like."""
        likes = LikeHelper(alice_ctx)
        assert likes.has_liked_content("topic", 1) is True
        assert likes.has_liked_content("Topic", "1") is True
        assert likes.has_liked_content("post", 1) is False
        assert likes.has_liked_content("topic", 1, member_id=ADMIN_ID) is False

    def test_total_likes(self, guest_ctx: BoardContext) -> None:
        """Should count likes per content key."""
        likes = LikeHelper(guest_ctx)
        assert likes.get_total_likes("topic", 1) == 1
        assert likes.get_total_likes("topic", 2) == 0

    def test_unknown_content_type(self, guest_ctx: BoardContext) -> None:
        """Should reject content types it does not know."""
        with pytest.raises(InvalidInputError):
            LikeHelper(guest_ctx).get_total_likes("calendar", 1)

    def test_listing_newest_first(self, admin_ctx: BoardContext) -> None:
        """Should list likers with their members."""
        listing = LikeHelper(admin_ctx).get_like_listing("topic", 1)
        assert [entry.member.id for entry in listing] == [ALICE_ID]
        assert listing[0].member.name == "alice"


class TestLikeWrites:
    """Tests for liking and unliking."""

    async def test_like_then_unlike(self, admin_ctx: BoardContext) -> None:
        """Should record then remove a like and refresh the cache."""
        likes = LikeHelper(admin_ctx)

        assert await likes.like_content("post", 2) is True
        assert likes.has_liked_content("post", 2) is True
        assert likes.get_total_likes("post", 2) == 1

        assert await likes.unlike_content("post", 2) is True
        assert likes.has_liked_content("post", 2) is False

    async def test_like_is_idempotent(self, alice_ctx: BoardContext) -> None:
        """Should refuse a second like from the same member."""
        likes = LikeHelper(alice_ctx)
        assert await likes.like_content("topic", 1) is False
        assert likes.get_total_likes("topic", 1) == 1

    async def test_unlike_without_like(self, admin_ctx: BoardContext) -> None:
        """Should report False when there is nothing to remove."""
        assert await LikeHelper(admin_ctx).unlike_content("topic", 2) is False

    async def test_concurrent_likes_record_once(self, admin_ctx: BoardContext) -> None:
        """Should let exactly one of several concurrent likes through."""
        likes = LikeHelper(admin_ctx)
        results = await asyncio.gather(*(likes.like_content("topic", 2) for _ in range(5)))

        assert results.count(True) == 1
        assert likes.get_total_likes("topic", 2) == 1

    async def test_backing_store_failure_reports_false(
        self, admin_ctx: BoardContext, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Should log and report False when the write fails."""

        async def failing_query(built):
            raise BackingStoreError("database is locked", category=ErrorCategory.LOCKED)

        monkeypatch.setattr(admin_ctx.db, "query", failing_query)

        likes = LikeHelper(admin_ctx)
        assert await likes.like_content("topic", 2) is False
        assert likes.has_liked_content("topic", 2) is False
