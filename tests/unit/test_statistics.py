"""Tests for StatisticsHelper."""

from datetime import datetime, timezone

from boardcore.context import BoardContext
from boardcore.core.query_builder import QueryBuilder
from boardcore.helpers.statistics import StatisticsHelper
from tests.mocks.board import BOB_ID


class TestBbicStatistics:
    """Tests for the board info center statistics."""

    def test_totals_and_newest_member(self, guest_ctx: BoardContext) -> None:
        """Should count rows and pick the most recently joined member."""
        stats = StatisticsHelper(guest_ctx).get_bbic_statistics()

        assert stats["totalCategories"] == 2
        assert stats["totalForums"] == 4
        assert stats["totalTopics"] == 3
        assert stats["totalPosts"] == 5
        assert stats["totalMembers"] == 3

        newest = stats["newestMember"]
        assert newest["member"].id == BOB_ID
        assert newest["url"] == f"http://board.test/profile/{BOB_ID}"

    def test_most_online(self, guest_ctx: BoardContext) -> None:
        """Should decode the registry record."""
        stats = StatisticsHelper(guest_ctx).get_bbic_statistics()
        assert stats["mostOnline"] == {
            "total": 12,
            "timestamp": datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc),
        }

    async def test_empty_board(self, guest_ctx: BoardContext) -> None:
        """Should report None for the newest member and record when absent."""
        builder = QueryBuilder(guest_ctx.config.database)
        await guest_ctx.db.query(builder.delete_from("registry").build())
        await guest_ctx.db.query(builder.clear().delete_from("members").build())
        await guest_ctx.cache.update_all(["registry", "members"])

        stats = StatisticsHelper(guest_ctx).get_bbic_statistics()
        assert stats["totalMembers"] == 0
        assert stats["newestMember"] is None
        assert stats["mostOnline"] is None
