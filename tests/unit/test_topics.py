"""Tests for TopicHelper."""

import asyncio
import json

import pytest

from boardcore.context import BoardContext
from boardcore.core.errors import (
    DataDecodeError,
    InvalidInputError,
    InvalidPermissionsError,
    NotFoundError,
)
from boardcore.helpers.topics import TopicHelper, poll_option_percentage, prepare_poll
from boardcore.repositories.base import epoch_to_datetime
from tests.mocks.board import ADMIN_ID, ALICE_ID, BASE_TIME

RED = {"1": {"options": {"1": True}}}
BLUE = {"1": {"options": {"2": True}}}


class TestPollFunctions:
    """Tests for the pure poll helpers."""

    def test_percentage(self) -> None:
        """Should round to two places and guard against zero totals."""
        assert poll_option_percentage(3, 1) == 33.33
        assert poll_option_percentage(0, 0) == 0.0

    def test_prepare_poll_zeroes_counters(self) -> None:
        """Should open the poll and reset votes and voters per option."""
        submitted = {
            "closed": True,
            "questions": {"1": {"question": "?", "options": {"a": "A", "b": "B"}, "votes": {"a": 9}}},
        }
        prepared = prepare_poll(submitted)

        assert prepared["closed"] is False
        assert prepared["expire"] == {"enabled": False, "expireDateTime": None}
        assert prepared["questions"]["1"]["votes"] == {"a": 0, "b": 0}
        assert prepared["questions"]["1"]["voters"] == {"a": [], "b": []}
        assert submitted["questions"]["1"]["votes"] == {"a": 9}


class TestTopicAggregates:
    """Tests for topic aggregates."""

    def test_replies_and_attachments(self, guest_ctx: BoardContext) -> None:
        """Should detect replies and attachments among the topic's posts."""
        topics = TopicHelper(guest_ctx)
        assert topics.contains_replies(1) is True
        assert topics.contains_replies(2) is False
        assert topics.contains_attachments(1) is True
        assert topics.contains_attachments(2) is False
        assert topics.get_total_attachments_in_topic(1) == 1

    def test_counts(self, guest_ctx: BoardContext) -> None:
        """Should count posts, posters and likes."""
        topics = TopicHelper(guest_ctx)
        assert topics.get_total_posts_in_topic(1) == 3
        assert topics.get_total_unique_posters(1) == 2
        assert topics.get_total_likes(1) == 1
        assert topics.get_total_likes(1, include_posts=True) == 1

    def test_latest_post_timestamps(self, guest_ctx: BoardContext) -> None:
        """Should agree on the newest post's creation time."""
        topics = TopicHelper(guest_ctx)
        expected = epoch_to_datetime(BASE_TIME + 12_000)
        assert topics.get_latest_post_timestamp(1) == expected
        assert topics.determine_latest_post_timestamp(1) == expected
        assert topics.get_latest_post_timestamp(999) is None

    def test_is_hot_at_threshold(self, guest_ctx: BoardContext) -> None:
        """Should count a topic as hot when replies equal the threshold."""
        topics = TopicHelper(guest_ctx)
        assert topics.is_hot(1) == {"hot": True, "threshold": 2}
        assert topics.is_hot(2) == {"hot": False, "threshold": 2}

    def test_is_popular(self, guest_ctx: BoardContext) -> None:
        """Should compare views with the forum's popularity threshold."""
        assert TopicHelper(guest_ctx).is_popular(1) == {"popular": False, "threshold": 10}

    def test_missing_topic(self, guest_ctx: BoardContext) -> None:
        """Should raise NotFoundError for unknown topics."""
        with pytest.raises(NotFoundError):
            TopicHelper(guest_ctx).is_hot(999)

    def test_previous_and_next(self, guest_ctx: BoardContext) -> None:
        """Should find neighbours in the same forum by creation time."""
        topics = TopicHelper(guest_ctx)
        first = topics.get_previous_and_next_topics(1)
        assert first["previous"] is None
        assert first["next"].id == 2

        second = topics.get_previous_and_next_topics(2)
        assert second["previous"].id == 1
        assert second["next"] is None


class TestIncrementViews:
    """Tests for view counting."""

    async def test_counts_every_view(self, guest_ctx: BoardContext) -> None:
        """Should count each view when the forum does not require uniqueness."""
        topics = TopicHelper(guest_ctx)
        first = await topics.increment_views(1)
        second = await topics.increment_views(1)

        assert first.incremented and second.incremented
        assert first.guest_tracker is None
        assert topics.get_topic(1).total_views == 7

    async def test_unique_views_for_members(self, admin_ctx: BoardContext) -> None:
        """Should count a member once in a unique-views forum."""
        topics = TopicHelper(admin_ctx)
        assert (await topics.increment_views(3)).incremented is True
        assert (await topics.increment_views(3)).incremented is False
        assert topics.get_topic(3).total_views == 1

    async def test_unique_views_for_guests(self, guest_ctx: BoardContext) -> None:
        """Should track guest views through the returned tracker."""
        topics = TopicHelper(guest_ctx)
        first = await topics.increment_views(3)
        assert first.incremented is True
        assert first.guest_tracker == [{"contentType": "topic", "contentId": 3}]

        second = await topics.increment_views(3, guest_tracker=first.guest_tracker)
        assert second.incremented is False
        assert topics.get_topic(3).total_views == 1

    async def test_concurrent_views_are_not_lost(self, guest_ctx: BoardContext) -> None:
        """Should apply every concurrent increment."""
        topics = TopicHelper(guest_ctx)
        await asyncio.gather(*(topics.increment_views(2) for _ in range(5)))
        assert topics.get_topic(2).total_views == 5

    async def test_concurrent_unique_views_count_once(self, admin_ctx: BoardContext) -> None:
        """Should count one view and write one tracker row for simultaneous views."""
        topics = TopicHelper(admin_ctx)
        results = await asyncio.gather(*(topics.increment_views(3) for _ in range(3)))

        assert sorted(result.incremented for result in results) == [False, False, True]
        assert topics.get_topic(3).total_views == 1
        rows = [
            row
            for row in admin_ctx.cache.get("content_views_tracker")
            if row["contentId"] == 3 and row["memberId"] == ADMIN_ID
        ]
        assert len(rows) == 1


class TestPolls:
    """Tests for poll views and voting."""

    def test_build_poll_before_voting(self, alice_ctx: BoardContext) -> None:
        """Should show the footer to a member who has not voted."""
        view = TopicHelper(alice_ctx).build_poll(1)
        assert view.has_voted is False
        assert view.footer is True
        assert view.total_participants == 0
        assert view.is_own_poll is False
        assert view.poll["questions"]["1"]["percentages"] == {"1": 0.0, "2": 0.0}

    def test_build_poll_for_guest_and_owner(self, guest_ctx: BoardContext, admin_ctx: BoardContext) -> None:
        """Should hide the footer from guests and flag the owner."""
        assert TopicHelper(guest_ctx).build_poll(1).footer is False
        assert TopicHelper(admin_ctx).build_poll(1).is_own_poll is True
        assert TopicHelper(admin_ctx).build_poll(2) is None

    async def test_cast_vote(self, alice_ctx: BoardContext) -> None:
        """Should record the vote once and update the counts."""
        topics = TopicHelper(alice_ctx)
        assert await topics.cast_poll(1, RED) is True
        assert await topics.cast_poll(1, BLUE) is False

        view = topics.build_poll(1)
        assert view.has_voted is True
        assert view.total_participants == 1
        assert view.poll["questions"]["1"]["votes"] == {"1": 1, "2": 0}
        assert view.poll["questions"]["1"]["percentages"] == {"1": 100.0, "2": 0.0}

    async def test_view_results_without_casting(self, alice_ctx: BoardContext) -> None:
        """Should record participation without counting a vote."""
        topics = TopicHelper(alice_ctx)
        assert await topics.cast_poll(1, json.dumps(RED), cast=False) is True
        assert topics.get_total_votes_for_question(1, "1") == 0
        assert topics.has_voted_in_poll(1) is True

    async def test_concurrent_votes_from_different_members(
        self, alice_ctx: BoardContext, admin_ctx: BoardContext
    ) -> None:
        """Should keep both votes when two members vote at once."""
        await asyncio.gather(
            TopicHelper(alice_ctx).cast_poll(1, RED),
            TopicHelper(admin_ctx).cast_poll(1, BLUE),
        )
        topics = TopicHelper(alice_ctx)
        assert topics.get_total_votes_for_question(1, 1) == 2
        assert topics.has_voted_in_poll(1, member_id=ADMIN_ID) is True
        assert topics.has_voted_in_poll(1, member_id=ALICE_ID) is True

    async def test_guest_cannot_vote(self, guest_ctx: BoardContext) -> None:
        """Should reject votes from guests."""
        with pytest.raises(InvalidPermissionsError):
            await TopicHelper(guest_ctx).cast_poll(1, RED)

    async def test_unknown_option(self, alice_ctx: BoardContext) -> None:
        """Should reject options the question does not have."""
        with pytest.raises(NotFoundError):
            await TopicHelper(alice_ctx).cast_poll(1, {"1": {"options": {"7": True}}})

    async def test_malformed_selection(self, alice_ctx: BoardContext) -> None:
        """Should reject selections that are not valid JSON."""
        with pytest.raises(DataDecodeError):
            await TopicHelper(alice_ctx).cast_poll(1, "{not json")

    @pytest.mark.parametrize(
        "selections",
        ["[1, 2]", "7", {"1": [1]}, {"1": {"options": ["1"]}}],
    )
    async def test_misshapen_selection(self, alice_ctx: BoardContext, selections: object) -> None:
        """Should reject selections that are not question to options mappings."""
        with pytest.raises(InvalidInputError):
            await TopicHelper(alice_ctx).cast_poll(1, selections)

    async def test_no_option_chosen(self, alice_ctx: BoardContext) -> None:
        """Should reject a cast that chooses nothing and leave the member free to vote."""
        topics = TopicHelper(alice_ctx)
        with pytest.raises(InvalidInputError):
            await topics.cast_poll(1, {"1": {"options": {"1": False, "2": False}}})

        assert topics.has_voted_in_poll(1) is False
        assert await topics.cast_poll(1, RED) is True

    async def test_topic_without_poll(self, alice_ctx: BoardContext) -> None:
        """Should raise NotFoundError when the topic has no poll."""
        with pytest.raises(NotFoundError):
            await TopicHelper(alice_ctx).cast_poll(2, RED)
