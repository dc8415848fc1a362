"""Topic aggregates, view counting and polls.

Poll documents are stored as JSON on the topic row:

    {
        "closed": false,
        "expire": {"enabled": false, "expireDateTime": null},
        "questions": {
            "1": {
                "question": "Favourite colour?",
                "options": {"1": "Red", "2": "Blue"},
                "votes": {"1": 3, "2": 1},
                "voters": {"1": [4, 7, 9], "2": [12]}
            }
        }
    }
"""

import copy
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from boardcore.context import BoardContext
from boardcore.core.content import ContentType
from boardcore.core.entities import Forum, Topic
from boardcore.core.errors import (
    DataDecodeError,
    InvalidInputError,
    InvalidPermissionsError,
    NotFoundError,
)
from boardcore.core.logging import get_logger
from boardcore.core.query_builder import QueryBuilder
from boardcore.helpers.likes import LikeHelper
from boardcore.helpers.util import UtilHelper, in_tracker
from boardcore.repositories.base import (
    decode_json,
    epoch_to_datetime,
    now_epoch,
    parse_id,
    to_int,
)
from boardcore.services.permissions import ForumPermission

logger = get_logger(__name__)


def poll_option_percentage(total_votes: int, option_votes: int) -> float:
    """Share of a question's votes that went to one option, in percent."""
    if total_votes <= 0:
        return 0.0
    return round(option_votes / total_votes * 100, 2)


def prepare_poll(poll: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize a freshly submitted poll: open, with zeroed counters."""
    prepared = copy.deepcopy(dict(poll))
    prepared["closed"] = False
    prepared["closedAt"] = None
    prepared.setdefault("expire", {"enabled": False, "expireDateTime": None})

    for question in prepared.get("questions", {}).values():
        question["votes"] = {option_id: 0 for option_id in question.get("options", {})}
        question["voters"] = {option_id: [] for option_id in question.get("options", {})}
    return prepared


def _poll_voters(poll: Mapping[str, Any]) -> Iterable[int]:
    for question in (poll.get("questions") or {}).values():
        for voters in (question.get("voters") or {}).values():
            if isinstance(voters, list):
                yield from voters


@dataclass
class ViewIncrement:
    """Outcome of counting a topic view.

    Attributes:
        incremented: Whether totalViews was increased.
        guest_tracker: The updated views tracker for a guest's cookie, when
            it changed; None otherwise.
    """

    incremented: bool
    guest_tracker: list[dict[str, Any]] | None = None


@dataclass
class PollView:
    """View model for rendering a topic's poll."""

    topic_id: int
    poll: dict[str, Any]
    has_voted: bool
    total_participants: int
    footer: bool
    is_own_poll: bool
    permissions: dict[str, bool] = field(default_factory=dict)


class TopicHelper:
    def __init__(self, ctx: BoardContext) -> None:
        self._ctx = ctx
        self._likes = LikeHelper(ctx)
        self._util = UtilHelper(ctx)

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_topic(self, topic_id: Any) -> Topic | None:
        return self._ctx.repositories.topics.get_topic_by_id(topic_id)

    def _require_topic(self, topic_id: Any) -> Topic:
        topic = self.get_topic(topic_id)
        if topic is None:
            raise NotFoundError("topic does not exist", data={"topic_id": topic_id})
        return topic

    def _require_forum(self, topic: Topic) -> Forum:
        forum = self._ctx.repositories.forums.get_forum_by_id(topic.forum_id)
        if forum is None:
            raise NotFoundError(
                "forum does not exist",
                data={"topic_id": topic.id, "forum_id": topic.forum_id},
            )
        return forum

    def _posts_in(self, topic_id: Any) -> list[dict[str, Any]]:
        target = parse_id(topic_id)
        return [
            row for row in self._ctx.cache.get("posts") if parse_id(row.get("topicId")) == target
        ]

    # =========================================================================
    # Aggregates
    # =========================================================================

    def contains_replies(self, topic_id: Any) -> bool:
        return any(to_int(row.get("isFirstPost")) != 1 for row in self._posts_in(topic_id))

    def get_total_likes(self, topic_id: Any, include_posts: bool = False) -> int:
        total = self._likes.get_total_likes(ContentType.TOPIC, topic_id)
        if include_posts:
            for row in self._posts_in(topic_id):
                total += self._likes.get_total_likes(ContentType.POST, row.get("id"))
        return total

    def contains_attachments(self, topic_id: Any) -> bool:
        return any(
            decode_json(row.get("attachments"), "attachments") for row in self._posts_in(topic_id)
        )

    def get_latest_post_timestamp(self, topic_id: Any) -> datetime | None:
        timestamps = [to_int(row.get("createdAt")) for row in self._posts_in(topic_id)]
        if not timestamps:
            return None
        return epoch_to_datetime(max(timestamps))

    def is_hot(self, topic_id: Any) -> dict[str, Any]:
        """A topic is hot once its replies reach the forum's hot threshold."""
        topic = self._require_topic(topic_id)
        threshold = self._require_forum(topic).hot_threshold
        return {"hot": topic.total_replies >= threshold, "threshold": threshold}

    def is_popular(self, topic_id: Any) -> dict[str, Any]:
        """A topic is popular once its views reach the forum's threshold."""
        topic = self._require_topic(topic_id)
        threshold = self._require_forum(topic).popularity_threshold
        return {"popular": topic.total_views >= threshold, "threshold": threshold}

    def get_total_unique_posters(self, topic_id: Any) -> int:
        return len({parse_id(row.get("createdBy")) for row in self._posts_in(topic_id)})

    def get_total_posts_in_topic(self, topic_id: Any) -> int:
        return len(self._posts_in(topic_id))

    def get_total_attachments_in_topic(self, topic_id: Any) -> int:
        total = 0
        for row in self._posts_in(topic_id):
            total += len(decode_json(row.get("attachments"), "attachments") or [])
        return total

    def get_previous_and_next_topics(self, topic_id: Any) -> dict[str, Topic | None]:
        """Neighbouring topics in the same forum, by creation time."""
        topic = self._require_topic(topic_id)
        repository = self._ctx.repositories.topics

        siblings = [
            repository.build_topic_from_data(row)
            for row in self._ctx.cache.get("topics")
            if parse_id(row.get("forumId")) == topic.forum_id
        ]
        siblings = sorted(
            (sibling for sibling in siblings if sibling is not None),
            key=lambda sibling: (
                sibling.created_at.timestamp() if sibling.created_at else 0,
                sibling.id,
            ),
        )

        previous = following = None
        for index, sibling in enumerate(siblings):
            if sibling.id == topic.id:
                previous = siblings[index - 1] if index > 0 else None
                following = siblings[index + 1] if index < len(siblings) - 1 else None
                break
        return {"previous": previous, "next": following}

    def determine_latest_post_timestamp(self, topic_id: Any) -> datetime | None:
        """Creation time of the topic's last post, via its lastPostId."""
        topic = self._require_topic(topic_id)
        if not topic.last_post_id:
            return None
        post = self._ctx.repositories.posts.get_post_by_id(topic.last_post_id)
        return post.created_at if post else None

    # =========================================================================
    # Views
    # =========================================================================

    async def increment_views(
        self,
        topic_id: Any,
        guest_tracker: list[dict[str, Any]] | None = None,
    ) -> ViewIncrement:
        """Count a view of the topic.

        When the forum counts unique views only, a viewer is counted once:
        members through the content_views_tracker table, guests through the
        tracker list carried in their cookie (passed in as guest_tracker and
        handed back updated in the result).
        """
        topic = self._require_topic(topic_id)
        forum = self._require_forum(topic)
        member = self._ctx.member
        unique = forum.unique_view_incrementation

        builder = QueryBuilder(self._ctx.config.database)
        touched = ["topics"]

        async with self._ctx.locks.hold(("topics", topic.id)):
            # Re-read under the lock so concurrent views are not lost.
            current = self._require_topic(topic.id)
            if unique and self._util.has_viewed_content(
                ContentType.TOPIC, topic.id, member.id, guest_tracker
            ):
                return ViewIncrement(incremented=False)

            await self._ctx.db.query(
                builder.update("topics")
                .set(["totalViews"], [current.total_views + 1])
                .where("id = ?", [topic.id])
                .build()
            )

            if unique and member.is_signed_in:
                await self._ctx.db.query(
                    builder.clear()
                    .insert_into(
                        "content_views_tracker",
                        ["contentType", "contentId", "memberId", "addedAt"],
                        [ContentType.TOPIC.value, topic.id, member.id, now_epoch()],
                    )
                    .build()
                )
                touched.append("content_views_tracker")

            await self._ctx.cache.update_all(touched)

        tracker = None
        if unique and not member.is_signed_in:
            tracker = list(guest_tracker or [])
            if not in_tracker(tracker, ContentType.TOPIC, topic.id):
                tracker.append({"contentType": ContentType.TOPIC.value, "contentId": topic.id})

        return ViewIncrement(incremented=True, guest_tracker=tracker)

    # =========================================================================
    # Polls
    # =========================================================================

    def _require_poll(self, topic: Topic) -> dict[str, Any]:
        if not topic.poll:
            raise NotFoundError("topic has no poll", data={"topic_id": topic.id})
        return topic.poll

    def has_voted_in_poll(self, topic_id: Any, member_id: int | None = None) -> bool:
        topic = self._require_topic(topic_id)
        if not topic.poll:
            return False
        voter = self._ctx.member.id if member_id is None else member_id
        return any(parse_id(existing) == voter for existing in _poll_voters(topic.poll))

    def get_total_poll_participants(self, topic_id: Any) -> int:
        topic = self._require_topic(topic_id)
        if not topic.poll:
            return 0
        return len({parse_id(voter) for voter in _poll_voters(topic.poll)})

    def get_total_votes_for_question(self, topic_id: Any, question_id: Any) -> int:
        poll = self._require_poll(self._require_topic(topic_id))
        question = (poll.get("questions") or {}).get(str(question_id))
        if question is None:
            raise NotFoundError(
                "poll question does not exist",
                data={"topic_id": topic_id, "question_id": question_id},
            )
        return sum(to_int(votes) for votes in (question.get("votes") or {}).values())

    def build_poll(self, topic_id: Any) -> PollView | None:
        """Assemble the poll view model, or None when the topic has no poll."""
        topic = self._require_topic(topic_id)
        if not topic.poll:
            return None

        member = self._ctx.member
        poll = copy.deepcopy(topic.poll)
        has_voted = self.has_voted_in_poll(topic.id)
        expire = poll.get("expire") or {}

        footer = bool(
            (expire.get("enabled") and expire.get("expireDateTime"))
            or poll.get("closed")
            or (member.is_signed_in and not has_voted)
        )

        for question_id, question in (poll.get("questions") or {}).items():
            total_votes = self.get_total_votes_for_question(topic.id, question_id)
            votes = question.get("votes") or {}
            question["totalVotes"] = total_votes
            question["percentages"] = {
                option_id: poll_option_percentage(total_votes, to_int(votes.get(option_id)))
                for option_id in question.get("options") or {}
            }

        return PollView(
            topic_id=topic.id,
            poll=poll,
            has_voted=has_voted,
            total_participants=self.get_total_poll_participants(topic.id),
            footer=footer,
            is_own_poll=topic.created_by == member.id,
            permissions=self._ctx.permissions.has_forum_permissions(
                topic.forum_id,
                [ForumPermission.CLOSE_POLLS, ForumPermission.EDIT_POLLS],
                member.id,
            ),
        )

    async def cast_poll(
        self,
        topic_id: Any,
        selections: Mapping[str, Any] | str,
        cast: bool = True,
    ) -> bool:
        """Record the acting member's poll choices.

        Args:
            topic_id: The topic holding the poll.
            selections: ``{question_id: {"options": {option_id: bool}}}``,
                or the same document as JSON text.
            cast: When False the member is recorded as a participant (to
                see the results) without adding to the vote counts.

        Returns:
            True if the choices were recorded, False if the member had
            already voted.

        Raises:
            NotFoundError: If the topic, its poll, or a selected question or
                option does not exist.
            InvalidPermissionsError: If the member is a guest, the poll is
                closed, or the forum forbids casting.
            DataDecodeError: If selections is malformed JSON.
            InvalidInputError: If selections are not shaped as above or
                choose no option.
        """
        if isinstance(selections, str):
            try:
                selections = json.loads(selections)
            except json.JSONDecodeError as ex:
                raise DataDecodeError("Malformed poll selections") from ex
        if not isinstance(selections, Mapping):
            raise InvalidInputError("Poll selections must be an object keyed by question")

        member = self._ctx.member
        if not member.is_signed_in:
            raise InvalidPermissionsError("guests cannot vote in polls")

        async with self._ctx.locks.hold(("topics", parse_id(topic_id))):
            topic = self._require_topic(topic_id)
            poll = copy.deepcopy(self._require_poll(topic))

            if not self._ctx.permissions.has_forum_permission(
                topic.forum_id, ForumPermission.CAST_IN_POLLS, member.id
            ):
                raise InvalidPermissionsError(
                    "not allowed to vote in this poll", data={"topic_id": topic.id}
                )
            if poll.get("closed"):
                raise InvalidPermissionsError("poll is closed", data={"topic_id": topic.id})
            if any(parse_id(voter) == member.id for voter in _poll_voters(poll)):
                return False

            questions = poll.get("questions") or {}
            chose_any = False
            for question_id, selection in selections.items():
                options = selection.get("options") if isinstance(selection, Mapping) else None
                if not isinstance(options, Mapping):
                    raise InvalidInputError(
                        "Poll selection must carry an options object",
                        data={"topic_id": topic.id, "question_id": question_id},
                    )
                question = questions.get(str(question_id))
                if question is None:
                    raise NotFoundError(
                        "poll question does not exist",
                        data={"topic_id": topic.id, "question_id": question_id},
                    )
                for option_id, chosen in options.items():
                    if not chosen:
                        continue
                    chose_any = True
                    option_id = str(option_id)
                    if option_id not in (question.get("options") or {}):
                        raise NotFoundError(
                            "poll option does not exist",
                            data={"topic_id": topic.id, "option_id": option_id},
                        )
                    question.setdefault("voters", {}).setdefault(option_id, []).append(member.id)
                    if cast:
                        votes = question.setdefault("votes", {})
                        votes[option_id] = to_int(votes.get(option_id)) + 1

            if not chose_any:
                raise InvalidInputError("No poll option was chosen", data={"topic_id": topic.id})

            await self._ctx.db.query(
                QueryBuilder(self._ctx.config.database)
                .update("topics")
                .set(["poll"], [json.dumps(poll)])
                .where("id = ?", [topic.id])
                .build()
            )
            await self._ctx.cache.update("topics")

        logger.info("poll_cast", topic_id=topic.id, counted=cast)
        return True
