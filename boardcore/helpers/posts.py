"""Posts: lookups, links and writing new topics and replies.

A new topic is stored as a topic row plus its first post (isFirstPost = 1).
Writing either keeps the denormalized counters in step with the rows:

    topics.totalReplies, topics.lastPostId
    forums.totalTopics, forums.totalPosts, forums.lastPostId
    members.totalPosts (signed-in authors only)
"""

import json
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any

from boardcore.context import BoardContext
from boardcore.core.content import ContentType
from boardcore.core.entities import Attachment, Forum, Post, Topic
from boardcore.core.errors import (
    BackingStoreError,
    InvalidInputError,
    InvalidPermissionsError,
    NotFoundError,
)
from boardcore.core.logging import get_logger
from boardcore.core.query_builder import QueryBuilder
from boardcore.helpers.following import FollowingHelper
from boardcore.helpers.likes import LikeHelper
from boardcore.helpers.tags import TagsHelper
from boardcore.helpers.topics import prepare_poll
from boardcore.repositories.base import now_epoch, parse_id, to_int
from boardcore.services.permissions import ForumPermission

logger = get_logger(__name__)

TOUCHED_BY_POSTING = ["topics", "posts", "forums", "members"]


def _attachments_json(attachments: Sequence[Any] | None) -> str | None:
    if not attachments:
        return None
    return json.dumps([{"id": parse_id(attachment)} for attachment in attachments])


class PostsHelper:
    def __init__(self, ctx: BoardContext) -> None:
        self._ctx = ctx
        self._likes = LikeHelper(ctx)

    def get_post(self, post_id: Any) -> Post | None:
        return self._ctx.repositories.posts.get_post_by_id(post_id)

    def get_total_likes(self, post_id: Any) -> int:
        return self._likes.get_total_likes(ContentType.POST, post_id)

    def get_link_to_post(self, post_id: Any) -> str | None:
        """URL of the topic page holding the post, anchored on its number.

        The page is found from the post's position among its topic's posts
        and the acting member's posts-per-page setting.
        """
        repositories = self._ctx.repositories
        post = repositories.posts.get_post_by_id(post_id)
        if post is None:
            return None
        topic = repositories.topics.get_topic_by_id(post.topic_id)
        if topic is None:
            return None

        siblings = sorted(
            (
                row
                for row in self._ctx.cache.get("posts")
                if parse_id(row.get("topicId")) == post.topic_id
            ),
            key=lambda row: (to_int(row.get("createdAt")), to_int(row.get("id"))),
        )
        index = next(
            (i for i, row in enumerate(siblings) if parse_id(row.get("id")) == post.id), None
        )
        if index is None:
            return None

        per_page = max(self._ctx.member.per_page_for("posts"), 1)
        page = index // per_page + 1
        return f"{topic.url(self._ctx.base_url)}/page/{page}/#postnumber-{post.post_number}"

    def attachments_to_entities(
        self, attachments: Sequence[Any] | None, forum_id: int
    ) -> list[Attachment] | None:
        """Resolve a post's attachment references, tagging each with forum_id.

        References are ``{"id": ...}`` documents or bare ids. Ones that no
        longer resolve are skipped.
        """
        if not attachments:
            return None
        repository = self._ctx.repositories.attachments
        entities = []
        for reference in attachments:
            attachment_id = reference.get("id") if isinstance(reference, dict) else reference
            entity = repository.get_attachment_by_id(attachment_id)
            if entity is not None:
                entity.forum_id = forum_id
                entities.append(entity)
        return entities

    # =========================================================================
    # Writing
    # =========================================================================

    def _require_forum(self, forum_id: Any) -> Forum:
        forum = self._ctx.repositories.forums.get_forum_by_id(forum_id)
        if forum is None:
            raise NotFoundError("forum does not exist", data={"forum_id": forum_id})
        return forum

    def _require_topic(self, topic_id: Any) -> Topic:
        topic = self._ctx.repositories.topics.get_topic_by_id(topic_id)
        if topic is None:
            raise NotFoundError("topic does not exist", data={"topic_id": topic_id})
        return topic

    async def _insert_post(
        self,
        topic: Topic,
        content: str,
        is_first_post: bool,
        tags: list[int] | None,
        attachments: Sequence[Any] | None,
        include_signature: bool,
        client: dict[str, str | None],
    ) -> int:
        result = await self._ctx.db.query(
            QueryBuilder(self._ctx.config.database)
            .insert_into(
                "posts",
                [
                    "categoryId",
                    "forumId",
                    "topicId",
                    "createdBy",
                    "createdAt",
                    "content",
                    "tags",
                    "attachments",
                    "isFirstPost",
                    "ipAddress",
                    "hostname",
                    "userAgent",
                    "includeSignature",
                ],
                [
                    topic.category_id,
                    topic.forum_id,
                    topic.id,
                    self._ctx.member.id,
                    now_epoch(),
                    content,
                    json.dumps(tags) if tags else None,
                    _attachments_json(attachments),
                    1 if is_first_post else 0,
                    client.get("ip_address"),
                    client.get("hostname"),
                    client.get("user_agent"),
                    1 if include_signature else 0,
                ],
            )
            .build()
        )
        return int(result.insert_id)

    @asynccontextmanager
    async def _refresh_on_failure(self) -> AsyncIterator[None]:
        """Refresh the posting collections if a write sequence stops part way."""
        try:
            yield
        except Exception:
            logger.warning("posting_interrupted", collections=TOUCHED_BY_POSTING)
            await self._ctx.cache.update_all(TOUCHED_BY_POSTING)
            raise

    async def _update_counters(
        self, forum: Forum, post_id: int, new_topics: int
    ) -> None:
        """Bump forum and author totals and refresh everything posting touches."""
        builder = QueryBuilder(self._ctx.config.database)
        member = self._ctx.member

        async with self._ctx.locks.hold(("forums", forum.id)):
            current = self._require_forum(forum.id)
            await self._ctx.db.query(
                builder.update("forums")
                .set(
                    ["totalTopics", "totalPosts", "lastPostId"],
                    [current.total_topics + new_topics, current.total_posts + 1, post_id],
                )
                .where("id = ?", [forum.id])
                .build()
            )

            if member.is_signed_in:
                row = self._ctx.repositories.members.load_member_data_by_id(member.id)
                total_posts = to_int(row.get("totalPosts")) if row else member.total_posts
                await self._ctx.db.query(
                    builder.clear()
                    .update("members")
                    .set(["totalPosts"], [total_posts + 1])
                    .where("id = ?", [member.id])
                    .build()
                )

            await self._ctx.cache.update_all(TOUCHED_BY_POSTING)

    async def create_topic(
        self,
        forum_id: Any,
        title: str,
        content: str,
        tags: Sequence[str] | None = None,
        poll: dict[str, Any] | None = None,
        attachments: Sequence[Any] | None = None,
        follow: bool = False,
        include_signature: bool = True,
        ip_address: str | None = None,
        hostname: str | None = None,
        user_agent: str | None = None,
    ) -> Topic:
        """Create a topic with its first post.

        Args:
            tags: Tag titles; unknown titles are created.
            poll: Poll document as submitted; counters are reset before saving.
            attachments: Attachment ids to list on the first post.
            follow: Have the author follow the new topic.

        Raises:
            NotFoundError: If the forum does not exist.
            InvalidInputError: If the title or content is blank.
            InvalidPermissionsError: If the forum does not take new topics.
        """
        title = (title or "").strip()
        if not title:
            raise InvalidInputError("topic title is required")
        if not (content or "").strip():
            raise InvalidInputError("post content is required")

        forum = self._require_forum(forum_id)
        member = self._ctx.member
        if forum.is_redirect or forum.archived:
            raise InvalidPermissionsError(
                "forum does not accept new topics", data={"forum_id": forum.id}
            )
        if not self._ctx.permissions.has_forum_permission(
            forum.id, ForumPermission.CREATE_TOPIC, member.id
        ):
            raise InvalidPermissionsError(
                "not allowed to create topics", data={"forum_id": forum.id}
            )

        tag_ids = await TagsHelper(self._ctx).tag_names_to_identifiers(list(tags)) if tags else None
        prepared_poll = prepare_poll(poll) if poll else None
        created_at = now_epoch()

        async with self._refresh_on_failure():
            result = await self._ctx.db.query(
                QueryBuilder(self._ctx.config.database)
                .insert_into(
                    "topics",
                    ["categoryId", "forumId", "title", "createdBy", "createdAt", "tags", "poll"],
                    [
                        forum.category_id,
                        forum.id,
                        title,
                        member.id,
                        created_at,
                        json.dumps(tag_ids) if tag_ids else None,
                        json.dumps(prepared_poll) if prepared_poll else None,
                    ],
                )
                .build()
            )
            topic = Topic(
                id=int(result.insert_id),
                category_id=forum.category_id,
                forum_id=forum.id,
                title=title,
                created_by=member.id,
            )

            client = {"ip_address": ip_address, "hostname": hostname, "user_agent": user_agent}
            try:
                post_id = await self._insert_post(
                    topic, content, True, tag_ids, attachments, include_signature, client
                )
            except BackingStoreError:
                # A topic without its first post must not outlive the failure.
                await self._ctx.db.query(
                    QueryBuilder(self._ctx.config.database)
                    .delete_from("topics")
                    .where("id = ?", [topic.id])
                    .build()
                )
                raise
            await self._ctx.db.query(
                QueryBuilder(self._ctx.config.database)
                .update("topics")
                .set(["lastPostId"], [post_id])
                .where("id = ?", [topic.id])
                .build()
            )
            await self._update_counters(forum, post_id, new_topics=1)

        if follow and member.is_signed_in:
            await FollowingHelper(self._ctx).follow_content(ContentType.TOPIC, topic.id)

        logger.info("topic_created", topic_id=topic.id, forum_id=forum.id, post_id=post_id)
        return self._require_topic(topic.id)

    async def create_reply(
        self,
        topic_id: Any,
        content: str,
        attachments: Sequence[Any] | None = None,
        follow: bool = False,
        include_signature: bool = True,
        ip_address: str | None = None,
        hostname: str | None = None,
        user_agent: str | None = None,
    ) -> Post:
        """Add a reply to a topic.

        Raises:
            NotFoundError: If the topic or its forum does not exist.
            InvalidInputError: If the content is blank.
            InvalidPermissionsError: If the topic is locked (moderators and
                admins excepted) or replying is not allowed in the forum.
        """
        if not (content or "").strip():
            raise InvalidInputError("post content is required")

        topic = self._require_topic(topic_id)
        forum = self._require_forum(topic.forum_id)
        member = self._ctx.member
        if topic.locked and not (member.is_moderator or member.is_admin):
            raise InvalidPermissionsError("topic is locked", data={"topic_id": topic.id})
        if not self._ctx.permissions.has_forum_permission(
            forum.id, ForumPermission.REPLY_TO_TOPIC, member.id
        ):
            raise InvalidPermissionsError(
                "not allowed to reply", data={"topic_id": topic.id}
            )

        client = {"ip_address": ip_address, "hostname": hostname, "user_agent": user_agent}
        async with self._ctx.locks.hold(("topics", topic.id)), self._refresh_on_failure():
            current = self._require_topic(topic.id)
            post_id = await self._insert_post(
                current, content, False, None, attachments, include_signature, client
            )
            await self._ctx.db.query(
                QueryBuilder(self._ctx.config.database)
                .update("topics")
                .set(["totalReplies", "lastPostId"], [current.total_replies + 1, post_id])
                .where("id = ?", [topic.id])
                .build()
            )
            await self._update_counters(forum, post_id, new_topics=0)

        if follow and member.is_signed_in:
            await FollowingHelper(self._ctx).follow_content(ContentType.TOPIC, topic.id)

        logger.info("reply_created", topic_id=topic.id, post_id=post_id)
        post = self.get_post(post_id)
        if post is None:
            raise NotFoundError("post does not exist", data={"post_id": post_id})
        return post
