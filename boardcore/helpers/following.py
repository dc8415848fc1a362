"""Following and unfollowing content."""

from typing import Any

from boardcore.context import BoardContext
from boardcore.core.content import ContentType
from boardcore.core.logging import get_logger
from boardcore.core.query_builder import QueryBuilder
from boardcore.helpers.util import matches_content
from boardcore.repositories.base import now_epoch, parse_id

logger = get_logger(__name__)

COLLECTION = "followed_content"


class FollowingHelper:
    def __init__(self, ctx: BoardContext) -> None:
        self._ctx = ctx

    def _member_id(self, member_id: int | None) -> int:
        return self._ctx.member.id if member_id is None else member_id

    def is_following(
        self, content_type: ContentType | str, content_id: Any, member_id: int | None = None
    ) -> bool:
        kind = ContentType.parse(content_type)
        target = parse_id(content_id)
        follower = self._member_id(member_id)
        return any(
            matches_content(row, kind, target, follower)
            for row in self._ctx.cache.get(COLLECTION)
        )

    def get_total_following(self, content_type: ContentType | str, content_id: Any) -> int:
        kind = ContentType.parse(content_type)
        target = parse_id(content_id)
        return sum(
            1 for row in self._ctx.cache.get(COLLECTION) if matches_content(row, kind, target)
        )

    async def follow_content(
        self, content_type: ContentType | str, content_id: Any, member_id: int | None = None
    ) -> bool:
        """Follow content; returns False when already following.

        Backing-store errors propagate.
        """
        kind = ContentType.parse(content_type)
        target = parse_id(content_id)
        follower = self._member_id(member_id)

        async with self._ctx.locks.hold((COLLECTION, kind.value, target, follower)):
            if self.is_following(kind, target, follower):
                return False

            await self._ctx.db.query(
                QueryBuilder(self._ctx.config.database)
                .insert_into(
                    COLLECTION,
                    ["contentType", "contentId", "memberId", "followedAt"],
                    [kind.value, target, follower, now_epoch()],
                )
                .build()
            )
            await self._ctx.cache.update(COLLECTION)

        logger.debug("content_followed", content_type=kind.value, content_id=target)
        return True

    async def unfollow_content(
        self, content_type: ContentType | str, content_id: Any, member_id: int | None = None
    ) -> bool:
        kind = ContentType.parse(content_type)
        target = parse_id(content_id)
        follower = self._member_id(member_id)

        async with self._ctx.locks.hold((COLLECTION, kind.value, target, follower)):
            if not self.is_following(kind, target, follower):
                return False

            await self._ctx.db.query(
                QueryBuilder(self._ctx.config.database)
                .delete_from(COLLECTION)
                .where(
                    "contentType = ? AND contentId = ? AND memberId = ?",
                    [kind.value, target, follower],
                )
                .build()
            )
            await self._ctx.cache.update(COLLECTION)

        logger.debug("content_unfollowed", content_type=kind.value, content_id=target)
        return True
