"""Liking and unliking topics and posts."""

from dataclasses import dataclass
from typing import Any

from boardcore.context import BoardContext
from boardcore.core.content import ContentType
from boardcore.core.entities import Like, Member
from boardcore.core.errors import BackingStoreError
from boardcore.core.logging import get_logger
from boardcore.core.query_builder import QueryBuilder
from boardcore.helpers.util import matches_content
from boardcore.repositories.base import now_epoch, parse_id

logger = get_logger(__name__)

COLLECTION = "liked_content"


@dataclass
class LikeListingEntry:
    like: Like
    member: Member


class LikeHelper:
    """Read and toggle likes.

    Writes for one (content type, content id, member) key are serialized with
    the context's keyed locks, so two concurrent likes from the same member
    cannot both pass the "not liked yet" check.
    """

    def __init__(self, ctx: BoardContext) -> None:
        self._ctx = ctx

    def _member_id(self, member_id: int | None) -> int:
        return self._ctx.member.id if member_id is None else member_id

    def has_liked_content(
        self, content_type: ContentType | str, content_id: Any, member_id: int | None = None
    ) -> bool:
        kind = ContentType.parse(content_type)
        target = parse_id(content_id)
        liker = self._member_id(member_id)
        return any(
            matches_content(row, kind, target, liker)
            for row in self._ctx.cache.get(COLLECTION)
        )

    def get_total_likes(self, content_type: ContentType | str, content_id: Any) -> int:
        kind = ContentType.parse(content_type)
        target = parse_id(content_id)
        return sum(
            1 for row in self._ctx.cache.get(COLLECTION) if matches_content(row, kind, target)
        )

    def get_like_listing(
        self, content_type: ContentType | str, content_id: Any
    ) -> list[LikeListingEntry]:
        """Likes on a piece of content with their members, newest first."""
        kind = ContentType.parse(content_type)
        target = parse_id(content_id)
        repositories = self._ctx.repositories

        entries = []
        for row in self._ctx.cache.get(COLLECTION):
            if not matches_content(row, kind, target):
                continue
            like = repositories.likes.build_like_from_data(row)
            if like is None:
                continue
            member = repositories.members.get_member_by_id(like.member_id)
            entries.append(LikeListingEntry(like=like, member=member))

        entries.sort(
            key=lambda entry: (entry.like.liked_at.timestamp() if entry.like.liked_at else 0),
            reverse=True,
        )
        return entries

    async def like_content(
        self, content_type: ContentType | str, content_id: Any, member_id: int | None = None
    ) -> bool:
        """Like content once.

        Returns:
            True if a like was recorded, False if the member already liked it
            or the write failed.
        """
        kind = ContentType.parse(content_type)
        target = parse_id(content_id)
        liker = self._member_id(member_id)

        async with self._ctx.locks.hold((COLLECTION, kind.value, target, liker)):
            if self.has_liked_content(kind, target, liker):
                return False

            built = (
                QueryBuilder(self._ctx.config.database)
                .insert_into(
                    COLLECTION,
                    ["contentType", "contentId", "memberId", "likedAt"],
                    [kind.value, target, liker, now_epoch()],
                )
                .build()
            )
            try:
                await self._ctx.db.query(built)
                await self._ctx.cache.update(COLLECTION)
            except BackingStoreError as ex:
                logger.error(
                    "like_content_failed",
                    content_type=kind.value,
                    content_id=target,
                    error=str(ex),
                )
                return False

        logger.debug("content_liked", content_type=kind.value, content_id=target)
        return True

    async def unlike_content(
        self, content_type: ContentType | str, content_id: Any, member_id: int | None = None
    ) -> bool:
        """Remove a like.

        Returns:
            True if a like was removed, False if there was none or the write
            failed.
        """
        kind = ContentType.parse(content_type)
        target = parse_id(content_id)
        liker = self._member_id(member_id)

        async with self._ctx.locks.hold((COLLECTION, kind.value, target, liker)):
            if not self.has_liked_content(kind, target, liker):
                return False

            built = (
                QueryBuilder(self._ctx.config.database)
                .delete_from(COLLECTION)
                .where(
                    "contentType = ? AND contentId = ? AND memberId = ?",
                    [kind.value, target, liker],
                )
                .build()
            )
            try:
                await self._ctx.db.query(built)
                await self._ctx.cache.update(COLLECTION)
            except BackingStoreError as ex:
                logger.error(
                    "unlike_content_failed",
                    content_type=kind.value,
                    content_id=target,
                    error=str(ex),
                )
                return False

        logger.debug("content_unliked", content_type=kind.value, content_id=target)
        return True
