"""Handlers behind the board's AJAX endpoints.

Every handler answers with the same envelope:

    {"success": true, "data": {...}}
    {"success": false, "data": {"message": "..."}}

Expected failures (unknown content, closed polls, missing files) become a
failure envelope. Backing-store errors and other unexpected errors propagate
to the caller.
"""

import dataclasses
from typing import Any

from boardcore.context import BoardContext
from boardcore.core.content import UPLOAD_COLLECTIONS, UPLOAD_DIRECTORIES, UploadType
from boardcore.core.errors import (
    DataDecodeError,
    InvalidInputError,
    InvalidPermissionsError,
    NotFoundError,
)
from boardcore.core.logging import get_logger
from boardcore.core.query_builder import QueryBuilder
from boardcore.helpers.likes import LikeHelper
from boardcore.helpers.topics import TopicHelper
from boardcore.helpers.util import UtilHelper
from boardcore.repositories.base import parse_id, to_int
from boardcore.services.settings import EMOTICONS_KEY

logger = get_logger(__name__)

LIKE_MODES = ("like", "unlike")


def build_response(success: bool, data: dict[str, Any] | None = None) -> dict[str, Any]:
    return {"success": success, "data": data if data is not None else {}}


def _failure(message: str) -> dict[str, Any]:
    return build_response(False, {"message": message})


class AjaxHelper:
    def __init__(self, ctx: BoardContext) -> None:
        self._ctx = ctx
        self._likes = LikeHelper(ctx)

    async def like_unlike_content(
        self, mode: str, content_type: str, content_id: Any
    ) -> dict[str, Any]:
        """Like or unlike a topic or post for the acting member.

        On success the data carries the new like state, total and listing.
        """
        if not UtilHelper(self._ctx).is_content_valid(content_type, content_id):
            return _failure("The requested content does not exist.")
        if mode not in LIKE_MODES:
            return _failure(f"Invalid like mode: {mode!r}.")

        if mode == "like":
            changed = await self._likes.like_content(content_type, content_id)
        else:
            changed = await self._likes.unlike_content(content_type, content_id)

        if not changed:
            return _failure(f"Could not {mode} the content.")

        listing = [
            {
                "memberId": entry.member.id,
                "name": entry.member.name,
                "likedAt": entry.like.liked_at.isoformat() if entry.like.liked_at else None,
            }
            for entry in self._likes.get_like_listing(content_type, content_id)
        ]
        return build_response(
            True,
            {
                "liked": mode == "like",
                "totalLikes": len(listing),
                "listing": listing,
            },
        )

    async def cast_poll(
        self, topic_id: Any, poll_data: dict[str, Any] | str, cast: bool = True
    ) -> dict[str, Any]:
        """Record the acting member's poll choices and return the updated poll."""
        topics = TopicHelper(self._ctx)
        try:
            recorded = await topics.cast_poll(topic_id, poll_data, cast=cast)
        except (NotFoundError, InvalidPermissionsError, InvalidInputError, DataDecodeError) as ex:
            logger.info("cast_poll_rejected", topic_id=topic_id, reason=str(ex))
            return _failure(str(ex))

        if not recorded:
            return _failure("You have already voted in this poll.")

        view = topics.build_poll(topic_id)
        return build_response(True, {"poll": dataclasses.asdict(view) if view else None})

    def search_tags(self, text: str | None) -> dict[str, Any]:
        """Tags whose title contains text, ignoring case."""
        needle = (text or "").lower()
        tags = [
            {"id": parse_id(row.get("id")), "title": row.get("title") or ""}
            for row in self._ctx.cache.get("tags")
            if needle in (row.get("title") or "").lower()
        ]
        return build_response(True, {"haveTags": bool(tags), "tags": tags})

    async def delete_file(self, file_id: Any, upload_type: UploadType | str = "attachment") -> dict[str, Any]:
        """Delete an uploaded file and its row.

        Only the uploader, a moderator or an admin may delete. A file that
        is already gone from disk does not stop the row from being removed.
        """
        try:
            kind = UploadType.parse(upload_type)
        except InvalidInputError as ex:
            return _failure(str(ex))

        collection = UPLOAD_COLLECTIONS[kind]
        target = parse_id(file_id)
        row = next(
            (item for item in self._ctx.cache.get(collection) if parse_id(item.get("id")) == target),
            None,
        )
        if row is None:
            return _failure(f"The {kind.value} does not exist.")

        member = self._ctx.member
        owner_id = to_int(row.get("memberId"))
        if not member.is_signed_in or (
            owner_id != member.id and not (member.is_moderator or member.is_admin)
        ):
            return _failure(f"You may not delete this {kind.value}.")

        path = (
            self._ctx.config.uploads_root
            / UPLOAD_DIRECTORIES[kind]
            / f"member-{owner_id}"
            / str(row.get("fileName") or "")
        )
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("upload_file_missing", path=str(path), upload_type=kind.value)
        except OSError as ex:
            logger.error("upload_delete_failed", path=str(path), error=str(ex))
            return _failure(f"Failed to delete the {kind.value}: {ex}")

        await self._ctx.db.query(
            QueryBuilder(self._ctx.config.database)
            .delete_from(collection)
            .where("id = ?", [target])
            .build()
        )
        await self._ctx.cache.update(collection)

        logger.info("upload_deleted", upload_type=kind.value, file_id=target)
        return build_response(True)

    def get_emoticons(self, category: str | None = None) -> dict[str, Any]:
        """All emoticons, or one category's when it exists.

        Emoticons are either a mapping of category to entries or a list of
        entries carrying a ``category`` key.
        """
        emoticons = self._ctx.settings.get(EMOTICONS_KEY) or []
        if category:
            if isinstance(emoticons, dict) and category in emoticons:
                return build_response(True, {"emoticons": emoticons[category]})
            if isinstance(emoticons, list):
                matching = [
                    entry
                    for entry in emoticons
                    if isinstance(entry, dict) and entry.get("category") == category
                ]
                if matching:
                    return build_response(True, {"emoticons": matching})
        return build_response(True, {"emoticons": emoticons})
