"""Small predicates shared by the domain helpers."""

from collections.abc import Iterable, Mapping
from typing import Any

from boardcore.context import BoardContext
from boardcore.core.content import CONTENT_COLLECTIONS, ContentType
from boardcore.ports.cache import RawRecord
from boardcore.repositories.base import find_by_id, parse_id


def matches_content(
    row: RawRecord,
    content_type: ContentType,
    content_id: int | None,
    member_id: int | None = None,
) -> bool:
    """Check a tracker-style row (likes, follows, views) against a key."""
    if str(row.get("contentType")) != content_type.value:
        return False
    if parse_id(row.get("contentId")) != content_id:
        return False
    return member_id is None or parse_id(row.get("memberId")) == member_id


def in_tracker(
    tracker: Iterable[Mapping[str, Any]] | None,
    content_type: ContentType,
    content_id: int | None,
) -> bool:
    """Check a guest's cookie-held tracker list for a content key."""
    return any(
        str(entry.get("contentType")) == content_type.value
        and parse_id(entry.get("contentId")) == content_id
        for entry in tracker or ()
    )


class UtilHelper:
    def __init__(self, ctx: BoardContext) -> None:
        self._ctx = ctx

    def is_content_valid(self, content_type: ContentType | str, content_id: Any) -> bool:
        """Whether a topic or post with this id exists."""
        try:
            kind = ContentType.parse(content_type)
        except ValueError:
            return False
        if kind not in (ContentType.TOPIC, ContentType.POST):
            return False
        rows = self._ctx.cache.get(CONTENT_COLLECTIONS[kind])
        return find_by_id(rows, content_id) is not None

    def has_viewed_content(
        self,
        content_type: ContentType | str,
        content_id: Any,
        member_id: int | None = None,
        guest_tracker: Iterable[Mapping[str, Any]] | None = None,
    ) -> bool:
        """Whether the viewer already counted as a view of this content.

        Members are checked against the content_views_tracker collection.
        Guests are checked against the tracker list their cookie carries.
        """
        kind = ContentType.parse(content_type)
        target = parse_id(content_id)
        viewer = self._ctx.member.id if member_id is None else member_id

        if viewer:
            return any(
                matches_content(row, kind, target, viewer)
                for row in self._ctx.cache.get("content_views_tracker")
            )
        return in_tracker(guest_tracker, kind, target)
