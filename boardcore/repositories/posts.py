"""Post repository."""

from typing import Any

from boardcore.core.entities import Post
from boardcore.ports.cache import RawRecord
from boardcore.repositories.base import (
    CachedRepository,
    decode_json,
    epoch_to_datetime,
    parse_id,
    to_bool,
    to_int,
)


class PostRepository(CachedRepository):
    collection = "posts"

    def load_post_data_by_id(self, post_id: Any) -> RawRecord | None:
        return self._load_by_id(post_id)

    def determine_post_number(self, post_id: int, topic_id: int) -> int | None:
        """1-based position of a post among its topic's posts by creation time.

        Ties on createdAt keep id order.
        """
        posts = sorted(
            (row for row in self._cache.get("posts") if parse_id(row.get("topicId")) == topic_id),
            key=lambda row: (to_int(row.get("createdAt")), to_int(row.get("id"))),
        )
        for index, row in enumerate(posts):
            if parse_id(row.get("id")) == post_id:
                return index + 1
        return None

    def build_post_from_data(self, data: RawRecord | None) -> Post | None:
        if not data:
            return None
        post = Post(
            id=to_int(data.get("id")),
            category_id=to_int(data.get("categoryId")),
            forum_id=to_int(data.get("forumId")),
            topic_id=to_int(data.get("topicId")),
            created_by=to_int(data.get("createdBy")),
            created_at=epoch_to_datetime(data.get("createdAt")),
            content=data.get("content") or "",
            tags=decode_json(data.get("tags"), "tags"),
            attachments=decode_json(data.get("attachments"), "attachments"),
            is_first_post=to_bool(data.get("isFirstPost")),
            ip_address=data.get("ipAddress"),
            hostname=data.get("hostname"),
            user_agent=data.get("userAgent"),
            include_signature=to_bool(data.get("includeSignature")),
        )
        post.post_number = self.determine_post_number(post.id, post.topic_id)
        return post

    def get_post_by_id(self, post_id: Any) -> Post | None:
        return self.build_post_from_data(self.load_post_data_by_id(post_id))
