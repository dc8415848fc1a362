"""Topic repository."""

from typing import Any

from boardcore.core.entities import Topic
from boardcore.ports.cache import RawRecord
from boardcore.repositories.base import (
    CachedRepository,
    decode_json,
    epoch_to_datetime,
    to_bool,
    to_int,
    to_optional_int,
)


class TopicRepository(CachedRepository):
    collection = "topics"

    def load_topic_data_by_id(self, topic_id: Any) -> RawRecord | None:
        return self._load_by_id(topic_id)

    def build_topic_from_data(self, data: RawRecord | None) -> Topic | None:
        if not data:
            return None
        return Topic(
            id=to_int(data.get("id")),
            category_id=to_int(data.get("categoryId")),
            forum_id=to_int(data.get("forumId")),
            title=data.get("title") or "",
            created_by=to_int(data.get("createdBy")),
            created_at=epoch_to_datetime(data.get("createdAt")),
            locked=to_bool(data.get("locked")),
            total_replies=to_int(data.get("totalReplies")),
            total_views=to_int(data.get("totalViews")),
            last_post_id=to_optional_int(data.get("lastPostId")),
            tags=decode_json(data.get("tags"), "tags"),
            answered=to_bool(data.get("answered")),
            answered_data=decode_json(data.get("answeredData"), "answeredData"),
            pinned=to_bool(data.get("pinned")),
            pinned_at=epoch_to_datetime(data.get("pinnedAt")),
            pinned_by=to_optional_int(data.get("pinnedBy")),
            poll=decode_json(data.get("poll"), "poll"),
        )

    def get_topic_by_id(self, topic_id: Any) -> Topic | None:
        return self.build_topic_from_data(self.load_topic_data_by_id(topic_id))
