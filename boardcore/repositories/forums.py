"""Forum repository."""

from typing import Any

from boardcore.core.entities import Forum
from boardcore.ports.cache import RawRecord
from boardcore.repositories.base import (
    CachedRepository,
    decode_json,
    epoch_to_datetime,
    to_bool,
    to_int,
    to_optional_int,
)

DEFAULT_HOT_THRESHOLD = 20
DEFAULT_POPULARITY_THRESHOLD = 100


class ForumRepository(CachedRepository):
    collection = "forums"

    def load_forum_data_by_id(self, forum_id: Any) -> RawRecord | None:
        return self._load_by_id(forum_id)

    def build_forum_from_data(self, data: RawRecord | None) -> Forum | None:
        if not data:
            return None
        return Forum(
            id=to_int(data.get("id")),
            category_id=to_int(data.get("categoryId")),
            title=data.get("title") or "",
            description=data.get("description"),
            sort_order=to_int(data.get("sortOrder")),
            created_at=epoch_to_datetime(data.get("createdAt")),
            has_parent=to_bool(data.get("hasParent")),
            parent_id=to_int(data.get("parentId")),
            show_sub_forums=to_bool(data.get("showSubForums")),
            visible=to_bool(data.get("visible")),
            archived=to_bool(data.get("archived")),
            image=data.get("image") or None,
            total_topics=to_int(data.get("totalTopics")),
            total_posts=to_int(data.get("totalPosts")),
            last_post_id=to_optional_int(data.get("lastPostId")),
            redirect=decode_json(data.get("redirect"), "redirect"),
            password_protected=to_bool(data.get("passwordProtected")),
            password=data.get("password") or None,
            forum_type=data.get("forumType"),
            can=decode_json(data.get("can"), "can"),
            # Zero or missing thresholds fall back to the board defaults.
            hot_threshold=to_int(data.get("hotThreshold")) or DEFAULT_HOT_THRESHOLD,
            popularity_threshold=(
                to_int(data.get("popularityThreshold")) or DEFAULT_POPULARITY_THRESHOLD
            ),
            default_filters=decode_json(data.get("defaultFilters"), "defaultFilters"),
            unique_view_incrementation=to_bool(data.get("uniqueViewIncrementation")),
            poll=decode_json(data.get("poll"), "poll", default={}),
        )

    def get_forum_by_id(self, forum_id: Any) -> Forum | None:
        return self.build_forum_from_data(self.load_forum_data_by_id(forum_id))
