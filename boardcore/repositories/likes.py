"""Like repository."""

from typing import Any

from boardcore.core.entities import Like
from boardcore.ports.cache import RawRecord
from boardcore.repositories.base import CachedRepository, epoch_to_datetime, to_int


class LikeRepository(CachedRepository):
    collection = "liked_content"

    def load_like_data_by_id(self, like_id: Any) -> RawRecord | None:
        return self._load_by_id(like_id)

    def build_like_from_data(self, data: RawRecord | None) -> Like | None:
        if not data:
            return None
        return Like(
            id=to_int(data.get("id")),
            content_type=str(data.get("contentType") or ""),
            content_id=to_int(data.get("contentId")),
            member_id=to_int(data.get("memberId")),
            liked_at=epoch_to_datetime(data.get("likedAt")),
        )

    def get_like_by_id(self, like_id: Any) -> Like | None:
        return self.build_like_from_data(self.load_like_data_by_id(like_id))
