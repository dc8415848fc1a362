"""Tag repository."""

from typing import Any

from boardcore.core.entities import Tag
from boardcore.ports.cache import RawRecord
from boardcore.repositories.base import CachedRepository, epoch_to_datetime, to_int


class TagRepository(CachedRepository):
    collection = "tags"

    def load_tag_data_by_id(self, tag_id: Any) -> RawRecord | None:
        return self._load_by_id(tag_id)

    def build_tag_from_data(self, data: RawRecord | None) -> Tag | None:
        if not data:
            return None
        return Tag(
            id=to_int(data.get("id")),
            title=data.get("title") or "",
            created_by=to_int(data.get("createdBy")),
            created_at=epoch_to_datetime(data.get("createdAt")),
        )

    def get_tag_by_id(self, tag_id: Any) -> Tag | None:
        return self.build_tag_from_data(self.load_tag_data_by_id(tag_id))
