"""Category repository."""

from typing import Any

from boardcore.core.entities import Category
from boardcore.ports.cache import RawRecord
from boardcore.repositories.base import (
    CachedRepository,
    epoch_to_datetime,
    to_bool,
    to_int,
)


class CategoryRepository(CachedRepository):
    collection = "categories"

    def load_category_data_by_id(self, category_id: Any) -> RawRecord | None:
        return self._load_by_id(category_id)

    def build_category_from_data(self, data: RawRecord | None) -> Category | None:
        if not data:
            return None
        return Category(
            id=to_int(data.get("id")),
            title=data.get("title") or "",
            sort_order=to_int(data.get("sortOrder")),
            created_at=epoch_to_datetime(data.get("createdAt")),
            visible=to_bool(data.get("visible")),
        )

    def get_category_by_id(self, category_id: Any) -> Category | None:
        return self.build_category_from_data(self.load_category_data_by_id(category_id))
