"""Group repository."""

from typing import Any

from boardcore.core.entities import Group
from boardcore.ports.cache import RawRecord
from boardcore.repositories.base import (
    CachedRepository,
    epoch_to_datetime,
    to_bool,
    to_int,
)


class GroupRepository(CachedRepository):
    collection = "user_groups"

    def load_group_data_by_id(self, group_id: Any) -> RawRecord | None:
        return self._load_by_id(group_id)

    def build_group_from_data(self, data: RawRecord | None) -> Group | None:
        if not data:
            return None
        return Group(
            id=to_int(data.get("id")),
            name=data.get("name") or None,
            description=data.get("description") or None,
            created_at=epoch_to_datetime(data.get("createdAt")),
            color=data.get("color") or None,
            emphasize=to_bool(data.get("emphasize")),
            display=to_bool(data.get("display")),
            is_moderator=to_bool(data.get("isModerator")),
            is_admin=to_bool(data.get("isAdmin")),
            sort_order=to_int(data.get("sortOrder")),
            can_be_modified=to_bool(data.get("canBeModified")),
            can_be_deleted=to_bool(data.get("canBeDeleted")),
        )

    def get_group_by_id(self, group_id: Any) -> Group | None:
        return self.build_group_from_data(self.load_group_data_by_id(group_id))
