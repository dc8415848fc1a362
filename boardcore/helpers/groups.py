"""Member group listings."""

from boardcore.context import BoardContext
from boardcore.core.entities import Group


class GroupHelper:
    def __init__(self, ctx: BoardContext) -> None:
        self._ctx = ctx

    def get_groups(self) -> list[Group]:
        """Groups flagged for display, in sort order."""
        repository = self._ctx.repositories.groups
        groups = [
            repository.build_group_from_data(row) for row in self._ctx.cache.get("user_groups")
        ]
        return sorted(
            (group for group in groups if group is not None and group.display),
            key=lambda group: (group.sort_order, group.id),
        )
