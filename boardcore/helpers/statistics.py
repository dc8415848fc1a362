"""Board statistics for the board info center."""

from typing import Any

from boardcore.context import BoardContext
from boardcore.repositories.base import epoch_to_datetime, to_int


class StatisticsHelper:
    def __init__(self, ctx: BoardContext) -> None:
        self._ctx = ctx

    def get_bbic_statistics(self) -> dict[str, Any]:
        """Totals, the newest member and the most-users-online record.

        ``newestMember`` is None on a board without members and
        ``mostOnline`` is None until the registry holds a ``mostUsers``
        record.
        """
        data = self._ctx.cache.get_all(
            {
                "categories": "categories",
                "forums": "forums",
                "topics": "topics",
                "posts": "posts",
                "members": "members",
            }
        )
        statistics: dict[str, Any] = {
            "totalCategories": len(data["categories"]),
            "totalForums": len(data["forums"]),
            "totalTopics": len(data["topics"]),
            "totalPosts": len(data["posts"]),
            "totalMembers": len(data["members"]),
            "newestMember": None,
            "mostOnline": None,
        }

        if data["members"]:
            newest = max(
                data["members"],
                key=lambda row: (to_int(row.get("joined")), to_int(row.get("id"))),
            )
            member = self._ctx.repositories.members.get_member_by_id(newest.get("id"))
            statistics["newestMember"] = {
                "member": member,
                "url": f"{self._ctx.base_url}/profile/{member.id}",
                "joined": member.joined,
            }

        most_users = self._ctx.registry.get("mostUsers")
        if isinstance(most_users, dict):
            statistics["mostOnline"] = {
                "total": to_int(most_users.get("total")),
                "timestamp": epoch_to_datetime(most_users.get("timestamp")),
            }

        return statistics
