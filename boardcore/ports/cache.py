"""Cache provider protocol and the list of cached collections.

A cache provider holds one in-memory collection of raw records per backing
table. Reads are synchronous and operate on whatever snapshot is installed;
refreshes are asynchronous and replace a whole collection at once. A
collection is the unit of invalidation: any code that writes to a table must
await ``update`` for that table before it returns.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

RawRecord = dict[str, Any]

CACHED_COLLECTIONS: tuple[str, ...] = (
    "categories",
    "forums",
    "topics",
    "posts",
    "members",
    "user_groups",
    "tags",
    "liked_content",
    "followed_content",
    "member_attachments",
    "member_photos",
    "member_cover_photos",
    "sessions",
    "member_devices",
    "registry",
    "settings",
    "content_tracker",
    "content_views_tracker",
    "forum_clicks",
    "profile_visitors",
    "forum_permissions",
    "locales",
    "themes",
)


class CacheProvider(Protocol):
    """Protocol for read-through caches of backing-store tables."""

    async def build(self) -> None:
        """Load every registered collection that is not loaded yet."""
        ...

    def get(self, name: str) -> Sequence[RawRecord]:
        """Return the current snapshot of a collection.

        Never returns None. Registered collections that were never loaded
        are empty.

        Raises:
            ConfigurationError: If name is not a registered collection.
        """
        ...

    def get_all(self, names: Mapping[str, str]) -> dict[str, Sequence[RawRecord]]:
        """Batch form of get: maps each alias to its collection snapshot."""
        ...

    async def update(self, name: str) -> None:
        """Re-read a collection from the backing store and swap it in.

        On failure the previous snapshot stays installed and the error
        propagates to the caller.
        """
        ...

    async def update_all(self, names: Sequence[str]) -> None:
        """Refresh several collections, in order."""
        ...
