"""In-process cache that mirrors backing-store tables.

Every registered collection is held as a tuple of raw records. A refresh
re-reads the whole table and installs the new tuple with a single
assignment, so a concurrent reader sees either the old snapshot or the new
one, never a partially filled collection.
"""

from collections.abc import Mapping, Sequence

from boardcore.core.config import DatabaseConfig
from boardcore.core.errors import ConfigurationError
from boardcore.core.logging import get_logger
from boardcore.core.query_builder import QueryBuilder
from boardcore.ports.cache import CACHED_COLLECTIONS, RawRecord
from boardcore.ports.database import DatabaseProvider

logger = get_logger(__name__)

_EMPTY: tuple[RawRecord, ...] = ()


class PassthroughCacheProvider:
    """Cache provider that keeps whole tables in memory.

    Example:
        cache = PassthroughCacheProvider(db, config.database)
        await cache.build()
        forums = cache.get("forums")

        # After writing to the topics table:
        await cache.update("topics")
    """

    def __init__(
        self,
        db: DatabaseProvider,
        config: DatabaseConfig,
        collections: Sequence[str] = CACHED_COLLECTIONS,
    ) -> None:
        self._db = db
        self._config = config
        self._collections = tuple(collections)
        self._data: dict[str, tuple[RawRecord, ...]] = {}

    @property
    def collections(self) -> tuple[str, ...]:
        return self._collections

    def is_loaded(self, name: str) -> bool:
        return name in self._data

    def _check_registered(self, name: str) -> None:
        if name not in self._collections:
            raise ConfigurationError(
                f"Unknown cache collection: {name!r}",
                data={"collection": name},
            )

    async def build(self) -> None:
        """Load every registered collection that is not loaded yet."""
        pending = [name for name in self._collections if name not in self._data]
        for name in pending:
            await self.update(name)
        logger.info("cache_built", collections=len(self._data), loaded=len(pending))

    def get(self, name: str) -> Sequence[RawRecord]:
        self._check_registered(name)
        return self._data.get(name, _EMPTY)

    def get_all(self, names: Mapping[str, str]) -> dict[str, Sequence[RawRecord]]:
        return {alias: self.get(name) for alias, name in names.items()}

    async def update(self, name: str) -> None:
        """Re-read one table and install it as the collection's snapshot.

        Raises:
            ConfigurationError: If name is not a registered collection.
            BackingStoreError: If the read fails; the old snapshot is kept.
        """
        self._check_registered(name)
        built = QueryBuilder(self._config).select("*").from_(name).build()

        try:
            rows = await self._db.fetch_all(built)
        except Exception as ex:
            logger.error(
                "cache_update_failed",
                collection=name,
                error=str(ex),
                error_type=type(ex).__name__,
            )
            raise

        self._data[name] = tuple(rows)
        logger.debug("cache_updated", collection=name, rows=len(rows))

    async def update_all(self, names: Sequence[str]) -> None:
        if not isinstance(names, (list, tuple)):
            raise ConfigurationError(
                "update_all expects a list of collection names",
                data={"names": repr(names)},
            )
        for name in names:
            await self.update(name)
