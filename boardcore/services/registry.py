"""Typed key/value registry persisted in the ``registry`` table.

Unlike settings, registry values change at runtime (for example the board's
"most users online" record), so writes go to the database and are followed
by a refresh of the cached collection.
"""

import json
from typing import Any

from boardcore.core.config import DatabaseConfig
from boardcore.core.logging import get_logger
from boardcore.core.query_builder import QueryBuilder
from boardcore.ports.cache import CacheProvider, RawRecord
from boardcore.ports.database import DatabaseProvider
from boardcore.repositories.base import decode_json, now_epoch, to_int

logger = get_logger(__name__)


def _decode(data: RawRecord) -> Any:
    data_type = (data.get("dataType") or "").lower()
    value = data.get("value")
    if data_type == "serialized":
        return decode_json(value, "value")
    if data_type == "number":
        return to_int(value)
    if data_type == "bool":
        return str(value).strip().lower() == "true"
    if data_type == "float":
        return float(value)
    if data_type == "string":
        return "" if value is None else str(value)
    return value


def _encode(value: Any, data_type: str) -> Any:
    if data_type == "serialized":
        return json.dumps(value)
    if data_type == "bool":
        return "true" if value else "false"
    return value


class RegistryService:
    """Read and write registry keys.

    Example:
        registry = RegistryService(cache, db, config.database)
        most_users = registry.get("mostUsers")
        await registry.set("mostUsers", {"total": 12, "timestamp": ts}, "serialized")
    """

    def __init__(
        self, cache: CacheProvider, db: DatabaseProvider, config: DatabaseConfig
    ) -> None:
        self._cache = cache
        self._db = db
        self._config = config

    def _find(self, key: str) -> RawRecord | None:
        for row in self._cache.get("registry"):
            if row.get("name") == key:
                return row
        return None

    def exists(self, key: str) -> bool:
        return self._find(key) is not None

    def get(self, key: str) -> Any:
        """Return the typed value for key, or None when the key is absent."""
        data = self._find(key)
        if data is None:
            return None
        return _decode(data)

    async def set(self, key: str, value: Any, data_type: str = "string") -> None:
        """Update the key if it exists, otherwise insert it."""
        data_type = data_type.lower()
        stored = _encode(value, data_type)
        builder = QueryBuilder(self._config)

        if self.exists(key):
            built = (
                builder.update("registry")
                .set(["dataType", "value", "updatedAt"], [data_type, stored, now_epoch()])
                .where("name = ?", [key])
                .build()
            )
        else:
            built = builder.insert_into(
                "registry",
                ["dataType", "name", "value", "updatedAt"],
                [data_type, key, stored, now_epoch()],
            ).build()

        await self._db.query(built)
        await self._cache.update("registry")
        logger.debug("registry_key_set", key=key, data_type=data_type)
