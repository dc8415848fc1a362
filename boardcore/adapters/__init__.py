"""Adapters for the backing store and the cache."""

from boardcore.adapters.factory import (
    create_cache_provider,
    create_database_provider,
    reset_providers,
)
from boardcore.adapters.passthrough_cache import PassthroughCacheProvider
from boardcore.adapters.sqlite_database import SQLiteDatabaseProvider

__all__ = [
    "PassthroughCacheProvider",
    "SQLiteDatabaseProvider",
    "create_cache_provider",
    "create_database_provider",
    "reset_providers",
]
