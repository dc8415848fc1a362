"""Provider factories for the database and cache backends.

Both factories memoize a single process-wide instance: every caller after
the first receives the same object, whatever configuration it passes.

Supported backends:
- database "sqlite": SQLiteDatabaseProvider
- cache "passthrough": PassthroughCacheProvider (also used when caching is
  disabled)

Example:
    config = AppConfig.from_env()
    db = create_database_provider(config.database)
    await db.connect()
    cache = create_cache_provider(config, db)
    await cache.build()

    # In tests, forget the memoized instances:
    reset_providers()
"""

from __future__ import annotations

from boardcore.adapters.passthrough_cache import PassthroughCacheProvider
from boardcore.adapters.sqlite_database import SQLiteDatabaseProvider
from boardcore.core.config import AppConfig, DatabaseConfig
from boardcore.core.errors import ConfigurationError
from boardcore.core.logging import get_logger
from boardcore.ports.cache import CacheProvider
from boardcore.ports.database import DatabaseProvider

logger = get_logger(__name__)

SUPPORTED_CACHE_METHODS = ("passthrough",)

_database_provider: DatabaseProvider | None = None
_cache_provider: CacheProvider | None = None


def create_database_provider(config: DatabaseConfig) -> DatabaseProvider:
    """Return the process-wide database provider, creating it on first use.

    Raises:
        ConfigurationError: If the configured provider is not supported.
    """
    global _database_provider
    if _database_provider is not None:
        return _database_provider

    # Resolves the prefix and rejects unsupported providers.
    prefix = config.table_prefix

    if config.provider.lower() == "sqlite":
        _database_provider = SQLiteDatabaseProvider(
            config.sqlite_path, table_prefix=prefix
        )
        logger.info("database_provider_created", provider="sqlite")
        return _database_provider

    raise ConfigurationError(
        f"Unsupported database provider: {config.provider!r}",
        data={"provider": config.provider},
    )


def create_cache_provider(config: AppConfig, db: DatabaseProvider) -> CacheProvider:
    """Return the process-wide cache provider, creating it on first use.

    Raises:
        ConfigurationError: If caching is enabled with an unknown method.
    """
    global _cache_provider
    if _cache_provider is not None:
        return _cache_provider

    method = config.cache.method.lower() if config.cache.enabled else "passthrough"
    if method not in SUPPORTED_CACHE_METHODS:
        raise ConfigurationError(
            f"Unsupported cache method: {config.cache.method!r}. "
            f"Supported methods: {', '.join(SUPPORTED_CACHE_METHODS)}",
            data={"method": config.cache.method},
        )

    _cache_provider = PassthroughCacheProvider(db, config.database)
    logger.info("cache_provider_created", method=method)
    return _cache_provider


def reset_providers() -> None:
    """Forget the memoized providers (used by tests)."""
    global _database_provider, _cache_provider
    _database_provider = None
    _cache_provider = None
