"""Process configuration read from environment variables.

Configuration is resolved once at startup into frozen dataclasses and then
passed explicitly to the factories, the query builder and the request
context. Nothing below the context reads the environment on its own.
"""

from dataclasses import dataclass, field
from os import getenv
from pathlib import Path

from boardcore.core.errors import ConfigurationError

# Providers the query builder knows how to prefix tables for.
SUPPORTED_DATABASE_PROVIDERS = ("sqlite",)

DEFAULT_HTTP_TIMEOUT_SECONDS = 5.0


def _env_bool(name: str, default: bool = False) -> bool:
    value = getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class DatabaseConfig:
    """Backing store selection.

    Attributes:
        provider: Database provider name (only "sqlite" ships).
        sqlite_path: Path to the SQLite file, or ":memory:".
        table_prefixes: Per-provider table name prefix.
    """

    provider: str = "sqlite"
    sqlite_path: str = "./database.sqlite"
    table_prefixes: dict[str, str] = field(default_factory=dict)

    @property
    def table_prefix(self) -> str:
        """Table prefix for the active provider.

        Raises:
            ConfigurationError: If the provider is not supported.
        """
        provider = self.provider.lower()
        if provider not in SUPPORTED_DATABASE_PROVIDERS:
            raise ConfigurationError(
                f"Unsupported database provider: {self.provider!r}. "
                f"Supported providers: {', '.join(SUPPORTED_DATABASE_PROVIDERS)}",
                data={"provider": self.provider},
            )
        return self.table_prefixes.get(provider, "")

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        return cls(
            provider=getenv("DATABASE_PROVIDER", "sqlite"),
            sqlite_path=getenv("SQLITE_DATABASE_PATH", "./database.sqlite"),
            table_prefixes={"sqlite": getenv("SQLITE_TABLE_PREFIX", "")},
        )


@dataclass(frozen=True)
class CacheConfig:
    """Cache provider selection.

    Attributes:
        enabled: Whether a caching backend other than passthrough is wanted.
        method: Name of the caching backend when enabled.
    """

    enabled: bool = False
    method: str = "passthrough"

    @classmethod
    def from_env(cls) -> "CacheConfig":
        return cls(
            enabled=_env_bool("CACHE_ENABLED"),
            method=getenv("CACHE_METHOD", "passthrough"),
        )


@dataclass(frozen=True)
class AppConfig:
    """Top-level configuration for a board process."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    base_url: str = "http://localhost:3000"
    locale_root: Path = Path("locale")
    themes_root: Path = Path("themes")
    uploads_root: Path = Path("uploads")
    emoticons_path: Path | None = None
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build the configuration from environment variables."""
        emoticons = getenv("EMOTICONS_PATH")
        timeout_raw = getenv("HTTP_TIMEOUT_SECONDS")
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_HTTP_TIMEOUT_SECONDS
        except ValueError as ex:
            raise ConfigurationError(
                f"HTTP_TIMEOUT_SECONDS must be a number, got {timeout_raw!r}"
            ) from ex

        return cls(
            database=DatabaseConfig.from_env(),
            cache=CacheConfig.from_env(),
            base_url=getenv("BASE_URL", "http://localhost:3000").rstrip("/"),
            locale_root=Path(getenv("LOCALE_ROOT", "locale")),
            themes_root=Path(getenv("THEMES_ROOT", "themes")),
            uploads_root=Path(getenv("UPLOADS_ROOT", "uploads")),
            emoticons_path=Path(emoticons) if emoticons else None,
            http_timeout_seconds=timeout,
        )
