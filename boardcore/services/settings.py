"""Board settings map.

The map is built once at startup from the ``settings`` collection (plus an
optional emoticons JSON file) and only read afterwards, so it is shared
between requests without locking.

Example:
    settings = Settings.load(cache, emoticons_path=config.emoticons_path)
    per_page = settings.get("defaultPerPage")
"""

import json
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from boardcore.core.errors import ConfigurationError
from boardcore.core.logging import get_logger
from boardcore.ports.cache import CacheProvider
from boardcore.repositories.settings import SettingRepository

logger = get_logger(__name__)

EMOTICONS_KEY = "emoticons"


class Settings(Mapping[str, Any]):
    """Read-only mapping of setting name to typed value."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values = MappingProxyType(dict(values or {}))

    @classmethod
    def load(
        cls, cache: CacheProvider, emoticons_path: Path | None = None
    ) -> "Settings":
        """Build the map from the cached settings rows.

        Raises:
            DataDecodeError: If a row's value cannot be decoded for its type.
            ConfigurationError: If the emoticons file is missing or invalid.
        """
        values: dict[str, Any] = {}
        for setting in SettingRepository(cache).get_all_settings():
            if setting.name:
                values[setting.name] = setting.value

        if emoticons_path is not None:
            values[EMOTICONS_KEY] = _load_emoticons(emoticons_path)

        logger.info("settings_loaded", total=len(values))
        return cls(values)

    def get(self, key: str, default: Any = None) -> Any:
        if not isinstance(key, str):
            raise TypeError("Setting key must be a string")
        return self._values.get(key, default)

    def exists(self, key: str) -> bool:
        return key in self._values

    def as_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


def _load_emoticons(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError as ex:
        raise ConfigurationError(
            f"Emoticons file not found: {path}", data={"path": str(path)}
        ) from ex
    except json.JSONDecodeError as ex:
        raise ConfigurationError(
            f"Emoticons file is not valid JSON: {path}", data={"path": str(path)}
        ) from ex
