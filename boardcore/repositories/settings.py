"""Setting repository.

Settings rows store their value as text alongside a type tag. The type tag
decides how value and defaultValue are decoded:

    serialized  -> JSON document
    regexarray  -> JSON list of patterns, compiled with re
    bool        -> "true" (any case) is True, anything else False
    number      -> int
    float       -> float
    string      -> str
    (other)     -> the raw column value
"""

import re
from typing import Any

from boardcore.core.entities import Setting
from boardcore.core.errors import DataDecodeError
from boardcore.core.logging import get_logger
from boardcore.ports.cache import RawRecord
from boardcore.repositories.base import CachedRepository, decode_json, to_int

logger = get_logger(__name__)

SETTING_TYPES = ("serialized", "regexarray", "bool", "number", "float", "string")


def _decode_value(setting_type: str | None, value: Any, column: str) -> Any:
    if setting_type == "serialized":
        return decode_json(value, column)
    if setting_type == "regexarray":
        patterns = decode_json(value, column) or []
        try:
            return [re.compile(pattern) for pattern in patterns]
        except (re.error, TypeError) as ex:
            raise DataDecodeError(
                f"Invalid pattern list in column {column!r}", data={"error": str(ex)}
            ) from ex
    if setting_type == "bool":
        return isinstance(value, str) and value.strip().lower() == "true"
    if setting_type == "number":
        return to_int(value)
    if setting_type == "float":
        try:
            return float(value)
        except (TypeError, ValueError) as ex:
            raise DataDecodeError(
                f"Invalid float in column {column!r}", data={"value": value}
            ) from ex
    if setting_type == "string":
        return "" if value is None else str(value)
    return value


class SettingRepository(CachedRepository):
    collection = "settings"

    def load_setting_data_by_id(self, setting_id: Any) -> RawRecord | None:
        return self._load_by_id(setting_id)

    def build_setting_from_data(self, data: RawRecord | None) -> Setting | None:
        if not data:
            return None

        setting_type = data.get("type") or None
        name = data.get("name") or None
        raw_default = data.get("defaultValue")
        if raw_default is None or raw_default == "":
            raw_default = data.get("value")

        try:
            value = _decode_value(setting_type, data.get("value"), "value")
            default_value = _decode_value(setting_type, raw_default, "defaultValue")
        except DataDecodeError as ex:
            logger.error("setting_decode_failed", setting=name, error=str(ex))
            ex.data.setdefault("setting", name)
            raise

        return Setting(
            id=to_int(data.get("id")),
            type=setting_type,
            name=name,
            value=value,
            default_value=default_value,
        )

    def get_setting_by_id(self, setting_id: Any) -> Setting | None:
        return self.build_setting_from_data(self.load_setting_data_by_id(setting_id))

    def get_all_settings(self) -> list[Setting]:
        settings = []
        for row in self._cache.get(self.collection):
            setting = self.build_setting_from_data(row)
            if setting is not None:
                settings.append(setting)
        return settings
