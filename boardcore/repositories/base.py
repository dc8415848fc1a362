"""Coercion helpers shared by the repositories.

Raw records hold integers that may arrive as numeric strings, booleans
stored as 0/1, epoch-millisecond timestamps and JSON text. Every repository
converts through these helpers so the rules live in one place.
"""

import json
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from boardcore.core.errors import DataDecodeError
from boardcore.ports.cache import CacheProvider, RawRecord


def parse_id(value: Any) -> int | None:
    """Parse an id the way request data delivers it ("5", 5, " 5 ")."""
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def to_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def to_optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return to_int(value)


def to_bool(value: Any) -> bool:
    """Stored flags are true only when they equal 1."""
    return to_int(value, 0) == 1


def epoch_to_datetime(value: Any) -> datetime | None:
    """Convert an epoch-milliseconds column into an aware datetime."""
    if value is None or value == "":
        return None
    return datetime.fromtimestamp(to_int(value) / 1000, tz=timezone.utc)


def datetime_to_epoch(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def now_epoch() -> int:
    return datetime_to_epoch(datetime.now(timezone.utc))


def decode_json(value: Any, column: str, default: Any = None) -> Any:
    """Decode a JSON text column.

    Empty columns give default. Already-decoded values pass through.

    Raises:
        DataDecodeError: If the column holds malformed JSON.
    """
    if value is None or value == "":
        return default
    if not isinstance(value, (str, bytes)):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError as ex:
        raise DataDecodeError(
            f"Malformed JSON in column {column!r}",
            data={"column": column, "error": str(ex)},
        ) from ex


def find_by_id(rows: Sequence[RawRecord], record_id: Any) -> RawRecord | None:
    target = parse_id(record_id)
    if target is None:
        return None
    for row in rows:
        if parse_id(row.get("id")) == target:
            return row
    return None


class CachedRepository:
    """Base for repositories that read one cached collection."""

    collection: str = ""

    def __init__(self, cache: CacheProvider) -> None:
        self._cache = cache

    def _load_by_id(self, record_id: Any) -> RawRecord | None:
        return find_by_id(self._cache.get(self.collection), record_id)
