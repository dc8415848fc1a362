"""Fluent SQL statement builder.

The builder only assembles text and parameters; it never executes anything.
Each clause method appends to the statement text and appends its bound
values to a parallel list in call order, so ``values`` always lines up with
the ``?`` placeholders in ``query`` for a positional-parameter driver.

Example:
    built = (
        QueryBuilder(config)
        .update("topics")
        .set(["totalViews"], [12])
        .where("id = ?", [5])
        .build()
    )
    # built.query  == "UPDATE topics SET totalViews = ? WHERE id = ?"
    # built.values == [12, 5]
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from boardcore.core.config import DatabaseConfig
from boardcore.core.errors import QueryValidationError

_NO_VALUES = object()


@dataclass
class BuiltQuery:
    """A finished statement and its positional parameters."""

    query: str
    values: list[Any] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {"query": self.query, "values": list(self.values)}


def _columns_text(columns: str | Sequence[str]) -> str:
    if isinstance(columns, str):
        return columns
    return ", ".join(columns)


class QueryBuilder:
    """Chainable SQL builder with table prefixing.

    The table prefix is resolved once, at construction, from the database
    configuration. An unsupported provider fails here rather than producing
    unprefixed SQL later.
    """

    def __init__(self, config: DatabaseConfig | None = None) -> None:
        if config is None:
            config = DatabaseConfig.from_env()
        self.prefix = config.table_prefix
        self._parts: list[str] = []
        self._values: list[Any] = []

    def _table(self, table: str) -> str:
        return f"{self.prefix}{table}"

    def _push(self, values: Any) -> None:
        if values is _NO_VALUES:
            return
        if isinstance(values, (list, tuple)):
            self._values.extend(values)
        else:
            self._values.append(values)

    def select(self, columns: str | Sequence[str] = "*") -> "QueryBuilder":
        self._parts.append(f"SELECT {_columns_text(columns)}")
        return self

    def distinct(self) -> "QueryBuilder":
        """Turn the preceding SELECT into SELECT DISTINCT."""
        for index, part in enumerate(self._parts):
            if part.startswith("SELECT ") and not part.startswith("SELECT DISTINCT "):
                self._parts[index] = part.replace("SELECT", "SELECT DISTINCT", 1)
                break
        return self

    def from_(self, table: str) -> "QueryBuilder":
        self._parts.append(f"FROM {self._table(table)}")
        return self

    def join(self, join_type: str, table: str, on_condition: str) -> "QueryBuilder":
        """Add a JOIN clause (join_type is INNER, LEFT, RIGHT or FULL)."""
        self._parts.append(
            f"{join_type.upper()} JOIN {self._table(table)} ON {on_condition}"
        )
        return self

    def where(self, condition: str, values: Any = _NO_VALUES) -> "QueryBuilder":
        """Add a WHERE clause; a list of values is bound in order."""
        self._parts.append(f"WHERE {condition}")
        self._push(values)
        return self

    def only_where(self) -> "QueryBuilder":
        """Open a bare WHERE for a following in_() or between()."""
        self._parts.append("WHERE")
        return self

    def and_where(self, condition: str, value: Any = _NO_VALUES) -> "QueryBuilder":
        self._parts.append(f"AND {condition}")
        self._push(value)
        return self

    def or_where(self, condition: str, value: Any = _NO_VALUES) -> "QueryBuilder":
        self._parts.append(f"OR {condition}")
        self._push(value)
        return self

    def in_(self, column: str, values: Sequence[Any] | None) -> "QueryBuilder":
        if not isinstance(values, (list, tuple)) or len(values) == 0:
            raise QueryValidationError(
                'The "values" parameter for IN must be a non-empty list'
            )
        placeholders = ", ".join("?" for _ in values)
        self._parts.append(f"{column} IN ({placeholders})")
        self._values.extend(values)
        return self

    def between(self, column: str, values: Sequence[Any] | None) -> "QueryBuilder":
        if not isinstance(values, (list, tuple)) or len(values) != 2:
            raise QueryValidationError(
                'The "values" parameter for BETWEEN must have exactly two elements'
            )
        self._parts.append(f"{column} BETWEEN ? AND ?")
        self._values.extend(values)
        return self

    def group_by(self, columns: str | Sequence[str]) -> "QueryBuilder":
        self._parts.append(f"GROUP BY {_columns_text(columns)}")
        return self

    def having(self, condition: str, value: Any = _NO_VALUES) -> "QueryBuilder":
        self._parts.append(f"HAVING {condition}")
        self._push(value)
        return self

    def order_by(
        self, columns: str | Sequence[str], direction: str = "ASC"
    ) -> "QueryBuilder":
        direction = direction.upper()
        if direction not in ("ASC", "DESC"):
            raise QueryValidationError(f"Invalid sort direction: {direction!r}")
        self._parts.append(f"ORDER BY {_columns_text(columns)} {direction}")
        return self

    def limit(self, limit: int) -> "QueryBuilder":
        # Bound like offset() so the value list always matches the placeholders.
        self._parts.append("LIMIT ?")
        self._values.append(limit)
        return self

    def offset(self, offset: int) -> "QueryBuilder":
        self._parts.append("OFFSET ?")
        self._values.append(offset)
        return self

    def insert_into(
        self,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any] | None,
    ) -> "QueryBuilder":
        if not isinstance(values, (list, tuple)) or len(values) == 0:
            raise QueryValidationError(
                'The "values" parameter for INSERT must be a non-empty list'
            )
        if len(columns) != len(values):
            raise QueryValidationError(
                "Columns and values lists must have the same length for INSERT"
            )
        placeholders = ", ".join("?" for _ in values)
        self._parts.append(
            f"INSERT INTO {self._table(table)} ({', '.join(columns)}) "
            f"VALUES ({placeholders})"
        )
        self._values.extend(values)
        return self

    def update(self, table: str) -> "QueryBuilder":
        self._parts.append(f"UPDATE {self._table(table)} SET")
        return self

    def set(self, columns: Sequence[str], values: Sequence[Any]) -> "QueryBuilder":
        if len(columns) != len(values):
            raise QueryValidationError(
                "Columns and values lists must have the same length"
            )
        if len(columns) == 0:
            raise QueryValidationError("SET requires at least one column")
        self._parts.append(", ".join(f"{column} = ?" for column in columns))
        self._values.extend(values)
        return self

    def delete_from(self, table: str) -> "QueryBuilder":
        self._parts.append(f"DELETE FROM {self._table(table)}")
        return self

    def on_duplicate_key(self, columns: Sequence[str]) -> "QueryBuilder":
        """Add ON DUPLICATE KEY UPDATE col = VALUES(col), ...; ."""
        if not isinstance(columns, (list, tuple)) or len(columns) == 0:
            raise QueryValidationError(
                "ON DUPLICATE KEY UPDATE requires a non-empty list of columns"
            )
        assignments = ", ".join(f"{column} = VALUES({column})" for column in columns)
        self._parts.append(f"ON DUPLICATE KEY UPDATE {assignments};")
        return self

    def build(self) -> BuiltQuery:
        return BuiltQuery(query=" ".join(self._parts).strip(), values=list(self._values))

    def clear(self) -> "QueryBuilder":
        """Reset the builder so it can be reused for another statement."""
        self._parts = []
        self._values = []
        return self

    @property
    def query(self) -> str:
        return " ".join(self._parts)

    @property
    def values(self) -> list[Any]:
        return list(self._values)
