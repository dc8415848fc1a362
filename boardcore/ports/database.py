"""Database provider protocol.

The core never executes raw SQL strings of its own; it hands a BuiltQuery
from the query builder to a provider implementing this protocol.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from boardcore.core.query_builder import BuiltQuery


@dataclass
class QueryResult:
    """Driver result for a statement.

    Attributes:
        insert_id: Row id generated by an INSERT, if any.
        affected_rows: Rows changed by INSERT/UPDATE/DELETE.
        rows: Result rows for SELECT statements.
    """

    insert_id: int | None = None
    affected_rows: int = 0
    rows: list[dict[str, Any]] = field(default_factory=list)


class DatabaseProvider(Protocol):
    """Protocol for the backing relational store."""

    async def connect(self) -> None:
        """Open the connection to the backing store."""
        ...

    async def close(self) -> None:
        """Close the connection to the backing store."""
        ...

    async def query(self, built: BuiltQuery) -> QueryResult:
        """Execute a built statement.

        Args:
            built: The statement text and its positional values.

        Returns:
            The QueryResult; insert_id is set for INSERT statements.

        Raises:
            BackingStoreError: If the driver rejects the statement.
        """
        ...

    async def fetch_all(self, built: BuiltQuery) -> list[dict[str, Any]]:
        """Execute a SELECT and return every row as a plain mapping."""
        ...
