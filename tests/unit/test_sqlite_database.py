"""Tests for SQLiteDatabaseProvider."""

import pytest

from boardcore.adapters.sqlite_database import SQLiteDatabaseProvider
from boardcore.core.config import DatabaseConfig
from boardcore.core.errors import BackingStoreError, ErrorCategory
from boardcore.core.query_builder import BuiltQuery, QueryBuilder

SQLITE = DatabaseConfig(provider="sqlite")


@pytest.fixture
async def db():
    """Create an empty in-memory database for testing."""
    async with SQLiteDatabaseProvider(":memory:") as provider:
        yield provider


class TestSQLiteDatabaseProvider:
    """Tests for statement execution."""

    async def test_insert_returns_insert_id(self, db: SQLiteDatabaseProvider) -> None:
        """Should report the generated row id."""
        result = await db.query(
            QueryBuilder(SQLITE)
            .insert_into("tags", ["title", "createdBy", "createdAt"], ["python", 1, 0])
            .build()
        )
        assert result.insert_id == 1
        assert result.affected_rows == 1

    async def test_select_returns_plain_dicts(self, db: SQLiteDatabaseProvider) -> None:
        """Should return rows as plain mappings keyed by column."""
        await db.query(
            QueryBuilder(SQLITE)
            .insert_into("tags", ["title", "createdBy", "createdAt"], ["python", 1, 5])
            .build()
        )
        rows = await db.fetch_all(QueryBuilder(SQLITE).select("*").from_("tags").build())
        assert rows == [{"id": 1, "title": "python", "createdBy": 1, "createdAt": 5}]

    async def test_update_reports_affected_rows(self, db: SQLiteDatabaseProvider) -> None:
        """Should report how many rows an UPDATE touched."""
        for title in ("a", "b"):
            await db.query(
                QueryBuilder(SQLITE)
                .insert_into("tags", ["title", "createdBy", "createdAt"], [title, 1, 0])
                .build()
            )
        result = await db.query(
            QueryBuilder(SQLITE).update("tags").set(["createdBy"], [2]).build()
        )
        assert result.affected_rows == 2

    async def test_unique_constraint_is_wrapped(self, db: SQLiteDatabaseProvider) -> None:
        """Should wrap driver errors in BackingStoreError."""
        built = (
            QueryBuilder(SQLITE)
            .insert_into(
                "liked_content",
                ["contentType", "contentId", "memberId", "likedAt"],
                ["topic", 1, 2, 0],
            )
            .build()
        )
        await db.query(built)
        with pytest.raises(BackingStoreError) as exc_info:
            await db.query(built)
        assert exc_info.value.category == ErrorCategory.BACKING_STORE
        assert exc_info.value.data["query"] == built.query

    async def test_missing_table_is_configuration_error(self, db: SQLiteDatabaseProvider) -> None:
        """Should classify a missing table as a configuration problem."""
        with pytest.raises(BackingStoreError) as exc_info:
            await db.fetch_all(QueryBuilder(SQLITE).select("*").from_("calendars").build())
        assert exc_info.value.category == ErrorCategory.CONFIGURATION

    async def test_empty_query_rejected(self, db: SQLiteDatabaseProvider) -> None:
        """Should reject an empty statement before touching the driver."""
        with pytest.raises(BackingStoreError):
            await db.query(BuiltQuery(query=""))

    async def test_prefixed_schema(self) -> None:
        """Should create prefixed tables when a prefix is configured."""
        config = DatabaseConfig(provider="sqlite", table_prefixes={"sqlite": "nb_"})
        async with SQLiteDatabaseProvider(":memory:", table_prefix="nb_") as provider:
            rows = await provider.fetch_all(QueryBuilder(config).select("*").from_("forums").build())
        assert rows == []

    async def test_query_before_connect(self) -> None:
        """Should refuse to run statements on a closed provider."""
        provider = SQLiteDatabaseProvider(":memory:")
        assert not provider.is_connected
        with pytest.raises(RuntimeError):
            await provider.query(QueryBuilder(SQLITE).select("*").from_("tags").build())
