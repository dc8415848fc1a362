"""Shared pytest fixtures for boardcore tests.

Most tests run against the small board from tests.mocks.board, seeded into
an in-memory SQLite database.
"""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio

from boardcore.adapters.factory import reset_providers
from boardcore.adapters.sqlite_database import SQLiteDatabaseProvider
from boardcore.context import AppState, BoardContext
from boardcore.core.config import AppConfig, DatabaseConfig
from tests.mocks.board import ADMIN_ID, ALICE_ID, BOB_ID, seed_board
from tests.mocks.providers import MockDatabaseProvider

# Configure pytest-asyncio to use auto mode for async tests
pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def board_config(tmp_path: Path) -> AppConfig:
    """Provide a configuration for an in-memory board.

    Uploads go to a per-test temporary directory.

    Returns:
        AppConfig: Configuration with base_url ``http://board.test``.
    """
    return AppConfig(
        database=DatabaseConfig(provider="sqlite", sqlite_path=":memory:"),
        base_url="http://board.test",
        uploads_root=tmp_path / "uploads",
    )


@pytest_asyncio.fixture
async def board_db(board_config: AppConfig) -> AsyncIterator[SQLiteDatabaseProvider]:
    """Provide a connected in-memory SQLite provider holding the seed board.

    Yields:
        SQLiteDatabaseProvider: The connected, seeded provider.
    """
    db = SQLiteDatabaseProvider(":memory:")
    await db.connect()
    await seed_board(db, board_config.database)
    yield db
    await db.close()


@pytest_asyncio.fixture
async def app_state(
    board_config: AppConfig, board_db: SQLiteDatabaseProvider
) -> AsyncIterator[AppState]:
    """Provide an initialized AppState over the seed board.

    Memoized providers are reset before and after so tests do not share a
    cache.
    """
    reset_providers()
    state = AppState()
    await state.initialize(board_config, db=board_db)
    yield state
    await state.shutdown()
    reset_providers()


@pytest.fixture
def guest_ctx(app_state: AppState) -> BoardContext:
    """Context for an anonymous visitor."""
    return app_state.context_for()


@pytest.fixture
def admin_ctx(app_state: AppState) -> BoardContext:
    """Context for the administrator (member 1)."""
    return app_state.context_for(ADMIN_ID, session_id="s-admin")


@pytest.fixture
def alice_ctx(app_state: AppState) -> BoardContext:
    """Context for alice (member 2), a regular member."""
    return app_state.context_for(ALICE_ID)


@pytest.fixture
def bob_ctx(app_state: AppState) -> BoardContext:
    """Context for bob (member 3), a regular member."""
    return app_state.context_for(BOB_ID, session_id="s-bob")


@pytest.fixture
def mock_db() -> MockDatabaseProvider:
    """Provide an empty mock database provider.

    Returns:
        MockDatabaseProvider: Configure ``tables`` directly in the test.
    """
    return MockDatabaseProvider()
