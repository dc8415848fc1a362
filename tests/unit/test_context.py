"""Tests for AppState and BoardContext."""

import pytest
import structlog

from boardcore.adapters.factory import reset_providers
from boardcore.context import AppState
from boardcore.core.config import AppConfig
from boardcore.core.errors import ConfigurationError
from tests.mocks.board import ADMIN_ID
from tests.mocks.providers import MockDatabaseProvider


class TestAppState:
    """Tests for the application state lifecycle."""

    def test_context_requires_initialize(self) -> None:
        """Should refuse to hand out contexts before initialize()."""
        with pytest.raises(ConfigurationError):
            AppState().context_for()

    async def test_initialize_builds_cache(self, mock_db: MockDatabaseProvider) -> None:
        """Should build the cache through the injected database."""
        reset_providers()
        mock_db.tables["forums"] = [{"id": 1, "title": "Only"}]
        state = AppState()
        try:
            await state.initialize(AppConfig(), db=mock_db)
            assert state.is_initialized
            assert any(built.query == "SELECT * FROM forums" for built in mock_db.queries)

            queries = len(mock_db.queries)
            await state.initialize(AppConfig(), db=mock_db)
            assert len(mock_db.queries) == queries
        finally:
            await state.shutdown()
            reset_providers()

        assert state.is_initialized is False
        assert mock_db.connected is False

    def test_context_for_member(self, app_state: AppState) -> None:
        """Should resolve the member and session and bind them for logging."""
        ctx = app_state.context_for(ADMIN_ID, session_id="s-admin")

        assert ctx.member.id == ADMIN_ID
        assert ctx.session.location == "/topic/1/hello-world/"
        assert ctx.base_url == "http://board.test"
        assert structlog.contextvars.get_contextvars()["member_id"] == ADMIN_ID

    def test_unknown_member_is_guest(self, app_state: AppState) -> None:
        """Should fall back to the guest member."""
        ctx = app_state.context_for(404, session_id="missing")
        assert ctx.member.is_signed_in is False
        assert ctx.session is None

    def test_contexts_share_locks_and_cache(self, app_state: AppState) -> None:
        """Should share process-wide pieces between requests."""
        first = app_state.context_for()
        second = app_state.context_for(ADMIN_ID)
        assert first.locks is second.locks
        assert first.cache is second.cache
        assert first.member is not second.member
