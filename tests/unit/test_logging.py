"""Tests for the board's structured logging."""

import json
import logging

import pytest
import structlog

from boardcore.core.logging import (
    QUIETED_LOGGERS,
    bind_request,
    configure_logging,
    end_request,
    get_logger,
)


@pytest.fixture(autouse=True)
def fresh_logging():
    """Start every test from structlog's defaults and an empty request scope."""
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


def _last_event(capsys: pytest.CaptureFixture[str]) -> dict:
    lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    return json.loads(lines[-1])


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_production_writes_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Should emit one JSON object per event with level and logger name."""
        configure_logging(development=False, log_level="INFO")
        get_logger("boardcore.helpers.topics").info("poll_cast", topic_id=1, counted=True)

        event = _last_event(capsys)
        assert event["event"] == "poll_cast"
        assert event["topic_id"] == 1
        assert event["level"] == "info"
        assert event["logger"] == "boardcore.helpers.topics"

    def test_development_is_not_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Should render console lines while developing."""
        configure_logging(development=True, log_level="INFO")
        get_logger("test").info("cache_built", collections=23)

        out = capsys.readouterr().out
        assert "cache_built" in out
        with pytest.raises(json.JSONDecodeError):
            json.loads(out.splitlines()[-1])

    def test_environment_selects_mode_and_level(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Should read ENVIRONMENT and LOG_LEVEL when not given explicitly."""
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        configure_logging()

        assert logging.getLogger().level == logging.DEBUG
        get_logger("test").debug("url_check_failed", url="http://board.test")
        assert _last_event(capsys)["level"] == "debug"

    def test_unknown_level_falls_back_to_info(self) -> None:
        """Should treat an unknown level name as INFO."""
        configure_logging(development=True, log_level="CHATTY")
        assert logging.getLogger().level == logging.INFO

    def test_quiets_library_loggers(self) -> None:
        """Should hold aiohttp and asyncio at WARNING."""
        configure_logging(development=True, log_level="DEBUG")
        assert QUIETED_LOGGERS == ("aiohttp", "asyncio")
        for name in QUIETED_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING


class TestRequestScope:
    """Tests for bind_request and end_request."""

    def test_events_carry_member_and_session(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Should stamp every event in the request with the member and session."""
        configure_logging(development=False, log_level="INFO")
        bind_request(7, "a1b2")
        get_logger("test").info("topic_viewed", topic_id=12)

        event = _last_event(capsys)
        assert event["member_id"] == 7
        assert event["session_id"] == "a1b2"

    def test_new_request_drops_earlier_values(self) -> None:
        """Should not leak a previous request's values into the next one."""
        bind_request(7, "a1b2")
        structlog.contextvars.bind_contextvars(topic_id=3)
        bind_request(0)

        assert structlog.contextvars.get_contextvars() == {"member_id": 0, "session_id": None}

    def test_end_request(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Should remove the member and session from later events."""
        configure_logging(development=False, log_level="INFO")
        bind_request(7, "a1b2")
        end_request()
        get_logger("test").info("app_state_shutdown")

        event = _last_event(capsys)
        assert "member_id" not in event
        assert "session_id" not in event
