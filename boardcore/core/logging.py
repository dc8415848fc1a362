"""Structured logging for the board, built on structlog.

Development runs render coloured key/value lines; production emits one JSON
object per event. Every event logged while a request is being served carries
the acting member and session, bound by AppState.context_for():

    configure_logging(development=False)
    logger = get_logger(__name__)

    bind_request(member_id=7, session_id="a1b2")
    logger.info("topic_viewed", topic_id=12)
    # {"event": "topic_viewed", "topic_id": 12, "member_id": 7,
    #  "session_id": "a1b2", "level": "info", ...}
"""

import logging
import sys
from os import getenv
from typing import cast

import structlog
from structlog.types import Processor

# Libraries the board calls into whose INFO chatter drowns out board events.
QUIETED_LOGGERS = ("aiohttp", "asyncio")

REQUEST_KEYS = ("member_id", "session_id")


def _renderers(development: bool) -> list[Processor]:
    if development:
        return [structlog.dev.ConsoleRenderer(colors=True)]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def configure_logging(
    development: bool | None = None,
    log_level: str | None = None,
) -> None:
    """Configure structlog and the stdlib root logger for the board.

    Args:
        development: Pretty console output when True, JSON when False.
            Defaults to ENVIRONMENT != "production".
        log_level: DEBUG, INFO, WARNING or ERROR. Defaults to LOG_LEVEL,
            then INFO. Unknown names fall back to INFO.
    """
    if development is None:
        development = getenv("ENVIRONMENT", "development").lower() != "production"
    level_name = (log_level or getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            *_renderers(development),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # force=True replaces handlers an embedding server may have installed
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)
    logging.getLogger().setLevel(level)
    for name in QUIETED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Logger for a board module; pass ``__name__``."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


def bind_request(member_id: int, session_id: str | None = None) -> None:
    """Start the logging scope of a request.

    Values left behind by an earlier request on the same task are dropped
    first, so a guest request never inherits a signed-in member's id.
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(member_id=member_id, session_id=session_id)


def end_request() -> None:
    """Drop the member and session ids bound by bind_request()."""
    structlog.contextvars.unbind_contextvars(*REQUEST_KEYS)
