"""Error taxonomy for the board's data layer.

Every error raised by boardcore derives from BoardError and carries an
ErrorCategory so that callers (controllers, ajax endpoints) can decide how to
surface it without string matching on messages.

Example:
    from boardcore.core.errors import NotFoundError, BackingStoreError

    forum = repositories.forums.get_forum_by_id(forum_id)
    if forum is None:
        raise NotFoundError("forum does not exist", data={"forum_id": forum_id})

    try:
        await db.query(built)
    except BackingStoreError as ex:
        if is_retryable(ex.category):
            ...
"""

import asyncio
import json
import sqlite3
from enum import Enum, auto
from typing import Any


class ErrorCategory(Enum):
    """Classification of error types for handling decisions."""

    # Transient errors - the caller may retry
    TIMEOUT = auto()  # Backing store or outbound request timed out
    NETWORK = auto()  # Connectivity issues
    LOCKED = auto()  # Backing store busy/locked

    # Permanent errors - retrying will not help
    NOT_FOUND = auto()  # Repository lookup returned nothing
    INVALID_INPUT = auto()  # Malformed builder call or request data
    PERMISSION = auto()  # Member lacks a required permission
    CONFIGURATION = auto()  # Missing or unsupported configuration
    DATA_CORRUPTION = auto()  # Stored column could not be decoded
    BACKING_STORE = auto()  # Query rejected by the backing store
    UNKNOWN = auto()  # Unclassified error


RETRYABLE_CATEGORIES = {
    ErrorCategory.TIMEOUT,
    ErrorCategory.NETWORK,
    ErrorCategory.LOCKED,
}


class BoardError(Exception):
    """Base class for all boardcore errors.

    Attributes:
        category: The ErrorCategory of this error.
        data: Extra structured context (ids, collection names) for logging.
    """

    default_category = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        data: dict[str, Any] | None = None,
        category: ErrorCategory | None = None,
    ) -> None:
        super().__init__(message)
        self.data = data or {}
        self.category = category or self.default_category


class NotFoundError(BoardError):
    """A repository lookup the caller depends on returned nothing."""

    default_category = ErrorCategory.NOT_FOUND


class InvalidInputError(BoardError, ValueError):
    """A helper was called with a value it cannot act on."""

    default_category = ErrorCategory.INVALID_INPUT


class QueryValidationError(InvalidInputError):
    """A query builder method was called with malformed arguments.

    These are programmer errors; they are raised synchronously at build time.
    """


class ConfigurationError(BoardError):
    """Configuration is missing or names an unsupported provider/collection."""

    default_category = ErrorCategory.CONFIGURATION


class DataDecodeError(BoardError):
    """A JSON column in a raw record could not be decoded."""

    default_category = ErrorCategory.DATA_CORRUPTION


class InvalidPermissionsError(BoardError):
    """The acting member is not allowed to perform the operation."""

    default_category = ErrorCategory.PERMISSION


class BackingStoreError(BoardError):
    """The database provider failed to execute a statement.

    Attributes:
        original_error: The driver exception that was wrapped.
    """

    default_category = ErrorCategory.BACKING_STORE

    def __init__(
        self,
        message: str,
        data: dict[str, Any] | None = None,
        category: ErrorCategory | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, data=data, category=category)
        self.original_error = original_error

    @classmethod
    def from_exception(
        cls,
        ex: Exception,
        data: dict[str, Any] | None = None,
    ) -> "BackingStoreError":
        """Wrap a driver exception, classifying it on the way."""
        return cls(
            message=str(ex),
            data=data,
            category=classify_error(ex),
            original_error=ex,
        )


class ExternalServiceError(BoardError):
    """An outbound HTTP request (embeds, link checks) failed."""

    default_category = ErrorCategory.NETWORK


def classify_error(error: Exception) -> ErrorCategory:
    """Classify an exception into an error category.

    Args:
        error: The exception to classify.

    Returns:
        The ErrorCategory that best matches the error.
    """
    if isinstance(error, BoardError):
        return error.category

    if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
        return ErrorCategory.TIMEOUT

    if isinstance(error, json.JSONDecodeError):
        return ErrorCategory.DATA_CORRUPTION

    error_str = str(error).lower()

    if isinstance(error, sqlite3.OperationalError):
        if "locked" in error_str or "busy" in error_str:
            return ErrorCategory.LOCKED
        if "no such table" in error_str or "no such column" in error_str:
            return ErrorCategory.CONFIGURATION
        return ErrorCategory.BACKING_STORE

    if isinstance(error, sqlite3.Error):
        return ErrorCategory.BACKING_STORE

    if isinstance(error, ConnectionError):
        return ErrorCategory.NETWORK
    if "connection" in error_str or "network" in error_str:
        return ErrorCategory.NETWORK

    if "not found" in error_str:
        return ErrorCategory.NOT_FOUND

    if "configuration" in error_str or "not configured" in error_str:
        return ErrorCategory.CONFIGURATION

    return ErrorCategory.UNKNOWN


def is_retryable(category: ErrorCategory) -> bool:
    """Check if an error category is safe to retry.

    Nothing in boardcore retries on its own; this only informs callers.
    """
    return category in RETRYABLE_CATEGORIES
