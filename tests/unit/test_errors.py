"""Tests for error classification and the board error types."""

import asyncio
import json
import sqlite3

import pytest

from boardcore.core.errors import (
    BackingStoreError,
    BoardError,
    ConfigurationError,
    DataDecodeError,
    ErrorCategory,
    ExternalServiceError,
    InvalidInputError,
    InvalidPermissionsError,
    NotFoundError,
    QueryValidationError,
    classify_error,
    is_retryable,
)


class TestClassifyError:
    """Tests for classify_error function."""

    def test_classifies_timeout_error(self) -> None:
        """Should classify TimeoutError as TIMEOUT."""
        assert classify_error(TimeoutError("Operation timed out")) == ErrorCategory.TIMEOUT

    def test_classifies_asyncio_timeout(self) -> None:
        """Should classify asyncio.TimeoutError as TIMEOUT."""
        assert classify_error(asyncio.TimeoutError()) == ErrorCategory.TIMEOUT

    def test_classifies_locked_database(self) -> None:
        """Should classify a locked SQLite database as LOCKED."""
        error = sqlite3.OperationalError("database is locked")
        assert classify_error(error) == ErrorCategory.LOCKED

    def test_classifies_missing_table_as_configuration(self) -> None:
        """Should classify a missing table as CONFIGURATION."""
        error = sqlite3.OperationalError("no such table: forums")
        assert classify_error(error) == ErrorCategory.CONFIGURATION

    def test_classifies_integrity_error_as_backing_store(self) -> None:
        """Should classify other sqlite errors as BACKING_STORE."""
        error = sqlite3.IntegrityError("UNIQUE constraint failed")
        assert classify_error(error) == ErrorCategory.BACKING_STORE

    def test_classifies_json_error_as_data_corruption(self) -> None:
        """Should classify JSON decode errors as DATA_CORRUPTION."""
        with pytest.raises(json.JSONDecodeError) as exc_info:
            json.loads("{not json")
        assert classify_error(exc_info.value) == ErrorCategory.DATA_CORRUPTION

    def test_classifies_connection_as_network(self) -> None:
        """Should classify connection errors as NETWORK."""
        assert classify_error(ConnectionError("refused")) == ErrorCategory.NETWORK
        assert classify_error(Exception("Connection reset")) == ErrorCategory.NETWORK

    def test_board_error_keeps_its_category(self) -> None:
        """Should return the category carried by a BoardError."""
        assert classify_error(NotFoundError("gone")) == ErrorCategory.NOT_FOUND

    def test_classifies_unknown_error(self) -> None:
        """Should classify unrecognized errors as UNKNOWN."""
        assert classify_error(Exception("Some random error")) == ErrorCategory.UNKNOWN


class TestIsRetryable:
    """Tests for is_retryable function."""

    @pytest.mark.parametrize(
        "category",
        [ErrorCategory.TIMEOUT, ErrorCategory.NETWORK, ErrorCategory.LOCKED],
    )
    def test_transient_categories_are_retryable(self, category: ErrorCategory) -> None:
        """Should consider transient categories retryable."""
        assert is_retryable(category) is True

    @pytest.mark.parametrize(
        "category",
        [
            ErrorCategory.NOT_FOUND,
            ErrorCategory.INVALID_INPUT,
            ErrorCategory.PERMISSION,
            ErrorCategory.CONFIGURATION,
            ErrorCategory.DATA_CORRUPTION,
            ErrorCategory.UNKNOWN,
        ],
    )
    def test_permanent_categories_are_not_retryable(self, category: ErrorCategory) -> None:
        """Should not consider permanent categories retryable."""
        assert is_retryable(category) is False


class TestBoardErrors:
    """Tests for the BoardError hierarchy."""

    def test_default_categories(self) -> None:
        """Each error type should carry its default category."""
        assert NotFoundError("x").category == ErrorCategory.NOT_FOUND
        assert InvalidInputError("x").category == ErrorCategory.INVALID_INPUT
        assert ConfigurationError("x").category == ErrorCategory.CONFIGURATION
        assert DataDecodeError("x").category == ErrorCategory.DATA_CORRUPTION
        assert InvalidPermissionsError("x").category == ErrorCategory.PERMISSION
        assert ExternalServiceError("x").category == ErrorCategory.NETWORK

    def test_stores_data(self) -> None:
        """Should keep structured data and default it to an empty dict."""
        assert NotFoundError("gone", data={"topic_id": 5}).data == {"topic_id": 5}
        assert NotFoundError("gone").data == {}

    def test_query_validation_error_is_value_error(self) -> None:
        """QueryValidationError should be catchable as ValueError."""
        error = QueryValidationError("bad")
        assert isinstance(error, ValueError)
        assert isinstance(error, InvalidInputError)
        assert isinstance(error, BoardError)

    def test_backing_store_from_exception(self) -> None:
        """Should wrap and classify a driver exception."""
        original = sqlite3.OperationalError("database is locked")
        error = BackingStoreError.from_exception(original, data={"query": "SELECT 1"})

        assert str(error) == "database is locked"
        assert error.category == ErrorCategory.LOCKED
        assert error.original_error is original
        assert error.data == {"query": "SELECT 1"}
