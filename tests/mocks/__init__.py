"""Mock implementations for testing."""

from tests.mocks.providers import MockDatabaseProvider

__all__ = ["MockDatabaseProvider"]
