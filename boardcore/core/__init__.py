"""Platform-agnostic building blocks.

Configuration, logging, the error taxonomy, entities, the query builder and
the small utilities (pagination, keyed locks) the rest of the package uses.
"""

from boardcore.core.config import AppConfig, CacheConfig, DatabaseConfig
from boardcore.core.content import ContentType, UploadType
from boardcore.core.entities import (
    GUEST_MEMBER_ID,
    Attachment,
    Category,
    Forum,
    Group,
    Like,
    Member,
    MemberConfigs,
    Post,
    Session,
    Setting,
    Tag,
    Topic,
    slugify,
)
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
from boardcore.core.locks import KeyedLock
from boardcore.core.logging import bind_request, configure_logging, end_request, get_logger
from boardcore.core.pagination import PageLink, Pagination, paginate
from boardcore.core.query_builder import BuiltQuery, QueryBuilder

__all__ = [
    # Configuration
    "AppConfig",
    "CacheConfig",
    "DatabaseConfig",
    # Content kinds
    "ContentType",
    "UploadType",
    # Entities
    "GUEST_MEMBER_ID",
    "Attachment",
    "Category",
    "Forum",
    "Group",
    "Like",
    "Member",
    "MemberConfigs",
    "Post",
    "Session",
    "Setting",
    "Tag",
    "Topic",
    "slugify",
    # Errors
    "BackingStoreError",
    "BoardError",
    "ConfigurationError",
    "DataDecodeError",
    "ErrorCategory",
    "ExternalServiceError",
    "InvalidInputError",
    "InvalidPermissionsError",
    "NotFoundError",
    "QueryValidationError",
    "classify_error",
    "is_retryable",
    # Locks
    "KeyedLock",
    # Logging
    "bind_request",
    "configure_logging",
    "end_request",
    "get_logger",
    # Pagination
    "PageLink",
    "Pagination",
    "paginate",
    # Query builder
    "BuiltQuery",
    "QueryBuilder",
]
