"""SQLite implementation of the DatabaseProvider protocol.

All methods are async, wrapping synchronous sqlite3 calls with
asyncio.to_thread. Both file-based and in-memory (:memory:) databases are
supported; the in-memory form backs the test suite.
"""

import asyncio
import sqlite3
from pathlib import Path
from typing import Any

from boardcore.core.errors import BackingStoreError
from boardcore.core.logging import get_logger
from boardcore.core.query_builder import BuiltQuery
from boardcore.ports.database import QueryResult

logger = get_logger(__name__)


# =============================================================================
# SQL Schema Definitions
# =============================================================================
# Column names mirror the board's persisted schema (camelCase). "{prefix}" is
# replaced with the configured table prefix.

_SCHEMA: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS {prefix}categories(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        sortOrder INTEGER NOT NULL DEFAULT 0,
        createdAt INTEGER NOT NULL,
        visible INTEGER NOT NULL DEFAULT 1
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}forums(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        categoryId INTEGER NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        sortOrder INTEGER NOT NULL DEFAULT 0,
        createdAt INTEGER NOT NULL,
        hasParent INTEGER NOT NULL DEFAULT 0,
        parentId INTEGER,
        showSubForums INTEGER NOT NULL DEFAULT 1,
        visible INTEGER NOT NULL DEFAULT 1,
        archived INTEGER NOT NULL DEFAULT 0,
        image TEXT,
        totalTopics INTEGER NOT NULL DEFAULT 0,
        totalPosts INTEGER NOT NULL DEFAULT 0,
        lastPostId INTEGER,
        redirect TEXT,
        passwordProtected INTEGER NOT NULL DEFAULT 0,
        password TEXT,
        forumType TEXT,
        can TEXT,
        hotThreshold INTEGER,
        popularityThreshold INTEGER,
        defaultFilters TEXT,
        uniqueViewIncrementation INTEGER NOT NULL DEFAULT 0,
        poll TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}topics(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        categoryId INTEGER NOT NULL,
        forumId INTEGER NOT NULL,
        title TEXT NOT NULL,
        createdBy INTEGER NOT NULL,
        createdAt INTEGER NOT NULL,
        locked INTEGER NOT NULL DEFAULT 0,
        totalReplies INTEGER NOT NULL DEFAULT 0,
        totalViews INTEGER NOT NULL DEFAULT 0,
        lastPostId INTEGER,
        tags TEXT,
        answered INTEGER NOT NULL DEFAULT 0,
        answeredData TEXT,
        pinned INTEGER NOT NULL DEFAULT 0,
        pinnedAt INTEGER,
        pinnedBy INTEGER,
        poll TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}posts(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        categoryId INTEGER NOT NULL,
        forumId INTEGER NOT NULL,
        topicId INTEGER NOT NULL,
        createdBy INTEGER NOT NULL,
        createdAt INTEGER NOT NULL,
        content TEXT,
        tags TEXT,
        attachments TEXT,
        isFirstPost INTEGER NOT NULL DEFAULT 0,
        ipAddress TEXT,
        hostname TEXT,
        userAgent TEXT,
        includeSignature INTEGER NOT NULL DEFAULT 0
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}members(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT NOT NULL UNIQUE,
        displayName TEXT,
        passwordHash TEXT,
        emailAddress TEXT,
        localeId INTEGER,
        themeId INTEGER,
        useDisplayName INTEGER NOT NULL DEFAULT 0,
        dateTime TEXT,
        primaryGroupId INTEGER,
        secondaryGroups TEXT,
        widgets TEXT,
        photoType TEXT,
        photoId INTEGER,
        perPage TEXT,
        lockout TEXT,
        displayOnWo INTEGER NOT NULL DEFAULT 1,
        lastOnline INTEGER,
        defaultCalendarId INTEGER,
        birthday TEXT,
        coverPhotoType TEXT,
        coverPhotoId INTEGER,
        coverPhotoLink TEXT,
        joined INTEGER,
        totalPosts INTEGER NOT NULL DEFAULT 0,
        reputation INTEGER NOT NULL DEFAULT 0,
        followers TEXT,
        location TEXT,
        gender TEXT,
        toggles TEXT,
        pronouns TEXT,
        pronunciation TEXT,
        websiteUrl TEXT,
        editorConfigs TEXT,
        censor INTEGER,
        censorChar TEXT,
        signature TEXT,
        bbic TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}user_groups(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        description TEXT,
        createdAt INTEGER,
        color TEXT,
        emphasize INTEGER NOT NULL DEFAULT 0,
        display INTEGER NOT NULL DEFAULT 1,
        isModerator INTEGER NOT NULL DEFAULT 0,
        isAdmin INTEGER NOT NULL DEFAULT 0,
        sortOrder INTEGER NOT NULL DEFAULT 0,
        canBeModified INTEGER NOT NULL DEFAULT 1,
        canBeDeleted INTEGER NOT NULL DEFAULT 1
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}tags(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        createdBy INTEGER NOT NULL,
        createdAt INTEGER NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}liked_content(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        contentType TEXT NOT NULL,
        contentId INTEGER NOT NULL,
        memberId INTEGER NOT NULL,
        likedAt INTEGER NOT NULL,
        UNIQUE(contentType, contentId, memberId)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}followed_content(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        contentType TEXT NOT NULL,
        contentId INTEGER NOT NULL,
        memberId INTEGER NOT NULL,
        followedAt INTEGER NOT NULL,
        UNIQUE(contentType, contentId, memberId)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}member_attachments(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        memberId INTEGER NOT NULL,
        fileName TEXT NOT NULL,
        fileSize INTEGER NOT NULL DEFAULT 0,
        uploadedAt INTEGER NOT NULL,
        totalDownloads INTEGER NOT NULL DEFAULT 0
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}member_photos(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        memberId INTEGER NOT NULL,
        fileName TEXT NOT NULL,
        fileSize INTEGER NOT NULL DEFAULT 0,
        uploadedAt INTEGER NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}member_cover_photos(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        memberId INTEGER NOT NULL,
        fileName TEXT NOT NULL,
        fileSize INTEGER NOT NULL DEFAULT 0,
        uploadedAt INTEGER NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}sessions(
        id TEXT PRIMARY KEY,
        memberId INTEGER NOT NULL DEFAULT 0,
        expires INTEGER,
        lastClick INTEGER,
        location TEXT NOT NULL DEFAULT '',
        ipAddress TEXT,
        hostname TEXT,
        userAgent TEXT,
        displayOnWo INTEGER NOT NULL DEFAULT 1,
        isBot INTEGER NOT NULL DEFAULT 0,
        botName TEXT,
        isAdmin INTEGER NOT NULL DEFAULT 0
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}member_devices(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        memberId INTEGER NOT NULL,
        token TEXT NOT NULL,
        userAgent TEXT,
        lastUsedAt INTEGER
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}registry(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        dataType TEXT NOT NULL DEFAULT 'string',
        name TEXT NOT NULL UNIQUE,
        value TEXT,
        updatedAt INTEGER
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}settings(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        type TEXT NOT NULL DEFAULT 'string',
        name TEXT NOT NULL UNIQUE,
        value TEXT,
        defaultValue TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}content_tracker(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        contentType TEXT NOT NULL,
        contentId INTEGER NOT NULL,
        memberId INTEGER NOT NULL,
        readAt INTEGER NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}content_views_tracker(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        contentType TEXT NOT NULL,
        contentId INTEGER NOT NULL,
        memberId INTEGER NOT NULL,
        addedAt INTEGER NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}forum_clicks(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        memberId INTEGER NOT NULL,
        forumId INTEGER NOT NULL,
        clickedAt INTEGER NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}profile_visitors(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        memberId INTEGER NOT NULL,
        visitorId INTEGER NOT NULL,
        visitedAt INTEGER NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}forum_permissions(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        forumId INTEGER NOT NULL,
        viewForum TEXT,
        createTopic TEXT,
        replyToTopic TEXT,
        castInPolls TEXT,
        likeTopics TEXT,
        likePosts TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}locales(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        folder TEXT NOT NULL,
        isDefault INTEGER NOT NULL DEFAULT 0
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS {prefix}themes(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        folder TEXT NOT NULL,
        imagesetFolder TEXT NOT NULL,
        isDefault INTEGER NOT NULL DEFAULT 0
    );
    """,
)


class SQLiteDatabaseProvider:
    """SQLite implementation of the DatabaseProvider protocol.

    One sqlite3 connection is shared by all operations. Statements run in a
    worker thread and are serialized with an asyncio.Lock, so the connection
    never sees two statements at once.

    Example:
        async with SQLiteDatabaseProvider("board.sqlite") as db:
            result = await db.query(builder.insert_into(...).build())
            print(result.insert_id)

    For testing, use `:memory:` as the db_path:
        db = SQLiteDatabaseProvider(":memory:")
        await db.connect()
    """

    def __init__(self, db_path: str | Path, table_prefix: str = "") -> None:
        """Initialize the provider with a database path.

        Args:
            db_path: Path to the SQLite database file, or ":memory:".
            table_prefix: Prefix applied to every table in the schema.
        """
        self._db_path = str(db_path)
        self._table_prefix = table_prefix
        self._connection: sqlite3.Connection | None = None
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "SQLiteDatabaseProvider":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def connect(self) -> None:
        """Connect to the database and create any missing tables."""
        logger.debug("connecting_to_database", path=self._db_path)
        self._connection = await asyncio.to_thread(self._connect_sync)
        await self.initialize_schema()
        logger.info("database_connected", path=self._db_path)

    def _connect_sync(self) -> sqlite3.Connection:
        """Synchronous connection setup.

        check_same_thread=False is required because statements run on
        asyncio.to_thread workers; self._lock keeps access sequential.
        """
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    async def initialize_schema(self) -> None:
        """Create the board's tables if they don't exist."""
        conn = self._ensure_connected()

        def init_sync() -> None:
            for statement in _SCHEMA:
                conn.execute(statement.format(prefix=self._table_prefix))
            conn.commit()

        async with self._lock:
            await asyncio.to_thread(init_sync)

    async def close(self) -> None:
        if self._connection is not None:
            logger.debug("closing_database_connection")
            await asyncio.to_thread(self._connection.close)
            self._connection = None

    def _ensure_connected(self) -> sqlite3.Connection:
        if self._connection is None:
            raise RuntimeError(
                "Database not connected. Call connect() or use async context manager."
            )
        return self._connection

    @staticmethod
    def _row_to_dict(row: sqlite3.Row) -> dict[str, Any]:
        return {key: row[key] for key in row.keys()}

    async def query(self, built: BuiltQuery) -> QueryResult:
        """Execute a built statement and return the driver result."""
        if not built.query or not isinstance(built.query, str):
            raise BackingStoreError("Invalid SQL query string.")

        conn = self._ensure_connected()
        is_select = built.query.lstrip().upper().startswith("SELECT")

        def execute_sync() -> QueryResult:
            cursor = conn.execute(built.query, built.values)
            if is_select:
                return QueryResult(
                    rows=[self._row_to_dict(row) for row in cursor.fetchall()]
                )
            conn.commit()
            return QueryResult(
                insert_id=cursor.lastrowid if cursor.lastrowid else None,
                affected_rows=cursor.rowcount,
            )

        async with self._lock:
            try:
                return await asyncio.to_thread(execute_sync)
            except sqlite3.Error as ex:
                logger.error("query_failed", query=built.query, error=str(ex))
                raise BackingStoreError.from_exception(
                    ex, data={"query": built.query}
                ) from ex

    async def fetch_all(self, built: BuiltQuery) -> list[dict[str, Any]]:
        result = await self.query(built)
        return result.rows
