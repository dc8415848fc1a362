"""Process-wide state and the per-request board context.

AppState owns the shared pieces (database, cache, settings, locks). For each
request it hands out a BoardContext that also carries the acting member and
session, so helpers never reach for a global "current member".

Example:
    state = AppState()
    await state.initialize(AppConfig.from_env())

    ctx = state.context_for(member_id=7, session_id="abc123")
    likes = LikeHelper(ctx)
    await likes.like_content("topic", 5)

    await state.shutdown()
"""

from dataclasses import dataclass

from boardcore.adapters.factory import create_cache_provider, create_database_provider
from boardcore.core.config import AppConfig
from boardcore.core.entities import GUEST_MEMBER_ID, Member, Session
from boardcore.core.errors import ConfigurationError
from boardcore.core.locks import KeyedLock
from boardcore.core.logging import bind_request, end_request, get_logger
from boardcore.ports.cache import CacheProvider
from boardcore.ports.database import DatabaseProvider
from boardcore.repositories import Repositories
from boardcore.services.member import MemberService
from boardcore.services.permissions import PermissionsService
from boardcore.services.registry import RegistryService
from boardcore.services.settings import Settings

logger = get_logger(__name__)


@dataclass
class BoardContext:
    """Everything a helper needs to serve one request.

    Attributes:
        member: The acting member (the guest member for anonymous requests).
        session: The visitor's session row, when one exists.
        locks: Process-wide keyed locks for check-then-write operations.
    """

    config: AppConfig
    db: DatabaseProvider
    cache: CacheProvider
    settings: Settings
    repositories: Repositories
    members: MemberService
    permissions: PermissionsService
    registry: RegistryService
    locks: KeyedLock
    member: Member
    session: Session | None = None

    @property
    def base_url(self) -> str:
        return self.config.base_url


class AppState:
    """Application state container for shared resources."""

    def __init__(self) -> None:
        self._config: AppConfig | None = None
        self._db: DatabaseProvider | None = None
        self._cache: CacheProvider | None = None
        self._settings: Settings | None = None
        self._repositories: Repositories | None = None
        self._locks = KeyedLock()
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(
        self,
        config: AppConfig | None = None,
        db: DatabaseProvider | None = None,
        cache: CacheProvider | None = None,
    ) -> None:
        """Connect the database, build the cache and load settings.

        Args:
            config: Board configuration; read from the environment when None.
            db: Database provider to use instead of the factory's.
            cache: Cache provider to use instead of the factory's.
        """
        if self._initialized:
            logger.warning("app_state_already_initialized")
            return

        self._config = config or AppConfig.from_env()

        if db is None:
            db = create_database_provider(self._config.database)
            await db.connect()
        self._db = db
        logger.info("database_initialized", provider=self._config.database.provider)

        self._cache = cache or create_cache_provider(self._config, db)
        await self._cache.build()

        self._settings = Settings.load(self._cache, self._config.emoticons_path)
        self._repositories = Repositories(self._cache, self._settings, self._config)

        self._initialized = True
        logger.info("app_state_initialized")

    async def shutdown(self) -> None:
        end_request()
        if self._db is not None:
            await self._db.close()
            logger.info("database_closed")
        self._initialized = False
        logger.info("app_state_shutdown")

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise ConfigurationError("AppState not initialized. Call initialize() first.")

    def context_for(
        self, member_id: int = GUEST_MEMBER_ID, session_id: str | None = None
    ) -> BoardContext:
        """Build the context for one request.

        Unknown member ids resolve to the guest member.
        """
        self._require_initialized()
        assert self._config is not None
        assert self._db is not None
        assert self._cache is not None
        assert self._settings is not None
        assert self._repositories is not None

        repositories = self._repositories
        member = repositories.members.get_member_by_id(member_id)
        session = repositories.sessions.get_session_by_id(session_id)
        bind_request(member.id, session_id)

        return BoardContext(
            config=self._config,
            db=self._db,
            cache=self._cache,
            settings=self._settings,
            repositories=repositories,
            members=MemberService(self._cache, repositories.members),
            permissions=PermissionsService(),
            registry=RegistryService(self._cache, self._db, self._config.database),
            locks=self._locks,
            member=member,
            session=session,
        )
