"""Session repository.

Session ids are opaque strings, so lookups compare ids as text rather than
parsing them as integers.
"""

from boardcore.core.entities import GUEST_MEMBER_ID, Session
from boardcore.ports.cache import RawRecord
from boardcore.repositories.base import CachedRepository, epoch_to_datetime, to_bool, to_int


class SessionRepository(CachedRepository):
    collection = "sessions"

    def load_session_data_by_id(self, session_id: str | None) -> RawRecord | None:
        if not session_id:
            return None
        for row in self._cache.get(self.collection):
            if str(row.get("id")) == str(session_id):
                return row
        return None

    def build_session_from_data(self, data: RawRecord | None) -> Session | None:
        if not data:
            return None
        return Session(
            id=str(data.get("id")),
            member_id=to_int(data.get("memberId"), GUEST_MEMBER_ID),
            expires=epoch_to_datetime(data.get("expires")),
            last_click=epoch_to_datetime(data.get("lastClick")),
            location=data.get("location") or "",
            ip_address=data.get("ipAddress"),
            hostname=data.get("hostname"),
            user_agent=data.get("userAgent"),
            display_on_wo=to_bool(data.get("displayOnWo")),
            is_bot=to_bool(data.get("isBot")),
            bot_name=data.get("botName") or None,
            is_admin=to_bool(data.get("isAdmin")),
        )

    def get_session_by_id(self, session_id: str | None) -> Session | None:
        return self.build_session_from_data(self.load_session_data_by_id(session_id))
