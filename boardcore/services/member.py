"""Member lookups that go beyond a single row."""

from typing import Any

from boardcore.core.entities import Member
from boardcore.ports.cache import CacheProvider
from boardcore.repositories.base import decode_json, parse_id, to_int
from boardcore.repositories.members import MemberRepository


class MemberService:
    def __init__(self, cache: CacheProvider, members: MemberRepository) -> None:
        self._cache = cache
        self._members = members

    def get_member_by_id(self, member_id: Any) -> Member:
        return self._members.get_member_by_id(member_id)

    def get_member_by_identity(self, identity: str) -> Member | None:
        """Find a member by username or email address."""
        for row in self._cache.get("members"):
            if identity in (row.get("username"), row.get("emailAddress")):
                return self._members.build_member_from_data(row)
        return None

    def does_member_exist_by_id(self, member_id: Any) -> bool:
        target = parse_id(member_id)
        if target is None:
            return False
        return any(parse_id(row.get("id")) == target for row in self._cache.get("members"))

    def get_total_answers(self, member_id: Any) -> int:
        """Count answered topics whose accepted answer was given by the member."""
        target = parse_id(member_id)
        total = 0
        for topic in self._cache.get("topics"):
            if to_int(topic.get("answered")) != 1:
                continue
            answered = decode_json(topic.get("answeredData"), "answeredData") or {}
            if parse_id(answered.get("answeredBy")) == target:
                total += 1
        return total
