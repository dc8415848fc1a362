"""Presence derived from the sessions collection.

A session's location is the URL path it last requested. Paths such as
``/topic/12/some-title/`` place the session on topic 12.

Every session falls into exactly one bucket:
    bots       isBot set
    guests     no member
    anonymous  a member who asked to be hidden from the online list
    members    everyone else
"""

import re
from dataclasses import dataclass, field
from typing import Any

from boardcore.context import BoardContext
from boardcore.core.content import BROWSABLE_CONTENT, ContentType
from boardcore.core.entities import Group, Member
from boardcore.core.errors import InvalidInputError
from boardcore.helpers.groups import GroupHelper
from boardcore.ports.cache import RawRecord
from boardcore.repositories.base import parse_id, to_bool, to_int


def _location_pattern(kind: ContentType) -> re.Pattern[str]:
    return re.compile(rf"^/{kind.value}/(\d+)/")


def classify_session(row: RawRecord) -> str:
    if to_bool(row.get("isBot")):
        return "bots"
    if not to_int(row.get("memberId")):
        return "guests"
    if not to_bool(row.get("displayOnWo")):
        return "anonymous"
    return "members"


@dataclass
class OnlineTotals:
    overall: int = 0
    members: int = 0
    anonymous: int = 0
    guests: int = 0
    bots: int = 0

    def add(self, bucket: str) -> None:
        setattr(self, bucket, getattr(self, bucket) + 1)
        self.overall += 1


@dataclass
class BrowsingData:
    totals: OnlineTotals = field(default_factory=OnlineTotals)
    members: list[Member] = field(default_factory=list)
    bots: list[str] = field(default_factory=list)


@dataclass
class WhosOnlineData(BrowsingData):
    legend: list[Group] = field(default_factory=list)


class WhosOnlineHelper:
    def __init__(self, ctx: BoardContext) -> None:
        self._ctx = ctx

    def _browsing_sessions(self, content_type: ContentType | str, content_id: Any) -> list[RawRecord]:
        kind = ContentType.parse(content_type)
        if kind not in BROWSABLE_CONTENT:
            raise InvalidInputError(
                f"Browsing is not tracked for {kind.value}", data={"content_type": kind.value}
            )
        pattern = _location_pattern(kind)
        target = parse_id(content_id)

        sessions = []
        for row in self._ctx.cache.get("sessions"):
            match = pattern.match(row.get("location") or "")
            if match and int(match.group(1)) == target:
                sessions.append(row)
        return sessions

    def _collect(self, sessions: list[RawRecord], data: BrowsingData) -> None:
        members = self._ctx.repositories.members
        for row in sessions:
            bucket = classify_session(row)
            data.totals.add(bucket)
            if bucket == "bots":
                data.bots.append(row.get("botName") or "")
            elif bucket == "members":
                data.members.append(members.get_member_by_id(row.get("memberId")))

    def get_total_browsing_content(self, content_type: ContentType | str, content_id: Any) -> int:
        """Number of sessions currently on a forum or topic page."""
        return len(self._browsing_sessions(content_type, content_id))

    def get_browsing_data(self, content_type: ContentType | str, content_id: Any) -> BrowsingData:
        """Bucketed totals and visible members for one forum or topic page."""
        data = BrowsingData()
        self._collect(self._browsing_sessions(content_type, content_id), data)
        return data

    def get_whos_online_data(self) -> WhosOnlineData:
        """Board-wide presence, with the displayed groups as a legend."""
        data = WhosOnlineData(legend=GroupHelper(self._ctx).get_groups())
        self._collect(list(self._ctx.cache.get("sessions")), data)
        return data
