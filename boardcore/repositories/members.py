"""Member repository.

Members are hydrated one of two ways. A stored member comes from its row in
the ``members`` collection. Anyone without a row (including id 0) becomes
the guest member, whose fields come entirely from board settings. Either
way the member's locale and theme rows are then resolved into MemberConfigs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from boardcore.core.config import AppConfig
from boardcore.core.entities import GUEST_MEMBER_ID, Group, Member, MemberConfigs
from boardcore.core.errors import NotFoundError
from boardcore.ports.cache import CacheProvider, RawRecord
from boardcore.repositories.base import (
    CachedRepository,
    decode_json,
    epoch_to_datetime,
    find_by_id,
    to_bool,
    to_int,
    to_optional_int,
)
from boardcore.repositories.groups import GroupRepository

if TYPE_CHECKING:
    from boardcore.services.settings import Settings

GUEST_NAME = "Guest"


class MemberRepository(CachedRepository):
    collection = "members"

    def __init__(
        self,
        cache: CacheProvider,
        groups: GroupRepository,
        settings: Settings,
        config: AppConfig,
    ) -> None:
        super().__init__(cache)
        self._groups = groups
        self._settings = settings
        self._config = config

    def load_member_data_by_id(self, member_id: Any) -> RawRecord | None:
        return self._load_by_id(member_id)

    def build_member_from_data(self, data: RawRecord | None) -> Member:
        """Build a member from its row, or the guest member when data is empty.

        Raises:
            NotFoundError: If the member's locale or theme row does not exist.
            DataDecodeError: If a JSON column is malformed.
        """
        if data:
            member = self._hydrate(data)
        else:
            member = self.populate_guest_settings()
        member.configs = self._resolve_configs(member)
        return member

    def get_member_by_id(self, member_id: Any) -> Member:
        return self.build_member_from_data(self.load_member_data_by_id(member_id))

    def _hydrate(self, data: RawRecord) -> Member:
        settings = self._settings
        secondary_ids = decode_json(data.get("secondaryGroups"), "secondaryGroups")

        return Member(
            id=to_int(data.get("id")),
            username=data.get("username") or "",
            display_name=data.get("displayName") or "",
            password_hash=data.get("passwordHash"),
            email_address=data.get("emailAddress"),
            locale_id=to_int(data.get("localeId")),
            theme_id=to_int(data.get("themeId")),
            use_display_name=(
                to_bool(data.get("useDisplayName"))
                if settings.get("useDisplayName")
                else False
            ),
            date_time=decode_json(data.get("dateTime"), "dateTime"),
            primary_group=self._groups.get_group_by_id(data.get("primaryGroupId")),
            secondary_groups=self._resolve_groups(secondary_ids),
            widgets=decode_json(data.get("widgets"), "widgets"),
            photo_type=data.get("photoType") or None,
            photo_id=to_optional_int(data.get("photoId")),
            per_page=decode_json(data.get("perPage"), "perPage"),
            lockout=decode_json(data.get("lockout"), "lockout"),
            display_on_wo=to_bool(data.get("displayOnWo")),
            last_online=epoch_to_datetime(data.get("lastOnline")),
            default_calendar_id=to_optional_int(data.get("defaultCalendarId")),
            birthday=decode_json(data.get("birthday"), "birthday"),
            cover_photo_type=data.get("coverPhotoType") or None,
            cover_photo_id=to_optional_int(data.get("coverPhotoId")),
            cover_photo_link=data.get("coverPhotoLink") or None,
            joined=epoch_to_datetime(data.get("joined")),
            total_posts=to_int(data.get("totalPosts")),
            reputation=to_int(data.get("reputation")),
            followers=decode_json(data.get("followers"), "followers", default={}),
            location=data.get("location") or None,
            gender=data.get("gender") or None,
            toggles=decode_json(data.get("toggles"), "toggles"),
            pronouns=decode_json(data.get("pronouns"), "pronouns"),
            pronunciation=data.get("pronunciation") or None,
            website_url=data.get("websiteUrl") or None,
            editor_configs=decode_json(
                data.get("editorConfigs"),
                "editorConfigs",
                default=settings.get("editorConfigs"),
            ),
            censor=to_bool(data.get("censor")),
            censor_char=data.get("censorChar"),
            signature=data.get("signature") or None,
            bbic=decode_json(data.get("bbic"), "bbic"),
        )

    def populate_guest_settings(self) -> Member:
        """Build the guest member (id 0) from board defaults."""
        settings = self._settings
        return Member(
            id=GUEST_MEMBER_ID,
            username=GUEST_NAME,
            display_name=GUEST_NAME,
            locale_id=to_int(settings.get("defaultLocaleId")),
            theme_id=to_int(settings.get("defaultThemeId")),
            use_display_name=False,
            date_time=settings.get("defaultDateTime"),
            primary_group=self._groups.get_group_by_id(settings.get("guestGroupId")),
            secondary_groups=None,
            widgets=settings.get("defaultWidgets"),
            per_page=settings.get("defaultPerPage"),
            display_on_wo=False,
            default_calendar_id=to_optional_int(settings.get("defaultCalendarId")),
            total_posts=0,
            followers=None,
            toggles=settings.get("defaultToggles"),
            editor_configs=settings.get("editorConfigs"),
            censor=bool(settings.get("defaultCensor")),
            censor_char=settings.get("defaultCensorChar"),
            bbic=settings.get("defaultBBIC"),
        )

    def _resolve_groups(self, group_ids: list[Any] | None) -> list[Group] | None:
        if not group_ids:
            return None
        groups = []
        for group_id in group_ids:
            group = self._groups.get_group_by_id(group_id)
            if group is not None:
                groups.append(group)
        return groups

    def _resolve_configs(self, member: Member) -> MemberConfigs:
        data = self._cache.get_all({"locales": "locales", "themes": "themes"})
        locale = find_by_id(data["locales"], member.locale_id)
        theme = find_by_id(data["themes"], member.theme_id)

        if locale is None:
            raise NotFoundError(
                "locale does not exist",
                data={"member_id": member.id, "locale_id": member.locale_id},
            )
        if theme is None:
            raise NotFoundError(
                "theme does not exist",
                data={"member_id": member.id, "theme_id": member.theme_id},
            )

        base_url = self._config.base_url
        return MemberConfigs(
            locale_path=self._config.locale_root / locale["folder"],
            theme_path=self._config.themes_root / theme["folder"],
            theme_css_url=f"{base_url}/css/{theme['folder']}",
            imageset_url=f"{base_url}/imagesets/{theme['imagesetFolder']}",
            theme_folder=theme["folder"],
        )
