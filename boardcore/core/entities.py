"""Typed entities built by the repositories.

Entities are plain data: they are constructed fresh from a raw cached record
on every repository call and never cached as objects. Changing a field in
memory persists nothing; a write goes through the query builder and the
database provider, followed by a refresh of the affected cache collection.

Presentation data that needs other entities (last post, creator, browsing
counts) is assembled by the helpers' view-model builders, not here.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

GUEST_MEMBER_ID = 0


def slugify(title: str) -> str:
    """URL slug used in forum/topic/tag links ("Hello, World" -> "hello-world")."""
    slug = "".join(ch.lower() if ch.isalnum() else "-" for ch in title)
    return "-".join(part for part in slug.split("-") if part)


# =============================================================================
# Board structure
# =============================================================================


@dataclass
class Category:
    """A top-level grouping of forums.

    Attributes:
        id: Category id.
        title: Display title.
        sort_order: Ascending display order on the index.
        created_at: When the category was created.
        visible: Whether the category is shown on the index.
    """

    id: int
    title: str = ""
    sort_order: int = 0
    created_at: datetime | None = None
    visible: bool = True


@dataclass
class Forum:
    """A forum, optionally nested under another forum.

    Attributes:
        has_parent: True for sub-forums; parent_id must then resolve.
        redirect: Click-tracking config for redirect forums
            (``{"enabled", "url", "uniqueClicks", "totalClicks", "lastClick"}``).
        hot_threshold: Replies at which a topic in this forum is hot.
        popularity_threshold: Views at which a topic in this forum is popular.
        unique_view_incrementation: Count a topic view once per viewer.
        poll: Forum-level poll defaults.
    """

    id: int
    category_id: int = 0
    title: str = ""
    description: str | None = None
    sort_order: int = 0
    created_at: datetime | None = None
    has_parent: bool = False
    parent_id: int = 0
    show_sub_forums: bool = False
    visible: bool = True
    archived: bool = False
    image: str | None = None
    total_topics: int = 0
    total_posts: int = 0
    last_post_id: int | None = None
    redirect: dict[str, Any] | None = None
    password_protected: bool = False
    password: str | None = None
    forum_type: str | None = None
    can: dict[str, Any] | None = None
    hot_threshold: int = 20
    popularity_threshold: int = 100
    default_filters: dict[str, Any] | None = None
    unique_view_incrementation: bool = False
    poll: dict[str, Any] = field(default_factory=dict)

    @property
    def is_redirect(self) -> bool:
        return bool(self.redirect and self.redirect.get("enabled"))

    def url(self, base_url: str) -> str:
        return f"{base_url}/forum/{self.id}/{slugify(self.title)}"


@dataclass
class Topic:
    """A discussion thread.

    Attributes:
        total_replies: Denormalized reply count, kept in sync on reply.
        tags: Tag ids.
        poll: Nested poll document; ``questions`` is keyed by question id,
            each holding ``options``, ``votes`` (counts) and ``voters``
            (member id lists) keyed by option id.
    """

    id: int
    category_id: int = 0
    forum_id: int = 0
    title: str = ""
    created_by: int = 0
    created_at: datetime | None = None
    locked: bool = False
    total_replies: int = 0
    total_views: int = 0
    last_post_id: int | None = None
    tags: list[int] | None = None
    answered: bool = False
    answered_data: dict[str, Any] | None = None
    pinned: bool = False
    pinned_at: datetime | None = None
    pinned_by: int | None = None
    poll: dict[str, Any] | None = None

    def url(self, base_url: str) -> str:
        return f"{base_url}/topic/{self.id}/{slugify(self.title)}"


@dataclass
class Post:
    """A single post in a topic.

    Attributes:
        post_number: 1-based position among the topic's posts ordered by
            created_at. Derived on every load, never stored.
        attachments: Attachment ids.
    """

    id: int
    category_id: int = 0
    forum_id: int = 0
    topic_id: int = 0
    created_by: int = 0
    created_at: datetime | None = None
    content: str = ""
    tags: list[int] | None = None
    attachments: list[Any] | None = None
    is_first_post: bool = False
    post_number: int | None = None
    ip_address: str | None = None
    hostname: str | None = None
    user_agent: str | None = None
    include_signature: bool = False


@dataclass
class Tag:
    id: int
    title: str = ""
    created_by: int = 0
    created_at: datetime | None = None

    def url(self, base_url: str) -> str:
        return f"{base_url}/tags/{self.id}/{slugify(self.title)}"


@dataclass
class Attachment:
    """An uploaded file.

    Attributes:
        forum_id: Not stored with the attachment; set by the caller from the
            post the attachment is shown on.
    """

    id: int
    member_id: int = 0
    file_name: str = ""
    file_size: int = 0
    uploaded_at: datetime | None = None
    total_downloads: int = 0
    forum_id: int | None = None


@dataclass
class Like:
    id: int
    content_type: str = ""
    content_id: int = 0
    member_id: int = 0
    liked_at: datetime | None = None


# =============================================================================
# Members
# =============================================================================


@dataclass
class Group:
    id: int
    name: str | None = None
    description: str | None = None
    created_at: datetime | None = None
    color: str | None = None
    emphasize: bool = False
    display: bool = False
    is_moderator: bool = False
    is_admin: bool = False
    sort_order: int = 0
    can_be_modified: bool = False
    can_be_deleted: bool = False


@dataclass
class MemberConfigs:
    """Filesystem and URL locations derived from a member's locale and theme."""

    locale_path: Path
    theme_path: Path
    theme_css_url: str
    imageset_url: str
    theme_folder: str


@dataclass
class Member:
    """A board member, or the guest sentinel (id 0).

    Attributes:
        primary_group: The member's primary group, if it resolves.
        secondary_groups: Additional groups, or None.
        per_page: Listing sizes, e.g. ``{"topics": 20, "posts": 10,
            "maxPageLinks": 5}``.
        configs: Locale/theme derived paths, set by the member repository.
    """

    id: int
    username: str = ""
    display_name: str = ""
    password_hash: str | None = None
    email_address: str | None = None
    locale_id: int = 0
    theme_id: int = 0
    use_display_name: bool = False
    date_time: dict[str, Any] | None = None
    primary_group: Group | None = None
    secondary_groups: list[Group] | None = None
    widgets: dict[str, Any] | None = None
    photo_type: str | None = None
    photo_id: int | None = None
    per_page: dict[str, Any] | None = None
    lockout: dict[str, Any] | None = None
    display_on_wo: bool = False
    last_online: datetime | None = None
    default_calendar_id: int | None = None
    birthday: dict[str, Any] | None = None
    cover_photo_type: str | None = None
    cover_photo_id: int | None = None
    cover_photo_link: str | None = None
    joined: datetime | None = None
    total_posts: int = 0
    reputation: int = 0
    followers: dict[str, Any] | list[Any] | None = None
    location: str | None = None
    gender: str | None = None
    toggles: dict[str, Any] | None = None
    pronouns: dict[str, Any] | None = None
    pronunciation: str | None = None
    website_url: str | None = None
    editor_configs: dict[str, Any] | None = None
    censor: bool = False
    censor_char: str | None = None
    signature: str | None = None
    bbic: dict[str, Any] | None = None
    configs: MemberConfigs | None = None

    @property
    def is_signed_in(self) -> bool:
        return self.id != GUEST_MEMBER_ID

    @property
    def name(self) -> str:
        """Name to display, honouring use_display_name."""
        if self.use_display_name and self.display_name:
            return self.display_name
        return self.username

    def _groups(self) -> list[Group]:
        groups = [self.primary_group] if self.primary_group else []
        return groups + list(self.secondary_groups or [])

    @property
    def is_moderator(self) -> bool:
        return any(group.is_moderator for group in self._groups())

    @property
    def is_admin(self) -> bool:
        return any(group.is_admin for group in self._groups())

    def per_page_for(self, listing: str, default: int = 20) -> int:
        if not self.per_page:
            return default
        return int(self.per_page.get(listing, default))


@dataclass
class Session:
    """A visitor session, used for presence tracking.

    Attributes:
        member_id: 0 for guests and bots.
        location: Current URL path, e.g. ``/topic/5/hello-world/``.
    """

    id: str
    member_id: int = GUEST_MEMBER_ID
    expires: datetime | None = None
    last_click: datetime | None = None
    location: str = ""
    ip_address: str | None = None
    hostname: str | None = None
    user_agent: str | None = None
    display_on_wo: bool = False
    is_bot: bool = False
    bot_name: str | None = None
    is_admin: bool = False


@dataclass
class Setting:
    """A typed configuration row.

    Attributes:
        type: One of serialized, regexarray, bool, number, float, string.
    """

    id: int
    type: str | None = None
    name: str | None = None
    value: Any = None
    default_value: Any = None
