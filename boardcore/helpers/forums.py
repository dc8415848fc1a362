"""Forum listings, breadcrumbs, redirects and forum totals."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from boardcore.context import BoardContext
from boardcore.core.content import ContentType
from boardcore.core.entities import Category, Forum, Member
from boardcore.core.errors import NotFoundError
from boardcore.core.logging import get_logger
from boardcore.core.query_builder import QueryBuilder
from boardcore.helpers.whos_online import WhosOnlineHelper
from boardcore.repositories.base import epoch_to_datetime, now_epoch, parse_id, to_int

logger = get_logger(__name__)


@dataclass
class LastPostView:
    topic_title: str
    topic_url: str
    created_at: datetime | None
    author: Member | None = None


@dataclass
class ForumView:
    """Everything a forum row on a listing needs."""

    forum: Forum
    url: str
    title: str
    description: str | None
    archived: bool
    total_topics: int
    total_posts: int
    imageset_url: str | None = None
    redirect: dict[str, Any] | None = None
    total_clicks: int | None = None
    last_click: datetime | None = None
    last_post: LastPostView | None = None
    sub_forums: list[dict[str, str]] | None = None
    browsing: int | None = None


@dataclass
class CategoryListing:
    category: Category
    forums: list[Forum] = field(default_factory=list)
    views: list[ForumView] = field(default_factory=list)


@dataclass
class ForumIndex:
    categories: list[CategoryListing] = field(default_factory=list)
    forums: list[Forum] = field(default_factory=list)
    have_categories: bool = False
    have_forums: bool = False


@dataclass
class RedirectResult:
    """Where to send the visitor of a redirect forum.

    Attributes:
        counted: Whether this visit added to the click totals.
        guest_tracker: Updated list of clicked forum ids for a guest's
            cookie, when it changed.
    """

    url: str
    counted: bool
    guest_tracker: list[int] | None = None


def build_forum_view(
    forum: Forum,
    base_url: str,
    last_post: LastPostView | None = None,
    sub_forums: list[dict[str, str]] | None = None,
    browsing: int | None = None,
    imageset_url: str | None = None,
) -> ForumView:
    """Assemble a forum's listing view from already-resolved pieces."""
    redirect = forum.redirect if forum.is_redirect else None
    return ForumView(
        forum=forum,
        url=forum.url(base_url),
        title=forum.title,
        description=forum.description,
        archived=forum.archived,
        total_topics=forum.total_topics,
        total_posts=forum.total_posts,
        imageset_url=imageset_url,
        redirect=redirect,
        total_clicks=to_int(redirect.get("totalClicks")) if redirect else None,
        last_click=epoch_to_datetime(redirect.get("lastClick")) if redirect else None,
        last_post=None if redirect else last_post,
        sub_forums=sub_forums,
        browsing=None if redirect else browsing,
    )


class ForumsHelper:
    def __init__(self, ctx: BoardContext) -> None:
        self._ctx = ctx
        self._whos_online = WhosOnlineHelper(ctx)

    # =========================================================================
    # Lookups
    # =========================================================================

    def _all_forums(self) -> list[Forum]:
        repository = self._ctx.repositories.forums
        forums = [repository.build_forum_from_data(row) for row in self._ctx.cache.get("forums")]
        return [forum for forum in forums if forum is not None]

    def forum_exists(self, forum_id: Any) -> bool:
        return self._ctx.repositories.forums.load_forum_data_by_id(forum_id) is not None

    def get_forum(self, forum_id: Any) -> Forum:
        forum = self._ctx.repositories.forums.get_forum_by_id(forum_id)
        if forum is None:
            raise NotFoundError("forum does not exist", data={"forum_id": forum_id})
        return forum

    def get_sub_forums(self, forum_id: Any) -> list[Forum]:
        """Visible direct children of a forum, in sort order."""
        parent = parse_id(forum_id)
        children = [
            forum
            for forum in self._all_forums()
            if forum.has_parent and forum.parent_id == parent and forum.visible
        ]
        return sorted(children, key=lambda forum: (forum.sort_order, forum.id))

    def has_sub_forums(self, forum_id: Any) -> bool:
        return bool(self.get_sub_forums(forum_id))

    def get_sub_forums_menu(self, forum_id: Any) -> list[dict[str, str]] | None:
        """Title/url entries for children that opt into the sub-forums menu."""
        sub_forums = self.get_sub_forums(forum_id)
        if not sub_forums:
            return None
        base_url = self._ctx.base_url
        return [
            {"title": forum.title, "url": forum.url(base_url)}
            for forum in sub_forums
            if forum.show_sub_forums
        ]

    # =========================================================================
    # Listings
    # =========================================================================

    def build_index(self, category_id: Any = None, forum_id: Any = None) -> ForumIndex:
        """Build the forum index.

        With a forum_id, lists that forum's sub-forums. Otherwise lists the
        visible categories (all, or only category_id) with their visible
        top-level forums.
        """
        index = ForumIndex()

        if forum_id is not None:
            index.forums = self.get_sub_forums(forum_id)
            index.have_forums = bool(index.forums)
            return index

        repository = self._ctx.repositories.categories
        categories = [
            repository.build_category_from_data(row) for row in self._ctx.cache.get("categories")
        ]
        wanted = parse_id(category_id) if category_id is not None else None
        categories = sorted(
            (
                category
                for category in categories
                if category is not None
                and category.visible
                and (wanted is None or category.id == wanted)
            ),
            key=lambda category: (category.sort_order, category.id),
        )
        index.have_categories = bool(categories)

        all_forums = self._all_forums()
        for category in categories:
            forums = sorted(
                (
                    forum
                    for forum in all_forums
                    if forum.category_id == category.id and forum.visible and not forum.has_parent
                ),
                key=lambda forum: (forum.sort_order, forum.id),
            )
            listing = CategoryListing(
                category=category,
                forums=forums,
                views=[self.forum_view(forum) for forum in forums],
            )
            if forums:
                index.have_forums = True
            index.categories.append(listing)

        return index

    def forum_view(self, forum: Forum) -> ForumView:
        """Resolve a forum's last post, sub-forums and browsing count into a view."""
        repositories = self._ctx.repositories
        base_url = self._ctx.base_url
        member = self._ctx.member

        last_post = None
        if forum.last_post_id:
            post = repositories.posts.get_post_by_id(forum.last_post_id)
            topic = repositories.topics.get_topic_by_id(post.topic_id) if post else None
            if post and topic:
                last_post = LastPostView(
                    topic_title=topic.title,
                    topic_url=topic.url(base_url),
                    created_at=post.created_at,
                    author=repositories.members.get_member_by_id(post.created_by),
                )

        browsing = None
        toggles = (member.toggles or {}).get("display") or {}
        if not forum.is_redirect and toggles.get("browsingForumLink", True):
            browsing = self.get_total_browsing_forum(forum.id)

        return build_forum_view(
            forum,
            base_url,
            last_post=last_post,
            sub_forums=self.get_sub_forums_menu(forum.id),
            browsing=browsing,
            imageset_url=member.configs.imageset_url if member.configs else None,
        )

    def build_breadcrumbs(self, forum_id: Any) -> list[dict[str, str]]:
        """Title/url trail from the top-level forum down to forum_id.

        A parent chain that loops back on itself is cut at the repeat.
        """
        repository = self._ctx.repositories.forums
        base_url = self._ctx.base_url
        trail: list[dict[str, str]] = []
        visited: set[int] = set()

        forum = repository.get_forum_by_id(forum_id)
        while forum is not None:
            if forum.id in visited:
                logger.warning("forum_parent_cycle", forum_id=forum.id)
                break
            visited.add(forum.id)
            trail.append({"title": forum.title, "url": forum.url(base_url)})
            if not forum.has_parent:
                break
            forum = repository.get_forum_by_id(forum.parent_id)

        trail.reverse()
        return trail

    # =========================================================================
    # Redirect forums
    # =========================================================================

    async def handle_redirect_forum(
        self, forum_id: Any, guest_tracker: list[int] | None = None
    ) -> RedirectResult | None:
        """Count a click on a redirect forum and return its target.

        Returns None for forums that do not redirect. With unique clicks
        enabled, members are counted once through forum_clicks and guests
        once through the forum ids kept in their cookie.
        """
        forum = self.get_forum(forum_id)
        if not forum.is_redirect:
            return None

        redirect = dict(forum.redirect or {})
        url = str(redirect.get("url") or "")
        member = self._ctx.member

        if not redirect.get("uniqueClicks"):
            await self.update_redirect_clicks(forum.id, redirect)
            return RedirectResult(url=url, counted=True)

        if member.is_signed_in:
            async with self._ctx.locks.hold(("forum_clicks", forum.id, member.id)):
                already = any(
                    parse_id(row.get("memberId")) == member.id
                    and parse_id(row.get("forumId")) == forum.id
                    for row in self._ctx.cache.get("forum_clicks")
                )
                if already:
                    return RedirectResult(url=url, counted=False)

                await self.update_redirect_clicks(forum.id, redirect)
                await self._ctx.db.query(
                    QueryBuilder(self._ctx.config.database)
                    .insert_into(
                        "forum_clicks",
                        ["memberId", "forumId", "clickedAt"],
                        [member.id, forum.id, now_epoch()],
                    )
                    .build()
                )
                await self._ctx.cache.update("forum_clicks")
            return RedirectResult(url=url, counted=True)

        tracker = [parse_id(value) for value in guest_tracker or []]
        if forum.id in tracker:
            return RedirectResult(url=url, counted=False)

        await self.update_redirect_clicks(forum.id, redirect)
        tracker.append(forum.id)
        return RedirectResult(url=url, counted=True, guest_tracker=tracker)

    async def update_redirect_clicks(self, forum_id: Any, redirect: dict[str, Any]) -> None:
        """Add one click to a redirect forum's totals."""
        target = parse_id(forum_id)
        async with self._ctx.locks.hold(("forums", target)):
            # Start from the stored document so concurrent clicks add up.
            stored = self._ctx.repositories.forums.get_forum_by_id(target)
            current = dict(stored.redirect or redirect) if stored else dict(redirect)
            current["totalClicks"] = to_int(current.get("totalClicks")) + 1
            current["lastClick"] = now_epoch()

            await self._ctx.db.query(
                QueryBuilder(self._ctx.config.database)
                .update("forums")
                .set(["redirect"], [json.dumps(current)])
                .where("id = ?", [target])
                .build()
            )
            await self._ctx.cache.update("forums")
        redirect.update(current)

    # =========================================================================
    # Totals
    # =========================================================================

    def _posts_in(self, forum_id: Any) -> list[dict[str, Any]]:
        target = parse_id(forum_id)
        return [
            row for row in self._ctx.cache.get("posts") if parse_id(row.get("forumId")) == target
        ]

    def _topics_in(self, forum_id: Any) -> list[dict[str, Any]]:
        target = parse_id(forum_id)
        return [
            row for row in self._ctx.cache.get("topics") if parse_id(row.get("forumId")) == target
        ]

    def get_total_posts_in_forum(self, forum_id: Any) -> int:
        return len(self._posts_in(forum_id))

    def get_total_posters_in_forum(self, forum_id: Any) -> int:
        return len({parse_id(row.get("createdBy")) for row in self._posts_in(forum_id)})

    def get_total_views_in_forum(self, forum_id: Any) -> int:
        return sum(to_int(row.get("totalViews")) for row in self._topics_in(forum_id))

    def get_total_topics_in_forum(self, forum_id: Any) -> int:
        return len(self._topics_in(forum_id))

    def get_total_browsing_forum(self, forum_id: Any, include_topics: bool = True) -> int:
        """Sessions on the forum page, plus on its topics when include_topics."""
        forum = self._ctx.repositories.forums.get_forum_by_id(forum_id)
        if forum is None:
            return 0
        total = self._whos_online.get_total_browsing_content(ContentType.FORUM, forum.id)
        if include_topics:
            for row in self._topics_in(forum.id):
                total += self._whos_online.get_total_browsing_content(
                    ContentType.TOPIC, row.get("id")
                )
        return total
