"""Repositories that build typed entities from cached records.

Every repository follows the same shape: ``load_x_data_by_id`` finds the raw
record in the cache, ``build_x_from_data`` converts it into an entity and
``get_x_by_id`` does both. Missing rows give None, except for members, who
fall back to the guest member.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from boardcore.core.config import AppConfig
from boardcore.ports.cache import CacheProvider
from boardcore.repositories.attachments import AttachmentRepository
from boardcore.repositories.categories import CategoryRepository
from boardcore.repositories.forums import ForumRepository
from boardcore.repositories.groups import GroupRepository
from boardcore.repositories.likes import LikeRepository
from boardcore.repositories.members import MemberRepository
from boardcore.repositories.posts import PostRepository
from boardcore.repositories.sessions import SessionRepository
from boardcore.repositories.settings import SettingRepository
from boardcore.repositories.tags import TagRepository
from boardcore.repositories.topics import TopicRepository

if TYPE_CHECKING:
    from boardcore.services.settings import Settings


class Repositories:
    """All repositories over one cache handle."""

    def __init__(self, cache: CacheProvider, settings: Settings, config: AppConfig) -> None:
        self.cache = cache
        self.attachments = AttachmentRepository(cache)
        self.categories = CategoryRepository(cache)
        self.forums = ForumRepository(cache)
        self.groups = GroupRepository(cache)
        self.likes = LikeRepository(cache)
        self.members = MemberRepository(cache, self.groups, settings, config)
        self.posts = PostRepository(cache)
        self.sessions = SessionRepository(cache)
        self.settings = SettingRepository(cache)
        self.tags = TagRepository(cache)
        self.topics = TopicRepository(cache)


__all__ = [
    "AttachmentRepository",
    "CategoryRepository",
    "ForumRepository",
    "GroupRepository",
    "LikeRepository",
    "MemberRepository",
    "PostRepository",
    "Repositories",
    "SessionRepository",
    "SettingRepository",
    "TagRepository",
    "TopicRepository",
]
