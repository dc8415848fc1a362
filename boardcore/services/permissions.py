"""Permission checks.

Permission rules are not enforced yet: every check answers True. The method
signatures are the ones helpers call, so enforcement can be added here
without touching callers.
"""

from collections.abc import Sequence
from enum import Enum

from boardcore.core.errors import ConfigurationError


class ForumPermission(str, Enum):
    VIEW_FORUM = "viewForum"
    CREATE_TOPIC = "createTopic"
    REPLY_TO_TOPIC = "replyToTopic"
    EDIT_POSTS = "editPosts"
    DELETE_POSTS = "deletePosts"
    VIEW_POLLS = "viewPolls"
    CREATE_POLLS = "createPolls"
    CAST_IN_POLLS = "castInPolls"
    EDIT_POLLS = "editPolls"
    CLOSE_POLLS = "closePolls"
    LIKE_TOPICS = "likeTopics"
    LIKE_POSTS = "likePosts"
    UNLIKE_TOPICS = "unlikeTopics"
    UNLIKE_POSTS = "unlikePosts"
    ATTACH_FILES = "attachFiles"
    DOWNLOAD_FILES = "downloadFiles"
    MARK_AS_SOLVED = "markAsSolved"
    FOLLOW_TOPICS = "followTopics"


class PermissionsService:
    def get_feature_permission(self, feature_name: str) -> bool:
        return True

    def get_feature_permissions(self, feature_names: Sequence[str]) -> dict[str, bool]:
        if not isinstance(feature_names, (list, tuple)):
            raise ConfigurationError("feature_names must be a list")
        return {name: self.get_feature_permission(name) for name in feature_names}

    def has_forum_permission(
        self,
        forum_id: int,
        permission: ForumPermission | str,
        member_id: int | None = None,
    ) -> bool:
        return True

    def has_forum_permissions(
        self,
        forum_id: int,
        permissions: Sequence[ForumPermission | str],
        member_id: int | None = None,
    ) -> dict[str, bool]:
        return {
            str(getattr(permission, "value", permission)): self.has_forum_permission(
                forum_id, permission, member_id
            )
            for permission in permissions
        }
