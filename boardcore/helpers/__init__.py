"""Domain helpers.

Each helper is built from a BoardContext and answers questions for, or acts
on behalf of, the context's member.
"""

from boardcore.helpers.ajax import AjaxHelper, build_response
from boardcore.helpers.embed import EmbedHelper
from boardcore.helpers.following import FollowingHelper
from boardcore.helpers.forums import ForumsHelper, ForumView, build_forum_view
from boardcore.helpers.groups import GroupHelper
from boardcore.helpers.likes import LikeHelper
from boardcore.helpers.posts import PostsHelper
from boardcore.helpers.statistics import StatisticsHelper
from boardcore.helpers.tags import TagsHelper
from boardcore.helpers.topics import PollView, TopicHelper
from boardcore.helpers.util import UtilHelper
from boardcore.helpers.whos_online import WhosOnlineHelper

__all__ = [
    "AjaxHelper",
    "EmbedHelper",
    "FollowingHelper",
    "ForumView",
    "ForumsHelper",
    "GroupHelper",
    "LikeHelper",
    "PollView",
    "PostsHelper",
    "StatisticsHelper",
    "TagsHelper",
    "TopicHelper",
    "UtilHelper",
    "WhosOnlineHelper",
    "build_forum_view",
    "build_response",
]
