"""Board-wide services shared by the helpers."""

from boardcore.services.member import MemberService
from boardcore.services.permissions import ForumPermission, PermissionsService
from boardcore.services.registry import RegistryService
from boardcore.services.settings import Settings

__all__ = [
    "ForumPermission",
    "MemberService",
    "PermissionsService",
    "RegistryService",
    "Settings",
]
