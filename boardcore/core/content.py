"""Content and upload kinds, with their collection dispatch tables.

Helpers look up the cache collection for a kind here instead of switching on
strings in several places.
"""

from enum import Enum

from boardcore.core.errors import InvalidInputError


class ContentType(str, Enum):
    """Content that can be liked, followed, viewed or browsed."""

    TOPIC = "topic"
    POST = "post"
    FORUM = "forum"

    @classmethod
    def parse(cls, value: "str | ContentType") -> "ContentType":
        """Parse a request value such as "Topic" or " post "."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as ex:
            raise InvalidInputError(
                f"Unknown content type: {value!r}", data={"content_type": value}
            ) from ex


class UploadType(str, Enum):
    """Kinds of member uploads."""

    ATTACHMENT = "attachment"
    PHOTO = "photo"
    COVER = "cover"

    @classmethod
    def parse(cls, value: "str | UploadType") -> "UploadType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as ex:
            raise InvalidInputError(
                f"Unknown upload type: {value!r}", data={"upload_type": value}
            ) from ex


# Collection holding the rows for each content kind.
CONTENT_COLLECTIONS: dict[ContentType, str] = {
    ContentType.TOPIC: "topics",
    ContentType.POST: "posts",
    ContentType.FORUM: "forums",
}

# Content kinds that may be liked.
LIKEABLE_CONTENT = frozenset({ContentType.TOPIC, ContentType.POST})

# Collection holding the rows for each upload kind.
UPLOAD_COLLECTIONS: dict[UploadType, str] = {
    UploadType.ATTACHMENT: "member_attachments",
    UploadType.PHOTO: "member_photos",
    UploadType.COVER: "member_cover_photos",
}

# Directory under the uploads root holding each upload kind.
UPLOAD_DIRECTORIES: dict[UploadType, str] = {
    UploadType.ATTACHMENT: "attachments",
    UploadType.PHOTO: "photos",
    UploadType.COVER: "covers",
}

# Content kinds whose pages are tracked for "who's browsing".
BROWSABLE_CONTENT = frozenset({ContentType.TOPIC, ContentType.FORUM})
