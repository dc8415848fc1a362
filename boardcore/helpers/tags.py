"""Tag lookups and the tag cloud."""

import random
from collections.abc import Sequence
from typing import Any

from boardcore.context import BoardContext
from boardcore.core.entities import Tag
from boardcore.core.errors import InvalidInputError
from boardcore.core.logging import get_logger
from boardcore.core.query_builder import QueryBuilder
from boardcore.repositories.base import now_epoch, parse_id, to_int

logger = get_logger(__name__)

DEFAULT_MAX_TAGS = 20
DEFAULT_TAG_MIN_FONT_SIZE = 12
DEFAULT_TAG_MAX_FONT_SIZE = 24


class TagsHelper:
    def __init__(self, ctx: BoardContext) -> None:
        self._ctx = ctx

    def get_tag_id_by_name(self, tag_name: str) -> int | None:
        for row in self._ctx.cache.get("tags"):
            if row.get("title") == tag_name:
                return parse_id(row.get("id"))
        return None

    async def tag_names_to_identifiers(self, tag_names: Sequence[str]) -> list[int]:
        """Map tag titles to ids, creating the tags that do not exist yet.

        Raises:
            InvalidInputError: If tag_names is not a list.
        """
        if not isinstance(tag_names, (list, tuple)):
            raise InvalidInputError("tag names must be a list")

        identifiers = []
        for name in tag_names:
            tag_id = self.get_tag_id_by_name(name)
            if tag_id is None:
                result = await self._ctx.db.query(
                    QueryBuilder(self._ctx.config.database)
                    .insert_into(
                        "tags",
                        ["title", "createdBy", "createdAt"],
                        [name, self._ctx.member.id, now_epoch()],
                    )
                    .build()
                )
                await self._ctx.cache.update("tags")
                tag_id = int(result.insert_id)
                logger.debug("tag_created", tag_id=tag_id, title=name)
            identifiers.append(tag_id)
        return identifiers

    def tag_identifiers_to_entities(self, tag_ids: Sequence[Any]) -> list[Tag | None]:
        """Tags for the given ids, with None where an id does not resolve."""
        if not isinstance(tag_ids, (list, tuple)):
            raise InvalidInputError("tag identifiers must be a list")
        repository = self._ctx.repositories.tags
        return [repository.get_tag_by_id(tag_id) for tag_id in tag_ids]

    def get_tags_bbic_data(self, rng: random.Random | None = None) -> list[dict[str, Any]] | None:
        """Newest tags for the board info center, each with a random font size.

        The count and the font size range come from the acting member's
        bbic settings. Returns None when there are no tags.
        """
        rng = rng or random.Random()
        bbic = self._ctx.member.bbic or {}
        max_tags = to_int(bbic.get("maxTags"), DEFAULT_MAX_TAGS)
        min_size = to_int(bbic.get("tagMinFontSize"), DEFAULT_TAG_MIN_FONT_SIZE)
        max_size = to_int(bbic.get("tagMaxFontSize"), DEFAULT_TAG_MAX_FONT_SIZE)
        if max_size < min_size:
            min_size, max_size = max_size, min_size

        repository = self._ctx.repositories.tags
        tags = [repository.build_tag_from_data(row) for row in self._ctx.cache.get("tags")]
        tags = sorted(
            (tag for tag in tags if tag is not None),
            key=lambda tag: tag.created_at.timestamp() if tag.created_at else 0,
            reverse=True,
        )[:max_tags]
        if not tags:
            return None

        base_url = self._ctx.base_url
        return [
            {
                "title": tag.title,
                "url": tag.url(base_url),
                "size": rng.randint(min_size, max_size),
            }
            for tag in tags
        ]
