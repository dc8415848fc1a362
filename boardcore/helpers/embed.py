"""Outbound lookups for media embeds.

Both calls go through aiohttp with the board's configured timeout
(``HTTP_TIMEOUT_SECONDS``, 5 seconds by default).
"""

import asyncio
import re

import aiohttp

from boardcore.core.config import AppConfig
from boardcore.core.errors import ErrorCategory, ExternalServiceError
from boardcore.core.logging import get_logger

logger = get_logger(__name__)

RUMBLE_BASE_URL = "https://rumble.com"

RUMBLE_EMBED_PATTERN = re.compile(
    r'href="https://rumble\.com/api/Media/oembed\.json\?url='
    r"https%3A%2F%2Frumble\.com%2Fembed%2F([a-zA-Z0-9_-]+)"
)

# Rumble serves a stripped page to unknown clients.
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.36"
)


class EmbedHelper:
    def __init__(self, config: AppConfig) -> None:
        self._timeout = aiohttp.ClientTimeout(total=config.http_timeout_seconds)

    async def get_rumble_embed_id(self, video_id: str | None, document_id: str | None) -> str | None:
        """Find the embed id for a Rumble video page.

        Args:
            video_id: The id part of the video URL (``v4abc12``).
            document_id: The slug part of the video URL.

        Returns:
            The embed id, or None when video_id is empty, the page is not
            found, or the page has no oEmbed link.

        Raises:
            ExternalServiceError: If the request fails or times out.
        """
        if not video_id:
            return None

        url = f"{RUMBLE_BASE_URL}/{video_id}-{document_id}"
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    headers={"User-Agent": BROWSER_USER_AGENT},
                    timeout=self._timeout,
                ) as response:
                    if response.status != 200:
                        logger.warning("rumble_page_unavailable", url=url, status=response.status)
                        return None
                    html = await response.text()
        except asyncio.TimeoutError as ex:
            raise ExternalServiceError(
                "Timed out fetching Rumble page",
                data={"url": url},
                category=ErrorCategory.TIMEOUT,
            ) from ex
        except aiohttp.ClientError as ex:
            logger.error("rumble_request_failed", url=url, error=str(ex))
            raise ExternalServiceError(
                f"Network error fetching Rumble page: {ex}", data={"url": url}
            ) from ex

        match = RUMBLE_EMBED_PATTERN.search(html)
        return match.group(1) if match else None

    async def url_exists(self, url: str) -> bool:
        """HEAD the URL; 2xx and 3xx answers count as existing.

        Unreachable hosts and timeouts count as missing.
        """
        try:
            async with aiohttp.ClientSession() as session:
                async with session.head(
                    url, timeout=self._timeout, allow_redirects=False
                ) as response:
                    return 200 <= response.status < 400
        except (aiohttp.ClientError, asyncio.TimeoutError) as ex:
            logger.debug("url_check_failed", url=url, error=str(ex))
            return False
