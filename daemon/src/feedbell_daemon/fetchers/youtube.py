"""YouTube channel feed fetcher."""

import logging
from typing import Any, Optional

import httpx

from ..models import Item
from ..watermark import WatermarkStore
from .base import FeedFetcher, synthetic_identifier
from .media import leading_url, normalize_media

logger = logging.getLogger(__name__)

CHANNEL_FEED_URL = "https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"
NEW_VIDEO = "New Video"
DEFAULT_AUTHOR = "YouTube Channel"


class YouTubeFetcher(FeedFetcher):
    """Polls the public Atom feed of a YouTube channel.

    YouTube entries always carry an ``<id>`` (``yt:video:...``), so there is
    no link fallback. Thumbnails live under ``media:group``, which feedparser
    flattens into ``media_thumbnail``.
    """

    source_type = "youtube"

    def __init__(
        self,
        channel_id: str,
        store: WatermarkStore,
        client: Optional[httpx.Client] = None,
        timeout: int = 30,
    ):
        """Initialize the YouTube fetcher.

        Args:
            channel_id: YouTube channel id (UC...)
            store: Watermark store
            client: Optional HTTP client
            timeout: Timeout in seconds for HTTP requests (default: 30)
        """
        super().__init__(store, client=client, timeout=timeout)
        self.channel_id = channel_id.strip()

    @property
    def feed_url(self) -> str:
        return CHANNEL_FEED_URL.format(channel_id=self.channel_id)

    @property
    def source_key(self) -> str:
        return f"youtube:{self.channel_id}"

    def _get_identifier(self, entry: Any) -> str:
        return entry.get("id") or entry.get("guid") or synthetic_identifier(entry)

    def _build_item(self, entry: Any, identifier: str) -> Item:
        return Item(
            title=entry.get("title") or NEW_VIDEO,
            link=entry.get("link") or "",
            identifier=identifier,
            source_type=self.source_type,
            image=self._extract_thumbnail(entry),
            author=entry.get("author") or DEFAULT_AUTHOR,
        )

    def _extract_thumbnail(self, entry: Any) -> Optional[str]:
        """First thumbnail URL; YouTube lists the largest resolution first."""
        thumbnails = entry.get("media_thumbnail")
        if thumbnails is None:
            group = entry.get("media_group")
            if hasattr(group, "get"):
                thumbnails = group.get("media_thumbnail") or group.get("media:thumbnail")
        return leading_url(normalize_media(thumbnails))
