"""Generic RSS/Atom fetcher."""

import html
import logging
import re
from typing import Any, Optional

import httpx

from ..models import Item
from ..watermark import WatermarkStore
from .base import FeedFetcher, synthetic_identifier
from .media import normalize_media, pick_image

logger = logging.getLogger(__name__)

SUMMARY_MAX_LENGTH = 300
NO_DESCRIPTION = "No description available."
UNTITLED = "Untitled"

_TAG_RE = re.compile(r"<[^>]*>?")


def clean_html(raw_html: Optional[str]) -> str:
    """Strip markup from a feed summary.

    Args:
        raw_html: Summary or description as found in the feed

    Returns:
        Plain text, or a placeholder when nothing is left
    """
    if not raw_html:
        return NO_DESCRIPTION
    text = html.unescape(_TAG_RE.sub("", raw_html)).strip()
    return text or NO_DESCRIPTION


def truncate_summary(text: str, limit: int = SUMMARY_MAX_LENGTH) -> str:
    """Cap text at ``limit`` characters, ending in '...' when cut."""
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


class RSSFetcher(FeedFetcher):
    """Polls a standard RSS or Atom feed.

    Identifier is the entry guid/id, falling back to its link.
    """

    source_type = "rss"

    def __init__(
        self,
        url: str,
        store: WatermarkStore,
        client: Optional[httpx.Client] = None,
        timeout: int = 30,
    ):
        """Initialize the RSS fetcher.

        Args:
            url: Feed URL
            store: Watermark store
            client: Optional HTTP client
            timeout: Timeout in seconds for HTTP requests (default: 30)
        """
        super().__init__(store, client=client, timeout=timeout)
        self.url = url

    @property
    def feed_url(self) -> str:
        return self.url

    @property
    def source_key(self) -> str:
        return f"rss:{self.url}"

    def _get_identifier(self, entry: Any) -> str:
        # feedparser exposes both RSS <guid> and Atom <id> as "id"
        return entry.get("id") or entry.get("link") or synthetic_identifier(entry)

    def _build_item(self, entry: Any, identifier: str) -> Item:
        raw_summary = entry.get("summary") or entry.get("description") or ""
        return Item(
            title=entry.get("title") or UNTITLED,
            link=entry.get("link") or "",
            identifier=identifier,
            source_type=self.source_type,
            summary=truncate_summary(clean_html(raw_summary)),
            image=self._extract_image(entry),
        )

    def _extract_image(self, entry: Any) -> Optional[str]:
        """Find an image for the entry.

        Tries media:content first, then the first enclosure with an image
        MIME type.
        """
        image = pick_image(normalize_media(entry.get("media_content")))
        if image:
            return image

        for enclosure in entry.get("enclosures") or []:
            mime_type = enclosure.get("type") or ""
            url = enclosure.get("href") or enclosure.get("url")
            if url and mime_type.startswith("image"):
                return url

        return None
