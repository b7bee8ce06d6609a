"""Shared watermark polling for all feed fetchers."""

import hashlib
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Sequence, Tuple

import feedparser
import httpx

from ..models import Item
from ..observability import log as obs_log
from ..watermark import WatermarkStore, WatermarkWriteError

logger = logging.getLogger(__name__)

USER_AGENT = "feedbell/0.1"


class FeedParseError(Exception):
    """Raised when a response could not be parsed as a feed."""


def scan_new_entries(
    entries: Sequence[Any],
    last_seen_id: Optional[str],
    identify: Callable[[Any], str],
) -> List[Tuple[Any, str]]:
    """Collect entries newer than the watermark.

    Entries are walked newest to oldest and scanning stops at the first
    entry whose identifier equals ``last_seen_id``. With no watermark every
    entry is new.

    Returns:
        (entry, identifier) pairs in feed order
    """
    new_entries = []
    for entry in entries:
        identifier = identify(entry)
        if last_seen_id is not None and identifier == last_seen_id:
            break
        new_entries.append((entry, identifier))
    return new_entries


def synthetic_identifier(entry: Any) -> str:
    """Stable identifier for an entry lacking id, guid and link."""
    title = entry.get("title") or ""
    summary = entry.get("summary") or entry.get("description") or ""
    digest = hashlib.sha256(f"{title}\n{summary}".encode()).hexdigest()[:16]
    return f"synthetic:{digest}"


class FeedFetcher(ABC):
    """Polls one feed and returns the entries published since the last poll.

    Subclasses supply the feed URL, the identifier rule and item extraction
    for their feed dialect; fetching, watermark comparison and persistence
    live here.
    """

    source_type = ""

    def __init__(
        self,
        store: WatermarkStore,
        client: Optional[httpx.Client] = None,
        timeout: int = 30,
    ):
        """Initialize the fetcher.

        Args:
            store: Watermark store shared by all fetchers
            client: Optional HTTP client (tests pass one with a mock transport)
            timeout: Timeout in seconds for HTTP requests (default: 30)
        """
        self.store = store
        self.timeout = timeout
        self.client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    @property
    @abstractmethod
    def feed_url(self) -> str:
        """URL of the feed to poll."""

    @property
    @abstractmethod
    def source_key(self) -> str:
        """Key of this feed's watermark."""

    @abstractmethod
    def _get_identifier(self, entry: Any) -> str:
        """Deduplication key of an entry."""

    @abstractmethod
    def _build_item(self, entry: Any, identifier: str) -> Item:
        """Convert a feed entry into an Item."""

    def poll_for_new(self) -> List[Item]:
        """Fetch the feed and return items newer than the stored watermark.

        Never raises. A failed fetch or parse returns an empty list and
        leaves the watermark alone.

        Returns:
            New items, newest first
        """
        start_time = time.time()

        try:
            entries = self._fetch_entries()
        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.error(f"Failed to fetch {self.source_type} feed {self.feed_url}: {e}")
            obs_log(
                "feed.poll.error",
                source=self.source_key,
                fetcher_type=self.source_type,
                error=str(e),
                duration_ms=duration_ms,
                status="error",
            )
            return []

        if not entries:
            logger.info(f"No entries in {self.feed_url}")
            return []

        last_seen_id = self.store.load(self.source_key)
        latest_id = self._get_identifier(entries[0])

        if latest_id == last_seen_id:
            logger.debug(f"Nothing new in {self.feed_url} (latest: {latest_id})")
            return []

        new_entries = scan_new_entries(entries, last_seen_id, self._get_identifier)

        items = []
        for entry, identifier in new_entries:
            try:
                items.append(self._build_item(entry, identifier))
            except Exception as e:
                logger.error(
                    f"Error processing entry '{entry.get('title', 'Unknown')}': {e}"
                )
                continue

        if new_entries:
            try:
                self.store.save(self.source_key, latest_id)
            except WatermarkWriteError as e:
                logger.error(f"{e}; these items may be delivered again next cycle")
                obs_log("watermark.write_error", source=self.source_key, error=str(e))

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Found {len(items)} new items in {self.feed_url}")
        obs_log(
            "feed.poll.complete",
            source=self.source_key,
            fetcher_type=self.source_type,
            entries_count=len(entries),
            new_items=len(items),
            duration_ms=duration_ms,
            status="success",
        )
        return items

    def _fetch_entries(self) -> list:
        """Download and parse the feed.

        Raises:
            httpx.HTTPError: On network errors or non-2xx responses
            FeedParseError: If the body is not a usable feed
        """
        logger.info(f"Fetching {self.source_type} feed: {self.feed_url}")
        response = self.client.get(self.feed_url)
        response.raise_for_status()
        feed = feedparser.parse(response.content)

        entries = list(feed.get("entries", []))
        if feed.get("bozo"):
            if not entries:
                raise FeedParseError(
                    f"Malformed feed {self.feed_url}: {feed.get('bozo_exception')}"
                )
            logger.warning(
                f"Feed parsing issues for {self.feed_url}: {feed.get('bozo_exception')}"
            )
        return entries

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()
