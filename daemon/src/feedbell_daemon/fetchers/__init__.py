"""Feed fetchers for the supported feed dialects."""

from .base import FeedFetcher, FeedParseError
from .rss import RSSFetcher
from .youtube import YouTubeFetcher

__all__ = ["FeedFetcher", "FeedParseError", "RSSFetcher", "YouTubeFetcher"]
