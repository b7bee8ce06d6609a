"""Data models for Feedbell daemon."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any, List, Tuple


@dataclass
class Item:
    """A new feed entry, normalized across feed dialects.

    Shared by both fetchers and the broadcaster.
    """

    title: str
    link: str
    identifier: str  # Deduplication key, never empty
    source_type: str  # 'rss', 'youtube'
    summary: Optional[str] = None  # RSS only
    image: Optional[str] = None  # Image or thumbnail URL, never fabricated
    author: Optional[str] = None  # YouTube only

    def to_dict(self) -> dict:
        """Convert to dictionary for logging and tests."""
        return {
            "title": self.title,
            "link": self.link,
            "identifier": self.identifier,
            "source_type": self.source_type,
            "summary": self.summary,
            "image": self.image,
            "author": self.author,
        }


@dataclass
class Watermark:
    """Last seen identifier for one source."""

    source: str
    last_seen_id: Optional[str]
    updated_at: datetime

    def to_dict(self) -> dict:
        """Convert to the persisted JSON record."""
        return {
            "source": self.source,
            "last_seen_id": self.last_seen_id,
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Watermark":
        return cls(
            source=data["source"],
            last_seen_id=data.get("last_seen_id") or None,
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )


@dataclass(frozen=True)
class MediaRef:
    """Normalized optional media field from feed XML.

    Feeds carry media tags either as a single element or as a list of
    elements. ``urls`` is empty when the field is absent.
    """

    kind: str  # 'absent', 'single', 'collection'
    urls: Tuple[str, ...] = ()
    entries: Tuple[Dict[str, Any], ...] = ()

    @property
    def first_url(self) -> Optional[str]:
        return self.urls[0] if self.urls else None


@dataclass(frozen=True)
class NotificationStyle:
    """Per feed type presentation of a notification."""

    color: int
    footer: str


@dataclass
class Notification:
    """Structured message sent to one destination."""

    title: str
    url: str
    color: int
    footer: str
    description: Optional[str] = None
    image: Optional[str] = None
    author: Optional[str] = None

    @classmethod
    def from_item(cls, item: Item, style: NotificationStyle) -> "Notification":
        return cls(
            title=item.title,
            url=item.link,
            color=style.color,
            footer=style.footer,
            description=item.summary,
            image=item.image,
            author=item.author,
        )

    def to_embed(self) -> Dict[str, Any]:
        """Render as a Discord embed object."""
        embed: Dict[str, Any] = {
            "title": self.title[:256],
            "color": self.color,
            "footer": {"text": self.footer},
        }
        if self.url:
            embed["url"] = self.url
        if self.description:
            embed["description"] = self.description
        if self.image:
            embed["image"] = {"url": self.image}
        if self.author:
            embed["author"] = {"name": self.author}
        return embed


@dataclass
class DeliveryResult:
    """Outcome of one send to one destination."""

    source_id: str
    target_id: str
    identifier: str
    success: bool
    error: Optional[str] = None


@dataclass
class DeliveryReport:
    """Per-cycle summary of a broadcast. Informational only."""

    results: List[DeliveryResult] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.results)

    @property
    def delivered(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> List[DeliveryResult]:
        return [result for result in self.results if not result.success]
