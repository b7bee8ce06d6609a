"""Normalization of optional media fields parsed from feed XML."""

from collections.abc import Mapping
from typing import Any, Optional

from ..models import MediaRef

ABSENT = MediaRef(kind="absent")


def _url_of(element: Mapping) -> Optional[str]:
    url = element.get("url") or element.get("href")
    if isinstance(url, str) and url.strip():
        return url.strip()
    return None


def normalize_media(value: Any) -> MediaRef:
    """Turn a media field into a MediaRef.

    feedparser gives media elements as a list of attribute dicts, but a
    single dict or a bare URL string are accepted too. Anything else is
    treated as absent.
    """
    if not value:
        return ABSENT

    if isinstance(value, str):
        url = value.strip()
        return MediaRef(kind="single", urls=(url,), entries=({"url": url},)) if url else ABSENT

    if isinstance(value, Mapping):
        url = _url_of(value)
        return MediaRef(kind="single", urls=(url,) if url else (), entries=(value,))

    if isinstance(value, (list, tuple)):
        entries = tuple(element for element in value if isinstance(element, Mapping))
        if not entries:
            return ABSENT
        urls = tuple(url for url in (_url_of(element) for element in entries) if url)
        return MediaRef(kind="collection", urls=urls, entries=entries)

    return ABSENT


def pick_image(media: MediaRef) -> Optional[str]:
    """Choose an image URL from a media:content field.

    In a collection an entry marked ``medium="image"`` wins, otherwise the
    first entry carrying a URL.
    """
    if media.kind == "collection":
        for element in media.entries:
            url = _url_of(element)
            if url and element.get("medium") == "image":
                return url
    return media.first_url


def leading_url(media: MediaRef) -> Optional[str]:
    """URL of the first element only; a collection led by a URL-less element has none."""
    if media.kind == "collection":
        return _url_of(media.entries[0])
    return media.first_url
